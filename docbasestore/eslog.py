"""Writing of log messages to an Elasticsearch index."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime

import requests

_MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)
_REQUEST_TIMEOUT = 3.0


class LogWriteError(Exception):
    """Raised when a log message could not be stored."""


@dataclass
class LogSettings:
    """Connection parameters of the log database."""

    host: str
    port: int
    index_db: str
    name_regional_object: str = ""
    user: str | None = None
    passwd: str | None = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


class ElasticsearchLogWriter:
    """Stores log messages in monthly indexes."""

    def __init__(self, settings: LogSettings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self._session = session if session is not None else requests.Session()
        if settings.user and self._session.auth is None:
            self._session.auth = (settings.user, settings.passwd or "")

    def index_name(self, moment: datetime) -> str:
        """Name of the index that receives messages written at ``moment``."""
        return f"logs.{self.settings.index_db}_{_MONTHS[moment.month - 1]}_{moment.year}"

    def write(self, msg_type: str, msg: str) -> None:
        """Store one message of type ``msg_type``."""
        now = datetime.now().astimezone()
        document = {
            "datetime": now.isoformat(timespec="seconds"),
            "type": msg_type,
            "nameRegionalObject": self.settings.name_regional_object,
            "message": msg,
        }
        try:
            response = self._session.post(
                f"{self.settings.base_url}/{self.index_name(now)}/_doc",
                data=json.dumps(document).encode(),
                headers={"Content-Type": "application/json"},
                timeout=_REQUEST_TIMEOUT,
            )
        except requests.RequestException as err:
            raise LogWriteError(str(err)) from err

        if response.status_code in (200, 201):
            return

        try:
            payload = response.json()
        except ValueError as err:
            raise LogWriteError(str(err)) from err

        if isinstance(payload, dict) and "error" in payload:
            status = f"{response.status_code} {response.reason or ''}".rstrip()
            raise LogWriteError(
                f"{status} received from module Elsaticsearch: {payload['error']}"
            )