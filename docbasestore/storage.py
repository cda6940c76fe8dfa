"""Storage of alert and case documents in Elasticsearch indexes."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import requests

from docbasestore.jsondecoder import iter_fields

REQUEST_TIMEOUT = 15.0
TOTAL_FIELDS_LIMIT = "2000"
_TOTAL_FIELDS_QUERY = json.dumps(
    {"index": {"mapping": {"total_fields": {"limit": int(TOTAL_FIELDS_LIMIT)}}}}
)
_UNDERLINE_ID_BRANCH = "hits.hits._id"
_IP_ADDRESSES_KEY = "@ipAddressAdditionalInformation"


class StorageError(Exception):
    """Raised when the database rejects a request or answers unexpectedly."""


@dataclass
class StorageSettings:
    """Connection parameters of the document database."""

    host: str
    port: int
    user: str | None = None
    passwd: str | None = None
    namedb: str = ""
    storages: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("the value of 'host' cannot be empty")
        if not 0 < self.port <= 65535:
            raise ValueError("an incorrect network port value was received")
        if self.user == "":
            raise ValueError("the value of 'user' cannot be empty")
        if self.passwd == "":
            raise ValueError("the value of 'passwd' cannot be empty")

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


@dataclass(frozen=True)
class ServiceOption:
    """Identifier of a stored document and the index that holds it."""

    id: str
    index: str


@dataclass
class IpAddressesInformation:
    """Geographic details of an IP address as stored with a case."""

    ip: str = ""
    city: str = ""
    country: str = ""
    country_code: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IpAddressesInformation:
        return cls(
            ip=str(data.get("ip", "") or ""),
            city=str(data.get("city", "") or ""),
            country=str(data.get("country", "") or ""),
            country_code=str(data.get("countryCode", "") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "ip": self.ip,
            "city": self.city,
            "country": self.country,
            "countryCode": self.country_code,
        }


def _match_query(*matches: tuple[str, str]) -> bytes:
    must = [{"match": {name: value}} for name, value in matches]
    return json.dumps({"query": {"bool": {"must": must}}}).encode()


def _as_bytes(body: bytes | str | Mapping[str, Any]) -> bytes:
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode()
    return json.dumps(body).encode()


def _status(response: requests.Response) -> str:
    return f"{response.status_code} {response.reason or ''}".rstrip()


def _json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as err:
        raise StorageError(f"the database response is not valid JSON: {err}") from err


def _hits(payload: Any) -> list[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        return []
    hits = (payload.get("hits") or {}).get("hits") or []
    return [hit for hit in hits if isinstance(hit, Mapping)]


class DatabaseStorage:
    """Client for the indexes that hold alert and case documents."""

    def __init__(self, settings: StorageSettings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self._session = session if session is not None else requests.Session()
        if settings.user and self._session.auth is None:
            self._session.auth = (settings.user, settings.passwd or "")

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> requests.Response:
        headers = {"Content-Type": "application/json"} if body is not None else None
        try:
            return self._session.request(
                method,
                f"{self.settings.base_url}/{path}",
                params=params,
                data=body,
                headers=headers,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as err:
            raise StorageError(str(err)) from err

    def get_existing_indexes(self, pattern: str) -> list[str]:
        """Names of the indexes whose name contains ``pattern``."""
        response = self._request("GET", "_cat/indices", params={"format": "json"})
        entries = _json(response)
        if not isinstance(entries, list):
            raise StorageError(f"unexpected list of indexes received: {_status(response)}")
        return [
            entry["index"]
            for entry in entries
            if isinstance(entry, Mapping) and pattern in str(entry.get("index", ""))
        ]

    def get_index_setting(self, index: str) -> dict[str, str]:
        """Map each returned index name to its total fields limit ("" if unset)."""
        response = self._request(
            "GET", f"{index}/_settings", params={"pretty": "true", "human": "true"}
        )
        if response.status_code != 200:
            raise StorageError(
                "the server response when executing an index search query "
                f"is equal to '{_status(response)}'"
            )
        payload = _json(response)
        if not isinstance(payload, Mapping):
            return {}
        limits = {}
        for name, info in payload.items():
            limit = (
                ((info or {}).get("settings") or {})
                .get("index", {})
                .get("mapping", {})
                .get("total_fields", {})
                .get("limit", "")
            )
            limits[name] = str(limit)
        return limits

    def set_index_setting(self, indexes: Sequence[str], query: str | bytes) -> bool:
        """Apply ``query`` to the settings of ``indexes``; True when accepted."""
        response = self._request("PUT", f"{','.join(indexes)}/_settings", body=_as_bytes(query))
        if response.status_code in (200, 201):
            return True
        payload = _json(response)
        if isinstance(payload, Mapping) and "error" in payload:
            raise StorageError(
                f"received from module Elsaticsearch: {_status(response)} ({payload['error']})"
            )
        return False

    def delete_indexes(self, indexes: Sequence[str]) -> int:
        """Delete ``indexes`` together with their settings; return the status code."""
        return self._request("DELETE", ",".join(indexes)).status_code

    def get_document(self, indexes: Sequence[str], query: str | bytes) -> bytes:
        """Run a search over ``indexes`` and return the raw response body."""
        response = self._request("POST", f"{','.join(indexes)}/_search", body=_as_bytes(query))
        return response.content

    def insert_document(self, index: str, document: bytes | str | Mapping[str, Any]) -> int:
        """Add ``document`` to ``index`` and return the HTTP status code."""
        response = self._request("POST", f"{index}/_doc", body=_as_bytes(document))
        payload = _json(response)
        if isinstance(payload, (dict, list)):
            for item in iter_fields(payload):
                if "error" in item.field_branch:
                    raise StorageError(str(item.value))
        return response.status_code

    def update_document(
        self,
        current_index: str,
        targets: Iterable[ServiceOption],
        document: bytes | str | Mapping[str, Any],
    ) -> tuple[int, int]:
        """Delete the ``targets`` and insert ``document`` into ``current_index``.

        Returns the status code of the insertion and the number of deletions.
        """
        count_deleted = 0
        for target in targets:
            self._request("DELETE", f"{target.index}/_doc/{target.id}")
            count_deleted += 1
        return self.insert_document(current_index, document), count_deleted

    def set_max_total_fields_limit(self, indexes: Sequence[str]) -> list[str]:
        """Raise the total fields limit of ``indexes`` to 2000 where it is not set so.

        Returns the names of the indexes whose limit was changed.
        """
        if not indexes:
            raise StorageError("an empty list of indexes was received")

        problems: list[str] = []
        to_update = []
        for index in indexes:
            try:
                limits = self.get_index_setting(index)
            except StorageError as err:
                problems.append(str(err))
                continue
            if index not in limits or limits[index] == TOTAL_FIELDS_LIMIT:
                continue
            to_update.append(index)

        if to_update:
            self.set_index_setting(to_update, _TOTAL_FIELDS_QUERY)

        if problems:
            raise StorageError("\n".join(problems))

        return to_update

    def search_underline_id_alert(self, index_name: str, root_id: str, source: str) -> str:
        """The ``_id`` of the alert with ``root_id`` from ``source``, or ""."""
        query = _match_query(("source", source), ("event.rootId", root_id))
        response = self._request("POST", f"{index_name}/_search", body=query)
        if response.status_code != 200:
            raise StorageError(_status(response))
        for hit in _hits(_json(response)):
            return str(hit.get("_id", ""))
        return ""

    def search_underline_id_case(self, index_name: str, root_id: str) -> str:
        """The ``_id`` of the case with ``root_id``, or ""."""
        query = _match_query(("event.rootId", root_id))
        response = self._request("POST", f"{index_name}/_search", body=query)
        payload = _json(response)
        if isinstance(payload, (dict, list)):
            for item in iter_fields(payload):
                if item.field_branch == _UNDERLINE_ID_BRANCH:
                    return str(item.value)
        return ""

    def search_geoip_information_case(
        self, index_name: str, root_id: str
    ) -> tuple[str, list[IpAddressesInformation]]:
        """The ``_id`` of the case with ``root_id`` and its stored IP address details."""
        query = _match_query(("event.rootId", root_id))
        response = self._request("POST", f"{index_name}/_search", body=query)
        hits = _hits(_json(response))
        if not hits:
            raise StorageError(
                "there is no template for updating geolocation information "
                f"in object with rootId:'{root_id}'"
            )
        first = hits[0]
        source = first.get("_source") or {}
        stored = source.get(_IP_ADDRESSES_KEY) or [] if isinstance(source, Mapping) else []
        addresses = [
            IpAddressesInformation.from_dict(entry)
            for entry in stored
            if isinstance(entry, Mapping)
        ]
        return str(first.get("_id", "")), addresses

    def update(
        self, index: str, underline_id: str, body: bytes | str | Mapping[str, Any]
    ) -> requests.Response:
        """Partially update the document ``underline_id`` in ``index``."""
        return self._request("POST", f"{index}/_update/{underline_id}", body=_as_bytes(body))