"""Flatten JSON documents into a stream of leaf fields with their dotted paths."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

EMPTY_DOCUMENT_MESSAGE = "error decoding the json message, it may be empty"
PROCESSED_EVENTS_COUNTER = "update processed events"


class Logger(Protocol):
    def send(self, msg_type: str, msg: str) -> None: ...


class Counter(Protocol):
    def send_message(self, msg: str, count: int) -> None: ...


class EmptyDocumentError(ValueError):
    """Raised when a JSON document decodes to an empty object or array."""


@dataclass
class DecodedField:
    """One leaf value of a JSON document."""

    field_name: str
    value_type: str
    value: Any
    field_branch: str
    uuid: str = ""


def _simple_field(name: str, value: Any, branch: str) -> DecodedField | None:
    if isinstance(value, bool):
        return DecodedField(name, "bool", value, branch)
    if isinstance(value, int):
        return DecodedField(name, "int", value, branch)
    if isinstance(value, float):
        return DecodedField(name, "float", value, branch)
    if isinstance(value, str):
        return DecodedField(name, "string", value, branch)
    return None


def _iter_mapping(mapping: Mapping[str, Any], branch: str) -> Iterator[DecodedField]:
    for key, value in mapping.items():
        if value is None:
            continue
        child_branch = f"{branch}.{key}" if branch else key
        if isinstance(value, Mapping):
            yield from _iter_mapping(value, child_branch)
        elif isinstance(value, list):
            yield from _iter_sequence(value, child_branch)
        else:
            field = _simple_field(key, value, child_branch)
            if field is not None:
                yield field


def _iter_sequence(items: Sequence[Any], branch: str) -> Iterator[DecodedField]:
    # Elements of an array keep the branch of the array itself.
    for index, value in enumerate(items):
        if value is None:
            continue
        if isinstance(value, Mapping):
            yield from _iter_mapping(value, branch)
        elif isinstance(value, list):
            yield from _iter_sequence(value, branch)
        else:
            field = _simple_field(str(index), value, branch)
            if field is not None:
                yield field


def iter_fields(document: Mapping[str, Any] | Sequence[Any]) -> Iterator[DecodedField]:
    """Yield every leaf of a decoded JSON object or array, skipping nulls."""
    if isinstance(document, Mapping):
        return _iter_mapping(document, "")
    if isinstance(document, list):
        return _iter_sequence(document, "")
    raise TypeError("the document must be a JSON object or array")


class JsonDocumentDecoder:
    """Decodes raw JSON messages into leaf fields and counts processed events."""

    def __init__(self, counter: Counter, logger: Logger) -> None:
        self._counter = counter
        self._logger = logger

    def start(self, data: bytes | str, task_id: str) -> Iterator[DecodedField]:
        """Parse ``data`` and return an iterator over its leaf fields.

        ``task_id`` identifies the message for the caller; it does not change
        the decoded fields. The processed-events counter is bumped once the
        returned iterator is exhausted.
        """
        try:
            document = json.loads(data)
        except json.JSONDecodeError as err:
            self._logger.send("error", str(err))
            raise

        if not isinstance(document, (dict, list)):
            message = "the json message must be an object or an array"
            self._logger.send("error", message)
            raise ValueError(message)

        if not document:
            self._logger.send("error", EMPTY_DOCUMENT_MESSAGE)
            raise EmptyDocumentError(EMPTY_DOCUMENT_MESSAGE)

        return self._emit(document)

    def _emit(self, document: dict | list) -> Iterator[DecodedField]:
        yield from iter_fields(document)
        self._counter.send_message(PROCESSED_EVENTS_COUNTER, 1)