import json

import pytest

from docbasestore.jsondecoder import (
    DecodedField,
    EmptyDocumentError,
    JsonDocumentDecoder,
    iter_fields,
)


class FakeLogger:
    def __init__(self):
        self.messages = []

    def send(self, msg_type, msg):
        self.messages.append((msg_type, msg))


class FakeCounter:
    def __init__(self):
        self.calls = []

    def send_message(self, msg, count):
        self.calls.append((msg, count))


def test_nested_object_builds_dotted_branch():
    doc = {"event": {"rootId": "~91686760480", "object": {"flag": True}}}
    fields = {f.field_branch: f for f in iter_fields(doc)}
    assert fields["event.rootId"].value == "~91686760480"
    assert fields["event.rootId"].value_type == "string"
    assert fields["event.rootId"].field_name == "rootId"
    assert fields["event.object.flag"].value_type == "bool"
    assert fields["event.object.flag"].value is True


def test_value_types_of_numbers():
    doc = {"a": 3, "b": 2.5}
    types = {f.field_name: f.value_type for f in iter_fields(doc)}
    assert types == {"a": "int", "b": "float"}


def test_array_elements_share_parent_branch_and_use_index_names():
    values = ["x", "y", "z"]
    fields = list(iter_fields({"tags": values}))
    assert [f.value for f in fields] == values
    assert {f.field_branch for f in fields} == {"tags"}
    assert [f.field_name for f in fields] == [str(n) for n in range(len(values))]


def test_nulls_are_skipped():
    fields = list(iter_fields({"a": None, "b": "kept", "c": [None, "v"]}))
    assert [f.value for f in fields] == ["kept", "v"]


def test_nested_arrays_are_flattened_under_same_branch():
    fields = list(iter_fields({"list": [["p", "q"], [{"k": "r"}]]}))
    assert [f.value for f in fields] == ["p", "q", "r"]
    assert [f.field_branch for f in fields] == ["list", "list", "list.k"]


def test_top_level_array_of_objects():
    fields = list(iter_fields([{"source": "s1"}, {"source": "s2"}]))
    assert [(f.field_branch, f.value) for f in fields] == [("source", "s1"), ("source", "s2")]


def test_iter_fields_rejects_scalars():
    with pytest.raises(TypeError):
        list(iter_fields("text"))


def test_start_yields_fields_and_counts_once_exhausted():
    counter, logger = FakeCounter(), FakeLogger()
    decoder = JsonDocumentDecoder(counter, logger)
    payload = json.dumps({"event": {"rootId": "~91686760480"}, "source": "gcm"}).encode()

    stream = decoder.start(payload, "taskId_628292h")
    fields = list(stream)

    assert all(isinstance(f, DecodedField) for f in fields)
    assert {f.field_branch: f.value for f in fields} == {
        "event.rootId": "~91686760480",
        "source": "gcm",
    }
    assert counter.calls == [("update processed events", 1)]
    assert logger.messages == []


def test_start_does_not_count_before_consumption():
    counter = FakeCounter()
    decoder = JsonDocumentDecoder(counter, FakeLogger())
    decoder.start('{"a": "b"}', "task")
    assert counter.calls == []


@pytest.mark.parametrize("payload", ["{}", "[]"])
def test_start_empty_document_raises_and_logs(payload):
    counter, logger = FakeCounter(), FakeLogger()
    decoder = JsonDocumentDecoder(counter, logger)
    with pytest.raises(EmptyDocumentError):
        decoder.start(payload, "task")
    assert logger.messages == [("error", "error decoding the json message, it may be empty")]
    assert counter.calls == []


def test_start_invalid_json_raises_and_logs():
    logger = FakeLogger()
    decoder = JsonDocumentDecoder(FakeCounter(), logger)
    with pytest.raises(json.JSONDecodeError):
        decoder.start(b"{not json", "task")
    assert [kind for kind, _ in logger.messages] == ["error"]


def test_start_scalar_document_raises():
    logger = FakeLogger()
    decoder = JsonDocumentDecoder(FakeCounter(), logger)
    with pytest.raises(ValueError):
        decoder.start("42", "task")
    assert len(logger.messages) == 1