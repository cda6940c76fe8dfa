# docbasestore

A library for working with alert and case documents in JSON form. It turns a
JSON document into a flat stream of typed leaf fields, each with its dotted
path. It keeps documents in Elasticsearch indexes over HTTP and records log
messages in monthly Elasticsearch indexes.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

## `docbasestore.jsondecoder`

`iter_fields(document)` walks a decoded JSON object or array. It yields one
`DecodedField` for every scalar value and skips `null`s. A field has:

- `field_name`
- `value`
- `value_type`, which is one of `"string"`, `"int"`, `"float"` or `"bool"`
- `field_branch`, the dotted path to the value, for example
  `event.object.title`
- `uuid`, which is empty by default

Elements of an array keep the path of the array itself. Passing anything other
than an object or an array raises `TypeError`.

`JsonDocumentDecoder(counter, logger)` takes two collaborators:

- a counter with a `send_message(msg, count)` method
- a logger with a `send(msg_type, msg)` method

`start(data, task_id)` parses raw bytes or text and returns an iterator over
the fields. After the iterator is exhausted, it calls
`counter.send_message("update processed events", 1)`.

Errors are logged and then raised:

- Invalid JSON raises `json.JSONDecodeError`.
- A document that is neither an object nor an array raises `ValueError`.
- An empty object or array raises `EmptyDocumentError`, which is a subclass of
  `ValueError`.

```python
from docbasestore.jsondecoder import iter_fields

for field in iter_fields({"event": {"rootId": "~1", "tags": ["a", "b"]}}):
    print(field.field_branch, field.value_type, field.value)
# event.rootId string ~1
# event.tags string a
# event.tags string b
```

## `docbasestore.documents`

This module holds the extra information kept with a case.

- `SensorInformation` and `IpAddressInformation` are dataclasses. Each has
  `to_dict()` and `from_dict()`, which use the camel-case JSON keys, for
  example `sensorId` and `countryCode`.
- `AdditionalInformation` holds a list of sensors and a list of IP addresses.
  - `add_sensor_information()` ignores a sensor whose sensor id is already
    present.
  - `add_ip_address_information()` ignores an address whose IP is already
    present.
  - `to_dict()` and `from_dict()` use the keys `@sensorAdditionalInformation`
    and `@ipAddressAdditionalInformation`.

The module also has these helpers:

- `search_event_source(field_branch, value)` returns the value when the branch
  is `source` and the value is a string. Otherwise it returns `None`.
- `sensor_id_from_description(text)` extracts a sensor id written as
  ``СОА: - **`12345`**``. It raises `ValueError` if there is none.
- `list_ip_addresses(objects)` and `list_sensor_ids(objects)` return unique
  values in the order they were first seen.

## `docbasestore.storage`

`StorageSettings` checks its values when it is created, and raises
`ValueError` if any of these holds:

- `host` is empty
- `port` is outside 1–65535
- `user` or `passwd` is given as an empty string

`DatabaseStorage(settings, session=None)` sends requests through a
`requests.Session`. When a user is set, it applies basic authentication. Each
request has a 15 second timeout.

| Method | Does |
| --- | --- |
| `get_existing_indexes(pattern)` | Returns the names of indexes that contain `pattern`. |
| `get_index_setting(index)` | Maps each index name to its total-fields limit as a string, or `""` if no limit is set. |
| `set_index_setting(indexes, query)` | Puts new settings. Returns `True` when they are accepted. |
| `delete_indexes(indexes)` | Deletes the indexes and returns the status code. |
| `get_document(indexes, query)` | Searches the indexes and returns the raw response body. |
| `insert_document(index, document)` | Indexes the document and returns the status code. |
| `update_document(current_index, targets, document)` | Deletes each `ServiceOption(id, index)` in `targets`, then inserts the document. Returns `(status_code, count_deleted)`. |
| `set_max_total_fields_limit(indexes)` | Sets the total-fields limit to 2000 on each index where it is not already 2000. Returns the names of the indexes that were changed. |
| `search_underline_id_alert(index_name, root_id, source)` | Returns the `_id` of the matching alert, or `""`. |
| `search_underline_id_case(index_name, root_id)` | Returns the `_id` of the matching case, or `""`. |
| `search_geoip_information_case(index_name, root_id)` | Returns the `_id` of the case and its stored list of `IpAddressesInformation`. |
| `update(index, underline_id, body)` | Applies a partial update and returns the `requests.Response`. |

`StorageError` is raised in these cases:

- the server cannot be reached
- a response is not JSON
- an insert answer reports an error
- a settings request is rejected with an error
- an empty list of indexes is passed to `set_max_total_fields_limit`
- a search for geolocation information finds no case

```python
from docbasestore.storage import DatabaseStorage, StorageSettings

password = "password"
settings = StorageSettings(
    host="localhost",
    port=9200,
    user="user",
    passwd=password,
    storages={"case": "module_case", "alert": "module_alert"},
)
storage = DatabaseStorage(settings)
indexes = storage.get_existing_indexes("module_case")
```

## `docbasestore.eslog`

`ElasticsearchLogWriter(LogSettings(host, port, index_db, ...))` writes log
records.

- `index_name(moment)` returns `logs.<index_db>_<month>_<year>`, with the
  English month name in lower case, for example
  `logs.app_march_2025`.
- `write(msg_type, msg)` stores a record with the fields `datetime`, `type`,
  `nameRegionalObject` and `message` in the index for the current month.
  It raises `LogWriteError` when the record is not stored.

## What the package does not do

The package is a library only. It provides:

- no command-line program
- no long-running service
- no message-queue listener
- no configuration loading

It does not build complete alert or case documents from decoded fields. It
also does not request geolocation or sensor details from other services.
Callers give it the documents and details to store.

## Tests

```
pytest
```