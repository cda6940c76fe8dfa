import pytest

from docbasestore.documents import (
    AdditionalInformation,
    IpAddressInformation,
    SensorInformation,
    list_ip_addresses,
    list_sensor_ids,
    search_event_source,
    sensor_id_from_description,
)


def test_add_sensor_information_keeps_unique_ids_in_order():
    info = AdditionalInformation()
    info.add_sensor_information(SensorInformation(sensor_id="100"))
    info.add_sensor_information(SensorInformation(sensor_id="200"))
    info.add_sensor_information(SensorInformation(sensor_id="100", inn="x"))
    assert [s.sensor_id for s in info.sensors] == ["100", "200"]
    assert info.sensors[0].inn == ""


def test_add_ip_address_information_keeps_unique_ips():
    info = AdditionalInformation()
    first = IpAddressInformation(ip="96.136.64.9", city="Havana")
    info.add_ip_address_information(first)
    info.add_ip_address_information(IpAddressInformation(ip="96.136.64.9", city="Other"))
    info.add_ip_address_information(IpAddressInformation(ip="72.31.66.61"))
    assert [a.ip for a in info.ip_addresses] == ["96.136.64.9", "72.31.66.61"]
    assert info.ip_addresses[0] == first


def test_to_dict_uses_wire_keys():
    info = AdditionalInformation()
    info.add_sensor_information(SensorInformation(sensor_id="s1", subject_rf="r"))
    info.add_ip_address_information(IpAddressInformation(ip="13.22.63.6", country_code="LI"))
    data = info.to_dict()
    assert set(data) == {"@sensorAdditionalInformation", "@ipAddressAdditionalInformation"}
    assert data["@sensorAdditionalInformation"][0]["sensorId"] == "s1"
    assert data["@sensorAdditionalInformation"][0]["subjectRF"] == "r"
    assert data["@ipAddressAdditionalInformation"][0]["countryCode"] == "LI"


def test_to_dict_from_dict_round_trip():
    info = AdditionalInformation(
        sensors=[SensorInformation("1", "h", "g", "a", "s", "i", "n", "o", "f")],
        ip_addresses=[IpAddressInformation("45.13.191.34", "Oslo", "Норвегия", "NO")],
    )
    assert AdditionalInformation.from_dict(info.to_dict()) == info


def test_from_dict_fills_missing_values_with_empty_strings():
    info = AdditionalInformation.from_dict(
        {"@sensorAdditionalInformation": None, "@ipAddressAdditionalInformation": [{"ip": "a"}]}
    )
    assert info.sensors == []
    assert info.ip_addresses == [IpAddressInformation(ip="a")]


def test_search_event_source():
    assert search_event_source("source", "gcm") == "gcm"
    assert search_event_source("source", "") == ""
    assert search_event_source("event.source", "gcm") is None
    assert search_event_source("source", 5) is None


def test_sensor_id_from_description():
    text = "Описание\nСОА: - **`8030066`** ещё текст"
    assert sensor_id_from_description(text) == "8030066"


@pytest.mark.parametrize("text", ["", "СОА: - 8030066", "SOA: - **`8030066`**"])
def test_sensor_id_from_description_missing(text):
    with pytest.raises(ValueError):
        sensor_id_from_description(text)


def test_list_ip_addresses_unique_in_order():
    objects = [IpAddressInformation(ip=ip) for ip in ["b", "a", "b", "c", "a"]]
    result = list_ip_addresses(objects)
    assert result == ["b", "a", "c"]
    assert list_ip_addresses([]) == []


def test_list_sensor_ids_unique_in_order():
    objects = [SensorInformation(sensor_id=s) for s in ["7", "7", "3"]]
    assert list_sensor_ids(objects) == ["7", "3"]