"""Additional information attached to case documents and helpers for building it."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

_SENSOR_ID_PATTERN = re.compile(r"СОА:\s-\s\*\*`(\d+)`\*\*", re.ASCII)

_SENSOR_KEYS = {
    "sensor_id": "sensorId",
    "host_id": "hostId",
    "geo_code": "geoCode",
    "object_area": "objectArea",
    "subject_rf": "subjectRF",
    "inn": "inn",
    "home_net": "homeNet",
    "org_name": "orgName",
    "full_org_name": "fullOrgName",
}

_IP_KEYS = {
    "ip": "ip",
    "city": "city",
    "country": "country",
    "country_code": "countryCode",
}


@dataclass
class SensorInformation:
    """Location and ownership details of a sensor."""

    sensor_id: str = ""
    host_id: str = ""
    geo_code: str = ""
    object_area: str = ""
    subject_rf: str = ""
    inn: str = ""
    home_net: str = ""
    org_name: str = ""
    full_org_name: str = ""

    def to_dict(self) -> dict[str, str]:
        return {key: getattr(self, attr) for attr, key in _SENSOR_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SensorInformation:
        return cls(**{attr: str(data.get(key) or "") for attr, key in _SENSOR_KEYS.items()})


@dataclass
class IpAddressInformation:
    """Geographic details of an IP address."""

    ip: str = ""
    city: str = ""
    country: str = ""
    country_code: str = ""

    def to_dict(self) -> dict[str, str]:
        return {key: getattr(self, attr) for attr, key in _IP_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IpAddressInformation:
        return cls(**{attr: str(data.get(key) or "") for attr, key in _IP_KEYS.items()})


@dataclass
class AdditionalInformation:
    """Sensor and IP address details added to a case."""

    sensors: list[SensorInformation] = field(default_factory=list)
    ip_addresses: list[IpAddressInformation] = field(default_factory=list)

    def add_sensor_information(self, sensor: SensorInformation) -> None:
        """Append ``sensor`` unless one with the same sensor id is present."""
        if all(known.sensor_id != sensor.sensor_id for known in self.sensors):
            self.sensors.append(sensor)

    def add_ip_address_information(self, address: IpAddressInformation) -> None:
        """Append ``address`` unless one with the same ip is present."""
        if all(known.ip != address.ip for known in self.ip_addresses):
            self.ip_addresses.append(address)

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        return {
            "@sensorAdditionalInformation": [s.to_dict() for s in self.sensors],
            "@ipAddressAdditionalInformation": [i.to_dict() for i in self.ip_addresses],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AdditionalInformation:
        sensors = data.get("@sensorAdditionalInformation") or []
        addresses = data.get("@ipAddressAdditionalInformation") or []
        return cls(
            sensors=[SensorInformation.from_dict(item) for item in sensors],
            ip_addresses=[IpAddressInformation.from_dict(item) for item in addresses],
        )


def search_event_source(field_branch: str, value: Any) -> str | None:
    """Return the event source if ``field_branch`` is ``source`` and holds a string."""
    if field_branch != "source" or not isinstance(value, str):
        return None
    return value


def sensor_id_from_description(text: str) -> str:
    """Extract the sensor id from a description; raise ValueError if absent."""
    match = _SENSOR_ID_PATTERN.search(text)
    if match is None:
        raise ValueError("there is no sensor ID in the accepted line")
    return match.group(1)


def list_ip_addresses(objects: Iterable[IpAddressInformation]) -> list[str]:
    """Unique IP addresses in their first-seen order."""
    return list(dict.fromkeys(obj.ip for obj in objects))


def list_sensor_ids(objects: Iterable[SensorInformation]) -> list[str]:
    """Unique sensor ids in their first-seen order."""
    return list(dict.fromkeys(obj.sensor_id for obj in objects))