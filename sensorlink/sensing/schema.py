from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

NORMAL_STATUS = "normal"

FIELD_NAMES = (
    "Timestamp",
    "Temperature",
    "DeviceStatus",
    "Humidity",
    "Pressure",
    "Voltage",
    "Current",
    "DeviceId",
    "ErrorCode",
)

_TEXT_FIELDS = {"Timestamp": "timestamp", "DeviceStatus": "device_status", "DeviceId": "device_id"}
_FLOAT_FIELDS = {
    "Temperature": "temperature",
    "Humidity": "humidity",
    "Pressure": "pressure",
    "Voltage": "voltage",
    "Current": "current",
}

_TIMESTAMP_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y",
)


class SensorReadingError(ValueError):
    pass


def parse_timestamp(text: str) -> datetime:
    """Parse a wire timestamp, returning ``datetime.min`` when it is not a calendar time."""
    text = (text or "").strip()
    if not text:
        return datetime.min
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return datetime.min


def _fold_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    folded: dict[str, Any] = {}
    for key, value in data.items():
        folded[str(key).casefold()] = value
    return folded


def _coerce_text(value: Any, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SensorReadingError(f"invalid {field} value: {value!r} (expected string)")
    return value


def _coerce_float(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SensorReadingError(f"invalid {field} value: {value!r} (expected number)")
    return float(value)


def _coerce_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise SensorReadingError(f"invalid {field} value: {value!r} (expected integer)")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise SensorReadingError(f"invalid {field} value: {value!r} (expected integer)")


@dataclass(frozen=True)
class SensorReading:
    timestamp: str = ""
    temperature: float = 0.0
    humidity: float = 0.0
    pressure: float = 0.0
    voltage: float = 0.0
    current: float = 0.0
    device_id: str = ""
    device_status: str = ""
    error_code: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SensorReading":
        """Build a reading from a wire mapping.

        Field names match case-insensitively; absent fields keep their defaults.
        Raises SensorReadingError when a present field has the wrong JSON type.
        """
        folded = _fold_keys(data)
        kwargs: dict[str, Any] = {}
        for wire_name, attr in _TEXT_FIELDS.items():
            key = wire_name.casefold()
            if key in folded:
                kwargs[attr] = _coerce_text(folded[key], wire_name)
        for wire_name, attr in _FLOAT_FIELDS.items():
            key = wire_name.casefold()
            if key in folded:
                kwargs[attr] = _coerce_float(folded[key], wire_name)
        if "errorcode" in folded:
            kwargs["error_code"] = _coerce_int(folded["errorcode"], "ErrorCode")
        return cls(**kwargs)

    @staticmethod
    def known_fields(data: Mapping[str, Any]) -> list[str]:
        folded = {str(key).casefold() for key in data}
        return [name for name in FIELD_NAMES if name.casefold() in folded]

    def parsed_timestamp(self) -> datetime:
        return parse_timestamp(self.timestamp)

    @property
    def power(self) -> float:
        return round(self.voltage * self.current, 3)

    @property
    def temperature_band(self) -> str:
        if self.temperature < 20:
            return "low"
        if self.temperature > 45:
            return "high"
        return "normal"

    @property
    def humidity_band(self) -> str:
        if self.humidity < 30:
            return "dry"
        if self.humidity > 70:
            return "humid"
        return "comfortable"

    @property
    def is_nominal(self) -> bool:
        return self.device_status == NORMAL_STATUS and self.error_code == 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "Timestamp": self.timestamp,
            "Temperature": self.temperature,
            "DeviceStatus": self.device_status,
            "Humidity": self.humidity,
            "Pressure": self.pressure,
            "Voltage": self.voltage,
            "Current": self.current,
            "DeviceId": self.device_id,
            "ErrorCode": self.error_code,
        }

    def __str__(self) -> str:
        return (
            f"device: {self.device_id}, temperature: {self.temperature} C, "
            f"status: {self.device_status}, time: {self.timestamp}"
        )
