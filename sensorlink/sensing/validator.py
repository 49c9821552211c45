from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Tuple

from sensorlink.sensing.schema import SensorReading

TEMPERATURE_RANGE_C = (-50.0, 100.0)
HUMIDITY_RANGE_PCT = (0.0, 100.0)
PRESSURE_RANGE_HPA = (500.0, 1200.0)
VOLTAGE_RANGE_V = (0.0, 50.0)
CURRENT_RANGE_A = (0.0, 20.0)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def error_summary(self) -> str:
        return "; ".join(self.errors)


def _in_range(value: float, bounds: tuple[float, float]) -> bool:
    low, high = bounds
    return low <= value <= high


def validate(reading: SensorReading) -> ValidationResult:
    """Check every field of ``reading`` and collect all violations."""
    errors: List[str] = []

    if not reading.timestamp.strip():
        errors.append("timestamp must not be empty")
    elif reading.parsed_timestamp() == datetime.min:
        errors.append(f"invalid timestamp format: {reading.timestamp}")

    if not _in_range(reading.temperature, TEMPERATURE_RANGE_C):
        errors.append(f"temperature out of range: {reading.temperature} C")
    if not _in_range(reading.humidity, HUMIDITY_RANGE_PCT):
        errors.append(f"humidity out of range: {reading.humidity}%")
    if not _in_range(reading.pressure, PRESSURE_RANGE_HPA):
        errors.append(f"pressure out of range: {reading.pressure} hPa")
    if not _in_range(reading.voltage, VOLTAGE_RANGE_V):
        errors.append(f"voltage out of range: {reading.voltage} V")
    if not _in_range(reading.current, CURRENT_RANGE_A):
        errors.append(f"current out of range: {reading.current} A")

    if not reading.device_status.strip():
        errors.append("device status must not be empty")
    if not reading.device_id.strip():
        errors.append("device id must not be empty")
    if reading.error_code < 0:
        errors.append(f"error code must not be negative: {reading.error_code}")

    return ValidationResult(is_valid=not errors, errors=tuple(errors))
