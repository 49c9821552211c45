from dataclasses import replace

import pytest

from sensorlink.sensing.schema import SensorReading
from sensorlink.sensing.validator import ValidationResult, validate

GOOD = SensorReading(
    timestamp="2024-01-01 12:00:00",
    temperature=23.5,
    humidity=45.2,
    pressure=1013.2,
    voltage=12.1,
    current=0.85,
    device_id="DEV_1234",
    device_status="normal",
    error_code=0,
)


def test_all_fields_in_range_is_valid() -> None:
    result = validate(GOOD)
    assert result.is_valid
    assert result.errors == ()
    assert result.error_summary == ""


def test_temperature_out_of_range() -> None:
    result = validate(replace(GOOD, temperature=150))
    assert not result.is_valid
    assert result.errors == ("temperature out of range: 150 C",)


@pytest.mark.parametrize(
    "field, value, fragment",
    [
        ("temperature", -50.1, "temperature out of range"),
        ("humidity", -0.1, "humidity out of range"),
        ("humidity", 100.5, "humidity out of range"),
        ("pressure", 499.9, "pressure out of range"),
        ("pressure", 1200.1, "pressure out of range"),
        ("voltage", -1.0, "voltage out of range"),
        ("voltage", 50.01, "voltage out of range"),
        ("current", -0.001, "current out of range"),
        ("current", 20.5, "current out of range"),
        ("error_code", -1, "error code must not be negative: -1"),
        ("device_id", "", "device id must not be empty"),
        ("device_status", "  ", "device status must not be empty"),
    ],
)
def test_single_rule_violations(field: str, value: object, fragment: str) -> None:
    result = validate(replace(GOOD, **{field: value}))
    assert not result.is_valid
    assert len(result.errors) == 1
    assert fragment in result.errors[0]


@pytest.mark.parametrize(
    "field, value",
    [
        ("temperature", -50),
        ("temperature", 100),
        ("humidity", 0),
        ("humidity", 100),
        ("pressure", 500),
        ("pressure", 1200),
        ("voltage", 0),
        ("voltage", 50),
        ("current", 0),
        ("current", 20),
    ],
)
def test_range_bounds_are_inclusive(field: str, value: float) -> None:
    assert validate(replace(GOOD, **{field: value})).is_valid


def test_empty_timestamp_reports_only_emptiness() -> None:
    result = validate(replace(GOOD, timestamp=""))
    assert result.errors == ("timestamp must not be empty",)


def test_unparseable_timestamp() -> None:
    result = validate(replace(GOOD, timestamp="yesterday"))
    assert result.errors == ("invalid timestamp format: yesterday",)


def test_collects_every_violation_in_rule_order() -> None:
    reading = SensorReading()
    result = validate(replace(reading, temperature=-60, error_code=-5))
    assert not result.is_valid
    assert result.errors == (
        "timestamp must not be empty",
        "temperature out of range: -60 C",
        "pressure out of range: 0.0 hPa",
        "device status must not be empty",
        "device id must not be empty",
        "error code must not be negative: -5",
    )
    assert result.error_summary == "; ".join(result.errors)


def test_validation_result_is_immutable() -> None:
    result = ValidationResult(is_valid=True)
    with pytest.raises(AttributeError):
        result.is_valid = False  # type: ignore[misc]
