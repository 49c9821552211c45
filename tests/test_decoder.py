import json

import pytest

import sensorlink.protocol.decoder as decoder_mod
from sensorlink.protocol.decoder import (
    DecodeError,
    EmptyDecodeResult,
    Parsed,
    Rejected,
    decode,
    decode_reading,
)


def _full(**overrides: object) -> dict:
    data = {
        "Timestamp": "2024-01-01 12:00:00",
        "Temperature": 23.5,
        "DeviceStatus": "normal",
        "Humidity": 45.2,
        "Pressure": 1013.2,
        "Voltage": 12.1,
        "Current": 0.85,
        "DeviceId": "DEV_1234",
        "ErrorCode": 0,
    }
    data.update(overrides)
    return data


def test_decode_full_record() -> None:
    text = json.dumps(_full())
    outcome = decode(text)
    assert isinstance(outcome, Parsed)
    assert outcome.raw_text == text
    reading = outcome.reading
    assert reading.timestamp == "2024-01-01 12:00:00"
    assert reading.temperature == 23.5
    assert reading.humidity == 45.2
    assert reading.pressure == 1013.2
    assert reading.voltage == 12.1
    assert reading.current == 0.85
    assert reading.device_id == "DEV_1234"
    assert reading.device_status == "normal"
    assert reading.error_code == 0


def test_decode_field_names_are_case_insensitive() -> None:
    text = (
        '{"timestamp":"2024-01-01 00:00:00","TEMPERATURE":-3,"deviceStatus":"normal",'
        '"humidity":10,"PRESSURE":990,"voltage":5,"current":1,"deviceid":"d","errorcode":7}'
    )
    outcome = decode(text)
    assert isinstance(outcome, Parsed)
    assert outcome.reading.temperature == -3.0
    assert outcome.reading.device_id == "d"
    assert outcome.reading.error_code == 7


def test_decode_keeps_non_ascii_text() -> None:
    text = json.dumps(_full(DeviceStatus="正常", DeviceId="传感器-1"), ensure_ascii=False)
    outcome = decode(text)
    assert isinstance(outcome, Parsed)
    assert outcome.reading.device_status == "正常"
    assert outcome.reading.device_id == "传感器-1"


def test_decode_missing_fields_take_defaults() -> None:
    outcome = decode('{"DeviceId":"DEV_2"}')
    assert isinstance(outcome, Parsed)
    assert outcome.reading.device_id == "DEV_2"
    assert outcome.reading.timestamp == ""
    assert outcome.reading.temperature == 0.0
    assert outcome.reading.error_code == 0


def test_decode_ignores_unknown_fields() -> None:
    outcome = decode(json.dumps(_full(Firmware="1.2.3")))
    assert isinstance(outcome, Parsed)


def test_decode_null_text_field_becomes_empty() -> None:
    outcome = decode(json.dumps(_full(DeviceStatus=None)))
    assert isinstance(outcome, Parsed)
    assert outcome.reading.device_status == ""


def test_decode_invalid_json_is_rejected() -> None:
    outcome = decode('{"Temperature":23.5,}')
    assert isinstance(outcome, Rejected)
    assert outcome.raw_text == '{"Temperature":23.5,}'
    assert outcome.reason.startswith("decode error: ")


@pytest.mark.parametrize(
    "overrides",
    [
        {"Temperature": "23.5"},
        {"Temperature": None},
        {"Humidity": True},
        {"DeviceId": 1234},
        {"ErrorCode": 1.5},
        {"ErrorCode": "0"},
    ],
)
def test_decode_wrong_field_types_are_rejected(overrides: dict) -> None:
    outcome = decode(json.dumps(_full(**overrides)))
    assert isinstance(outcome, Rejected)
    assert outcome.reason.startswith("decode error: invalid ")


def test_decode_integral_float_error_code_accepted() -> None:
    outcome = decode(json.dumps(_full(ErrorCode=3.0)))
    assert isinstance(outcome, Parsed)
    assert outcome.reading.error_code == 3


@pytest.mark.parametrize("text", ["{}", '{"foo":1,"bar":"x"}', "null"])
def test_decode_empty_result(text: str) -> None:
    outcome = decode(text)
    assert isinstance(outcome, Rejected)
    assert outcome.reason == "decoded to empty result"


def test_decode_non_object_is_rejected() -> None:
    outcome = decode("[1, 2, 3]")
    assert isinstance(outcome, Rejected)
    assert outcome.reason == "decode error: expected a JSON object, got list"


def test_decode_reading_raises_typed_errors() -> None:
    with pytest.raises(EmptyDecodeResult):
        decode_reading("{}")
    with pytest.raises(DecodeError):
        decode_reading("{oops}")
    assert issubclass(DecodeError, ValueError)


def test_decode_unexpected_failure_becomes_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    def _explode(segment: str) -> object:
        raise RuntimeError("boom")

    monkeypatch.setattr(decoder_mod, "decode_reading", _explode)
    outcome = decoder_mod.decode('{"DeviceId":"x"}')
    assert isinstance(outcome, Rejected)
    assert outcome.reason == "unexpected decode error: RuntimeError: boom"


def test_decode_deep_nesting_does_not_raise() -> None:
    text = '{"DeviceId":' + "[" * 100000 + "]" * 100000 + "}"
    outcome = decode(text)
    assert isinstance(outcome, Rejected)
