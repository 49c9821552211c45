from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from sensorlink.sensing.schema import SensorReading, SensorReadingError

EMPTY_RESULT_REASON = "decoded to empty result"


class DecodeError(ValueError):
    pass


class EmptyDecodeResult(DecodeError):
    pass


@dataclass(frozen=True)
class Parsed:
    reading: SensorReading
    raw_text: str
    received_at_ms: int | None = None


@dataclass(frozen=True)
class Rejected:
    raw_text: str
    reason: str
    received_at_ms: int | None = None


Outcome = Union[Parsed, Rejected]


def decode_reading(segment: str) -> SensorReading:
    """
    Typed decode of one complete segment.

    Raises EmptyDecodeResult for a top-level null or an object without any
    known field, DecodeError for everything else that is not a reading.
    """
    try:
        data: Any = json.loads(segment)
    except json.JSONDecodeError as exc:
        raise DecodeError(str(exc)) from exc
    if data is None:
        raise EmptyDecodeResult(EMPTY_RESULT_REASON)
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
    if not SensorReading.known_fields(data):
        raise EmptyDecodeResult(EMPTY_RESULT_REASON)
    try:
        return SensorReading.from_dict(data)
    except SensorReadingError as exc:
        raise DecodeError(str(exc)) from exc


def decode(segment: str) -> Outcome:
    try:
        reading = decode_reading(segment)
    except EmptyDecodeResult:
        return Rejected(raw_text=segment, reason=EMPTY_RESULT_REASON)
    except DecodeError as exc:
        return Rejected(raw_text=segment, reason=f"decode error: {exc}")
    except Exception as exc:  # noqa: BLE001
        return Rejected(
            raw_text=segment,
            reason=f"unexpected decode error: {type(exc).__name__}: {exc}",
        )
    return Parsed(reading=reading, raw_text=segment)
