from sensorlink.sensing.schema import (
    FIELD_NAMES,
    NORMAL_STATUS,
    SensorReading,
    SensorReadingError,
    parse_timestamp,
)
from sensorlink.sensing.simulator import ReadingSimulator, encode_line
from sensorlink.sensing.validator import ValidationResult, validate

__all__ = [
    "FIELD_NAMES",
    "NORMAL_STATUS",
    "SensorReading",
    "SensorReadingError",
    "parse_timestamp",
    "ReadingSimulator",
    "encode_line",
    "ValidationResult",
    "validate",
]
