from __future__ import annotations

import json
import random
from datetime import datetime
from typing import Callable

from sensorlink.sensing.schema import NORMAL_STATUS, SensorReading

WARNING_STATUS = "warning"
LINE_TERMINATOR = "\r\n"


def encode_line(reading: SensorReading) -> str:
    """Serialize a reading as one compact wire line, non-ASCII kept as-is."""
    return json.dumps(reading.as_dict(), ensure_ascii=False, separators=(",", ":")) + LINE_TERMINATOR


class ReadingSimulator:
    """Produces plausible readings for exercising a link end to end."""

    def __init__(self, seed: int = 0, clock_fn: Callable[[], datetime] | None = None) -> None:
        self._rng = random.Random(seed)
        self._clock_fn = clock_fn or datetime.now

    def next_reading(self) -> SensorReading:
        rng = self._rng
        error_code = rng.randint(100, 998) if rng.randrange(5) == 0 else 0
        return SensorReading(
            timestamp=self._clock_fn().strftime("%Y-%m-%d %H:%M:%S"),
            temperature=round(rng.random() * 50 + 15, 2),
            device_status=NORMAL_STATUS if rng.randrange(2) == 0 else WARNING_STATUS,
            humidity=round(rng.random() * 100, 1),
            pressure=round(rng.random() * 200 + 800, 1),
            voltage=round(rng.random() * 5 + 10, 2),
            current=round(rng.random() * 2, 3),
            device_id=f"DEV_{rng.randint(1000, 9998)}",
            error_code=error_code,
        )
