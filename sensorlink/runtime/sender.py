from __future__ import annotations

from typing import Any, Dict, Protocol

from sensorlink.config.runspec import RunSpec
from sensorlink.runtime.scheduler import Clock, IntervalTimer, RealClock
from sensorlink.sensing.schema import SensorReading
from sensorlink.sensing.simulator import encode_line
from sensorlink.transport.base import ITransport


class ReadingSource(Protocol):
    def next_reading(self) -> SensorReading:
        ...


class EventLogger(Protocol):
    def log_event(self, event: str, fields: Dict[str, Any]) -> None:
        ...


class SenderNode:
    def __init__(
        self,
        runspec: RunSpec,
        transport: ITransport,
        logger: EventLogger,
        source: ReadingSource,
        clock: Clock | None = None,
    ) -> None:
        self._runspec = runspec
        self._transport = transport
        self._logger = logger
        self._source = source
        self._clock = clock or RealClock()
        self._timer = IntervalTimer(self._clock, runspec.sender.interval_ms)
        self._max_records = runspec.sender.max_records
        self._seq = 0
        self._stop = False

    @property
    def sent_count(self) -> int:
        return self._seq

    def stop(self) -> None:
        self._stop = True

    def finished(self) -> bool:
        if self._stop:
            return True
        return self._max_records is not None and self._seq >= self._max_records

    def send_reading(self, reading: SensorReading) -> str:
        line = encode_line(reading)
        self._transport.write(line)
        self._seq += 1
        self._logger.log_event(
            "tx_sent",
            {
                "seq": self._seq,
                "device_id": reading.device_id,
                "temperature": reading.temperature,
                "bytes": len(line.encode("utf-8")),
            },
        )
        return line

    def process_once(self) -> bool:
        if self.finished() or not self._timer.due():
            return False
        self.send_reading(self._source.next_reading())
        self._timer.mark_fired()
        return True

    def run(self, step_ms: int = 5, *, max_seconds: float | None = None) -> None:
        deadline_ms: int | None = None
        if max_seconds is not None:
            if max_seconds < 0:
                raise ValueError("max_seconds must be >= 0")
            deadline_ms = self._clock.now_ms() + int(max_seconds * 1000.0)
        while not self.finished():
            if deadline_ms is not None and self._clock.now_ms() >= deadline_ms:
                break
            self.process_once()
            self._clock.sleep_ms(step_ms)
