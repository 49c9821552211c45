from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List, Protocol

from sensorlink.config.runspec import RunSpec
from sensorlink.protocol.decoder import Parsed, Rejected
from sensorlink.protocol.reassembler import FrameReassembler
from sensorlink.runtime.scheduler import Clock, RealClock
from sensorlink.sensing.schema import SensorReading
from sensorlink.sensing.validator import ValidationResult, validate
from sensorlink.transport.base import ITransport

RAW_LOG_LIMIT = 256


class EventLogger(Protocol):
    def log_event(self, event: str, fields: Dict[str, Any]) -> None:
        ...


class ReceiverNode:
    def __init__(
        self,
        runspec: RunSpec,
        transport: ITransport,
        logger: EventLogger,
        clock: Clock | None = None,
        reassembler: FrameReassembler | None = None,
    ) -> None:
        self._runspec = runspec
        self._transport = transport
        self._logger = logger
        self._clock = clock or RealClock()
        self._reassembler = reassembler or FrameReassembler(clock=self._clock)
        self._reassembler.subscribe(on_parsed=self._on_parsed, on_rejected=self._on_rejected)
        self._validate = runspec.receiver.validate
        self._stop = False
        self._readings: Deque[SensorReading] = deque(maxlen=runspec.receiver.history)
        self._last_validation: ValidationResult | None = None
        self._parsed_count = 0
        self._rejected_count = 0
        self._invalid_count = 0

    @property
    def reassembler(self) -> FrameReassembler:
        return self._reassembler

    def stop(self) -> None:
        self._stop = True

    def readings(self) -> List[SensorReading]:
        """The most recent readings, oldest first, capped at `receiver.history`."""
        return list(self._readings)

    def last_reading(self) -> SensorReading | None:
        return self._readings[-1] if self._readings else None

    def last_validation(self) -> ValidationResult | None:
        return self._last_validation

    def counters(self) -> Dict[str, int]:
        return {
            "parsed_count": self._parsed_count,
            "rejected_count": self._rejected_count,
            "invalid_count": self._invalid_count,
            "buffered_chars": self._reassembler.buffered_chars(),
        }

    def _on_parsed(self, outcome: Parsed) -> None:
        reading = outcome.reading
        self._parsed_count += 1
        self._readings.append(reading)
        self._logger.log_event(
            "rx_parsed",
            {
                "device_id": reading.device_id,
                "temperature": reading.temperature,
                "is_nominal": reading.is_nominal,
                "raw_chars": len(outcome.raw_text),
            },
        )
        if not self._validate:
            return
        result = validate(reading)
        self._last_validation = result
        if not result.is_valid:
            self._invalid_count += 1
            self._logger.log_event(
                "rx_invalid",
                {"device_id": reading.device_id, "errors": list(result.errors)},
            )

    def _on_rejected(self, outcome: Rejected) -> None:
        self._rejected_count += 1
        self._logger.log_event(
            "rx_rejected",
            {"reason": outcome.reason, "raw": outcome.raw_text[:RAW_LOG_LIMIT]},
        )

    def reset(self) -> None:
        """Drop partial data, e.g. after the link was re-opened."""
        dropped = self._reassembler.buffered_chars()
        self._reassembler.clear()
        self._transport.reset_input()
        self._logger.log_event("rx_buffer_cleared", {"dropped_chars": dropped})

    def swap_transport(self, transport: ITransport) -> None:
        self._transport = transport
        if self._runspec.receiver.clear_on_reconnect:
            self.reset()

    def process_once(self) -> int:
        """Feed one transport read into the reassembler; returns the chars consumed."""
        if self._stop:
            return 0
        text = self._transport.read(timeout_ms=0)
        if not text:
            return 0
        self._reassembler.append(text)
        return len(text)

    def drain(self) -> int:
        """Process until the transport has nothing left to give."""
        total = 0
        while not self._stop:
            consumed = self.process_once()
            if consumed == 0:
                break
            total += consumed
        return total

    def run(
        self,
        step_ms: int | None = None,
        *,
        max_records: int | None = None,
        max_seconds: float | None = None,
    ) -> None:
        if step_ms is None:
            step_ms = self._runspec.receiver.poll_ms
        if max_records is None:
            max_records = self._runspec.receiver.max_records
        deadline_ms: int | None = None
        if max_seconds is not None:
            if max_seconds < 0:
                raise ValueError("max_seconds must be >= 0")
            deadline_ms = self._clock.now_ms() + int(max_seconds * 1000.0)
        while not self._stop:
            if max_records is not None and self._parsed_count >= max_records:
                break
            if deadline_ms is not None and self._clock.now_ms() >= deadline_ms:
                break
            if self.process_once() == 0:
                self._clock.sleep_ms(step_ms)
