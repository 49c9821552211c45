from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> int:
        ...

    def sleep_ms(self, ms: int) -> None:
        ...


class RealClock:
    def now_ms(self) -> int:
        return int(time.monotonic() * 1000)

    def sleep_ms(self, ms: int) -> None:
        time.sleep(ms / 1000.0)


class FakeClock:
    def __init__(self, start_ms: int = 0) -> None:
        self._now = start_ms

    def now_ms(self) -> int:
        return self._now

    def sleep_ms(self, ms: int) -> None:
        self._now += max(0, int(ms))


class IntervalTimer:
    """Fires at most once per `interval_ms`, starting immediately."""

    def __init__(self, clock: Clock, interval_ms: int) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self._clock = clock
        self._interval_ms = int(interval_ms)
        self._next_due_ms: int | None = None
        self.fired_count = 0

    def due(self) -> bool:
        if self._next_due_ms is None:
            return True
        return self._clock.now_ms() >= self._next_due_ms

    def mark_fired(self) -> None:
        now = self._clock.now_ms()
        if self._next_due_ms is None:
            self._next_due_ms = now + self._interval_ms
        else:
            # keep the cadence anchored even if a poll ran late
            self._next_due_ms = max(self._next_due_ms + self._interval_ms, now)
        self.fired_count += 1
