from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping

from sensorlink.config.runspec import RunSpec
from sensorlink.runtime.scheduler import Clock, RealClock


class JsonlLogger:
    """
    Append-only event log for one role of one run.

    Each line is a JSON object that starts with `ts_ms`, `run_id`, `event` and
    `role`, followed by the event's own fields. Lines are flushed as they are
    written so a crashed receiver still leaves a readable log.
    """

    def __init__(
        self,
        out_dir: str | Path,
        run_id: str,
        role: str,
        clock: Clock | None = None,
    ) -> None:
        out = Path(out_dir)
        out.mkdir(parents=True, exist_ok=True)
        self._path = out / f"{run_id}_{role}.jsonl"
        self._clock = clock or RealClock()
        self._run_id = run_id
        self._role = role
        self._events_written = 0
        self._fh = self._path.open("a", encoding="utf-8")

    @classmethod
    def for_run(cls, runspec: RunSpec, clock: Clock | None = None) -> "JsonlLogger":
        return cls(runspec.logging.out_dir, runspec.run_id, runspec.role, clock=clock)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def events_written(self) -> int:
        return self._events_written

    def log_run_start(self, runspec: RunSpec) -> None:
        self.log_event("run_start", {"runspec": runspec.as_dict()})

    def log_run_end(self, counters: Mapping[str, Any]) -> None:
        self.log_event("run_end", dict(counters))

    def log_event(self, event: str, fields: Dict[str, Any]) -> None:
        record: Dict[str, Any] = {
            "ts_ms": self._clock.now_ms(),
            "run_id": self._run_id,
            "event": event,
            "role": self._role,
        }
        record.update(fields)
        # non-ASCII labels are written as \u escapes
        self._fh.write(json.dumps(record, ensure_ascii=True) + "\n")
        self._fh.flush()
        self._events_written += 1

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()

    def __enter__(self) -> "JsonlLogger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
