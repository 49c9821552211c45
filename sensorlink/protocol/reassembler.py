from __future__ import annotations

import re
import threading
from dataclasses import replace
from typing import Callable, List, Protocol

from sensorlink.protocol.decoder import Outcome, Parsed, Rejected, decode

_LINE_SPLIT = re.compile(r"[\r\n]+")

ParsedCallback = Callable[[Parsed], None]
RejectedCallback = Callable[[Rejected], None]


class _MsClock(Protocol):
    def now_ms(self) -> int:
        ...


def is_complete_json(text: str) -> bool:
    """
    Brace-balance test for one candidate line.

    Only checks structure: the text must start with '{', end with '}', and the
    braces outside of quoted strings must cancel out. Anything else about the
    JSON grammar is left to the decoder.
    """
    text = text.strip()
    if not text:
        return False
    if not text.startswith("{") or not text.endswith("}"):
        return False
    depth = 0
    in_string = False
    escaped = False
    for ch in text:
        if escaped:
            escaped = False
            continue
        if ch == "\\" and in_string:
            escaped = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if not in_string:
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
    return depth == 0


class FrameReassembler:
    """
    Rebuilds newline-delimited JSON records from arbitrarily fragmented text.

    Every `append` rescans the whole buffer: the text is split on CR/LF, each
    segment that passes `is_complete_json` is decoded and dropped, and the
    rest is put back in order to wait for more input. Segments are scanned
    under a lock; the resulting outcomes are then handed to subscribers in
    order, after the lock is released, and also returned from `append`.
    """

    def __init__(
        self,
        decoder: Callable[[str], Outcome] = decode,
        clock: _MsClock | None = None,
    ) -> None:
        self._decoder = decoder
        self._clock = clock
        self._buf: List[str] = []
        self._lock = threading.Lock()
        self._on_parsed: List[ParsedCallback] = []
        self._on_rejected: List[RejectedCallback] = []

    def subscribe(
        self,
        on_parsed: ParsedCallback | None = None,
        on_rejected: RejectedCallback | None = None,
    ) -> None:
        if on_parsed is not None:
            self._on_parsed.append(on_parsed)
        if on_rejected is not None:
            self._on_rejected.append(on_rejected)

    def unsubscribe(
        self,
        on_parsed: ParsedCallback | None = None,
        on_rejected: RejectedCallback | None = None,
    ) -> None:
        if on_parsed is not None and on_parsed in self._on_parsed:
            self._on_parsed.remove(on_parsed)
        if on_rejected is not None and on_rejected in self._on_rejected:
            self._on_rejected.remove(on_rejected)

    def append(self, fragment: str | None) -> List[Outcome]:
        if not fragment:
            return []
        with self._lock:
            self._buf.append(fragment)
            outcomes = self._scan()
        self._dispatch(outcomes)
        return outcomes

    def clear(self) -> None:
        with self._lock:
            self._buf.clear()

    def peek_buffer(self) -> str:
        with self._lock:
            return "".join(self._buf)

    def buffered_chars(self) -> int:
        with self._lock:
            return sum(len(part) for part in self._buf)

    def _scan(self) -> List[Outcome]:
        content = "".join(self._buf)
        segments = [part for part in _LINE_SPLIT.split(content) if part]
        self._buf.clear()

        outcomes: List[Outcome] = []
        for segment in segments:
            candidate = segment.strip()
            if not candidate:
                continue
            if not is_complete_json(candidate):
                # untrimmed: the cut may fall on whitespace inside a string value
                self._buf.append(segment)
                continue
            outcome = self._decoder(candidate)
            if self._clock is not None:
                outcome = replace(outcome, received_at_ms=self._clock.now_ms())
            outcomes.append(outcome)
        return outcomes

    def _dispatch(self, outcomes: List[Outcome]) -> None:
        # called with the lock released
        callback_error: BaseException | None = None
        for outcome in outcomes:
            try:
                self._emit(outcome)
            except Exception as exc:  # noqa: BLE001
                if callback_error is None:
                    callback_error = exc
        if callback_error is not None:
            raise callback_error

    def _emit(self, outcome: Outcome) -> None:
        if isinstance(outcome, Parsed):
            for callback in list(self._on_parsed):
                callback(outcome)
        else:
            for callback in list(self._on_rejected):
                callback(outcome)
