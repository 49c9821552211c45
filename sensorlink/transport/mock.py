from __future__ import annotations

import random
from collections import deque
from typing import Deque, Sequence

from sensorlink.transport.base import ITransport, TransportError


class _Chunker:
    def __init__(self, chunk_sizes: Sequence[int] | None, seed: int, max_chunk: int) -> None:
        if chunk_sizes is not None and (not chunk_sizes or min(chunk_sizes) <= 0):
            raise ValueError("chunk_sizes must be a non-empty list of sizes > 0")
        if max_chunk <= 0:
            raise ValueError("max_chunk must be > 0")
        self._sizes = list(chunk_sizes) if chunk_sizes is not None else None
        self._rng = random.Random(seed)
        self._max_chunk = max_chunk
        self._counter = 0

    def next_size(self) -> int:
        if self._sizes:
            size = self._sizes[self._counter % len(self._sizes)]
            self._counter += 1
            return size
        return self._rng.randint(1, self._max_chunk)

    def split(self, text: str) -> list[str]:
        chunks = []
        pos = 0
        while pos < len(text):
            size = self.next_size()
            chunks.append(text[pos : pos + size])
            pos += size
        return chunks


class MockLink:
    """
    In-memory pair of transports.

    Text written on one end shows up on the other end re-cut into chunks, so
    the receiving side sees the same arbitrary fragmentation a serial line
    produces. Each `read` returns exactly one chunk.
    """

    def __init__(
        self,
        chunk_sizes: Sequence[int] | None = None,
        seed: int = 0,
        max_chunk: int = 32,
    ) -> None:
        self._chunker_ab = _Chunker(chunk_sizes, seed, max_chunk)
        self._chunker_ba = _Chunker(chunk_sizes, seed + 1, max_chunk)
        self._queues: dict[str, Deque[str]] = {"a": deque(), "b": deque()}
        self.a = MockTransport(self, "a")
        self.b = MockTransport(self, "b")

    def _send(self, sender: str, text: str) -> None:
        chunker = self._chunker_ab if sender == "a" else self._chunker_ba
        peer = "b" if sender == "a" else "a"
        self._queues[peer].extend(chunker.split(text))

    def _recv(self, receiver: str) -> str:
        queue = self._queues[receiver]
        if not queue:
            return ""
        return queue.popleft()

    def _discard(self, receiver: str) -> None:
        self._queues[receiver].clear()

    def pending(self, receiver: str) -> int:
        return len(self._queues[receiver])


class MockTransport(ITransport):
    def __init__(self, link: MockLink, label: str) -> None:
        self._link = link
        self._label = label
        self._closed = False

    def write(self, text: str) -> None:
        if self._closed:
            raise TransportError("transport is closed")
        self._link._send(self._label, text)

    def read(self, timeout_ms: int) -> str:  # noqa: ARG002
        if self._closed:
            return ""
        return self._link._recv(self._label)

    def reset_input(self) -> None:
        self._link._discard(self._label)

    def close(self) -> None:
        self._closed = True


def create_mock_link(
    chunk_sizes: Sequence[int] | None = None,
    seed: int = 0,
    max_chunk: int = 32,
) -> MockLink:
    return MockLink(chunk_sizes=chunk_sizes, seed=seed, max_chunk=max_chunk)
