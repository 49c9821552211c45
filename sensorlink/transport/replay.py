from __future__ import annotations

from pathlib import Path

from sensorlink.transport.base import ITransport, TransportError


class ReplayTransport(ITransport):
    """Feeds a captured serial log back as fixed-size text fragments."""

    def __init__(self, path: str | Path, chunk_chars: int = 64, encoding: str = "utf-8") -> None:
        if chunk_chars <= 0:
            raise ValueError("chunk_chars must be > 0")
        self._path = Path(path)
        self._chunk_chars = int(chunk_chars)
        # newline="" keeps CR/LF exactly as captured
        self._fh = self._path.open("r", encoding=encoding, errors="replace", newline="")
        self._eof = False

    def read(self, timeout_ms: int) -> str:  # noqa: ARG002
        if self._eof or self._fh.closed:
            return ""
        chunk = self._fh.read(self._chunk_chars)
        if not chunk:
            self._eof = True
        return chunk

    def exhausted(self) -> bool:
        return self._eof or self._fh.closed

    def write(self, text: str) -> None:
        raise TransportError("replay transport is read-only")

    def close(self) -> None:
        self._fh.close()
