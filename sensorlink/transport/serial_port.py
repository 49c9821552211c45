from __future__ import annotations

import codecs
import time

from sensorlink.transport.base import ITransport, TransportError


class SerialTransport(ITransport):
    """
    Text transport over a serial line.

    Reads whatever bytes are waiting and decodes them incrementally, so a
    multi-byte UTF-8 character cut between two reads comes out whole on the
    second read. Chunk boundaries are otherwise passed through untouched;
    reassembling records is the caller's job.
    """

    def __init__(
        self,
        port: str,
        baudrate: int,
        timeout_ms: int = 1000,
        encoding: str = "utf-8",
    ) -> None:
        try:
            import serial  # type: ignore
        except ImportError as exc:
            raise TransportError(
                "pyserial is required for serial mode. Install with `pip install -e .[serial]`."
            ) from exc

        if baudrate <= 0:
            raise ValueError("baudrate must be > 0")

        self._serial = serial.Serial(
            port=port,
            baudrate=baudrate,
            timeout=0,
            write_timeout=max(0.0, timeout_ms / 1000.0),
        )
        self._encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    def _read_available(self) -> bytes:
        try:
            waiting = int(self._serial.in_waiting)
        except Exception:
            waiting = 0
        if waiting <= 0:
            return b""
        return self._serial.read(waiting)

    def read(self, timeout_ms: int) -> str:
        deadline = time.monotonic() + max(0, timeout_ms) / 1000.0
        while True:
            chunk = self._read_available()
            if chunk:
                text = self._decoder.decode(chunk)
                if text:
                    return text
                continue
            if timeout_ms <= 0 or time.monotonic() >= deadline:
                return ""
            time.sleep(0.001)

    def write(self, text: str) -> None:
        remaining = memoryview(text.encode(self._encoding))
        while remaining:
            written = self._serial.write(remaining)
            if not written or written <= 0:
                raise TransportError("serial write returned no bytes")
            remaining = remaining[written:]
        self._serial.flush()

    def reset_input(self) -> None:
        """Drop bytes the OS has buffered and any half-decoded character."""
        reset = getattr(self._serial, "reset_input_buffer", None)
        if reset is not None:
            reset()
        self._decoder.reset()

    def close(self) -> None:
        try:
            self._serial.close()
        except Exception:
            return None
