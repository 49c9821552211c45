from __future__ import annotations

from abc import ABC, abstractmethod


class TransportError(RuntimeError):
    pass


class ITransport(ABC):
    @abstractmethod
    def write(self, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def read(self, timeout_ms: int) -> str:
        """Return whatever text is available, or "" once `timeout_ms` elapses."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError

    def reset_input(self) -> None:
        """Discard input that arrived but was not read yet."""
        return None
