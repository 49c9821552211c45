from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Literal

Role = Literal["tx", "rx"]


def _require_keys(data: Dict[str, Any], keys: Iterable[str], context: str) -> None:
    missing = [key for key in keys if key not in data]
    if missing:
        joined = ", ".join(missing)
        raise ValueError(f"missing {context} keys: {joined}")


def _optional_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"", "auto", "none", "null"}:
            return default
        if text in {"1", "true", "on", "yes"}:
            return True
        if text in {"0", "false", "off", "no"}:
            return False
    raise ValueError(f"invalid bool value: {value!r}")


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"invalid int value: {value!r}")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"", "auto", "none", "null"}:
            return None
        return int(text)
    raise ValueError(f"invalid int value: {value!r}")


@dataclass(frozen=True)
class SerialSpec:
    port: str | None = None
    baudrate: int = 9600
    timeout_ms: int = 1000
    encoding: str = "utf-8"

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "SerialSpec":
        data = data or {}
        port = data.get("port")
        return cls(
            port=(str(port) if port else None),
            baudrate=int(data.get("baudrate", 9600)),
            timeout_ms=int(data.get("timeout_ms", 1000)),
            encoding=str(data.get("encoding", "utf-8")),
        )


@dataclass(frozen=True)
class SenderSpec:
    interval_ms: int = 2000
    max_records: int | None = None
    seed: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "SenderSpec":
        data = data or {}
        return cls(
            interval_ms=int(data.get("interval_ms", 2000)),
            max_records=_optional_int(data.get("max_records")),
            seed=int(data.get("seed", 0)),
        )


@dataclass(frozen=True)
class ReceiverSpec:
    poll_ms: int = 5
    max_records: int | None = None
    clear_on_reconnect: bool = True
    validate: bool = True
    history: int = 50

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "ReceiverSpec":
        data = data or {}
        return cls(
            poll_ms=int(data.get("poll_ms", 5)),
            max_records=_optional_int(data.get("max_records")),
            clear_on_reconnect=_optional_bool(data.get("clear_on_reconnect"), True),
            validate=_optional_bool(data.get("validate"), True),
            history=int(data.get("history", 50)),
        )


@dataclass(frozen=True)
class LoggingSpec:
    out_dir: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSpec":
        _require_keys(data, ["out_dir"], "logging")
        return cls(out_dir=str(data["out_dir"]))


@dataclass(frozen=True)
class RunSpec:
    run_id: str
    role: Role
    logging: LoggingSpec
    serial: SerialSpec = SerialSpec()
    sender: SenderSpec = SenderSpec()
    receiver: ReceiverSpec = ReceiverSpec()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunSpec":
        _require_keys(data, ["run_id", "role", "logging"], "runspec")
        return cls(
            run_id=str(data["run_id"]),
            role=data["role"],
            logging=LoggingSpec.from_dict(data["logging"]),
            serial=SerialSpec.from_dict(data.get("serial")),
            sender=SenderSpec.from_dict(data.get("sender")),
            receiver=ReceiverSpec.from_dict(data.get("receiver")),
        )

    def validate(self) -> None:
        if not self.run_id:
            raise ValueError("run_id must be non-empty")
        if self.role not in ("tx", "rx"):
            raise ValueError(f"invalid role: {self.role}")
        if self.serial.baudrate <= 0:
            raise ValueError("serial baudrate must be > 0")
        if self.serial.timeout_ms < 0:
            raise ValueError("serial timeout_ms must be >= 0")
        if not self.serial.encoding:
            raise ValueError("serial encoding must be non-empty")
        if self.sender.interval_ms <= 0:
            raise ValueError("sender interval_ms must be > 0")
        if self.sender.max_records is not None and self.sender.max_records < 0:
            raise ValueError("sender max_records must be >= 0")
        if self.receiver.poll_ms < 0:
            raise ValueError("receiver poll_ms must be >= 0")
        if self.receiver.max_records is not None and self.receiver.max_records < 0:
            raise ValueError("receiver max_records must be >= 0")
        if self.receiver.history <= 0:
            raise ValueError("receiver history must be > 0")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "role": self.role,
            "serial": {
                "port": self.serial.port,
                "baudrate": self.serial.baudrate,
                "timeout_ms": self.serial.timeout_ms,
                "encoding": self.serial.encoding,
            },
            "sender": {
                "interval_ms": self.sender.interval_ms,
                "max_records": self.sender.max_records,
                "seed": self.sender.seed,
            },
            "receiver": {
                "poll_ms": self.receiver.poll_ms,
                "max_records": self.receiver.max_records,
                "clear_on_reconnect": self.receiver.clear_on_reconnect,
                "validate": self.receiver.validate,
                "history": self.receiver.history,
            },
            "logging": {"out_dir": self.logging.out_dir},
        }


def _load_json(path: Path) -> Dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        import yaml
    except ImportError as exc:
        raise RuntimeError("PyYAML is required to load YAML runspecs") from exc
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def load_runspec(path: str | Path) -> RunSpec:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = _load_yaml(path)
    else:
        data = _load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"runspec must be a mapping: {path}")
    spec = RunSpec.from_dict(data)
    spec.validate()
    return spec


def save_runspec(path: str | Path, spec: RunSpec) -> None:
    path = Path(path)
    data = spec.as_dict()
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise RuntimeError("PyYAML is required to write YAML runspecs") from exc
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
    else:
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
