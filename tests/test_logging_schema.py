import json
from pathlib import Path

from sensorlink.config.runspec import RunSpec
from sensorlink.runtime.logging import JsonlLogger
from sensorlink.runtime.scheduler import FakeClock


def _make_runspec(tmp_path: Path) -> RunSpec:
    spec = RunSpec.from_dict(
        {"run_id": "test_run", "role": "rx", "logging": {"out_dir": str(tmp_path)}}
    )
    spec.validate()
    return spec


def test_jsonl_logging_schema(tmp_path: Path) -> None:
    spec = _make_runspec(tmp_path)
    clock = FakeClock(start_ms=10)
    logger = JsonlLogger(spec.logging.out_dir, spec.run_id, spec.role, clock=clock)
    logger.log_run_start(spec)
    clock.sleep_ms(5)
    logger.log_event("rx_rejected", {"reason": "decoded to empty result", "raw": "{}"})
    logger.log_event("rx_parsed", {"device_id": "DEV_1", "temperature": 23.5})
    logger.close()

    log_path = tmp_path / "test_run_rx.jsonl"
    assert logger.path == log_path
    lines = log_path.read_text(encoding="utf-8").splitlines()
    events = [json.loads(line) for line in lines]
    assert [e["event"] for e in events] == ["run_start", "rx_rejected", "rx_parsed"]
    for event in events:
        assert event["run_id"] == "test_run"
        assert event["role"] == "rx"
        assert "ts_ms" in event
    assert events[0]["ts_ms"] == 10
    assert events[1]["ts_ms"] == 15
    assert events[0]["runspec"]["run_id"] == "test_run"


def test_jsonl_logging_escapes_non_ascii(tmp_path: Path) -> None:
    logger = JsonlLogger(tmp_path, "r", "rx", clock=FakeClock())
    logger.log_event("rx_parsed", {"device_id": "传感器"})
    logger.close()
    text = (tmp_path / "r_rx.jsonl").read_text(encoding="utf-8")
    assert text.isascii()
    assert json.loads(text)["device_id"] == "传感器"


def test_jsonl_logging_appends(tmp_path: Path) -> None:
    for _ in range(2):
        logger = JsonlLogger(tmp_path / "nested", "r", "tx", clock=FakeClock())
        logger.log_event("tx_sent", {"seq": 1})
        logger.close()
    lines = (tmp_path / "nested" / "r_tx.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2


def test_jsonl_logger_for_run_and_run_end(tmp_path: Path) -> None:
    spec = _make_runspec(tmp_path)
    with JsonlLogger.for_run(spec, clock=FakeClock(start_ms=3)) as logger:
        logger.log_run_start(spec)
        logger.log_run_end({"parsed_count": 2, "buffered_chars": 0})
        assert logger.events_written == 2
    logger.close()
    events = [
        json.loads(line)
        for line in (tmp_path / "test_run_rx.jsonl").read_text(encoding="utf-8").splitlines()
    ]
    assert [e["event"] for e in events] == ["run_start", "run_end"]
    assert list(events[1])[:4] == ["ts_ms", "run_id", "event", "role"]
    assert events[1]["parsed_count"] == 2
    assert events[0]["runspec"]["receiver"]["history"] == 50
