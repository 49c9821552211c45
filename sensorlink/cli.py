from __future__ import annotations

import argparse
import json
from pathlib import Path

from sensorlink.analysis.metrics import compute_metrics, load_events
from sensorlink.config import RunSpec, load_runspec
from sensorlink.protocol.decoder import Parsed
from sensorlink.protocol.reassembler import FrameReassembler
from sensorlink.runtime.logging import JsonlLogger
from sensorlink.runtime.receiver import ReceiverNode
from sensorlink.runtime.scheduler import RealClock
from sensorlink.runtime.sender import SenderNode
from sensorlink.sensing.simulator import ReadingSimulator
from sensorlink.sensing.validator import validate
from sensorlink.transport.base import ITransport
from sensorlink.transport.replay import ReplayTransport
from sensorlink.transport.serial_port import SerialTransport


def _open_serial(runspec: RunSpec, args: argparse.Namespace) -> SerialTransport:
    port = args.port or runspec.serial.port
    if not port:
        raise ValueError("--port is required when the runspec has no serial.port")
    baudrate = args.baud or runspec.serial.baudrate
    return SerialTransport(
        port=port,
        baudrate=baudrate,
        timeout_ms=runspec.serial.timeout_ms,
        encoding=runspec.serial.encoding,
    )


def _run_rx(args: argparse.Namespace) -> int:
    runspec = load_runspec(args.runspec)
    clock = RealClock()

    transport: ITransport
    if args.transport == "replay":
        if not args.input:
            raise ValueError("--input is required for --transport replay")
        transport = ReplayTransport(
            args.input, chunk_chars=args.chunk_chars, encoding=runspec.serial.encoding
        )
    else:
        transport = _open_serial(runspec, args)

    with JsonlLogger.for_run(runspec, clock=clock) as logger:
        logger.log_run_start(runspec)
        node = ReceiverNode(runspec, transport, logger, clock=clock)
        try:
            if isinstance(transport, ReplayTransport):
                node.drain()
            else:
                node.run(
                    step_ms=args.step_ms,
                    max_records=args.max_records,
                    max_seconds=args.max_seconds,
                )
        finally:
            logger.log_run_end(node.counters())
            transport.close()
    return 0


def _run_tx(args: argparse.Namespace) -> int:
    runspec = load_runspec(args.runspec)
    clock = RealClock()
    transport = _open_serial(runspec, args)
    with JsonlLogger.for_run(runspec, clock=clock) as logger:
        logger.log_run_start(runspec)
        node = SenderNode(
            runspec,
            transport,
            logger,
            ReadingSimulator(seed=runspec.sender.seed),
            clock=clock,
        )
        try:
            node.run(step_ms=args.step_ms, max_seconds=args.max_seconds)
        finally:
            logger.log_run_end({"sent_count": node.sent_count})
            transport.close()
    return 0


def _run_replay(args: argparse.Namespace) -> int:
    transport = ReplayTransport(args.input, chunk_chars=args.chunk_chars)
    reassembler = FrameReassembler()
    parsed = 0
    invalid = 0
    rejected: list[dict[str, str]] = []
    try:
        while True:
            chunk = transport.read(timeout_ms=0)
            if not chunk:
                break
            for outcome in reassembler.append(chunk):
                if isinstance(outcome, Parsed):
                    parsed += 1
                    if not validate(outcome.reading).is_valid:
                        invalid += 1
                else:
                    rejected.append({"reason": outcome.reason, "raw": outcome.raw_text})
    finally:
        transport.close()
    report = {
        "parsed_count": parsed,
        "invalid_count": invalid,
        "rejected_count": len(rejected),
        "rejected": rejected,
        "leftover_chars": reassembler.buffered_chars(),
    }
    print(json.dumps(report, indent=2, ensure_ascii=False))
    return 0


def _run_metrics(args: argparse.Namespace) -> int:
    events = []
    for path in args.log:
        events.extend(load_events(path))
    grouped: dict[str, list[dict[str, object]]] = {}
    for event in events:
        run_id = str(event.get("run_id", "unknown"))
        grouped.setdefault(run_id, []).append(event)
    report = {run_id: compute_metrics(run_events) for run_id, run_events in grouped.items()}
    output = json.dumps(report, indent=2)
    if args.out:
        Path(args.out).write_text(output, encoding="utf-8")
    else:
        print(output)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="sensorlink")
    sub = parser.add_subparsers(dest="cmd", required=True)

    rx = sub.add_parser("rx", help="receive, reassemble and validate readings")
    rx.add_argument("--runspec", required=True)
    rx.add_argument("--transport", choices=["serial", "replay"], default="serial")
    rx.add_argument("--port")
    rx.add_argument("--baud", type=int)
    rx.add_argument("--input", help="capture file for --transport replay")
    rx.add_argument("--chunk-chars", type=int, default=64)
    rx.add_argument("--step-ms", type=int, default=5)
    rx.add_argument("--max-records", type=int)
    rx.add_argument("--max-seconds", type=float)
    rx.set_defaults(func=_run_rx)

    tx = sub.add_parser("tx", help="send simulated readings over serial")
    tx.add_argument("--runspec", required=True)
    tx.add_argument("--port")
    tx.add_argument("--baud", type=int)
    tx.add_argument("--step-ms", type=int, default=5)
    tx.add_argument("--max-seconds", type=float)
    tx.set_defaults(func=_run_tx)

    replay = sub.add_parser("replay", help="check a capture file without a runspec")
    replay.add_argument("--input", required=True)
    replay.add_argument("--chunk-chars", type=int, default=64)
    replay.set_defaults(func=_run_replay)

    metrics = sub.add_parser("metrics", help="summarise JSONL run logs")
    metrics.add_argument("--log", action="append", required=True, help="path to a JSONL log")
    metrics.add_argument("--out")
    metrics.set_defaults(func=_run_metrics)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
