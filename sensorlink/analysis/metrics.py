from __future__ import annotations

import json
import math
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence


def _to_float(value: object) -> float | None:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _quantile(sorted_values: Sequence[float], q: float) -> float:
    if not sorted_values:
        raise ValueError("quantile requires non-empty list")
    if q <= 0:
        return float(sorted_values[0])
    if q >= 1:
        return float(sorted_values[-1])
    k = (len(sorted_values) - 1) * q
    f = int(math.floor(k))
    c = int(math.ceil(k))
    if f == c:
        return float(sorted_values[f])
    d = k - f
    return float(sorted_values[f] * (1.0 - d) + sorted_values[c] * d)


def _summary_stats(values: List[float]) -> Dict[str, Any] | None:
    if not values:
        return None
    values_sorted = sorted(values)
    total = float(sum(values_sorted))
    count = len(values_sorted)
    return {
        "count": count,
        "min": float(values_sorted[0]),
        "p50": _quantile(values_sorted, 0.5),
        "p90": _quantile(values_sorted, 0.9),
        "max": float(values_sorted[-1]),
        "mean": total / count,
    }


def _reason_kind(reason: object) -> str:
    text = str(reason or "").strip()
    if not text:
        return "unknown"
    return text.split(":", 1)[0].strip()


def load_events(path: str | Path) -> List[Dict[str, Any]]:
    path = Path(path)
    events = []
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        events.append(json.loads(line))
    return events


def compute_metrics(events: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    events = list(events)
    tx_sent = [e for e in events if e.get("event") == "tx_sent"]
    rx_parsed = [e for e in events if e.get("event") == "rx_parsed"]
    rx_rejected = [e for e in events if e.get("event") == "rx_rejected"]
    rx_invalid = [e for e in events if e.get("event") == "rx_invalid"]
    cleared = [e for e in events if e.get("event") == "rx_buffer_cleared"]

    sent_count = len(tx_sent)
    parsed_count = len(rx_parsed)

    temperatures: List[float] = []
    nominal_count = 0
    for event in rx_parsed:
        temp = _to_float(event.get("temperature"))
        if temp is not None:
            temperatures.append(temp)
        if event.get("is_nominal") is True:
            nominal_count += 1

    reasons = Counter(_reason_kind(e.get("reason")) for e in rx_rejected)
    violations: Counter[str] = Counter()
    for event in rx_invalid:
        for message in event.get("errors") or []:
            violations[str(message).split(":", 1)[0].strip()] += 1

    return {
        "sent_count": sent_count,
        "parsed_count": parsed_count,
        "rejected_count": len(rx_rejected),
        "invalid_count": len(rx_invalid),
        "nominal_count": nominal_count,
        "buffer_clears": len(cleared),
        "parse_ratio": (parsed_count / sent_count) if sent_count else None,
        "reject_reasons": dict(sorted(reasons.items())),
        "violations": dict(sorted(violations.items())),
        "temperature_c": _summary_stats(temperatures),
    }
