"""In-memory operational metrics.

Keeps lightweight runtime counters to expose:
- p95 latency per route group (first path segment)
- notification dispatch outcomes (created / suppressed / failed)

Note: in-memory metrics reset on process restart.
"""

from collections import defaultdict, deque
from statistics import median
from threading import Lock
from typing import Dict, Deque


_LOCK = Lock()

_LATENCY_MS: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=400))
_DISPATCH_CREATED = 0
_DISPATCH_SUPPRESSED = 0
_DISPATCH_FAILED = 0


def observe_latency(path: str, elapsed_ms: float) -> None:
    segment = "/" + path.strip("/").split("/", 1)[0]
    with _LOCK:
        _LATENCY_MS[segment].append(max(elapsed_ms, 0.0))


def observe_dispatch(created: int = 0, suppressed: int = 0, failed: int = 0) -> None:
    global _DISPATCH_CREATED, _DISPATCH_SUPPRESSED, _DISPATCH_FAILED
    with _LOCK:
        _DISPATCH_CREATED += max(created, 0)
        _DISPATCH_SUPPRESSED += max(suppressed, 0)
        _DISPATCH_FAILED += max(failed, 0)


def _p95(samples: list[float]) -> float:
    if not samples:
        return 0.0
    ordered = sorted(samples)
    idx = max(int(0.95 * len(ordered)) - 1, 0)
    return round(ordered[idx], 2)


def get_ops_metrics() -> dict:
    with _LOCK:
        latency_snapshot = {
            segment: {
                "count": len(samples),
                "p95_ms": _p95(list(samples)),
                "median_ms": round(median(samples), 2) if samples else 0.0,
            }
            for segment, samples in _LATENCY_MS.items()
        }

        attempted = _DISPATCH_CREATED + _DISPATCH_FAILED
        failure_rate = (
            round((_DISPATCH_FAILED / attempted) * 100, 2)
            if attempted > 0
            else 0.0
        )

        return {
            "latency": latency_snapshot,
            "notifications_created": _DISPATCH_CREATED,
            "notifications_suppressed": _DISPATCH_SUPPRESSED,
            "notifications_failed": _DISPATCH_FAILED,
            "dispatch_failure_rate_pct": failure_rate,
        }


def reset_ops_metrics() -> None:
    global _DISPATCH_CREATED, _DISPATCH_SUPPRESSED, _DISPATCH_FAILED
    with _LOCK:
        _LATENCY_MS.clear()
        _DISPATCH_CREATED = 0
        _DISPATCH_SUPPRESSED = 0
        _DISPATCH_FAILED = 0
