from __future__ import annotations

from collections import defaultdict, deque
from datetime import datetime, timezone
from math import ceil
from threading import Lock
from typing import Any


def _percentile(values: list[float], pct: int) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    index = max(0, min(len(ordered) - 1, ceil((pct / 100) * len(ordered)) - 1))
    return ordered[index]


def _summarize(values: list[float]) -> dict[str, Any]:
    if not values:
        return {"count": 0, "avg_ms": 0.0, "p50_ms": 0.0, "p95_ms": 0.0, "max_ms": 0.0, "last_ms": 0.0}
    return {
        "count": len(values),
        "avg_ms": round(sum(values) / len(values), 2),
        "p50_ms": round(_percentile(values, 50), 2),
        "p95_ms": round(_percentile(values, 95), 2),
        "max_ms": round(max(values), 2),
        "last_ms": round(values[-1], 2),
    }


class PerformanceMetrics:
    """Rolling latency samples for API routes and Supabase calls.

    Only the newest ``max_samples`` timings per key are kept. API keys also
    carry a count of 5xx responses so the admin dashboard can spot failing
    routes without a log search.
    """

    def __init__(self, *, max_samples: int = 200, slowest_limit: int = 5) -> None:
        self._max_samples = max_samples
        self._slowest_limit = slowest_limit
        self._lock = Lock()
        self._api_store: dict[str, deque[float]] = defaultdict(
            lambda: deque(maxlen=self._max_samples)
        )
        self._db_store: dict[str, deque[float]] = defaultdict(
            lambda: deque(maxlen=self._max_samples)
        )
        self._api_errors: dict[str, int] = defaultdict(int)

    def record_api(self, key: str, duration_ms: float, *, status_code: int = 200) -> None:
        with self._lock:
            self._api_store[key].append(float(duration_ms))
            if status_code >= 500:
                self._api_errors[key] += 1

    def record_db(self, key: str, duration_ms: float) -> None:
        with self._lock:
            self._db_store[key].append(float(duration_ms))

    def get_api_summary(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            values = list(self._api_store.get(key, []))
            errors = self._api_errors.get(key, 0)
        if not values:
            return None
        return {**_summarize(values), "error_count": errors}

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            api_snapshot = {
                key: {**_summarize(list(values)), "error_count": self._api_errors.get(key, 0)}
                for key, values in self._api_store.items()
            }
            db_snapshot = {key: _summarize(list(values)) for key, values in self._db_store.items()}

        slowest = sorted(api_snapshot.items(), key=lambda item: item[1]["p95_ms"], reverse=True)
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "api": api_snapshot,
            "db": db_snapshot,
            "slowest_routes": [
                {"route": key, "p95_ms": summary["p95_ms"], "count": summary["count"]}
                for key, summary in slowest[: self._slowest_limit]
            ],
        }

    def clear(self) -> None:
        with self._lock:
            self._api_store.clear()
            self._db_store.clear()
            self._api_errors.clear()


perf_metrics = PerformanceMetrics()
