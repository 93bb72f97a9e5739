"""Timing helpers shared by the rule evaluation benchmarks."""

from __future__ import annotations

import math
import os
import platform
import time
from dataclasses import dataclass
from typing import Any, Callable

import jax


@dataclass(frozen=True)
class TimingSummary:
    mean_ms: float
    stdev_ms: float
    p50_ms: float
    p95_ms: float

    @property
    def ops_per_sec(self) -> float:
        return 1000.0 / self.mean_ms if self.mean_ms > 0 else math.inf


def host_metadata() -> dict[str, Any]:
    return {
        "platform": platform.platform(),
        "python": platform.python_version(),
        "jax": getattr(jax, "__version__", "unknown"),
        "jax_backend": jax.default_backend(),
        "cpu_count": os.cpu_count(),
    }


def _quantile(ordered: list[float], q: float) -> float:
    # linear interpolation between closest ranks
    pos = (len(ordered) - 1) * q
    below = ordered[math.floor(pos)]
    above = ordered[math.ceil(pos)]
    return below + (above - below) * (pos - math.floor(pos))


def summarize_ms(samples: list[float]) -> TimingSummary:
    if not samples:
        raise ValueError("no timing samples")
    ordered = sorted(samples)
    avg = math.fsum(ordered) / len(ordered)
    spread = 0.0
    if len(ordered) > 1:
        spread = math.sqrt(math.fsum((s - avg) ** 2 for s in ordered) / (len(ordered) - 1))
    return TimingSummary(
        mean_ms=avg,
        stdev_ms=spread,
        p50_ms=_quantile(ordered, 0.50),
        p95_ms=_quantile(ordered, 0.95),
    )


def sample_ms(fn: Callable[[], object], *, repeats: int, warmup: int, samples: int) -> list[float]:
    """Return per-call milliseconds for each of ``samples`` batches of ``repeats`` calls."""
    for _ in range(max(0, warmup)):
        fn()

    rows: list[float] = []
    for _ in range(samples):
        start_ns = time.perf_counter_ns()
        for _ in range(repeats):
            fn()
        rows.append((time.perf_counter_ns() - start_ns) / repeats / 1e6)
    return rows
