"""Throughput benchmark for repeated rule evaluation."""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from tinyrule import RuleChecker
from _bench_utils import host_metadata, sample_ms, summarize_ms

DEFAULT_ITERATIONS = 100_000
DEFAULT_EXPRESSION = "myfloat.eq(1.9999999) || myint.eq(32)"


@dataclass(frozen=True)
class EvalRow:
    expression: str
    iterations: int
    samples: int
    mean_ms: float
    stdev_ms: float
    p50_ms: float
    p95_ms: float
    ops_per_sec: float


def _build_checker() -> RuleChecker:
    checker = RuleChecker()
    checker.set_int("myint", 1)
    checker.set_float("myfloat", 2.0)
    checker.set_string("mystr", "my string")
    return checker


def run_eval_benchmark(expression: str, *, iterations: int, samples: int, warmup: int, expected: bool) -> EvalRow:
    checker = _build_checker()
    outcome = checker.evaluate(expression)
    if not outcome.ok:
        raise RuntimeError(f"benchmark expression failed: {outcome.error}")
    if outcome.result != expected:
        raise RuntimeError(f"benchmark expression returned {outcome.result}, expected {expected}")

    repeats = max(1, iterations // max(1, samples))
    ms = sample_ms(lambda: checker.evaluate(expression), repeats=repeats, warmup=warmup, samples=samples)
    summary = summarize_ms(ms)
    return EvalRow(
        expression=expression,
        iterations=repeats * samples,
        samples=samples,
        mean_ms=summary.mean_ms,
        stdev_ms=summary.stdev_ms,
        p50_ms=summary.p50_ms,
        p95_ms=summary.p95_ms,
        ops_per_sec=summary.ops_per_sec,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Measure rule evaluations per second.")
    parser.add_argument("--expression", default=DEFAULT_EXPRESSION, help="rule text to evaluate")
    parser.add_argument("--expect", choices=("true", "false"), default="false", help="expected boolean result")
    parser.add_argument(
        "--iterations",
        type=int,
        default=int(os.environ.get("BENCHMARK_ITERATIONS", DEFAULT_ITERATIONS)),
        help="total evaluations (default: $BENCHMARK_ITERATIONS or 100000)",
    )
    parser.add_argument("--samples", type=int, default=5, help="timing batches")
    parser.add_argument("--warmup", type=int, default=100, help="untimed evaluations before sampling")
    parser.add_argument("--json-out", default="", help="optional path to write machine-readable results")
    args = parser.parse_args()

    try:
        row = run_eval_benchmark(
            args.expression,
            iterations=args.iterations,
            samples=args.samples,
            warmup=args.warmup,
            expected=args.expect == "true",
        )
    except RuntimeError as err:
        print(f"FAILED: {err}", file=sys.stderr)
        return 1

    print(f"expression: {row.expression}")
    print(f"{row.ops_per_sec / 1e6:.3f} M ops/sec  ({row.iterations} in {row.mean_ms * row.iterations / 1000.0:.3f} seconds)")
    print(f"per eval: mean={row.mean_ms * 1000.0:.2f}us p50={row.p50_ms * 1000.0:.2f}us p95={row.p95_ms * 1000.0:.2f}us")

    if args.json_out:
        payload = {
            "timestamp_utc": datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ"),
            "host": host_metadata(),
            "rows": [asdict(row)],
        }
        out_path = Path(args.json_out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        print(f"wrote {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
