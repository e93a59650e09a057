"""Benchmark compiled accessors against direct access and getattr-style reflection."""

from __future__ import annotations

import argparse
import json
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from _bench_utils import (
    calibrate_repeats,
    configure_cpu_affinity_from_env,
    host_metadata,
    mean as _mean,
    percentile as _percentile,
    sample_adaptive_ns,
    stddev as _stddev,
)
from reflection_accel import (
    AccessorCache,
    CallShape,
    compile_action,
    compile_constructor,
    compile_getter,
    compile_method,
    compile_setter,
    constructor_of,
    field_of,
    get_or_compile,
    method_of,
    property_of,
)

PROFILE_CONFIG: dict[str, dict[str, float | int]] = {
    "quick": {"samples": 3, "warmup": 1, "target_sample_ms": 5.0, "min_repeats": 1_000, "cv_target_pct": 25.0, "max_samples": 7},
    "full": {"samples": 7, "warmup": 2, "target_sample_ms": 20.0, "min_repeats": 10_000, "cv_target_pct": 15.0, "max_samples": 15},
}
SECTIONS = ("construct", "call", "action", "get", "set", "compile")


class Vector:
    x: float
    y: float

    def __init__(self, x: float, y: float) -> None:
        self.x = x
        self.y = y
        self._norm_cache = 0.0

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y

    def shift(self, dx: float) -> None:
        self.x += dx

    @property
    def norm_cache(self) -> float:
        return self._norm_cache

    @norm_cache.setter
    def norm_cache(self, value: float) -> None:
        self._norm_cache = value


@dataclass(frozen=True)
class BenchCase:
    section: str
    name: str
    build: Callable[[], Callable[[], object]]


@dataclass(frozen=True)
class BenchRow:
    section: str
    name: str
    status: str
    mean_ns: float | None
    stdev_ns: float | None
    cv_pct: float | None
    p50_ns: float | None
    p95_ns: float | None
    min_ns: float | None
    repeats: int
    samples: int
    error: str | None


def _all_cases() -> list[BenchCase]:
    cache = AccessorCache()
    ctor = constructor_of(Vector)
    dot = method_of(Vector, "dot")
    shift = method_of(Vector, "shift")
    x_field = field_of(Vector, "x")
    norm = property_of(Vector, "norm_cache")
    v = Vector(1.0, 2.0)
    w = Vector(3.0, 4.0)
    ctor_args = (1.0, 2.0)

    def direct(fn):
        return lambda: fn

    def bound(make, *args):
        def build():
            accessor = make()
            return lambda: accessor(*args)

        return build

    return [
        BenchCase("construct", "direct", direct(lambda: Vector(1.0, 2.0))),
        BenchCase("construct", "reflection", direct(lambda: Vector(*ctor_args))),
        BenchCase("construct", "accessor", bound(lambda: compile_constructor(ctor, cache=cache), 1.0, 2.0)),
        BenchCase(
            "construct",
            "accessor_array",
            bound(lambda: compile_constructor(ctor, CallShape.constructor_array(), cache=cache), ctor_args),
        ),
        BenchCase("call", "direct", direct(lambda: v.dot(w))),
        BenchCase("call", "reflection", direct(lambda: getattr(v, "dot")(w))),
        BenchCase("call", "accessor", bound(lambda: compile_method(dot, cache=cache), v, w)),
        BenchCase(
            "call",
            "accessor_typed",
            bound(lambda: compile_method(dot, CallShape.func(1, base=Vector, result=float), cache=cache), v, w),
        ),
        BenchCase("action", "direct", direct(lambda: v.shift(0.0))),
        BenchCase("action", "reflection", direct(lambda: getattr(v, "shift")(0.0))),
        BenchCase("action", "accessor", bound(lambda: compile_action(shift, cache=cache), v, 0.0)),
        BenchCase("get", "direct", direct(lambda: v.norm_cache)),
        BenchCase("get", "reflection", direct(lambda: getattr(v, "norm_cache"))),
        BenchCase("get", "accessor", bound(lambda: compile_getter(norm, cache=cache), v)),
        BenchCase("get", "accessor_field", bound(lambda: compile_getter(x_field, cache=cache), v)),
        BenchCase("set", "reflection", direct(lambda: setattr(v, "norm_cache", 1.5))),
        BenchCase("set", "accessor", bound(lambda: compile_setter(norm, cache=cache), v, 1.5)),
        BenchCase(
            "set",
            "accessor_pinned",
            bound(lambda: compile_setter(norm, CallShape.setter(base=Vector, value=float), cache=cache), v, 1.5),
        ),
        BenchCase("compile", "cache_hit", direct(lambda: get_or_compile(dot, CallShape.func(1), cache=cache))),
        BenchCase("compile", "uncached_build", direct(lambda: get_or_compile(dot, CallShape.func(1), use_cache=False))),
    ]


def _run_case(
    case: BenchCase,
    *,
    samples: int,
    warmup: int,
    target_sample_ms: float,
    min_repeats: int,
    cv_target_pct: float,
    max_samples: int,
) -> BenchRow:
    try:
        fn = case.build()
        fn()
        repeats = calibrate_repeats(fn, target_sample_ms=target_sample_ms, min_repeats=min_repeats)
        per_call_ns = sample_adaptive_ns(
            fn,
            repeats=repeats,
            warmup=warmup,
            samples=samples,
            cv_target_pct=cv_target_pct,
            max_samples=max_samples,
        )
        mean_ns = _mean(per_call_ns)
        stdev_ns = _stddev(per_call_ns)
        return BenchRow(
            section=case.section,
            name=case.name,
            status="ok",
            mean_ns=mean_ns,
            stdev_ns=stdev_ns,
            cv_pct=(stdev_ns / mean_ns) * 100.0 if mean_ns > 0 else 0.0,
            p50_ns=_percentile(per_call_ns, 0.50),
            p95_ns=_percentile(per_call_ns, 0.95),
            min_ns=min(per_call_ns),
            repeats=repeats,
            samples=len(per_call_ns),
            error=None,
        )
    except Exception as err:  # pragma: no cover - benchmark resilience
        return BenchRow(
            section=case.section,
            name=case.name,
            status="error",
            mean_ns=None,
            stdev_ns=None,
            cv_pct=None,
            p50_ns=None,
            p95_ns=None,
            min_ns=None,
            repeats=min_repeats,
            samples=samples,
            error=str(err),
        )


def _print_summary(rows: list[BenchRow]) -> None:
    print("accessor benchmark summary")
    print("section    case                mean(ns)   p95(ns)   cv(%)   status")
    print("---------  ----------------  ---------  --------  ------  ------")
    for row in rows:
        mean_text = "-" if row.mean_ns is None else f"{row.mean_ns:9.1f}"
        p95_text = "-" if row.p95_ns is None else f"{row.p95_ns:8.1f}"
        cv_text = "-" if row.cv_pct is None else f"{row.cv_pct:6.2f}"
        print(f"{row.section:9}  {row.name:16}  {mean_text:>9}  {p95_text:>8}  {cv_text:>6}  {row.status}")
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--profile",
        choices=sorted(PROFILE_CONFIG),
        default="quick",
        help="fixed benchmark profile presets",
    )
    parser.add_argument(
        "--sections",
        default=",".join(SECTIONS),
        help="comma-separated subset of sections",
    )
    parser.add_argument("--samples", type=int, default=None, help="timing samples per case")
    parser.add_argument("--warmup", type=int, default=None, help="warmup rounds before timing")
    parser.add_argument("--target-sample-ms", type=float, default=None, help="target wall time per sample")
    parser.add_argument("--min-repeats", type=int, default=None, help="minimum repeats after calibration")
    parser.add_argument("--cv-target", type=float, default=None, help="adaptive sampling CV target percent")
    parser.add_argument("--max-samples", type=int, default=None, help="adaptive sampling cap")
    parser.add_argument(
        "--json-out",
        default="",
        help="optional path for machine-readable output",
    )
    args = parser.parse_args()
    affinity_info = configure_cpu_affinity_from_env()
    host = host_metadata()

    profile = PROFILE_CONFIG[args.profile]
    samples = int(profile["samples"] if args.samples is None else args.samples)
    warmup = int(profile["warmup"] if args.warmup is None else args.warmup)
    target_sample_ms = float(profile["target_sample_ms"] if args.target_sample_ms is None else args.target_sample_ms)
    min_repeats = int(profile["min_repeats"] if args.min_repeats is None else args.min_repeats)
    cv_target_pct = float(profile["cv_target_pct"] if args.cv_target is None else args.cv_target)
    max_samples = int(profile["max_samples"] if args.max_samples is None else args.max_samples)
    if max_samples < samples:
        max_samples = samples

    wanted_sections = {part.strip() for part in args.sections.split(",") if part.strip()}
    unknown = wanted_sections - set(SECTIONS)
    if unknown:
        raise SystemExit(f"Unknown sections: {sorted(unknown)}")

    cases = [case for case in _all_cases() if case.section in wanted_sections]
    print(
        "profile: "
        f"{args.profile} (samples={samples}, warmup={warmup}, target_sample_ms={target_sample_ms:.1f}, "
        f"min_repeats={min_repeats}, cv_target={cv_target_pct:.1f}%, max_samples={max_samples})"
    )
    print(f"sections: {sorted(wanted_sections)}")
    print(f"host: backend={host['backend']}, affinity={affinity_info.get('active')}")
    print()

    started = time.perf_counter()
    rows = [
        _run_case(
            case,
            samples=samples,
            warmup=warmup,
            target_sample_ms=target_sample_ms,
            min_repeats=min_repeats,
            cv_target_pct=cv_target_pct,
            max_samples=max_samples,
        )
        for case in cases
    ]
    print(f"completed {len(rows)} cases in {time.perf_counter() - started:.2f}s")
    print()
    _print_summary(rows)

    if args.json_out:
        outpath = Path(args.json_out)
        outpath.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "timestamp_utc": datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ"),
            "profile": args.profile,
            "sections": sorted(wanted_sections),
            "samples": samples,
            "warmup": warmup,
            "target_sample_ms": target_sample_ms,
            "min_repeats": min_repeats,
            "cv_target_pct": cv_target_pct,
            "max_samples": max_samples,
            "affinity": affinity_info,
            "host": host,
            "rows": [asdict(row) for row in rows],
        }
        outpath.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote JSON: {outpath}")


if __name__ == "__main__":
    main()
