from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
import math
import statistics
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

"""Timing samples and the statistics derived from them.

Durations are stored in integer nanoseconds as read from the monotonic clock;
the ``*_ms`` properties exist for presentation only.
"""

try:
    _CI_Z = statistics.NormalDist().inv_cdf(0.975)
except Exception:
    _CI_Z = 1.959964

_NS_PER_MS = 1_000_000.0


@dataclass(frozen=True)
class BenchmarkSample:
    label: str
    n: Optional[int]
    duration_ns: int
    result: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class TaskReport:
    label: str
    n: Optional[int]
    n_samples: int
    min_ns: float | None = None
    median_ns: float | None = None
    mean_ns: float | None = None
    max_ns: float | None = None
    stddev_ns: float | None = None
    ci95_low_ns: float | None = None
    ci95_high_ns: float | None = None
    all_results_equal: bool | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def min_ms(self) -> float | None:
        return _to_ms(self.min_ns)

    @property
    def median_ms(self) -> float | None:
        return _to_ms(self.median_ns)

    @property
    def mean_ms(self) -> float | None:
        return _to_ms(self.mean_ns)

    @property
    def max_ms(self) -> float | None:
        return _to_ms(self.max_ns)

    def to_record(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "n": self.n,
            "n_samples": self.n_samples,
            "min": self.min_ns,
            "median": self.median_ns,
            "mean": self.mean_ns,
            "max": self.max_ns,
            "stddev": self.stddev_ns,
            "ci95_low": self.ci95_low_ns,
            "ci95_high": self.ci95_high_ns,
            "all_results_equal": self.all_results_equal,
            "failed": self.failed,
            "error": self.error,
        }


def _to_ms(value: float | None) -> float | None:
    if value is None:
        return None
    return value / _NS_PER_MS


def _compute_ci95(mean: float, samples: Sequence[float]) -> Tuple[float, float]:
    if len(samples) < 2:
        return mean, mean
    try:
        std = statistics.stdev(samples)
    except statistics.StatisticsError:
        return mean, mean
    if std == 0:
        return mean, mean
    margin = _CI_Z * (std / math.sqrt(len(samples)))
    return mean - margin, mean + margin


def _results_equal(samples: Sequence[BenchmarkSample]) -> bool | None:
    captured = [s.result for s in samples if s.result is not None]
    if not captured:
        return None
    if len(captured) != len(samples):
        return False
    first = captured[0]
    return all(r == first for r in captured[1:])


def summarize(label: str, samples: Sequence[BenchmarkSample]) -> TaskReport:
    """Collapse every sample recorded for ``label`` into one report row.

    Any failed sample marks the whole row as failed; its timing fields stay
    ``None`` so a partial run is never mistaken for a complete one.
    ``stddev_ns`` and the 95 % interval both use the sample (n - 1) standard
    deviation; a single sample reports a stddev of 0.
    """
    n = samples[0].n if samples else None
    errors = [s.error for s in samples if s.error is not None]
    if errors:
        return TaskReport(label=label, n=n, n_samples=0, error=errors[0])
    if not samples:
        return TaskReport(label=label, n=n, n_samples=0, error="no samples recorded")

    times = [float(s.duration_ns) for s in samples]
    mean = sum(times) / len(times)
    ci_low, ci_high = _compute_ci95(mean, times)
    return TaskReport(
        label=label,
        n=n,
        n_samples=len(times),
        min_ns=min(times),
        median_ns=statistics.median(times),
        mean_ns=mean,
        max_ns=max(times),
        stddev_ns=statistics.stdev(times) if len(times) > 1 else 0.0,
        ci95_low_ns=ci_low,
        ci95_high_ns=ci_high,
        all_results_equal=_results_equal(samples),
    )


def _order_key(row: TaskReport) -> Tuple[int, float, str]:
    if row.failed or row.median_ns is None:
        return (1, 0.0, row.label)
    return (0, row.median_ns, row.label)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class BenchmarkReport:
    rows: Tuple[TaskReport, ...]
    created_at: str = field(default_factory=_utc_now)
    meta: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_samples(
        cls,
        samples: Iterable[BenchmarkSample],
        *,
        meta: Dict[str, Any] | None = None,
    ) -> "BenchmarkReport":
        grouped: Dict[str, List[BenchmarkSample]] = {}
        for sample in samples:
            grouped.setdefault(sample.label, []).append(sample)
        rows = [summarize(label, group) for label, group in grouped.items()]
        rows.sort(key=_order_key)
        return cls(rows=tuple(rows), meta=dict(meta or {}))

    @property
    def labels(self) -> List[str]:
        return [row.label for row in self.rows]

    @property
    def successful(self) -> List[TaskReport]:
        return [row for row in self.rows if not row.failed]

    @property
    def failed(self) -> List[TaskReport]:
        return [row for row in self.rows if row.failed]

    @property
    def fastest(self) -> TaskReport | None:
        ok = self.successful
        return ok[0] if ok else None

    def get(self, label: str) -> TaskReport:
        for row in self.rows:
            if row.label == label:
                return row
        raise KeyError(label)

    def to_records(self) -> List[Dict[str, Any]]:
        return [row.to_record() for row in self.rows]
