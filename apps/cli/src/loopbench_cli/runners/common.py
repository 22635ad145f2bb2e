from __future__ import annotations
"""Shared benchmarking utilities for CLI runners.

Includes task-spec parsing, harness construction, the text table renderer and
JSON/CSV export wiring used by both the CLI and the batch scripts.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from loopbench import (
    BenchmarkHarness,
    BenchmarkReport,
    ConfigurationError,
    HarnessConfig,
    SuiteEntry,
    build_harness,
    default_suite,
    load_suite,
    registry,
)
from loopbench.export import collect_environment_meta, export_csv, export_json

log = logging.getLogger(__name__)


@dataclass
class RunSummary:
    harness: BenchmarkHarness
    report: BenchmarkReport
    meta: Dict[str, Any]

    @property
    def failed(self) -> bool:
        return bool(self.report.failed)


def parse_task_spec(spec: str) -> SuiteEntry:
    """Parse ``name``, ``name:n`` or ``label=name:n``."""
    raw = spec.strip()
    if not raw:
        raise ConfigurationError("empty task spec")
    label: Optional[str] = None
    if "=" in raw:
        label, raw = (part.strip() for part in raw.split("=", 1))
        if not label:
            raise ConfigurationError(f"task spec '{spec}' has an empty label")
    name, sep, n_str = raw.partition(":")
    name = name.strip()
    registry.get(name)
    n: Optional[int] = None
    if sep:
        try:
            n = int(n_str.strip())
        except ValueError:
            raise ConfigurationError(f"task spec '{spec}' has a non-integer n") from None
    if label is None:
        label = name if n is None else f"{name}:{n}"
    return SuiteEntry(label=label, task=name, n=n)


def resolve_entries(task_specs: Sequence[str] | None, suite_path: str | None) -> List[SuiteEntry]:
    entries: List[SuiteEntry] = []
    if suite_path:
        entries.extend(load_suite(suite_path))
    for spec in task_specs or ():
        entries.append(parse_task_spec(spec))
    return entries or default_suite()


def run_suite(
    entries: Sequence[SuiteEntry],
    config: HarnessConfig,
    *,
    progress: Optional[Callable[[str, int, int], None]] = None,
) -> RunSummary:
    """Register every entry on a fresh harness and run it."""
    harness = build_harness(list(entries), config)
    report = harness.run(config.repetitions, progress=progress)
    meta = {
        "repetitions": config.repetitions,
        "warmup": config.warmup,
        "timing": "perf_counter_ns around the call, call overhead included",
        "environment": collect_environment_meta(),
    }
    if report.failed:
        log.warning("%d task(s) failed: %s", len(report.failed), ", ".join(r.label for r in report.failed))
    return RunSummary(harness=harness, report=report, meta=meta)


def _fmt_ms(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:.4f}"


def format_table(report: BenchmarkReport) -> str:
    headers = ["label", "n", "runs", "min_ms", "median_ms", "mean_ms", "max_ms", "consistent"]
    rows: List[List[str]] = []
    for row in report.rows:
        if row.failed:
            rows.append([row.label, str(row.n), "0", "FAILED", row.error or "", "", "", ""])
            continue
        consistent = "-" if row.all_results_equal is None else ("yes" if row.all_results_equal else "NO")
        rows.append([
            row.label,
            str(row.n),
            str(row.n_samples),
            _fmt_ms(row.min_ms),
            _fmt_ms(row.median_ms),
            _fmt_ms(row.mean_ms),
            _fmt_ms(row.max_ms),
            consistent,
        ])
    widths = [len(h) for h in headers]
    for r in rows:
        for i, cell in enumerate(r[:len(headers)]):
            widths[i] = max(widths[i], len(cell))
    lines = ["  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))]
    lines.append("  ".join("-" * w for w in widths))
    for r in rows:
        lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(r)).rstrip())
    return "\n".join(lines)


def export_summary(summary: RunSummary, json_path: str | None, csv_path: str | None) -> None:
    written = export_json(summary.report, json_path, samples=summary.harness.samples, meta=summary.meta)
    if written:
        log.info("wrote %s", written)
    written = export_csv(summary.report, csv_path)
    if written:
        log.info("wrote %s", written)
