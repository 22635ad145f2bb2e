from __future__ import annotations
"""JSON/CSV export of benchmark reports and host metadata."""

import copy
import csv
import json
import os
import pathlib
import platform
import subprocess
from typing import Any, Dict, Optional, Sequence

import psutil

from .metrics import BenchmarkReport, BenchmarkSample

CSV_FIELDS = (
    "label",
    "n",
    "n_samples",
    "min",
    "median",
    "mean",
    "max",
    "stddev",
    "ci95_low",
    "ci95_high",
    "all_results_equal",
    "failed",
    "error",
)

_ENVIRONMENT_CACHE: Dict[str, Any] | None = None


def _detect_cpu_model() -> str | None:
    system = platform.system()
    try:
        if system == "Darwin":
            out = subprocess.check_output(
                ["sysctl", "-n", "machdep.cpu.brand_string"],
                stderr=subprocess.DEVNULL,
                text=True,
            ).strip()
            if out:
                return out
        elif system == "Linux":
            cpuinfo = pathlib.Path("/proc/cpuinfo")
            if cpuinfo.exists():
                for line in cpuinfo.read_text(encoding="utf-8", errors="ignore").splitlines():
                    if line.lower().startswith("model name"):
                        return line.split(":", 1)[1].strip()
        elif system == "Windows":
            val = os.environ.get("PROCESSOR_IDENTIFIER")
            if val:
                return val
    except (OSError, subprocess.SubprocessError):
        pass
    return platform.processor() or platform.machine() or None


def collect_environment_meta() -> Dict[str, Any]:
    """Describe the host the timings were taken on (cached per process)."""
    global _ENVIRONMENT_CACHE
    if _ENVIRONMENT_CACHE is None:
        info: Dict[str, Any] = {}
        cpu_model = _detect_cpu_model()
        if cpu_model:
            info["cpu_model"] = cpu_model
        info["os"] = platform.platform(aliased=True)
        info["python"] = platform.python_version()
        info["implementation"] = platform.python_implementation()
        info["cpu_logical"] = psutil.cpu_count(logical=True)
        info["cpu_physical"] = psutil.cpu_count(logical=False)
        info["memory_total_bytes"] = psutil.virtual_memory().total
        _ENVIRONMENT_CACHE = info
    return copy.deepcopy(_ENVIRONMENT_CACHE)


def _sample_record(sample: BenchmarkSample) -> Dict[str, Any]:
    return {
        "label": sample.label,
        "n": sample.n,
        "duration_ns": sample.duration_ns,
        "error": sample.error,
    }


def build_export_payload(
    report: BenchmarkReport,
    samples: Optional[Sequence[BenchmarkSample]] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    merged = dict(report.meta)
    if meta:
        merged.update(meta)
    payload: Dict[str, Any] = {
        "created_at": report.created_at,
        "meta": merged,
        "report": report.to_records(),
    }
    if samples is not None:
        payload["samples"] = [_sample_record(s) for s in samples]
    return payload


def _resolve(export_path: str | os.PathLike[str]) -> pathlib.Path:
    raw = os.fspath(export_path)
    # Normalize Windows-style separators on POSIX if users pass e.g. "results\file.json"
    if "\\" in raw and ":" not in raw and os.sep == "/":
        raw = raw.replace("\\", "/")
    path = pathlib.Path(raw)
    if not path.is_absolute():
        path = pathlib.Path.cwd() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def export_json(
    report: BenchmarkReport,
    export_path: str | os.PathLike[str] | None,
    *,
    samples: Optional[Sequence[BenchmarkSample]] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> pathlib.Path | None:
    if not export_path:
        return None
    path = _resolve(export_path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(build_export_payload(report, samples=samples, meta=meta), f, indent=2)
    return path


def export_csv(report: BenchmarkReport, export_path: str | os.PathLike[str] | None) -> pathlib.Path | None:
    if not export_path:
        return None
    path = _resolve(export_path)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for record in report.to_records():
            writer.writerow({k: ("" if record[k] is None else record[k]) for k in CSV_FIELDS})
    return path


def load_report_json(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """Read back a payload written by :func:`export_json`."""
    data = json.loads(pathlib.Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("report"), list):
        raise ValueError(f"{path} does not contain an exported benchmark report")
    return data
