"""Harness settings from the environment and JSON suite files."""

from __future__ import annotations

from dataclasses import dataclass
import json
import os
import pathlib
from typing import Any, List, Mapping, Optional, Tuple

from .errors import ConfigurationError
from .harness import BenchmarkHarness
from .registry import registry

ENV_RUNS = "LOOPBENCH_RUNS"
ENV_WARMUP = "LOOPBENCH_WARMUP"
ENV_CAPTURE = "LOOPBENCH_CAPTURE_RESULTS"
ENV_RESULTS_DIR = "LOOPBENCH_RESULTS_DIR"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class HarnessConfig:
    repetitions: int = 1
    warmup: int = 0
    capture_results: bool = True
    results_dir: str = "results"


@dataclass(frozen=True)
class SuiteEntry:
    label: str
    task: str
    n: Optional[int] = None


def _parse_int(name: str, raw: str, minimum: int) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _parse_bool(name: str, raw: str) -> bool:
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}")


def load_config(env: Mapping[str, str] | None = None) -> HarnessConfig:
    """Build a :class:`HarnessConfig`, overriding defaults from ``env``."""
    env = os.environ if env is None else env
    defaults = HarnessConfig()
    repetitions = defaults.repetitions
    warmup = defaults.warmup
    capture = defaults.capture_results
    results_dir = defaults.results_dir
    if env.get(ENV_RUNS):
        repetitions = _parse_int(ENV_RUNS, env[ENV_RUNS], 1)
    if env.get(ENV_WARMUP):
        warmup = _parse_int(ENV_WARMUP, env[ENV_WARMUP], 0)
    if env.get(ENV_CAPTURE):
        capture = _parse_bool(ENV_CAPTURE, env[ENV_CAPTURE])
    if env.get(ENV_RESULTS_DIR):
        results_dir = env[ENV_RESULTS_DIR]
    return HarnessConfig(
        repetitions=repetitions,
        warmup=warmup,
        capture_results=capture,
        results_dir=results_dir,
    )


def _parse_entry(label: str, value: Any) -> SuiteEntry:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"suite entry '{label}' must be an object")
    task = value.get("task")
    if not isinstance(task, str) or not task:
        raise ConfigurationError(f"suite entry '{label}' is missing a task name")
    registry.get(task)
    n = value.get("n")
    if n is not None and (isinstance(n, bool) or not isinstance(n, int)):
        raise ConfigurationError(f"suite entry '{label}' has a non-integer n: {n!r}")
    return SuiteEntry(label=label, task=task, n=n)


def load_suite(path: str | os.PathLike[str]) -> List[SuiteEntry]:
    """Read a suite file.

    Accepts either an object keyed by label::

        {"pi-1e6": {"task": "pi", "n": 1000000}}

    or a list of objects carrying their own ``label``. Labels must be unique.
    """
    suite_path = pathlib.Path(path)
    if not suite_path.exists():
        raise ConfigurationError(f"suite file not found: {suite_path}")
    try:
        raw = json.loads(suite_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"suite file {suite_path} is not valid JSON: {exc}") from exc

    pairs: List[Tuple[str, Any]] = []
    if isinstance(raw, Mapping):
        pairs = list(raw.items())
    elif isinstance(raw, list):
        for item in raw:
            if not isinstance(item, Mapping) or not isinstance(item.get("label"), str):
                raise ConfigurationError(f"suite list entries need a string 'label': {item!r}")
            pairs.append((item["label"], item))
    else:
        raise ConfigurationError(f"suite file {suite_path} must hold an object or a list")

    entries: List[SuiteEntry] = []
    seen = set()
    for label, value in pairs:
        if label in seen:
            raise ConfigurationError(f"duplicate label '{label}' in {suite_path}")
        seen.add(label)
        entries.append(_parse_entry(label, value))
    return entries


def default_suite() -> List[SuiteEntry]:
    return [SuiteEntry(label=name, task=name) for name in registry.names()]


def build_harness(entries: List[SuiteEntry], config: HarnessConfig | None = None) -> BenchmarkHarness:
    config = config or HarnessConfig()
    harness = BenchmarkHarness(warmup=config.warmup, capture_results=config.capture_results)
    for entry in entries:
        task = registry.get(entry.task)
        n = task.default_n if entry.n is None else entry.n
        harness.register(entry.label, task, n)
    return harness
