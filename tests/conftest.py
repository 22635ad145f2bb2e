from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
CLI_SRC = ROOT / "apps" / "cli" / "src"
CORE_SRC = ROOT / "libs" / "core" / "src"

for candidate in (CLI_SRC, CORE_SRC, ROOT):
    candidate_str = str(candidate)
    if candidate_str not in sys.path:
        sys.path.insert(0, candidate_str)


class FakeClock:
    """Monotonic clock returning scripted nanosecond readings."""

    def __init__(self, readings: List[int]) -> None:
        self._readings: Iterator[int] = iter(readings)

    def __call__(self) -> int:
        return next(self._readings)


def clock_for_durations(durations: List[int]) -> FakeClock:
    readings: List[int] = []
    now = 0
    for d in durations:
        readings.extend([now, now + d])
        now += d + 10
    return FakeClock(readings)


@pytest.fixture
def env_clean(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "LOOPBENCH_RUNS",
        "LOOPBENCH_WARMUP",
        "LOOPBENCH_CAPTURE_RESULTS",
        "LOOPBENCH_RESULTS_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_clock():
    return clock_for_durations
