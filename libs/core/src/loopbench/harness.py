from __future__ import annotations
"""Sequential micro-benchmark harness.

Each registered task is a zero-argument closure over a workload and its fixed
input. Timing brackets the closure call itself: the clock is read just before
invocation and just after return, so every task pays the same host call
overhead and comparisons stay apples-to-apples.
"""

import logging
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple

from .computations import validate_n
from .errors import ComputationFailure, ConfigurationError
from .interfaces import Workload
from .metrics import BenchmarkReport, BenchmarkSample

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredTask:
    label: str
    call: Callable[[], Any]
    n: Optional[int]


class BenchmarkHarness:
    def __init__(
        self,
        *,
        warmup: int = 0,
        capture_results: bool = True,
        clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        if isinstance(warmup, bool) or not isinstance(warmup, int) or warmup < 0:
            raise ConfigurationError(f"warmup must be a non-negative integer, got {warmup!r}")
        self.warmup = warmup
        self.capture_results = capture_results
        self._clock = clock
        self._tasks: Dict[str, RegisteredTask] = {}
        self._samples: List[BenchmarkSample] = []
        self._failures: Dict[str, ComputationFailure] = {}

    def register(self, label: str, task: Workload | Callable[..., Any], input: Any = None) -> "BenchmarkHarness":
        """Bind ``task`` to ``input`` under a display ``label``.

        With ``input=None`` the task must already be a zero-argument callable.
        The input is checked here (through the workload's ``validate`` when it
        has one), so an out-of-domain ``n`` raises ``InvalidArgument`` before
        anything runs.
        """
        if not isinstance(label, str) or not label.strip():
            raise ConfigurationError(f"label must be a non-empty string, got {label!r}")
        if label in self._tasks:
            raise ConfigurationError(f"label '{label}' is already registered")
        if not callable(task):
            raise ConfigurationError(f"task for '{label}' is not callable")
        n: Optional[int] = None
        if input is None:
            call = task
        else:
            validate = getattr(task, "validate", None)
            n = validate(input) if callable(validate) else validate_n(input)
            call = partial(task, n)
        self._tasks[label] = RegisteredTask(label=label, call=call, n=n)
        log.debug("registered %s (n=%s)", label, n)
        return self

    @property
    def labels(self) -> List[str]:
        return list(self._tasks)

    @property
    def samples(self) -> Tuple[BenchmarkSample, ...]:
        return tuple(self._samples)

    @property
    def failures(self) -> Dict[str, ComputationFailure]:
        return dict(self._failures)

    def reset(self) -> None:
        """Forget collected samples and failures; registrations stay."""
        self._samples.clear()
        self._failures.clear()

    def run(
        self,
        repetitions: int = 1,
        *,
        progress: Optional[Callable[[str, int, int], None]] = None,
    ) -> BenchmarkReport:
        if isinstance(repetitions, bool) or not isinstance(repetitions, int) or repetitions < 1:
            raise ConfigurationError(f"repetitions must be a positive integer, got {repetitions!r}")
        for task in self._tasks.values():
            self._run_task(task, repetitions, progress)
        return self.report()

    def _run_task(
        self,
        task: RegisteredTask,
        repetitions: int,
        progress: Optional[Callable[[str, int, int], None]],
    ) -> None:
        clock = self._clock
        try:
            for _ in range(self.warmup):
                task.call()
        except Exception as exc:
            self._record_failure(task, exc, 0)
            return

        for i in range(repetitions):
            t0 = clock()
            try:
                result = task.call()
            except Exception as exc:
                elapsed = clock() - t0
                self._record_failure(task, exc, max(elapsed, 0))
                return
            elapsed = clock() - t0
            self._samples.append(
                BenchmarkSample(
                    label=task.label,
                    n=task.n,
                    duration_ns=max(elapsed, 0),
                    result=result if self.capture_results else None,
                )
            )
            log.debug("%s run %d/%d: %d ns", task.label, i + 1, repetitions, elapsed)
            try:
                if progress is not None:
                    progress(task.label, i + 1, repetitions)
            except Exception:
                # Never let progress reporting break measurements
                log.debug("progress callback failed for %s", task.label, exc_info=True)
        log.info("%s: %d samples", task.label, repetitions)

    def _record_failure(self, task: RegisteredTask, exc: Exception, elapsed: int) -> None:
        failure = ComputationFailure(task.label, exc)
        self._failures[task.label] = failure
        self._samples.append(
            BenchmarkSample(label=task.label, n=task.n, duration_ns=elapsed, error=str(failure))
        )
        log.exception("task %s failed; skipping its remaining repetitions", task.label, exc_info=exc)

    def report(self) -> BenchmarkReport:
        return BenchmarkReport.from_samples(self._samples)
