"""Numeric workloads timed by the harness.

Both workloads are deliberately naive: the Leibniz partial sum and a linear
Fibonacci recurrence. They are the loop bodies being compared, not
algorithms to optimise.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral
from typing import Any, Callable, List

from .errors import InvalidArgument


def validate_n(n: Any) -> int:
    """Return ``n`` as an int or raise :class:`InvalidArgument`.

    ``bool`` is rejected even though it subclasses ``int``.
    """
    if isinstance(n, bool) or not isinstance(n, Integral):
        raise InvalidArgument(f"n must be a non-negative integer, got {n!r}")
    value = int(n)
    if value < 0:
        raise InvalidArgument(f"n must be a non-negative integer, got {value}")
    return value


def pi_approx(n: int) -> float:
    """Partial sum of ``n`` terms of 4 * (1 - 1/3 + 1/5 - ...)."""
    n = validate_n(n)
    total = 0.0
    sign = 1.0
    for i in range(1, n + 1):
        total += sign / (2 * i - 1)
        sign = -sign
    return 4.0 * total


def fibonacci(n: int) -> List[int]:
    """Sequence F[0..n] built bottom-up."""
    n = validate_n(n)
    seq = [0]
    if n >= 1:
        seq.append(1)
    for i in range(2, n + 1):
        seq.append(seq[i - 1] + seq[i - 2])
    return seq


class FibonacciMemo:
    """Fibonacci with an explicit cache instead of recursive memoization.

    The cache only ever grows by appending the next term, so call depth stays
    constant for any ``n``.
    """

    def __init__(self) -> None:
        self._cache: List[int] = [0, 1]

    def __call__(self, n: int) -> List[int]:
        n = validate_n(n)
        cache = self._cache
        while len(cache) <= n:
            cache.append(cache[-1] + cache[-2])
        return cache[: n + 1]

    def cached_terms(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        del self._cache[2:]


def fibonacci_memo(n: int) -> List[int]:
    """Sequence F[0..n] filled through a cache owned by this call only."""
    return FibonacciMemo()(n)


@dataclass(frozen=True)
class ComputationTask:
    """A named workload with its representative input."""
    name: str
    fn: Callable[[int], Any]
    kind: str  # 'scalar' or 'sequence'
    default_n: int
    description: str = ""

    def validate(self, n: Any) -> int:
        return validate_n(n)

    def __call__(self, n: int) -> Any:
        return self.fn(n)
