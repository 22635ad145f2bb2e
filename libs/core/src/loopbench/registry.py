from __future__ import annotations
from typing import Dict, Callable, List

from .computations import ComputationTask, fibonacci, fibonacci_memo, pi_approx
from .errors import ConfigurationError

class _Registry:
    def __init__(self) -> None:
        self._items: Dict[str, ComputationTask] = {}

    def register(self, name: str) -> Callable[[ComputationTask], ComputationTask]:
        def _inner(task: ComputationTask) -> ComputationTask:
            if name in self._items:
                raise ConfigurationError(f"workload '{name}' is already registered")
            self._items[name] = task
            return task
        return _inner

    def get(self, name: str) -> ComputationTask:
        try:
            return self._items[name]
        except KeyError:
            known = ", ".join(sorted(self._items)) or "none"
            raise ConfigurationError(f"unknown workload '{name}' (known: {known})") from None

    def list(self) -> Dict[str, ComputationTask]:
        return dict(self._items)

    def names(self) -> List[str]:
        return list(self._items)

registry = _Registry()

registry.register("pi")(ComputationTask(
    name="pi",
    fn=pi_approx,
    kind="scalar",
    default_n=1_000_000,
    description="Leibniz series partial sum approximating pi",
))
registry.register("fibonacci")(ComputationTask(
    name="fibonacci",
    fn=fibonacci,
    kind="sequence",
    default_n=41,
    description="Fibonacci sequence F[0..n], iterative",
))
registry.register("fibonacci-memo")(ComputationTask(
    name="fibonacci-memo",
    fn=fibonacci_memo,
    kind="sequence",
    default_n=41,
    description="Fibonacci sequence F[0..n], explicit memo cache",
))
