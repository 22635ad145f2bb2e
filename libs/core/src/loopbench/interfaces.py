
from __future__ import annotations
from typing import Any, Protocol

"""Workload interfaces used by the harness.

Computations implement this Protocol and register themselves into the global
catalogue. The harness and CLI only rely on this interface, never on the
concrete algorithm.
"""

class Workload(Protocol):
    """Pure function of one non-negative integer."""
    name: str
    kind: str  # 'scalar' or 'sequence'
    default_n: int
    def validate(self, n: Any) -> int: ...
    def __call__(self, n: int) -> Any: ...
