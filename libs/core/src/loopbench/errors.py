from __future__ import annotations

"""Exception hierarchy shared by the computations, harness and CLI."""


class LoopBenchError(Exception):
    """Base class for every error raised by loopbench."""


class InvalidArgument(LoopBenchError, ValueError):
    """Input outside a computation's domain (negative or non-integral n)."""


class ConfigurationError(LoopBenchError):
    """Harness or suite set up incorrectly (duplicate label, bad repetitions)."""


class ComputationFailure(LoopBenchError):
    """A registered task raised while the harness was running it."""

    def __init__(self, label: str, cause: BaseException) -> None:
        self.label = label
        self.cause = cause
        super().__init__(f"{label}: {type(cause).__name__}: {cause}")
