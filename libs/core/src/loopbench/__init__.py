from .errors import ComputationFailure, ConfigurationError, InvalidArgument, LoopBenchError
from .interfaces import Workload
from .computations import ComputationTask, FibonacciMemo, fibonacci, fibonacci_memo, pi_approx, validate_n
from .registry import registry
from .metrics import BenchmarkReport, BenchmarkSample, TaskReport, summarize
from .harness import BenchmarkHarness
from .config import HarnessConfig, SuiteEntry, build_harness, default_suite, load_config, load_suite

__all__ = [
    "LoopBenchError",
    "InvalidArgument",
    "ConfigurationError",
    "ComputationFailure",
    "Workload",
    "ComputationTask",
    "FibonacciMemo",
    "fibonacci",
    "fibonacci_memo",
    "pi_approx",
    "validate_n",
    "registry",
    "BenchmarkReport",
    "BenchmarkSample",
    "TaskReport",
    "summarize",
    "BenchmarkHarness",
    "HarnessConfig",
    "SuiteEntry",
    "build_harness",
    "default_suite",
    "load_config",
    "load_suite",
]
