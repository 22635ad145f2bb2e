import pytest

from loopbench import ComputationTask, ConfigurationError, registry
from loopbench.registry import _Registry


def test_registry_has_builtin_workloads():
    items = registry.list()
    assert "pi" in items
    assert "fibonacci" in items
    assert "fibonacci-memo" in items


def test_builtin_defaults():
    assert registry.get("fibonacci").default_n == 41
    assert registry.get("fibonacci-memo").kind == "sequence"
    assert registry.get("pi").kind == "scalar"
    assert registry.get("pi")(1) == 4.0


def test_fibonacci_variants_agree():
    assert registry.get("fibonacci")(41) == registry.get("fibonacci-memo")(41)


def test_unknown_workload_is_configuration_error():
    with pytest.raises(ConfigurationError):
        registry.get("mandelbrot")


def test_duplicate_registration_rejected():
    reg = _Registry()
    task = ComputationTask(name="sq", fn=lambda n: n * n, kind="scalar", default_n=3)
    reg.register("sq")(task)
    with pytest.raises(ConfigurationError):
        reg.register("sq")(task)
    assert reg.names() == ["sq"]


def test_list_returns_copy():
    items = registry.list()
    items.pop("pi")
    assert "pi" in registry.list()
