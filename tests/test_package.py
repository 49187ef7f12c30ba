"""
Test: public names of the packages.

This validates:
- Every name listed in __all__ is importable from its package
"""
import importlib
import pytest

PACKAGES = [
    "circuitcore",
    "circuitcore.circuit",
    "circuitcore.dynamic",
    "circuitcore.static",
]


@pytest.mark.parametrize("package", PACKAGES)
def test_all_names_are_exported(package):
    module = importlib.import_module(package)

    missing = [name for name in module.__all__ if not hasattr(module, name)]

    assert missing == []


def test_dynamic_exports_solver_classes():
    dynamic = importlib.import_module("circuitcore.dynamic")

    assert {"DynamicCircuit", "IntegratorConfig", "integrate", "to_companion_model"} <= set(dynamic.__all__)
    assert "examples" not in dynamic.__all__


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
