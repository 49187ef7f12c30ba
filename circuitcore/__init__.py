"""
Top-level namespace for circuitcore.

The project exposes three layers:
- circuitcore.static: Modified Nodal Analysis of resistive networks.
- circuitcore.dynamic: companion models and adaptive step halving for
  capacitors and inductors.
- circuitcore.circuit: frame-by-frame solving of an editable circuit.
"""

from . import circuit  # noqa: F401
from . import dynamic  # noqa: F401
from . import static  # noqa: F401
from .errors import CircuitValidationError, SingularCircuitError  # noqa: F401

__all__ = ["circuit", "dynamic", "static", "CircuitValidationError", "SingularCircuitError"]
