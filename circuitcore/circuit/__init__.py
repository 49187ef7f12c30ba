"""
Adapter from an editable circuit (wires, switches, bulbs, sources,
capacitors and inductors between vertices) to the time-domain solver.
"""

from .adapter import CircuitSolution, solve_circuit  # noqa: F401
from .elements import (  # noqa: F401
    ACVoltageSource,
    Capacitor,
    CircuitElement,
    Inductor,
    LightBulb,
    Resistor,
    SolverConfig,
    Switch,
    VoltageSource,
    Wire,
)
from .graph import find_participants, propagate_voltages  # noqa: F401

__all__ = [
    "ACVoltageSource",
    "Capacitor",
    "CircuitElement",
    "CircuitSolution",
    "Inductor",
    "LightBulb",
    "Resistor",
    "SolverConfig",
    "Switch",
    "VoltageSource",
    "Wire",
    "find_participants",
    "propagate_voltages",
    "solve_circuit",
]
