"""
Time-domain solver for linear circuits with capacitors and inductors.

Dynamic elements are replaced by companion models at every
sub-step and the resulting resistive network is handed to
circuitcore.static. Sub-steps are chosen by error-controlled step halving.
"""

from .components import (  # noqa: F401
    Capacitor,
    CompanionModel,
    DynamicElementState,
    Inductor,
    rescale_for_capacitance,
    to_companion_model,
    updated_state,
)
from .network import DynamicCircuit, DynamicSolution, DynamicState, ResistiveBattery  # noqa: F401
from .solver import CircuitResult, IntegratorConfig, ResultSet, SubStep, integrate  # noqa: F401

__all__ = [
    "Capacitor",
    "CircuitResult",
    "CompanionModel",
    "DynamicCircuit",
    "DynamicElementState",
    "DynamicSolution",
    "DynamicState",
    "Inductor",
    "IntegratorConfig",
    "ResistiveBattery",
    "ResultSet",
    "SubStep",
    "integrate",
    "rescale_for_capacitance",
    "to_companion_model",
    "updated_state",
]
