from __future__ import annotations
from ...static.components.passive import Resistor
from ...static.components.sources import CurrentSource
from .base import CompanionModel, DynamicElement, DynamicElementState
from .capacitor import Capacitor
from .inductor import Inductor


def to_companion_model(element: DynamicElement, state: DynamicElementState, dt: float,
                       damped: bool = False) -> CompanionModel:
    """
    Replace a reactive element by its resistive equivalent for one sub-step.

    Args:
        element: Capacitor or Inductor.
        state: Voltage drop and current carried from the previous sub-step.
        dt: Sub-step duration in seconds (must be positive).
        damped: Use the backward Euler form instead of the trapezoidal one.

    Returns:
        CompanionModel whose resistor and current source span the element's
        terminals, ready to be handed to the static solver.
    """
    if dt <= 0:
        raise ValueError("Companion models need a positive time step.")
    if isinstance(element, Capacitor):
        resistance = element.companion_resistance(dt, damped)
        current = element.companion_current(state, dt, damped)
    elif isinstance(element, Inductor):
        resistance = element.companion_resistance(dt, damped)
        current = element.companion_current(state, dt, damped)
    else:
        raise TypeError(f"Unsupported dynamic element: {type(element).__name__}")
    return CompanionModel(
        resistor=Resistor(element.node0, element.node1, resistance),
        source=CurrentSource(element.node0, element.node1, current),
    )
