from dataclasses import dataclass
import math
from .base import DynamicElement, DynamicElementState


@dataclass(frozen=True, eq=False)
class Capacitor(DynamicElement):
    """
    Ideal capacitor, i = C dv/dt.

    Trapezoidal rule over a sub-step dt:
        v_{n+1} = v_n + dt / (2C) * (i_n + i_{n+1})
    which is a resistor R = dt / (2C) in parallel with a source carrying
    -(v_n / R + i_n) from node0 to node1.

    The damped (backward Euler) form
        v_{n+1} = v_n + dt / C * i_{n+1}
    uses R = dt / C and drops i_n, so a fast mode cannot ring from step to
    step.

    Attributes:
        capacitance: Capacitance in Farads (F).
    """
    capacitance: float

    def __post_init__(self) -> None:
        assert not math.isnan(self.capacitance), "capacitance must be a number"
        assert self.capacitance > 0, "capacitance must be positive"

    def companion_resistance(self, dt: float, damped: bool = False) -> float:
        if damped:
            return dt / self.capacitance
        return dt / (2.0 * self.capacitance)

    def companion_current(self, state: DynamicElementState, dt: float, damped: bool = False) -> float:
        """Source value for the static solver (positive leaves node0)."""
        conductance_term = state.voltage / self.companion_resistance(dt, damped)
        if damped:
            return conductance_term
        return conductance_term + state.current

    def charge(self, state: DynamicElementState) -> float:
        return self.capacitance * state.voltage


def rescale_for_capacitance(state: DynamicElementState, old_capacitance: float,
                            new_capacitance: float) -> DynamicElementState:
    """
    Keep the stored charge when the capacitance is edited.

    Q1 = C1 V1 = C2 V2, so V2 = C1 V1 / C2. The carried current is kept.
    """
    voltage = old_capacitance * state.voltage / new_capacitance
    return DynamicElementState(voltage=voltage, current=state.current)
