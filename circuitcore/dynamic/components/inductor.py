from dataclasses import dataclass
import math
from .base import DynamicElement, DynamicElementState


@dataclass(frozen=True, eq=False)
class Inductor(DynamicElement):
    """
    Ideal inductor, v = L di/dt.

    Trapezoidal rule over a sub-step dt:
        i_{n+1} = i_n + dt / (2L) * (v_n + v_{n+1})
    which is a resistor R = 2L / dt in parallel with a source carrying
    i_n + v_n / R from node0 to node1.

    The damped (backward Euler) form
        i_{n+1} = i_n + dt / L * v_{n+1}
    uses R = L / dt and drops v_n.

    Attributes:
        inductance: Inductance in Henries (H).
    """
    inductance: float

    def __post_init__(self) -> None:
        assert not math.isnan(self.inductance), "inductance must be a number"
        assert self.inductance > 0, "inductance must be positive"

    def companion_resistance(self, dt: float, damped: bool = False) -> float:
        if damped:
            return self.inductance / dt
        return 2.0 * self.inductance / dt

    def companion_current(self, state: DynamicElementState, dt: float, damped: bool = False) -> float:
        """Source value for the static solver (positive leaves node0)."""
        if damped:
            return -state.current
        return -(state.current + state.voltage / self.companion_resistance(dt))
