from __future__ import annotations
from dataclasses import dataclass
from ...static.circuit import StaticSolution
from ...static.components.base import StaticElement
from ...static.components.passive import Resistor
from ...static.components.sources import CurrentSource


@dataclass(frozen=True)
class DynamicElementState:
    """
    State carried by a reactive element from one sub-step to the next.

    This is the only history in the solver: everything else is recomputed
    from topology at every step.

    Attributes:
        voltage: Voltage drop V(node0) - V(node1) across the element.
        current: Current flowing node0 -> node1 through the element.
    """
    voltage: float = 0.0
    current: float = 0.0


@dataclass(frozen=True, eq=False)
class DynamicElement(StaticElement):
    """
    Base class for energy-storage elements (capacitors and inductors).

    The element itself only holds topology and its physical parameter; its
    DynamicElementState is passed alongside it and replaced, never mutated.
    """


@dataclass(frozen=True)
class CompanionModel:
    """
    Norton equivalent of a dynamic element over one sub-step.

    A resistor in parallel with a current source between the element's
    terminals. With the current-source convention of the static solver
    (positive value leaves node0 through the external network), the element
    current is i = v / R - I.
    """
    resistor: Resistor
    source: CurrentSource

    def current(self, solution: StaticSolution) -> float:
        return solution.current(self.resistor) - self.source.current

    def voltage(self, solution: StaticSolution) -> float:
        return solution.voltage_drop(self.resistor)


def updated_state(companion: CompanionModel, solution: StaticSolution) -> DynamicElementState:
    """Read the element's new voltage drop and current out of a solved sub-step."""
    return DynamicElementState(voltage=companion.voltage(solution), current=companion.current(solution))
