from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Generic, Iterator, Optional, Sequence, Tuple, TypeVar

if TYPE_CHECKING:
    from ...static.components.base import NodeId, StaticElement
    from ..network.network import DynamicState

S = TypeVar("S")


@dataclass(frozen=True)
class SubStep(Generic[S]):
    """One accepted interval of the integrator and the state reached at its end."""
    dt: float
    state: S


class ResultSet(Generic[S]):
    """
    Ordered sub-steps produced for one outer time step.

    A result set is created fresh for every outer step and discarded after
    its values have been read. An empty set (zero-length step) reads as 0.
    """

    def __init__(self, steps: Sequence[SubStep[S]] = ()) -> None:
        self._steps: Tuple[SubStep[S], ...] = tuple(steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[SubStep[S]]:
        return iter(self._steps)

    @property
    def steps(self) -> Tuple[SubStep[S], ...]:
        return self._steps

    @property
    def final_state(self) -> Optional[S]:
        return self._steps[-1].state if self._steps else None

    @property
    def total_time(self) -> float:
        return sum(step.dt for step in self._steps)

    def instantaneous(self, value: Callable[[S], float]) -> float:
        """Evaluate `value` on the last sub-step only."""
        if not self._steps:
            return 0.0
        return value(self._steps[-1].state)

    def time_average(self, value: Callable[[S], float]) -> float:
        """
        Duration-weighted mean of `value` over all sub-steps:
        sum(value_k * dt_k) / sum(dt_k).
        """
        if not self._steps:
            return 0.0
        total = self.total_time
        if total == 0:
            return self.instantaneous(value)
        return sum(value(step.state) * step.dt for step in self._steps) / total


class CircuitResult(ResultSet["DynamicState"]):
    """
    Result set of a dynamic circuit.

    Instantaneous values (last sub-step) drive the next outer step, while
    time averages smooth readouts against single-sub-step spikes such as the
    inrush into an uncharged capacitor.
    """

    def get_final_state(self) -> Optional[DynamicState]:
        return self.final_state

    def get_instantaneous_current(self, element: StaticElement) -> float:
        return self.instantaneous(lambda state: state.solution.current(element))

    def get_instantaneous_voltage(self, element: StaticElement) -> float:
        """Voltage drop V(node0) - V(node1) at the end of the step."""
        return self.instantaneous(lambda state: state.solution.voltage_drop(element))

    def get_time_average_current(self, element: StaticElement) -> float:
        return self.time_average(lambda state: state.solution.current(element))

    def get_node_voltage(self, node: NodeId) -> float:
        return self.instantaneous(lambda state: state.solution.node_voltage(node))
