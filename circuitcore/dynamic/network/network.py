from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple, Union
import math
from ...static.circuit import StaticCircuit, StaticSolution
from ...static.components.base import NodeId, StaticElement
from ...static.components.passive import Resistor
from ...static.components.sources import Battery, CurrentSource
from ..components.base import CompanionModel, DynamicElement, DynamicElementState, updated_state
from ..components.capacitor import Capacitor
from ..components.companion import to_companion_model
from ..components.inductor import Inductor
from ..solver.integrate import IntegratorConfig, integrate
from ..solver.results import CircuitResult


@dataclass(frozen=True)
class InternalNode:
    """
    Node created while expanding a composite element.

    Keyed by the owning element so it can never collide with a caller's
    node ids.
    """
    owner: StaticElement
    name: str


@dataclass(frozen=True, eq=False)
class ResistiveBattery(StaticElement):
    """
    Ideal battery in series with an internal resistance.

    Expanded before solving into a Battery node0 -> internal node and a
    Resistor internal node -> node1. With zero resistance only the battery
    is kept.

    Attributes:
        voltage: EMF in Volts, V(node1) - V(node0) at zero current.
        resistance: Internal resistance in Ohms (default: 0).
    """
    voltage: float
    resistance: float = 0.0

    def __post_init__(self) -> None:
        assert not math.isnan(self.voltage), "voltage must be a number"
        assert not math.isnan(self.resistance), "resistance must be a number"
        assert self.resistance >= 0, "resistance must not be negative"

    def expand(self) -> Tuple[Battery, Optional[Resistor]]:
        if self.resistance == 0:
            return Battery(self.node0, self.node1, self.voltage), None
        mid = InternalNode(self, "internal")
        return Battery(self.node0, mid, self.voltage), Resistor(mid, self.node1, self.resistance)


@dataclass(frozen=True)
class DynamicSolution:
    """
    Static solution of one sub-step, read back in terms of the caller's elements.

    Attributes:
        static: Solution of the resistive network of the sub-step.
        companions: Mapping dynamic element -> companion model used for it.
        battery_parts: Mapping ResistiveBattery -> the Battery it expanded to.
    """
    static: StaticSolution
    companions: Mapping[DynamicElement, CompanionModel]
    battery_parts: Mapping[ResistiveBattery, Battery]

    def node_voltage(self, node: NodeId) -> float:
        return self.static.node_voltage(node)

    def voltage_drop(self, element: StaticElement) -> float:
        return self.static.voltage_drop(element)

    def current(self, element: StaticElement) -> float:
        """Current flowing node0 -> node1 through any element of the circuit."""
        if element in self.companions:
            return self.companions[element].current(self.static)
        if element in self.battery_parts:
            return self.static.current(self.battery_parts[element])
        return self.static.current(element)


@dataclass(frozen=True)
class DynamicState:
    """
    Carried state of every capacitor and inductor after a sub-step.

    Attributes:
        element_states: Mapping dynamic element -> DynamicElementState.
        solution: Solution of the sub-step that produced these states
            (None for an initial state).
    """
    element_states: Mapping[DynamicElement, DynamicElementState]
    solution: Optional[DynamicSolution] = None

    def state_of(self, element: DynamicElement) -> DynamicElementState:
        return self.element_states.get(element, DynamicElementState())


@dataclass(frozen=True)
class DynamicCircuit:
    """
    Linear time-domain circuit: a static network plus capacitors and inductors.

    Each sub-step replaces the dynamic elements by their companion models and
    hands the resulting resistive network to the static solver.

    Attributes:
        resistors: Resistors (zero resistance is a short).
        batteries: Ideal batteries or batteries with internal resistance.
        current_sources: Independent current sources.
        capacitors: Capacitors.
        inductors: Inductors.
        strict: Forwarded to StaticCircuit.solve.
    """
    resistors: Tuple[Resistor, ...] = ()
    batteries: Tuple[Union[Battery, ResistiveBattery], ...] = ()
    current_sources: Tuple[CurrentSource, ...] = ()
    capacitors: Tuple[Capacitor, ...] = ()
    inductors: Tuple[Inductor, ...] = ()
    strict: bool = False

    # filled at init
    _static_batteries: Tuple[Battery, ...] = field(init=False, repr=False)
    _static_resistors: Tuple[Resistor, ...] = field(init=False, repr=False)
    _battery_parts: Dict[ResistiveBattery, Battery] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("resistors", "batteries", "current_sources", "capacitors", "inductors"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        static_batteries = []
        static_resistors = list(self.resistors)
        battery_parts: Dict[ResistiveBattery, Battery] = {}
        for battery in self.batteries:
            if isinstance(battery, ResistiveBattery):
                ideal, internal = battery.expand()
                battery_parts[battery] = ideal
                static_batteries.append(ideal)
                if internal is not None:
                    static_resistors.append(internal)
            elif isinstance(battery, Battery):
                static_batteries.append(battery)
            else:
                raise TypeError(f"Unsupported battery type: {type(battery).__name__}")
        object.__setattr__(self, "_static_batteries", tuple(static_batteries))
        object.__setattr__(self, "_static_resistors", tuple(static_resistors))
        object.__setattr__(self, "_battery_parts", battery_parts)

    @property
    def dynamic_elements(self) -> Tuple[DynamicElement, ...]:
        return self.capacitors + self.inductors

    def initial_state(
        self, states: Mapping[DynamicElement, DynamicElementState] | None = None
    ) -> DynamicState:
        """
        Build a starting state; elements missing from `states` start discharged.
        """
        states = states or {}
        return DynamicState(
            element_states={e: states.get(e, DynamicElementState()) for e in self.dynamic_elements}
        )

    def update(self, state: DynamicState, dt: float) -> DynamicState:
        """
        Advance every capacitor and inductor by one trapezoidal sub-step of length dt.

        Pure: the input state is left untouched.
        """
        return self._advance(state, dt, damped=False)

    def damped_update(self, state: DynamicState, dt: float) -> DynamicState:
        """
        Advance by one backward Euler sub-step of length dt.

        Used for the unchecked min_dt steps of the integrator. The trapezoidal
        rule keeps a mode much faster than dt (a capacitor straight across a
        battery's tiny series resistance) ringing with alternating sign
        instead of decaying; backward Euler damps it.
        """
        return self._advance(state, dt, damped=True)

    def _advance(self, state: DynamicState, dt: float, damped: bool) -> DynamicState:
        companions = {
            e: to_companion_model(e, state.state_of(e), dt, damped) for e in self.dynamic_elements
        }
        circuit = StaticCircuit(
            batteries=self._static_batteries,
            resistors=self._static_resistors + tuple(c.resistor for c in companions.values()),
            current_sources=self.current_sources + tuple(c.source for c in companions.values()),
        )
        static = circuit.solve(strict=self.strict)
        return DynamicState(
            element_states={e: updated_state(c, static) for e, c in companions.items()},
            solution=DynamicSolution(static, companions, self._battery_parts),
        )

    def distance(self, a: DynamicState, b: DynamicState) -> float:
        """
        Euclidean distance over the voltage and current of every dynamic element.

        Currents are included so that a current ringing from step to step
        is caught even while the voltages agree.
        """
        total = 0.0
        for element in self.dynamic_elements:
            sa, sb = a.state_of(element), b.state_of(element)
            total += (sa.voltage - sb.voltage) ** 2 + (sa.current - sb.current) ** 2
        return math.sqrt(total)

    def solve_with_subdivisions(
        self, state: DynamicState, dt: float, config: IntegratorConfig | None = None
    ) -> CircuitResult:
        """
        Advance the circuit over one outer step of length dt.

        Args:
            state: State at the start of the step.
            dt: Outer step length in seconds.
            config: Integrator tolerances (optional).

        Returns:
            CircuitResult over the accepted sub-steps.
        """
        result = integrate(state, self.update, self.distance, dt, config, floor_update=self.damped_update)
        return CircuitResult(result.steps)
