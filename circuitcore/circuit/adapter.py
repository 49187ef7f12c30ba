from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Mapping, Sequence, Set
import logging

from ..dynamic.components.base import DynamicElementState
from ..dynamic.components.capacitor import Capacitor as DynamicCapacitor
from ..dynamic.components.inductor import Inductor as DynamicInductor
from ..dynamic.network.network import DynamicCircuit, ResistiveBattery
from ..dynamic.solver.results import CircuitResult
from ..errors import CircuitValidationError
from ..static.components.base import StaticElement
from ..static.components.passive import Resistor as StaticResistor
from .elements import (
    ACVoltageSource,
    Capacitor,
    CircuitElement,
    Inductor,
    LightBulb,
    Resistor,
    SolverConfig,
    Switch,
    VertexId,
    VoltageSource,
    Wire,
)
from .graph import find_participants, propagate_voltages

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CircuitSolution:
    """
    Readouts of one frame, plus the state to carry into the next one.

    Attributes:
        currents: Time-averaged current per element (vertex0 -> vertex1),
            for display.
        instantaneous_currents: Current per element at the end of the frame.
        vertex_voltages: Voltage per vertex.
        states: New DynamicElementState per capacitor and inductor.
        resolved: Whether the frame was solved a second time.
    """
    currents: Mapping[CircuitElement, float]
    instantaneous_currents: Mapping[CircuitElement, float]
    vertex_voltages: Mapping[VertexId, float]
    states: Mapping[CircuitElement, DynamicElementState]
    resolved: bool = False

    def current(self, element: CircuitElement) -> float:
        return self.currents.get(element, 0.0)

    def voltage(self, vertex: VertexId) -> float:
        return self.vertex_voltages.get(vertex, 0.0)

    def voltage_drop(self, element: CircuitElement) -> float:
        """V(vertex0) - V(vertex1)."""
        return self.voltage(element.vertex0) - self.voltage(element.vertex1)

    def state_of(self, element: CircuitElement) -> DynamicElementState:
        return self.states.get(element, DynamicElementState())


@dataclass
class _FrameBuilder:
    """
    Builds the solver-side circuit for the participating elements.

    Holds the per-frame resistance overrides decided between the first solve
    and the corrective one.
    """
    participants: Sequence[CircuitElement]
    states: Mapping[CircuitElement, DynamicElementState]
    time: float
    config: SolverConfig
    bulb_resistances: Dict[CircuitElement, float] = field(default_factory=dict)
    true_resistance_sources: Set[CircuitElement] = field(default_factory=set)

    # filled by build
    mapping: Dict[CircuitElement, StaticElement] = field(default_factory=dict)

    def build(self) -> DynamicCircuit:
        self.mapping = {}
        resistors, batteries, capacitors, inductors = [], [], [], []
        for element in self.participants:
            v0, v1 = element.vertex0, element.vertex1
            if isinstance(element, (VoltageSource, ACVoltageSource)):
                if element in self.true_resistance_sources:
                    resistance = element.internal_resistance
                else:
                    resistance = self.config.battery_series_resistance
                solver_element = ResistiveBattery(v0, v1, element.voltage_at(self.time), resistance)
                batteries.append(solver_element)
            elif isinstance(element, (Wire, Resistor, LightBulb, Switch)):
                solver_element = StaticResistor(v0, v1, self._resistance(element))
                resistors.append(solver_element)
            elif isinstance(element, Capacitor):
                solver_element = DynamicCapacitor(v0, v1, element.capacitance)
                capacitors.append(solver_element)
            elif isinstance(element, Inductor):
                solver_element = DynamicInductor(v0, v1, element.inductance)
                inductors.append(solver_element)
            else:
                raise TypeError(f"Unsupported circuit element: {type(element).__name__}")
            self.mapping[element] = solver_element
        return DynamicCircuit(
            resistors=tuple(resistors),
            batteries=tuple(batteries),
            capacitors=tuple(capacitors),
            inductors=tuple(inductors),
        )

    def solve(self, dt: float) -> CircuitResult:
        circuit = self.build()
        initial = circuit.initial_state(
            {self.mapping[e]: s for e, s in self.states.items() if e in self.mapping}
        )
        return circuit.solve_with_subdivisions(initial, dt, self.config.integrator)

    def _resistance(self, element: CircuitElement) -> float:
        if element in self.bulb_resistances:
            resistance = self.bulb_resistances[element]
        elif isinstance(element, Switch):
            resistance = 0.0
        else:
            resistance = element.resistance
        return resistance or self.config.minimum_resistance


def solve_circuit(
    elements: Sequence[CircuitElement],
    dt: float,
    states: Mapping[CircuitElement, DynamicElementState] | None = None,
    time: float = 0.0,
    config: SolverConfig | None = None,
) -> CircuitSolution:
    """
    Solve one frame of an editable circuit.

    Only elements on a loop with a source are solved; every other element
    carries no current and its vertices get voltages by propagation from the
    solved ones. When the first solve calls for it (real light bulbs, or a
    voltage source above the current threshold) the frame is solved exactly
    once more with corrected resistances.

    Args:
        elements: Circuit elements, snapshotted by the caller.
        dt: Frame length in seconds.
        states: Carried state per capacitor and inductor (missing entries
            start discharged).
        time: Simulation time at the start of the frame.
        config: Adapter tunables (optional). If None, uses SolverConfig().

    Returns:
        CircuitSolution for the frame. Inputs are never mutated.
    """
    if config is None:
        config = SolverConfig()
    if dt < 0:
        raise CircuitValidationError("dt must not be negative.")
    elements = tuple(elements)
    states = dict(states or {})
    end_time = time + dt

    dynamic = [e for e in elements if isinstance(e, (Capacitor, Inductor))]
    if dt == 0:
        previous = {e: states.get(e, DynamicElementState()) for e in dynamic}
        zero = dict.fromkeys(elements, 0.0)
        return CircuitSolution(
            currents=zero,
            instantaneous_currents=dict(zero),
            vertex_voltages=propagate_voltages(elements, {}, previous, end_time),
            states=previous,
        )

    participants = find_participants(elements)
    builder = _FrameBuilder(participants, states, end_time, config)
    result = builder.solve(dt) if participants else CircuitResult()

    needs_help = False
    for element in participants:
        if isinstance(element, LightBulb) and element.real:
            drop = result.get_instantaneous_voltage(builder.mapping[element])
            builder.bulb_resistances[element] = LightBulb.resistance_at(drop)
            needs_help = True
        elif isinstance(element, (VoltageSource, ACVoltageSource)):
            current = result.get_time_average_current(builder.mapping[element])
            if abs(current) > config.battery_current_threshold:
                builder.true_resistance_sources.add(element)
                needs_help = True
    if needs_help:
        logger.debug("Re-solving frame with corrected resistances.")
        result = builder.solve(dt)

    currents: Dict[CircuitElement, float] = dict.fromkeys(elements, 0.0)
    instantaneous: Dict[CircuitElement, float] = dict.fromkeys(elements, 0.0)
    for element in participants:
        solver_element = builder.mapping[element]
        currents[element] = result.get_time_average_current(solver_element)
        instantaneous[element] = result.get_instantaneous_current(solver_element)

    new_states: Dict[CircuitElement, DynamicElementState] = {}
    for element in dynamic:
        if element in builder.mapping:
            solver_element = builder.mapping[element]
            new_states[element] = DynamicElementState(
                voltage=config.clamp(result.get_instantaneous_voltage(solver_element)),
                current=config.clamp(result.get_instantaneous_current(solver_element)),
            )
        else:
            previous = states.get(element, DynamicElementState())
            new_states[element] = DynamicElementState(voltage=previous.voltage, current=0.0)

    known = {}
    for element in participants:
        for vertex in (element.vertex0, element.vertex1):
            known[vertex] = result.get_node_voltage(vertex)
    vertex_voltages = propagate_voltages(elements, known, new_states, end_time)

    return CircuitSolution(
        currents=currents,
        instantaneous_currents=instantaneous,
        vertex_voltages=vertex_voltages,
        states=new_states,
        resolved=needs_help,
    )
