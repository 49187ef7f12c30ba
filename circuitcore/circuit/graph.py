from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence
import networkx as nx

from ..dynamic.components.base import DynamicElementState
from .elements import (
    ACVoltageSource,
    Capacitor,
    CircuitElement,
    Inductor,
    LightBulb,
    Resistor,
    Switch,
    VertexId,
    VoltageSource,
    Wire,
)


@dataclass(frozen=True)
class _Midpoint:
    """Extra vertex splitting an element's edge, so parallel elements form a simple cycle."""
    element: CircuitElement


def conducting_graph(elements: Sequence[CircuitElement]) -> nx.Graph:
    """
    Simple graph with one midpoint vertex per conducting element.

    Open switches and self-loops are left out. Splitting every edge keeps
    parallel elements distinct while still allowing biconnected components to
    be computed on a simple graph.
    """
    graph = nx.Graph()
    for element in elements:
        if not element.conducts or element.is_self_loop:
            continue
        mid = _Midpoint(element)
        graph.add_edge(element.vertex0, mid)
        graph.add_edge(mid, element.vertex1)
    return graph


def find_participants(elements: Sequence[CircuitElement]) -> List[CircuitElement]:
    """
    Elements lying on a closed loop together with at least one source.

    Two elements share a simple cycle exactly when their midpoints fall in
    the same biconnected component. A bridge element has a midpoint that is
    a cut vertex between two single-edge components, so it never qualifies.

    Returns:
        Participating elements in input order.
    """
    graph = conducting_graph(elements)
    participating: set = set()
    for block in nx.biconnected_components(graph):
        if len(block) < 3:
            continue
        members = [node.element for node in block if isinstance(node, _Midpoint)]
        if any(e.is_source for e in members):
            participating.update(id(e) for e in members)
    return [e for e in elements if id(e) in participating]


def propagate_voltages(
    elements: Sequence[CircuitElement],
    known: Mapping[VertexId, float],
    states: Mapping[CircuitElement, DynamicElementState],
    time: float,
) -> Dict[VertexId, float]:
    """
    Assign voltages to vertices the solve did not cover.

    Starting from the known vertices, a depth-first search walks every
    element: voltage is equal across a conductor (no current flows through a
    non-participant), shifted by the EMF across a source, shifted by the
    carried voltage drop across a capacitor or inductor and not carried
    across an open switch. The search only continues from vertices that got
    a voltage. Vertices still unreached seed a new search at 0 V, taking
    elements in order.

    Args:
        elements: All elements of the circuit.
        known: Vertex voltages from the solve (never overwritten).
        states: Carried state of capacitors and inductors.
        time: Time at which source voltages are evaluated.

    Returns:
        Mapping vertex -> voltage covering every vertex of `elements`.
    """
    graph = nx.MultiGraph()
    for element in elements:
        graph.add_edge(element.vertex0, element.vertex1, key=element)

    voltages: Dict[VertexId, float] = dict(known)
    explored: set = set()

    def search(start: VertexId) -> None:
        stack = [start]
        while stack:
            vertex = stack.pop()
            if vertex in explored:
                continue
            explored.add(vertex)
            for _, other, element in graph.edges(vertex, keys=True):
                if other in voltages:
                    if other not in explored:
                        stack.append(other)
                    continue
                voltage = _voltage_across(element, vertex, voltages[vertex], states, time)
                if voltage is None:
                    continue
                voltages[other] = voltage
                stack.append(other)

    for vertex in list(voltages):
        if vertex in graph:
            search(vertex)
    for element in elements:
        if element.vertex0 not in voltages:
            voltages[element.vertex0] = 0.0
        search(element.vertex0)
        if element.vertex1 not in voltages:
            voltages[element.vertex1] = 0.0
            search(element.vertex1)
    return voltages


def _voltage_across(
    element: CircuitElement,
    start: VertexId,
    start_voltage: float,
    states: Mapping[CircuitElement, DynamicElementState],
    time: float,
) -> Optional[float]:
    """Voltage at the far end of `element` reached from `start`, or None if it does not carry over."""
    sign = 1.0 if start == element.vertex0 else -1.0
    if isinstance(element, Switch):
        return start_voltage if element.closed else None
    if isinstance(element, (Wire, Resistor, LightBulb)):
        return start_voltage
    if isinstance(element, (VoltageSource, ACVoltageSource)):
        return start_voltage + sign * element.voltage_at(time)
    if isinstance(element, (Capacitor, Inductor)):
        state = states.get(element, DynamicElementState())
        return start_voltage - sign * state.voltage
    raise TypeError(f"Unsupported circuit element: {type(element).__name__}")
