from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple
import logging
import networkx as nx
import numpy as np
import scipy.linalg as sla

from ..errors import SingularCircuitError
from .components.base import (
    NodeId,
    StampData,
    StaticElement,
    stamp_reference,
    stamp_voltage_difference,
)
from .components.passive import Resistor
from .components.sources import Battery, CurrentSource

Array = np.ndarray

logger = logging.getLogger(__name__)


@dataclass
class StaticSolution:
    """
    Node voltages and branch currents of one static solve.

    Voltages are relative to an arbitrary reference inside each connected
    component. Nodes unknown to the solve read as 0 V.

    Attributes:
        node_voltages: Mapping node -> voltage.
        branch_currents: Mapping element -> current for the elements whose
            current is an unknown of the system (batteries and shorts).
        rank: Numerical rank found by the QR decomposition (-1 for the zero
            fallback).
    """
    node_voltages: Dict[NodeId, float]
    branch_currents: Dict[StaticElement, float]
    rank: int = -1

    @property
    def is_fallback(self) -> bool:
        return self.rank < 0

    def node_voltage(self, node: NodeId) -> float:
        return self.node_voltages.get(node, 0.0)

    def voltage_drop(self, element: StaticElement) -> float:
        """Return V(node0) - V(node1)."""
        return self.node_voltage(element.node0) - self.node_voltage(element.node1)

    def current(self, element: StaticElement) -> float:
        """
        Return the current flowing node0 -> node1 through an element.

        Ordinary resistor currents are not unknowns of the system; they are
        derived from the solved voltages by Ohm's law.
        """
        if isinstance(element, Resistor) and not element.is_short:
            return self.voltage_drop(element) / element.resistance
        if isinstance(element, (Battery, Resistor)):
            if element not in self.branch_currents:
                raise KeyError(f"Element {element!r} was not part of this solve.")
            return self.branch_currents[element]
        if isinstance(element, CurrentSource):
            return element.current
        raise TypeError(f"Unsupported element type: {type(element).__name__}")


@dataclass(frozen=True)
class StaticCircuit:
    """
    Resistive network of batteries, resistors and current sources.

    The circuit is immutable and `solve` is a pure function of it.
    """
    batteries: Tuple[Battery, ...] = ()
    resistors: Tuple[Resistor, ...] = ()
    current_sources: Tuple[CurrentSource, ...] = ()
    elements: Tuple[StaticElement, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "batteries", tuple(self.batteries))
        object.__setattr__(self, "resistors", tuple(self.resistors))
        object.__setattr__(self, "current_sources", tuple(self.current_sources))
        object.__setattr__(self, "elements", self.batteries + self.resistors + self.current_sources)

    @property
    def nodes(self) -> List[NodeId]:
        """Distinct node ids in order of first appearance."""
        ordered: Dict[NodeId, None] = {}
        for element in self.elements:
            ordered.setdefault(element.node0)
            ordered.setdefault(element.node1)
        return list(ordered)

    def unknown_currents(self) -> List[StaticElement]:
        """Elements whose current is an unknown: every battery, every short."""
        return [e for e in self.elements if _has_unknown_current(e)]

    def reference_nodes(self) -> List[NodeId]:
        """
        Pick one node per connected component to hold 0 V.

        Every element, shorts and batteries included, connects its terminals.
        The first node (in appearance order) of each component is chosen.
        """
        graph = nx.Graph()
        graph.add_nodes_from(self.nodes)
        graph.add_edges_from((e.node0, e.node1) for e in self.elements)
        references: List[NodeId] = []
        seen: set = set()
        for node in graph.nodes:
            if node in seen:
                continue
            references.append(node)
            seen.update(nx.node_connected_component(graph, node))
        return references

    def solve(self, strict: bool = False) -> StaticSolution:
        """
        Solve for node voltages and unknown branch currents.

        Args:
            strict: If True, raise SingularCircuitError when the system is
                rank deficient or cannot be solved. Otherwise a rank-deficient
                system yields its basic solution and a failed solve yields an
                all-zero solution.

        Returns:
            StaticSolution for this circuit.
        """
        nodes = self.nodes
        currents = self.unknown_currents()
        if not nodes:
            return StaticSolution(node_voltages={}, branch_currents={}, rank=0)

        voltage_index = {node: idx for idx, node in enumerate(nodes)}
        current_index = {id(e): len(nodes) + idx for idx, e in enumerate(currents)}
        references = self.reference_nodes()
        n_unknowns = len(nodes) + len(currents)
        n_equations = len(references) + len(nodes) + len(currents)

        data = StampData(
            A=np.zeros((n_equations, n_unknowns)),
            z=np.zeros(n_equations),
            voltage_index=voltage_index,
            current_index=current_index,
        )
        self._stamp(data, nodes, references)

        try:
            x, rank = _qr_solve(data.A, data.z)
        except (np.linalg.LinAlgError, ValueError) as exc:
            if strict:
                raise SingularCircuitError(f"Circuit matrix could not be solved: {exc}") from exc
            logger.warning("Static solve failed (%s); using zero solution.", exc)
            x, rank = np.zeros(n_unknowns), -1

        if rank >= 0 and rank < n_unknowns:
            if strict:
                raise SingularCircuitError(
                    f"Circuit matrix is rank deficient ({rank} < {n_unknowns})."
                )
            logger.debug("Rank deficient system (%d < %d); using basic solution.", rank, n_unknowns)

        node_voltages = {node: float(x[voltage_index[node]]) for node in nodes}
        branch_currents = {e: float(x[current_index[id(e)]]) for e in currents}
        return StaticSolution(node_voltages=node_voltages, branch_currents=branch_currents, rank=rank)

    def _stamp(self, data: StampData, nodes: Sequence[NodeId], references: Sequence[NodeId]) -> None:
        for node in references:
            stamp_reference(data, node)

        # KCL: outgoing branch currents equal the current-source total
        kcl_terms: Dict[NodeId, List[Tuple[float, int]]] = {node: [] for node in nodes}
        kcl_values: Dict[NodeId, float] = dict.fromkeys(nodes, 0.0)
        for element in self.elements:
            _stamp_branch(data, element, kcl_terms, kcl_values)
        for node in nodes:
            data.add_equation(kcl_values[node], kcl_terms[node])

        for battery in self.batteries:
            stamp_voltage_difference(data, battery.node0, battery.node1, battery.voltage)
        for resistor in self.resistors:
            if resistor.is_short:
                stamp_voltage_difference(data, resistor.node0, resistor.node1, 0.0)


def solve(
    batteries: Sequence[Battery],
    resistors: Sequence[Resistor],
    current_sources: Sequence[CurrentSource] = (),
    strict: bool = False,
) -> StaticSolution:
    """Solve a resistive network; see StaticCircuit.solve."""
    circuit = StaticCircuit(tuple(batteries), tuple(resistors), tuple(current_sources))
    return circuit.solve(strict=strict)


def _has_unknown_current(element: StaticElement) -> bool:
    if isinstance(element, Battery):
        return True
    if isinstance(element, Resistor):
        return element.is_short
    if isinstance(element, CurrentSource):
        return False
    raise TypeError(f"Unsupported element type: {type(element).__name__}")


def _stamp_branch(
    data: StampData,
    element: StaticElement,
    kcl_terms: Dict[NodeId, List[Tuple[float, int]]],
    kcl_values: Dict[NodeId, float],
) -> None:
    """Add one element's contribution to the KCL rows of its terminals."""
    n0, n1 = element.node0, element.node1
    if isinstance(element, Battery) or (isinstance(element, Resistor) and element.is_short):
        col = data.current(element)
        kcl_terms[n0].append((1.0, col))
        kcl_terms[n1].append((-1.0, col))
    elif isinstance(element, Resistor):
        g = 1.0 / element.resistance
        v0, v1 = data.voltage(n0), data.voltage(n1)
        kcl_terms[n0].extend([(g, v0), (-g, v1)])
        kcl_terms[n1].extend([(g, v1), (-g, v0)])
    elif isinstance(element, CurrentSource):
        kcl_values[n0] += element.current
        kcl_values[n1] -= element.current
    else:
        raise TypeError(f"Unsupported element type: {type(element).__name__}")


def _equilibrate(A: Array, z: Array) -> tuple[Array, Array, Array]:
    """
    Scale every row, then every column, to a largest magnitude of 1.

    Conductances of a circuit can span many decades (near-zero wires next to
    gigaohm loads), so the rank tolerance is only meaningful on the scaled
    system. All-zero rows and columns are left as they are.

    Returns:
        (scaled A, scaled z, column scale); the solution of the unscaled
        system is the scaled solution divided by the column scale.
    """
    row_scale = np.abs(A).max(axis=1)
    row_scale[row_scale == 0.0] = 1.0
    A = A / row_scale[:, None]
    z = z / row_scale
    col_scale = np.abs(A).max(axis=0)
    col_scale[col_scale == 0.0] = 1.0
    return A / col_scale, z, col_scale


def _qr_solve(A: Array, z: Array) -> tuple[Array, int]:
    """
    Solve the (overdetermined, consistent) system A x = z by pivoted QR.

    The system is equilibrated first. Columns whose pivot then falls below
    the rank tolerance are set to zero, which gives the basic solution of a
    mildly rank-deficient system.

    Returns:
        (x, rank)

    Raises:
        np.linalg.LinAlgError: If the matrix has rank 0 or the result is not finite.
        ValueError: If A or z contain non-finite values.
    """
    A_s, z_s, col_scale = _equilibrate(A, z)
    Q, R, P = sla.qr(A_s, mode="economic", pivoting=True)
    diag = np.abs(np.diag(R))
    if diag.size == 0 or diag[0] == 0.0:
        raise np.linalg.LinAlgError("Matrix has rank 0.")
    tol = diag[0] * max(A.shape) * np.finfo(float).eps
    rank = int(np.count_nonzero(diag > tol))
    y = Q[:, :rank].T @ z_s
    x_basic = sla.solve_triangular(R[:rank, :rank], y)
    if not np.all(np.isfinite(x_basic)):
        raise np.linalg.LinAlgError("Solution is not finite.")
    x = np.zeros(A.shape[1])
    x[P[:rank]] = x_basic
    return x / col_scale, rank
