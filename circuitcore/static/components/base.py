from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, Tuple
import numpy as np

Array = np.ndarray
NodeId = Hashable


@dataclass(frozen=True, eq=False)
class StaticElement:
    """
    Two-terminal element as seen by the static solver.

    Elements compare by identity, so two equal-valued resistors wired in
    parallel remain distinct keys of a solution.

    Attributes:
        node0: First terminal.
        node1: Second terminal.
    """
    node0: NodeId
    node1: NodeId


@dataclass
class StampData:
    """
    Shared view of the MNA system while equations are written.

    Rows are equations, columns are unknowns. There are more equations than
    unknowns (one reference equation per connected component on top of one
    KCL equation per node), so A is rectangular.

    Attributes:
        A: Coefficient matrix (n_equations x n_unknowns).
        z: Right-hand side vector.
        voltage_index: Mapping node -> column of its unknown voltage.
        current_index: Mapping id(element) -> column of its unknown current.
        row: Next free equation row.
    """
    A: Array
    z: Array
    voltage_index: Dict[NodeId, int]
    current_index: Dict[int, int]
    row: int = 0

    def voltage(self, node: NodeId) -> int:
        return self.voltage_index[node]

    def current(self, element: StaticElement) -> int:
        return self.current_index[id(element)]

    def add_equation(self, value: float, terms: Iterable[Tuple[float, int]]) -> None:
        """
        Write `sum(coefficient * x[column]) = value` into the next row.

        Coefficients of repeated columns accumulate.
        """
        self.z[self.row] = value
        for coefficient, column in terms:
            self.A[self.row, column] += coefficient
        self.row += 1


def stamp_reference(data: StampData, node: NodeId) -> None:
    """Pin a node to 0 V."""
    data.add_equation(0.0, [(1.0, data.voltage(node))])


def stamp_voltage_difference(data: StampData, node0: NodeId, node1: NodeId, voltage: float) -> None:
    """Write V(node1) - V(node0) = voltage."""
    data.add_equation(voltage, [(-1.0, data.voltage(node0)), (1.0, data.voltage(node1))])
