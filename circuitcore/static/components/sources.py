from __future__ import annotations
from dataclasses import dataclass
import math
from .base import StaticElement


@dataclass(frozen=True, eq=False)
class Battery(StaticElement):
    """
    Ideal voltage source.

    V(node1) - V(node0) = voltage. The solved current is positive when it
    flows from node0 to node1 through the battery.
    """
    voltage: float

    def __post_init__(self) -> None:
        assert not math.isnan(self.voltage), "voltage must be a number"


@dataclass(frozen=True, eq=False)
class CurrentSource(StaticElement):
    """
    Ideal current source.

    Positive current leaves node0 and enters node1 through the rest of the
    network.
    """
    current: float

    def __post_init__(self) -> None:
        assert not math.isnan(self.current), "current must be a number"
