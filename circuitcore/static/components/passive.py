from __future__ import annotations
from dataclasses import dataclass
import math
from .base import StaticElement


@dataclass(frozen=True, eq=False)
class Resistor(StaticElement):
    """
    Linear resistor between node0 and node1.

    A resistance of exactly 0 is a short: the solver carries its current as
    an unknown and forces equal terminal voltages. Callers that want a tiny
    but finite resistance must clamp it themselves.
    """
    resistance: float

    def __post_init__(self) -> None:
        assert not math.isnan(self.resistance), "resistance must be a number"
        assert self.resistance >= 0, "resistance must not be negative"

    @property
    def is_short(self) -> bool:
        return self.resistance == 0
