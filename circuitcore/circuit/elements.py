from __future__ import annotations
from dataclasses import dataclass, field
from typing import Hashable
import math

from ..dynamic.solver.integrate import IntegratorConfig

VertexId = Hashable


@dataclass(frozen=True)
class SolverConfig:
    """
    Tunables of the circuit adapter.

    Attributes:
        minimum_resistance: Resistance substituted for zero-resistance
            conductors (wires, closed switches) in Ohms (default: 1e-6).
        battery_series_resistance: Series resistance every voltage source gets
            on the first solve, in Ohms (default: 1e-6).
        battery_current_threshold: Time-averaged source current in Amperes
            above which the re-solve uses the source's true internal
            resistance (default: 1e4).
        max_magnitude: Bound applied to carried capacitor/inductor state
            (default: 1e20).
        integrator: Step-halving tolerances.
    """
    minimum_resistance: float = 1e-6
    battery_series_resistance: float = 1e-6
    battery_current_threshold: float = 1e4
    max_magnitude: float = 1e20
    integrator: IntegratorConfig = field(default_factory=IntegratorConfig)

    def clamp(self, value: float) -> float:
        return max(-self.max_magnitude, min(self.max_magnitude, value))


@dataclass(frozen=True, eq=False)
class CircuitElement:
    """
    Two-terminal element of an editable circuit.

    Elements compare by identity so they can key per-element results.

    Attributes:
        vertex0: Start vertex.
        vertex1: End vertex.
    """
    vertex0: VertexId
    vertex1: VertexId

    @property
    def conducts(self) -> bool:
        return True

    @property
    def is_source(self) -> bool:
        """Whether the element can drive current around a loop."""
        return False

    @property
    def is_self_loop(self) -> bool:
        return self.vertex0 == self.vertex1


@dataclass(frozen=True, eq=False)
class Wire(CircuitElement):
    resistance: float = 0.0

    def __post_init__(self) -> None:
        assert self.resistance >= 0, "resistance must not be negative"


@dataclass(frozen=True, eq=False)
class Resistor(CircuitElement):
    resistance: float

    def __post_init__(self) -> None:
        assert not math.isnan(self.resistance), "resistance must be a number"
        assert self.resistance >= 0, "resistance must not be negative"


@dataclass(frozen=True, eq=False)
class LightBulb(CircuitElement):
    """
    Light bulb; a real bulb is nonlinear.

    Attributes:
        resistance: Resistance in Ohms used for the first solve of a frame.
        real: If True, the resistance is recomputed from the voltage across
            the bulb and the frame is solved once more.
    """
    resistance: float
    real: bool = False

    def __post_init__(self) -> None:
        assert not math.isnan(self.resistance), "resistance must be a number"
        assert self.resistance >= 0, "resistance must not be negative"

    @staticmethod
    def resistance_at(voltage: float) -> float:
        """R = 10 + 3 V / log2(V + 2), with V the magnitude of the voltage drop."""
        v = abs(voltage)
        return 10.0 + 3.0 * v / math.log2(v + 2.0)


@dataclass(frozen=True, eq=False)
class Switch(CircuitElement):
    closed: bool = False

    @property
    def conducts(self) -> bool:
        return self.closed


@dataclass(frozen=True, eq=False)
class VoltageSource(CircuitElement):
    """
    DC voltage source, V(vertex1) - V(vertex0) = voltage.

    Attributes:
        voltage: EMF in Volts.
        internal_resistance: True internal resistance in Ohms, used only when
            the source current exceeds the configured threshold.
    """
    voltage: float
    internal_resistance: float = 0.0

    def __post_init__(self) -> None:
        assert not math.isnan(self.voltage), "voltage must be a number"
        assert self.internal_resistance >= 0, "internal_resistance must not be negative"

    @property
    def is_source(self) -> bool:
        return True

    def voltage_at(self, time: float) -> float:
        return self.voltage


@dataclass(frozen=True, eq=False)
class ACVoltageSource(CircuitElement):
    """
    Sinusoidal voltage source.

    Attributes:
        max_voltage: Amplitude in Volts.
        frequency: Frequency in Hz.
        phase: Phase offset in degrees (default: 0).
        internal_resistance: True internal resistance in Ohms.
    """
    max_voltage: float
    frequency: float
    phase: float = 0.0
    internal_resistance: float = 0.0

    def __post_init__(self) -> None:
        assert self.frequency >= 0, "frequency must not be negative"
        assert self.internal_resistance >= 0, "internal_resistance must not be negative"

    @property
    def is_source(self) -> bool:
        return True

    def voltage_at(self, time: float) -> float:
        return self.max_voltage * math.sin(2.0 * math.pi * self.frequency * time + math.radians(self.phase))


@dataclass(frozen=True, eq=False)
class Capacitor(CircuitElement):
    capacitance: float

    def __post_init__(self) -> None:
        assert self.capacitance > 0, "capacitance must be positive"

    @property
    def is_source(self) -> bool:
        return True


@dataclass(frozen=True, eq=False)
class Inductor(CircuitElement):
    inductance: float

    def __post_init__(self) -> None:
        assert self.inductance > 0, "inductance must be positive"

    @property
    def is_source(self) -> bool:
        return True
