"""
Test: frame-by-frame solving of an editable circuit.

This validates:
- End-to-end currents and vertex voltages
- Participant detection (loops with a source) and zero current elsewhere
- Voltage propagation across sources, capacitors and open switches
- The single corrective re-solve for real bulbs and overloaded sources
- Carrying capacitor state between frames
- A capacitor straight across a source settling instead of ringing
- Badly scaled circuits (huge resistances next to tiny series resistances)
"""
import math
import pytest

from circuitcore.circuit import (
    ACVoltageSource,
    Capacitor,
    Inductor,
    LightBulb,
    Resistor,
    SolverConfig,
    Switch,
    VoltageSource,
    Wire,
    find_participants,
    solve_circuit,
)
from circuitcore.dynamic import DynamicElementState
from circuitcore.errors import CircuitValidationError


def test_battery_and_resistor():
    source = VoltageSource("v0", "v1", 4.0)
    resistor = Resistor("v1", "v0", 4.0)

    solution = solve_circuit([source, resistor], 0.01)

    assert solution.voltage("v0") == pytest.approx(0.0, abs=1e-9)
    assert solution.voltage("v1") == pytest.approx(4.0, rel=1e-5)
    assert solution.current(resistor) == pytest.approx(1.0, rel=1e-5)
    assert solution.current(source) == pytest.approx(1.0, rel=1e-5)
    assert not solution.resolved


def test_parallel_resistors():
    source = VoltageSource("v0", "v1", 9.0)
    r1 = Resistor("v1", "v0", 5.0)
    r2 = Resistor("v1", "v0", 5.0)

    solution = solve_circuit([source, r1, r2], 0.01)

    assert solution.current(source) == pytest.approx(3.6, rel=1e-5)
    assert solution.instantaneous_currents[r1] == pytest.approx(1.8, rel=1e-5)


def test_participants():
    source = VoltageSource("a", "b", 1.0)
    loop = Resistor("b", "a", 1.0)
    dangling = Resistor("b", "c", 1.0)
    self_loop = Wire("a", "a")
    capacitors = [Capacitor("x", "y", 1e-6), Capacitor("y", "x", 1e-6)]
    resistors_only = [Resistor("p", "q", 1.0), Resistor("q", "p", 1.0)]

    elements = [source, loop, dangling, self_loop, *capacitors, *resistors_only]

    assert find_participants(elements) == [source, loop, *capacitors]


def test_dangling_element_carries_no_current():
    source = VoltageSource("v0", "v1", 4.0)
    resistor = Resistor("v1", "v0", 4.0)
    dangling = Resistor("v1", "x", 10.0)

    solution = solve_circuit([source, resistor, dangling], 0.01)

    assert solution.current(dangling) == 0.0
    assert solution.voltage("x") == pytest.approx(solution.voltage("v1"))


def test_open_switch_isolates():
    source = VoltageSource("v0", "v1", 4.0)
    switch = Switch("v1", "v2", closed=False)
    resistor = Resistor("v2", "v0", 10.0)

    solution = solve_circuit([source, switch, resistor], 0.01)

    assert solution.current(source) == 0.0
    assert solution.current(resistor) == 0.0
    assert solution.voltage("v1") == pytest.approx(4.0)
    assert solution.voltage("v2") == pytest.approx(0.0)


def test_closed_switch_conducts():
    source = VoltageSource("v0", "v1", 4.0)
    switch = Switch("v1", "v2", closed=True)
    resistor = Resistor("v2", "v0", 10.0)

    solution = solve_circuit([source, switch, resistor], 0.01)

    assert solution.current(switch) == pytest.approx(0.4, rel=1e-5)
    assert solution.voltage_drop(switch) == pytest.approx(0.0, abs=1e-5)


def test_voltage_propagates_across_charged_capacitor():
    cap = Capacitor("a", "b", 1e-6)
    lead = Wire("b", "c")
    states = {cap: DynamicElementState(voltage=3.0, current=0.0)}

    solution = solve_circuit([cap, lead], 0.01, states)

    assert solution.voltage("a") == 0.0
    assert solution.voltage("b") == pytest.approx(-3.0)
    assert solution.voltage("c") == pytest.approx(-3.0)
    assert solution.state_of(cap) == DynamicElementState(voltage=3.0, current=0.0)


def test_non_participant_inductor_current_zeroed():
    ind = Inductor("a", "b", 1e-3)
    states = {ind: DynamicElementState(voltage=1.5, current=2.0)}

    solution = solve_circuit([ind], 0.01, states)

    assert solution.state_of(ind) == DynamicElementState(voltage=1.5, current=0.0)
    assert solution.current(ind) == 0.0


def test_real_light_bulb_triggers_one_resolve():
    source = VoltageSource("v0", "v1", 10.0)
    bulb = LightBulb("v1", "v0", 5.0, real=True)

    solution = solve_circuit([source, bulb], 0.01)

    resistance = LightBulb.resistance_at(10.0)
    assert resistance == pytest.approx(10 + 3 * 10 / math.log2(12))
    assert solution.resolved
    assert solution.current(bulb) == pytest.approx(10.0 / resistance, rel=1e-5)


def test_plain_light_bulb_is_linear():
    source = VoltageSource("v0", "v1", 10.0)
    bulb = LightBulb("v1", "v0", 5.0)

    solution = solve_circuit([source, bulb], 0.01)

    assert not solution.resolved
    assert solution.current(bulb) == pytest.approx(2.0, rel=1e-5)


def test_overloaded_source_uses_internal_resistance():
    source = VoltageSource("v0", "v1", 10.0, internal_resistance=1.0)
    short = Wire("v1", "v0")

    solution = solve_circuit([source, short], 0.01)

    assert solution.resolved
    assert solution.current(source) == pytest.approx(10.0, rel=1e-5)


def test_threshold_is_configurable():
    source = VoltageSource("v0", "v1", 10.0, internal_resistance=1.0)
    load = Resistor("v1", "v0", 0.5)

    default = solve_circuit([source, load], 0.01)
    strict = solve_circuit([source, load], 0.01, config=SolverConfig(battery_current_threshold=5.0))

    assert not default.resolved
    assert default.current(load) == pytest.approx(20.0, rel=1e-5)
    assert strict.resolved
    assert strict.current(load) == pytest.approx(10.0 / 1.5, rel=1e-5)


def test_rc_charging_over_frames():
    source = VoltageSource("gnd", "vin", 5.0)
    resistor = Resistor("vin", "vc", 1e3)
    cap = Capacitor("vc", "gnd", 1e-6)
    elements = [source, resistor, cap]
    frame = 1e-4

    states = {}
    time = 0.0
    for _ in range(20):
        solution = solve_circuit(elements, frame, states, time)
        states = solution.states
        time += frame

    expected = 5.0 * (1 - math.exp(-2.0))
    assert abs(solution.state_of(cap).voltage - expected) / expected < 0.01
    assert solution.voltage("vc") == pytest.approx(solution.state_of(cap).voltage, rel=1e-4)


def test_overload_resolve_only_changes_the_overloaded_source():
    shorted = VoltageSource("a0", "a1", 10.0, internal_resistance=1.0)
    short = Wire("a1", "a0")
    loaded = VoltageSource("b0", "b1", 10.0, internal_resistance=1.0)
    load = Resistor("b1", "b0", 10.0)

    solution = solve_circuit([shorted, short, loaded, load], 0.01)

    assert solution.resolved
    assert solution.current(shorted) == pytest.approx(10.0, rel=1e-5)
    # the second source stays below the threshold, so it keeps the tiny series resistance
    assert solution.current(loaded) == pytest.approx(1.0, rel=1e-5)
    assert solution.current(load) == pytest.approx(1.0, rel=1e-5)


def test_divider_of_huge_resistances():
    source = VoltageSource("gnd", "a", 10.0)
    r1 = Resistor("a", "m", 1e10)
    r2 = Resistor("m", "gnd", 1e10)

    solution = solve_circuit([source, r1, r2], 0.01)

    assert solution.voltage("m") == pytest.approx(5.0, rel=1e-6)
    assert solution.current(r1) == pytest.approx(5e-10, rel=1e-6)
    assert solution.current(r2) == pytest.approx(solution.current(r1), rel=1e-6)


def test_capacitor_across_source_settles():
    source = VoltageSource("g", "a", 9.0)
    cap = Capacitor("a", "g", 0.1)
    elements = [source, cap]
    frame = 1 / 60

    states = {}
    time = 0.0
    solutions = []
    for _ in range(5):
        solution = solve_circuit(elements, frame, states, time)
        solutions.append(solution)
        states = solution.states
        time += frame

    # the whole 0.9 C inrush lands in the first frame
    assert solutions[0].current(source) == pytest.approx(0.9 / frame, rel=1e-2)
    for solution in solutions:
        assert solution.state_of(cap).voltage == pytest.approx(9.0, rel=1e-6)
        assert abs(solution.state_of(cap).current) < 1e-3
    for solution in solutions[1:]:
        assert abs(solution.current(source)) < 1e-3
        assert abs(solution.current(cap)) < 1e-3


def test_capacitor_discharges_through_resistor():
    cap = Capacitor("a", "b", 1e-6)
    resistor = Resistor("a", "b", 1e3)
    states = {cap: DynamicElementState(voltage=5.0, current=-5e-3)}

    solution = solve_circuit([cap, resistor], 1e-4, states)

    expected = 5.0 * math.exp(-0.1)
    assert solution.state_of(cap).voltage == pytest.approx(expected, rel=1e-3)
    assert solution.instantaneous_currents[cap] == pytest.approx(-solution.instantaneous_currents[resistor])
    assert solution.instantaneous_currents[resistor] == pytest.approx(expected / 1e3, rel=1e-3)


def test_zero_dt_keeps_states():
    source = VoltageSource("v0", "v1", 5.0)
    cap = Capacitor("v1", "v0", 1e-6)
    states = {cap: DynamicElementState(voltage=2.0, current=1e-3)}

    solution = solve_circuit([source, cap], 0.0, states)

    assert solution.state_of(cap) == states[cap]
    assert solution.current(source) == 0.0
    assert solution.current(cap) == 0.0


def test_inputs_not_mutated():
    source = VoltageSource("gnd", "vin", 5.0)
    resistor = Resistor("vin", "vc", 1e3)
    cap = Capacitor("vc", "gnd", 1e-6)
    states = {cap: DynamicElementState(voltage=1.0, current=4e-3)}
    snapshot = dict(states)

    solve_circuit([source, resistor, cap], 1e-4, states)

    assert states == snapshot


def test_negative_dt_raises():
    with pytest.raises(CircuitValidationError):
        solve_circuit([VoltageSource("a", "b", 1.0)], -0.1)


def test_state_magnitude_clamped():
    cap = Capacitor("a", "b", 1e-6)
    resistor = Resistor("a", "b", 1e3)
    states = {cap: DynamicElementState(voltage=50.0, current=0.0)}

    solution = solve_circuit([cap, resistor], 1e-5, states, config=SolverConfig(max_magnitude=10.0))

    assert abs(solution.state_of(cap).voltage) <= 10.0


def test_ac_source_voltage():
    source = ACVoltageSource("v0", "v1", max_voltage=10.0, frequency=50.0, phase=90.0)

    assert source.voltage_at(0.0) == pytest.approx(10.0)
    assert source.voltage_at(0.005) == pytest.approx(0.0, abs=1e-9)


def test_ac_source_evaluated_at_frame_end():
    source = ACVoltageSource("v0", "v1", max_voltage=10.0, frequency=50.0)
    resistor = Resistor("v1", "v0", 10.0)

    solution = solve_circuit([source, resistor], 0.005, time=0.0)

    assert solution.current(resistor) == pytest.approx(1.0, rel=1e-5)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
