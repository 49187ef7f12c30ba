"""
Test: result aggregation over sub-steps.

This validates:
- Duration-weighted time averages
- Instantaneous values read from the last sub-step
- Empty result sets reading as 0
- CircuitResult accessors on a solved circuit
"""
import pytest

from circuitcore.dynamic import CircuitResult, DynamicCircuit, ResultSet, SubStep
from circuitcore.static.components import Battery, Resistor


def test_time_average_is_duration_weighted():
    result = ResultSet([SubStep(0.1, 1.0), SubStep(0.3, 3.0)])

    assert result.time_average(lambda s: s) == pytest.approx((0.1 * 1.0 + 0.3 * 3.0) / 0.4)
    assert result.instantaneous(lambda s: s) == 3.0
    assert result.total_time == pytest.approx(0.4)


def test_single_step_average_is_its_value():
    result = ResultSet([SubStep(0.2, 7.0)])
    assert result.time_average(lambda s: s) == pytest.approx(7.0)


def test_empty_result_reads_zero():
    result = ResultSet()

    assert result.time_average(lambda s: s) == 0.0
    assert result.instantaneous(lambda s: s) == 0.0
    assert result.total_time == 0
    assert result.final_state is None
    assert list(result) == []


def test_empty_circuit_result_reads_zero():
    resistor = Resistor("0", "1", 1.0)
    result = CircuitResult()

    assert result.get_time_average_current(resistor) == 0.0
    assert result.get_instantaneous_current(resistor) == 0.0
    assert result.get_instantaneous_voltage(resistor) == 0.0
    assert result.get_node_voltage("1") == 0.0
    assert result.get_final_state() is None


def test_circuit_result_accessors():
    battery = Battery("0", "1", 9.0)
    r1 = Resistor("1", "0", 5.0)
    r2 = Resistor("1", "0", 5.0)
    circuit = DynamicCircuit(resistors=(r1, r2), batteries=(battery,))

    result = circuit.solve_with_subdivisions(circuit.initial_state(), 0.01)

    assert len(result) == 1
    assert result.get_time_average_current(battery) == pytest.approx(3.6)
    assert result.get_instantaneous_current(r1) == pytest.approx(1.8)
    assert result.get_instantaneous_voltage(r2) == pytest.approx(9.0)
    assert result.get_node_voltage("1") == pytest.approx(9.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
