"""
Series RC step response driven frame by frame.

Circuit:
    B1 (5 V) from gnd to vin -> R1 (1 kΩ) -> vc -> C1 (1 µF) -> gnd

Each outer frame is handed to the adaptive integrator, which subdivides it
as needed. The capacitor state read from the last sub-step seeds the next
frame. The capacitor voltage should follow 5 (1 - exp(-t / RC)).
"""

import math

from circuitcore.dynamic import Capacitor, DynamicCircuit, IntegratorConfig
from circuitcore.static.components import Battery, Resistor


def main(plot: bool = False) -> dict:
    frame = 1e-4
    t_stop = 5e-3

    b1 = Battery("gnd", "vin", 5.0)
    r1 = Resistor("vin", "vc", 1e3)
    c1 = Capacitor("vc", "gnd", 1e-6)
    tau = r1.resistance * c1.capacitance

    circuit = DynamicCircuit(resistors=(r1,), batteries=(b1,), capacitors=(c1,))
    config = IntegratorConfig(min_dt=1e-7, error_threshold=1e-5)

    state = circuit.initial_state()
    times, v_cap, i_avg = [], [], []
    n_frames = int(round(t_stop / frame))
    for k in range(1, n_frames + 1):
        result = circuit.solve_with_subdivisions(state, frame, config)
        state = result.get_final_state()
        times.append(k * frame)
        v_cap.append(result.get_instantaneous_voltage(c1))
        i_avg.append(result.get_time_average_current(r1))

    expected = 5.0 * (1.0 - math.exp(-t_stop / tau))
    print(f"Final capacitor voltage: {v_cap[-1]:.4f} V (analytic {expected:.4f} V)")
    print(f"Average resistor current over last frame: {i_avg[-1] * 1e3:.4f} mA")

    if plot:
        import matplotlib.pyplot as plt

        plt.figure(figsize=(7, 4))
        plt.plot([t * 1e3 for t in times], v_cap, label="v_cap")
        plt.plot(
            [t * 1e3 for t in times],
            [5.0 * (1.0 - math.exp(-t / tau)) for t in times],
            "--",
            label="analytic",
        )
        plt.xlabel("Time [ms]")
        plt.ylabel("Voltage [V]")
        plt.title("Series RC Step Response")
        plt.grid(True)
        plt.legend()
        plt.tight_layout()
        plt.show()

    return {"t": times, "v_cap": v_cap, "i_avg": i_avg, "expected": expected}


if __name__ == "__main__":
    main(plot=True)
