"""
DC voltage divider with a shorted segment and a stray island.

Circuit:
    B1 (9 V) from gnd to vin -> R1 (10 Ω) -> vout -> R2 (20 Ω) -> gnd
    a 0 Ω wire between vout and tap, and an unconnected 100 Ω resistor.

The static solver picks one reference node per island, so the stray resistor
reads 0 V instead of making the system singular.
"""

from circuitcore.static import solve
from circuitcore.static.components import Battery, Resistor


def main() -> dict:
    b1 = Battery("gnd", "vin", 9.0)
    r1 = Resistor("vin", "vout", 10.0)
    r2 = Resistor("vout", "gnd", 20.0)
    wire = Resistor("vout", "tap", 0.0)
    stray = Resistor("island_a", "island_b", 100.0)

    solution = solve([b1], [r1, r2, wire, stray])

    readings = {
        "vout": solution.node_voltage("vout"),
        "tap": solution.node_voltage("tap"),
        "i_b1": solution.current(b1),
        "i_r2": solution.current(r2),
        "i_wire": solution.current(wire),
        "island": solution.node_voltage("island_b"),
    }
    print(f"Vout = {readings['vout']:.3f} V (tap {readings['tap']:.3f} V)")
    print(f"I_B1 = {readings['i_b1']:.3f} A, I_R2 = {readings['i_r2']:.3f} A")
    print(f"I_wire = {readings['i_wire']:.3f} A, island = {readings['island']:.3f} V")
    return readings


if __name__ == "__main__":
    main()
