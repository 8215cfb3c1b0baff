"""
Example: LC Transient

A 5V source drives a 1mH inductor into a 1uF capacitor to ground.
Without resistance the capacitor voltage rings around 5V at
f0 = 1/(2*pi*sqrt(LC)) ~ 5 kHz; backward Euler damps it slowly.

Results are exported as a comma-separated table.

Components used: VoltageSource, Inductor, Capacitor
"""
import argparse
import math

from pyjunction import Circuit, Capacitor, Inductor, VoltageSource


def build_lc(dt, L_val=1e-3, C_val=1e-6, V=5.0):
    """Build the LC circuit.

    Circuit:
        Vs ---[L]---+--- (node 2)
                    |
                   [C]
                    |
                   GND
    """
    circuit = Circuit()
    circuit.add_component(VoltageSource(1, 0, V, 0))
    circuit.add_component(Inductor(1, 2, L_val, dt))
    circuit.add_component(Capacitor(2, 0, C_val, dt))
    return circuit


def main():
    parser = argparse.ArgumentParser(description="LC transient simulation")
    parser.add_argument("--end-time", type=float, default=1e-2, help="Simulation end time (s)")
    parser.add_argument("--dt", type=float, default=1e-5, help="Time step (s)")
    parser.add_argument("--output", default="output.txt", help="Result file")
    args = parser.parse_args()

    circuit = build_lc(args.dt)
    circuit.run_transient(args.end_time, args.dt)

    f0 = 1.0 / (2.0 * math.pi * math.sqrt(1e-3 * 1e-6))
    print(f"Resonant frequency: {f0:.1f} Hz")
    print(f"{'Time (ms)':>10s}  {'V1 (V)':>8s}  {'V2 (V)':>8s}  {'I_L (mA)':>9s}")
    results = circuit.get_results()
    for t, x in results[:: max(1, len(results) // 20)]:
        i_L = -circuit.branch_current(0, x)
        print(f"{t*1e3:10.3f}  {float(x[0]):8.4f}  {float(x[1]):8.4f}  {i_L*1e3:9.4f}")

    if circuit.save_results_to_file(args.output):
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
