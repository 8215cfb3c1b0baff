"""
Example: Voltage-Biased Josephson Junction

A 1 nV source held across a junction (Ic = 1 uA, R = 100 ohm, C = 1 pF).
The phase advances at dphi/dt = 2*pi*V/PHI_0 (AC Josephson relation),
so the supercurrent oscillates at f_J = V/PHI_0 ~ 0.48 MHz.

Components used: VoltageSource, JosephsonJunction
"""
import argparse
import math

from pyjunction import PHI_0, Circuit, JosephsonJunction, VoltageSource


def build_jj(V=1e-9, ic=1e-6, r=100.0, c=1e-12, dt=1e-12):
    """Build the voltage-biased junction.

    Node 1: junction terminal, node 2: junction phase variable.
    """
    circuit = Circuit()
    circuit.add_component(VoltageSource(1, 0, V, 0))
    circuit.add_component(JosephsonJunction(1, 0, 2, ic, r, c, dt))
    return circuit


def main():
    parser = argparse.ArgumentParser(description="Voltage-biased Josephson junction")
    parser.add_argument("--end-time", type=float, default=1e-9, help="Simulation end time (s)")
    parser.add_argument("--dt", type=float, default=1e-12, help="Time step (s)")
    parser.add_argument("--output", default="jj_transient_results.csv", help="Result file")
    args = parser.parse_args()

    V = 1e-9
    circuit = build_jj(V=V, dt=args.dt)
    converged = circuit.run_transient_jj(args.end_time, args.dt)

    t_last, x_last = circuit.get_results()[-1]
    expected = 2 * math.pi * V * (t_last + args.dt / 2) / PHI_0
    print(f"All steps converged: {converged}")
    print(f"Final phase: {float(x_last[1]):.6e} rad (expected {expected:.6e} rad)")

    if circuit.save_results_to_file(args.output):
        print(f"Transient simulation completed. Results saved to '{args.output}'.")


if __name__ == "__main__":
    main()
