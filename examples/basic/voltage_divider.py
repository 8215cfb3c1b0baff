"""
Example: Voltage Divider (DC operating point)

5V source into a 1k - 2k series divider to ground.

Expected:
    Node 1: 5.0 V (source voltage)
    Node 2: 3.33 V (divider tap)
    Current through voltage source: -1.67 mA

Components used: Resistor, VoltageSource
"""
from pyjunction import Circuit, Resistor, VoltageSource


def build_divider(V_in=5.0, R1=1000.0, R2=2000.0):
    """Build a 2-resistor voltage divider.

    Circuit:
        Vs ---[R1]---+---[R2]--- GND
                     |
                    Vout (node 2)
    """
    circuit = Circuit()
    circuit.add_component(VoltageSource(1, 0, V_in, 0))
    circuit.add_component(Resistor(1, 2, R1))
    circuit.add_component(Resistor(2, 0, R2))
    return circuit


def main():
    print("=" * 60)
    print("Voltage Divider Example")
    print("=" * 60)

    circuit = build_divider()
    circuit.run_dc()
    circuit.print_solution()

    v_out = circuit.node_voltage(2)
    expected = 5.0 * 2000.0 / 3000.0
    print(f"\nV_out = {v_out:.4f} V (expected: {expected:.4f} V)")


if __name__ == "__main__":
    main()
