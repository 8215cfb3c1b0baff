"""
Test: RC circuit step response.

A voltage source charges a capacitor through a resistor.
V(t) = V0 * (1 - exp(-t / RC))

This validates:
- Capacitor backward-Euler companion model
- Capacitor history carried between steps
- Monotonic approach to the DC steady state
"""
import math
import pytest


def _build_rc(R_val, C_val, dt, V=5.0):
    from pyjunction import Circuit, Resistor, Capacitor, VoltageSource

    # Circuit: Vs -- R -- C -- GND
    circuit = Circuit()
    circuit.add_component(VoltageSource(1, 0, V, 0))  # node 1: source output
    circuit.add_component(Resistor(1, 2, R_val))
    circuit.add_component(Capacitor(2, 0, C_val, dt))  # node 2: capacitor
    return circuit


def test_rc_step_response():
    R_val = 1000.0  # 1k ohm
    C_val = 1e-6    # 1 µF
    tau = R_val * C_val  # 1ms
    dt = 1e-5

    circuit = _build_rc(R_val, C_val, dt)
    circuit.run_transient(5 * tau, dt)
    results = circuit.get_results()

    # Stored sample at time t holds the solution at the end of that step
    v_at_1tau = None
    for t, x in results:
        if abs(t - tau) < dt / 2:
            v_at_1tau = float(x[1])
    v_at_5tau = float(results[-1][1][1])

    expected_1tau = 5.0 * (1 - math.exp(-1))  # ~3.16V
    expected_5tau = 5.0 * (1 - math.exp(-5))  # ~4.97V

    # Backward Euler at dt = tau/100 is within 1%
    assert v_at_1tau is not None
    assert abs(v_at_1tau - expected_1tau) / expected_1tau < 0.01
    assert abs(v_at_5tau - expected_5tau) / expected_5tau < 0.01


def test_rc_monotonic_approach_to_dc():
    """Capacitor voltage rises monotonically toward the DC value and never overshoots."""
    from pyjunction import Circuit, Resistor, VoltageSource

    dt = 1e-5
    circuit = _build_rc(1000.0, 1e-6, dt)
    circuit.run_transient(3e-3, dt)
    voltages = [float(x[1]) for _, x in circuit.get_results()]

    # DC steady state: no current through the capacitor, so V(2) = V(1)
    dc = Circuit()
    dc.add_component(VoltageSource(1, 0, 5.0, 0))
    dc.add_component(Resistor(1, 2, 1000.0))
    dc.add_component(Resistor(2, 0, 1e12))
    v_dc = float(dc.run_dc()[1])

    assert all(b > a for a, b in zip(voltages, voltages[1:]))
    assert all(v < v_dc for v in voltages)
    assert abs(voltages[-1] - v_dc) < abs(voltages[0] - v_dc)
    assert voltages[-1] == pytest.approx(v_dc, rel=0.1)


def test_capacitor_history_tracks_last_step():
    """Capacitor history equals the terminal voltage of the last completed step."""
    dt = 1e-5
    circuit = _build_rc(1000.0, 1e-6, dt)
    circuit.run_transient(1e-4, dt)

    last_x = circuit.get_results()[-1][1]
    state = circuit.history(2)
    assert state.prev_voltage == pytest.approx(float(last_x[1]))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
