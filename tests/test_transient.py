"""
Test: transient driver behaviour independent of circuit physics.

This validates:
- Resistor/source-only circuits are time-invariant
- Result history is cleared and regenerated on every run
- get_results() is idempotent
- Time-step mismatch and argument validation
"""
import pytest


def _divider():
    from pyjunction import Circuit, Resistor, VoltageSource

    circuit = Circuit()
    circuit.add_component(VoltageSource(1, 0, 5.0, 0))
    circuit.add_component(Resistor(1, 2, 1000.0))
    circuit.add_component(Resistor(2, 0, 2000.0))
    return circuit


def _rc(dt):
    from pyjunction import Circuit, Resistor, Capacitor, VoltageSource

    circuit = Circuit()
    circuit.add_component(VoltageSource(1, 0, 5.0, 0))
    circuit.add_component(Resistor(1, 2, 1000.0))
    circuit.add_component(Capacitor(2, 0, 1e-6, dt))
    return circuit


def test_resistive_circuit_is_time_invariant():
    circuit = _divider()
    circuit.run_transient(1e-3, 1e-4)
    results = circuit.get_results()

    assert len(results) >= 10
    first = results[0][1].tolist()
    for _, x in results:
        assert x.tolist() == first

    dc = _divider().run_dc()
    assert first == pytest.approx(dc.tolist())


def test_source_only_circuit_is_time_invariant():
    from pyjunction import Circuit, VoltageSource

    circuit = Circuit()
    circuit.add_component(VoltageSource(1, 0, 2.5, 0))
    circuit.run_transient(5e-3, 1e-3)

    snapshots = [x.tolist() for _, x in circuit.get_results()]
    assert all(s == [2.5, 0.0] for s in snapshots)


def test_times_are_chronological():
    dt = 1e-4
    circuit = _divider()
    circuit.run_transient(1e-3, dt)

    times = [t for t, _ in circuit.get_results()]
    assert times[0] == 0.0
    assert all(b > a for a, b in zip(times, times[1:]))
    assert times[-1] < 1e-3
    assert times[1] == pytest.approx(dt)


def test_get_results_is_idempotent():
    dt = 1e-5
    circuit = _rc(dt)
    circuit.run_transient(2e-4, dt)

    first = [(t, x.tolist()) for t, x in circuit.get_results()]
    second = [(t, x.tolist()) for t, x in circuit.get_results()]
    assert first == second


def test_rerun_regenerates_results():
    dt = 1e-5
    circuit = _rc(dt)
    circuit.run_transient(2e-4, dt)
    first = [(t, x.tolist()) for t, x in circuit.get_results()]

    circuit.run_transient(2e-4, dt)
    second = [(t, x.tolist()) for t, x in circuit.get_results()]

    assert len(second) == len(first)
    assert second == first


def test_result_history_helpers():
    dt = 1e-5
    circuit = _rc(dt)
    circuit.run_transient(1e-4, dt)

    history = circuit.results
    assert len(history) == len(circuit.get_results())
    assert history.snapshots().shape == (len(history), circuit.size)
    assert history.times().shape == (len(history),)


def test_time_step_mismatch_warns(caplog):
    circuit = _rc(1e-5)
    with caplog.at_level("WARNING", logger="pyjunction"):
        circuit.run_transient(1e-4, 2e-5)

    assert "discretized with dt=" in caplog.text
    assert len(circuit.get_results()) > 0


def test_non_positive_time_step_rejected():
    circuit = _divider()
    with pytest.raises(ValueError):
        circuit.run_transient(1e-3, 0.0)


def test_singular_transient_raises():
    from pyjunction import Circuit, Capacitor, SingularMatrixError

    circuit = Circuit()
    circuit.add_component(Capacitor(1, 2, 1e-6, 1e-5))  # no ground reference

    with pytest.raises(SingularMatrixError):
        circuit.run_transient(1e-4, 1e-5)


def test_floating_capacitor_island_raises():
    from pyjunction import Circuit, Resistor, Capacitor, VoltageSource, SingularMatrixError

    # Source and load are grounded; the capacitor pair 2-3 floats with zero history
    circuit = Circuit()
    circuit.add_component(VoltageSource(1, 0, 5.0, 0))
    circuit.add_component(Resistor(1, 0, 1000.0))
    circuit.add_component(Capacitor(2, 3, 1e-6, 1e-5))

    with pytest.raises(SingularMatrixError):
        circuit.run_transient(1e-4, 1e-5)
    assert len(circuit.get_results()) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
