"""
MNA stamps and history updates for every device kind.

Two pure operations per device:
    stamp(device, state, A, z, num_voltage_sources) -> (A, z)
    advance_history(device, state, x) -> state

``stamp`` only reads history; ``advance_history`` only reads the solution.
The circuit sequences them (assemble, solve, advance) so history always
reflects the last completed solve.

Matrix layout: rows/cols [0, n_nodes) are node voltages (node i at i-1),
followed by one branch-current unknown per voltage source.
"""

from __future__ import annotations

import math

from jax import Array

from .components import (
    Device,
    DeviceState,
    CapacitorState,
    InductorState,
    JunctionState,
    JosephsonJunction,
)
from .config import PHI_0


def _stamp_conductance(A: Array, ia: int, ib: int, g: float) -> Array:
    """
    Resistor-style stamp between nodes ia, ib (0 = ground):

    A[ia-1, ia-1] += g
    A[ib-1, ib-1] += g
    A[ia-1, ib-1] -= g
    A[ib-1, ia-1] -= g
    """
    if ia > 0:
        A = A.at[ia - 1, ia - 1].add(g)
    if ib > 0:
        A = A.at[ib - 1, ib - 1].add(g)
    if ia > 0 and ib > 0:
        A = A.at[ia - 1, ib - 1].add(-g)
        A = A.at[ib - 1, ia - 1].add(-g)
    return A


def _stamp_current(z: Array, ia: int, ib: int, i: float) -> Array:
    """Current source pushing ``i`` into node ia and drawing it from node ib."""
    if ia > 0:
        z = z.at[ia - 1].add(i)
    if ib > 0:
        z = z.at[ib - 1].add(-i)
    return z


def node_voltage(x: Array, node: int) -> float:
    """Voltage at a node (ground reads 0V)."""
    if node <= 0:
        return 0.0
    return float(x[node - 1])


def branch_voltage(x: Array, ia: int, ib: int) -> float:
    """V(ia) - V(ib) from a solution vector."""
    return node_voltage(x, ia) - node_voltage(x, ib)


def is_voltage_source(device: Device) -> bool:
    return device.kind == "VSource"


def stamp(
    device: Device,
    state: DeviceState,
    A: Array,
    z: Array,
    num_voltage_sources: int,
) -> tuple[Array, Array]:
    """
    Add one device's contribution to (A, z).

    Args:
        device: Device to stamp
        state: Its history (None for stateless kinds)
        A: MNA matrix, zeroed at the start of the assembly pass
        z: Right-hand side, zeroed at the start of the assembly pass
        num_voltage_sources: Number of branch-current unknowns in A

    Returns:
        (A, z) with the contribution added
    """
    ia, ib = device.node1, device.node2

    if device.kind == "R":
        A = _stamp_conductance(A, ia, ib, 1.0 / device.resistance)

    elif device.kind == "VSource":
        # Branch current rows follow the node rows
        row = A.shape[0] - num_voltage_sources + device.branch_index
        if ia > 0:
            A = A.at[ia - 1, row].add(1.0)
            A = A.at[row, ia - 1].add(1.0)
        if ib > 0:
            A = A.at[ib - 1, row].add(-1.0)
            A = A.at[row, ib - 1].add(-1.0)
        z = z.at[row].set(device.voltage)

    elif device.kind == "C":
        # Backward Euler: i = (C/dt) * (v - v_prev)
        gc = device.capacitance / device.time_step
        A = _stamp_conductance(A, ia, ib, gc)
        z = _stamp_current(z, ia, ib, gc * state.prev_voltage)

    elif device.kind == "L":
        # Backward Euler: i = i_prev + (dt/L) * v
        gl = device.time_step / device.inductance
        A = _stamp_conductance(A, ia, ib, gl)
        z = _stamp_current(z, ia, ib, -state.prev_current)

    elif device.kind == "JJ":
        A, z = _stamp_junction(device, state, A, z)

    else:
        raise ValueError(f"Unknown component kind: {device.kind}")

    return A, z


def _stamp_junction(
    jj: JosephsonJunction,
    state: JunctionState,
    A: Array,
    z: Array,
) -> tuple[Array, Array]:
    """
    RCSJ junction linearized around the Newton phase estimate.

    Terminal rows: shunt R, trapezoidal C companion, and the supercurrent
        Ic*sin(phi) ~ Ic*sin(phi0) + Ic*cos(phi0)*(phi - phi0)
    whose phi-dependent part couples into the phase-node column.

    Phase row (trapezoidal integration of the Josephson relation):
        phi - k*(v1 - v2) = prev_phase + k*prev_voltage,  k = (2*pi/PHI_0)*dt/2

    Signs follow the RCSJ equations: the capacitor history current
    C*dv_prev is injected into node1 and the phase row right-hand side
    carries +k*prev_voltage, so a junction held at constant V winds at
    exactly 2*pi*V/PHI_0.
    """
    ia, ib, p = jj.node1, jj.node2, jj.phase_node
    ic = jj.critical_current
    phi0 = state.nr_phase

    A = _stamp_conductance(A, ia, ib, 1.0 / jj.resistance)

    # Trapezoidal: i = (2C/dt) * (v - v_prev) - i_prev, with i_prev = C * dv_prev
    gc = 2.0 * jj.capacitance / jj.time_step
    A = _stamp_conductance(A, ia, ib, gc)
    z = _stamp_current(z, ia, ib, gc * state.prev_voltage + jj.capacitance * state.prev_dvoltage)

    # Constant part of the linearized supercurrent (flows node1 -> node2)
    i_jj = ic * math.sin(phi0) - ic * phi0 * math.cos(phi0)
    z = _stamp_current(z, ia, ib, -i_jj)

    if p > 0:
        coupling = ic * math.cos(phi0)
        k = (2.0 * math.pi / PHI_0) * jj.time_step / 2.0
        A = A.at[p - 1, p - 1].add(1.0)
        if ia > 0:
            A = A.at[ia - 1, p - 1].add(coupling)
            A = A.at[p - 1, ia - 1].add(-k)
        if ib > 0:
            A = A.at[ib - 1, p - 1].add(-coupling)
            A = A.at[p - 1, ib - 1].add(k)
        z = z.at[p - 1].add(state.prev_phase + k * state.prev_voltage)

    return A, z


def advance_history(device: Device, state: DeviceState, x: Array) -> DeviceState:
    """
    History after a completed solve ``x``.

    Stateless kinds return their state unchanged (None).
    """
    if device.kind == "C":
        return CapacitorState(prev_voltage=branch_voltage(x, device.node1, device.node2))

    elif device.kind == "L":
        v = branch_voltage(x, device.node1, device.node2)
        gl = device.time_step / device.inductance
        return InductorState(prev_current=state.prev_current + gl * v)

    elif device.kind == "JJ":
        return commit_junction(device, state, x)

    return state


# --- Josephson junction state transitions ---

def set_initial_nr_phase(state: JunctionState) -> JunctionState:
    """Start of a time step: seed the Newton estimate with the last converged phase."""
    return state._replace(nr_phase=state.prev_phase)


def update_nr_phase(state: JunctionState, phase: float) -> JunctionState:
    """After each Newton iteration: feed the new phase back into the linearization."""
    return state._replace(nr_phase=float(phase))


def update_prev_dvoltage(jj: JosephsonJunction, state: JunctionState, voltage: float) -> JunctionState:
    """
    Central-difference dV/dt from the new voltage and the one two steps back,
    then shift the voltage history by one step.
    """
    dvoltage = (voltage - state.prev_voltage2) / (2.0 * jj.time_step)
    return state._replace(
        prev_dvoltage=dvoltage,
        prev_voltage2=state.prev_voltage,
        prev_voltage=voltage,
    )


def update_phase_and_voltage(state: JunctionState, voltage: float, phase: float) -> JunctionState:
    """After convergence: commit the converged voltage and phase."""
    return state._replace(prev_voltage=voltage, prev_phase=float(phase))


def commit_junction(jj: JosephsonJunction, state: JunctionState, x: Array) -> JunctionState:
    """Post-convergence commit of a junction from the converged solution."""
    voltage = branch_voltage(x, jj.node1, jj.node2)
    phase = node_voltage(x, jj.phase_node)
    state = update_prev_dvoltage(jj, state, voltage)
    return update_phase_and_voltage(state, voltage, phase)
