"""Circuit container and analysis drivers (DC, transient, junction transient)."""

from __future__ import annotations

import logging
import math
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from .components import Device, DeviceState, device_nodes, initial_state, validate_device
from .config import SolverOptions
from .results import ResultHistory, StepStatus, write_results
from .solver import TopologyError, solve
from .stamps import (
    advance_history,
    is_voltage_source,
    node_voltage,
    set_initial_nr_phase,
    stamp,
    update_nr_phase,
)

logger = logging.getLogger(__name__)


class NewtonResult(NamedTuple):
    """Outcome of one Newton-Raphson solve."""
    x: Array
    converged: bool
    iterations: int
    error: float


class Circuit:
    """
    MNA circuit: device list, working matrices and result history.

    Build by adding devices, then run an analysis:
        circuit = Circuit()
        circuit.add_component(VoltageSource(1, 0, 5.0, 0))
        circuit.add_component(Resistor(1, 2, 1000.0))
        circuit.add_component(Resistor(2, 0, 2000.0))
        x = circuit.run_dc()

    Unknowns are ordered [V(1) .. V(num_nodes), I(vs_0) .. I(vs_M-1)].
    """

    def __init__(self, options: SolverOptions | None = None):
        self.options = options if options is not None else SolverOptions()
        self.components: list[Device] = []
        self._states: list[DeviceState] = []
        self.num_nodes = 0
        self.num_voltage_sources = 0

        self.A = jnp.zeros((0, 0))
        self.z = jnp.zeros(0)
        self.x = jnp.zeros(0)

        self.results = ResultHistory()
        self.convergence: list[StepStatus] = []

    @property
    def size(self) -> int:
        """Dimension of the MNA system."""
        return self.num_nodes + self.num_voltage_sources

    def add_component(self, device: Device) -> int:
        """
        Add a device. The circuit owns it from here on.

        Returns:
            Index of the device in insertion order (key for ``history``).
        """
        validate_device(device)
        self.num_nodes = max(self.num_nodes, *device_nodes(device))
        if is_voltage_source(device):
            self.num_voltage_sources += 1

        self.components.append(device)
        self._states.append(initial_state(device))
        return len(self.components) - 1

    def history(self, index: int) -> DeviceState:
        """History record of the device at ``index`` (None for stateless kinds)."""
        return self._states[index]

    def _junction_indices(self) -> list[int]:
        return [i for i, d in enumerate(self.components) if d.kind == "JJ"]

    def _resize(self) -> None:
        """Recount voltage sources and size x, keeping its content as the initial guess."""
        branches = sorted(d.branch_index for d in self.components if is_voltage_source(d))
        if branches != list(range(len(branches))):
            raise TopologyError(
                f"Voltage source branch indices must be 0..{len(branches) - 1} "
                f"with no gaps or repeats, got {branches}"
            )
        self.num_voltage_sources = len(branches)

        size = self.size
        if self.x.shape[0] != size:
            logger.debug("Resizing MNA system to %d (%d nodes, %d voltage sources)",
                         size, self.num_nodes, self.num_voltage_sources)
            x = jnp.zeros(size)
            keep = min(size, self.x.shape[0])
            self.x = x.at[:keep].set(self.x[:keep])

    def build_system(self) -> None:
        """
        Assemble A and z from scratch for the current device histories.

        A and z are recreated zero-filled; x is kept as the Newton seed.
        """
        self._resize()
        size = self.size
        A = jnp.zeros((size, size))
        z = jnp.zeros(size)
        for device, state in zip(self.components, self._states):
            A, z = stamp(device, state, A, z, self.num_voltage_sources)
        self.A = A
        self.z = z

    def _reset(self) -> None:
        """Zero every device history and the solution (t = 0 initial conditions)."""
        self._states = [initial_state(d) for d in self.components]
        self.x = jnp.zeros(self.size)

    def _begin_step(self) -> None:
        for i in self._junction_indices():
            self._states[i] = set_initial_nr_phase(self._states[i])

    def _advance_histories(self) -> None:
        self._states = [
            advance_history(d, s, self.x) for d, s in zip(self.components, self._states)
        ]

    def _check_time_step(self, time_step: float) -> None:
        if time_step <= 0:
            raise ValueError(f"time_step must be > 0, got {time_step}")
        for device in self.components:
            dt = getattr(device, "time_step", None)
            if dt is not None and not math.isclose(dt, time_step):
                logger.warning(
                    "%s between nodes %d and %d was discretized with dt=%g but the run uses dt=%g",
                    device.kind, device.node1, device.node2, dt, time_step,
                )

    def run_dc(self) -> Array:
        """
        Single assemble and solve.

        Returns:
            Solution vector x

        Raises:
            SingularMatrixError: floating node, no ground reference, or a
                voltage-source loop.
        """
        self.build_system()
        self.x = solve(self.A, self.z)
        return self.x

    def run_transient(self, end_time: float, time_step: float) -> None:
        """
        Fixed-step transient analysis from t = 0 while t < end_time.

        Each step: assemble from the previous step's history, solve, advance
        every device history from the new solution, store (t, x).
        """
        self._check_time_step(time_step)
        self.results.clear()
        self.convergence.clear()
        self._reset()

        n = 0
        t = 0.0
        while t < end_time:
            self._begin_step()
            self.build_system()
            self.x = solve(self.A, self.z)
            self._advance_histories()
            self.store_results(t)
            n += 1
            t = n * time_step

        logger.debug("Transient run finished: %d steps", len(self.results))

    def solve_nr(
        self,
        tolerance: float | None = None,
        max_iterations: int | None = None,
    ) -> NewtonResult:
        """
        Newton-Raphson iteration for the current time step.

        Every iteration re-linearizes the junctions around the latest phase:
        assemble, solve, measure sum(|x_new - x_old|), accept x_new, feed each
        junction's phase-node value back as its new estimate.

        Args:
            tolerance: L1 convergence threshold (default from options)
            max_iterations: Iteration bound (default from options). With 0 the
                current x is returned unconverged.

        Returns:
            NewtonResult with the last iterate; ``converged`` is False if the
            bound was reached first.
        """
        tol = self.options.tolerance if tolerance is None else tolerance
        max_iter = self.options.max_iterations if max_iterations is None else max_iterations
        junctions = self._junction_indices()

        self._resize()
        iterations = 0
        error = math.inf

        while iterations < max_iter and error > tol:
            self.build_system()
            x_new = solve(self.A, self.z)
            error = float(jnp.sum(jnp.abs(x_new - self.x)))
            self.x = x_new

            for i in junctions:
                phase = node_voltage(self.x, self.components[i].phase_node)
                self._states[i] = update_nr_phase(self._states[i], phase)

            iterations += 1

        return NewtonResult(self.x, error <= tol, iterations, error)

    def run_transient_jj(
        self,
        end_time: float,
        time_step: float,
        tolerance: float | None = None,
        max_iterations: int | None = None,
    ) -> bool:
        """
        Transient analysis with a Newton-Raphson solve per step for Josephson junctions.

        Per step: reset the junction phase estimates, iterate to convergence,
        commit junction voltage/phase and the other device histories, store
        (t, x). Non-convergence is logged and recorded in ``convergence``; the
        last iterate is kept and the run continues.

        Returns:
            True if every step converged.

        Raises:
            TopologyError: the circuit has no Josephson junction.
        """
        if not self._junction_indices():
            raise TopologyError("run_transient_jj needs a JosephsonJunction; use run_transient")
        self._check_time_step(time_step)
        self.results.clear()
        self.convergence.clear()
        self._reset()

        n = 0
        t = 0.0
        while t < end_time:
            self._begin_step()
            result = self.solve_nr(tolerance, max_iterations)
            if not result.converged:
                logger.warning(
                    "Newton-Raphson did not converge at time %g s (error=%g after %d iterations)",
                    t, result.error, result.iterations,
                )
            self.convergence.append(StepStatus(t, result.converged, result.iterations, result.error))

            self._advance_histories()
            self.store_results(t)
            n += 1
            t = n * time_step

        return all(s.converged for s in self.convergence)

    def store_results(self, t: float) -> None:
        """Append the current solution at time t."""
        self.results.append(t, self.x)

    def get_results(self) -> tuple[tuple[float, Array], ...]:
        """Read-only (time, solution) history of the last transient run."""
        return self.results.entries()

    def node_voltage(self, node: int, x: Array | None = None) -> float:
        """Voltage at ``node`` in ``x`` (default: current solution). Ground reads 0V."""
        if not 0 <= node <= self.num_nodes:
            raise IndexError(f"node {node} out of range 0..{self.num_nodes}")
        return node_voltage(self.x if x is None else x, node)

    def branch_current(self, branch_index: int, x: Array | None = None) -> float:
        """Current through the voltage source with ``branch_index``."""
        if not 0 <= branch_index < self.num_voltage_sources:
            raise IndexError(
                f"branch index {branch_index} out of range 0..{self.num_voltage_sources - 1}"
            )
        x = self.x if x is None else x
        return float(x[self.num_nodes + branch_index])

    def save_results_to_file(self, filename: str) -> bool:
        """
        Export the history as ``Time, Node1.., Current1..`` rows.

        Returns False (after logging) if the file cannot be written.
        """
        return write_results(filename, self.results, self.num_nodes, self.x.shape[0])

    def print_a(self) -> None:
        print("MNA Matrix (A):")
        for row in self.A.tolist():
            print(" ".join(f"{v:10.4g}" for v in row))

    def print_solution(self) -> None:
        print("Solution (x):")
        x = self.x.tolist()
        print("Node Voltages:")
        for i in range(min(self.num_nodes, len(x))):
            print(f"  Node {i + 1}: {x[i]:10.4g} V")
        print("Branch Currents:")
        for i in range(self.num_nodes, len(x)):
            print(f"  Current through voltage source {i - self.num_nodes + 1}: {x[i]:10.4g} A")
