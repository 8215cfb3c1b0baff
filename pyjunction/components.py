"""Circuit device definitions (immutable topology and history records).

Each device kind is a NamedTuple carrying its terminals and parameters.
Dynamic kinds have a matching history NamedTuple that the circuit keeps
next to the device and replaces after every completed step.

Node index 0 is ground and never owns a matrix row.
"""

from __future__ import annotations

from typing import NamedTuple, Union

from .solver import TopologyError


class Resistor(NamedTuple):
    """
    Linear resistor.

    Args:
        node1: First terminal
        node2: Second terminal
        resistance: Resistance in Ohms

    Example:
        r1 = Resistor(1, 2, 1000.0)  # 1 kΩ between nodes 1 and 2
    """
    node1: int
    node2: int
    resistance: float

    kind = "R"


class VoltageSource(NamedTuple):
    """
    Ideal DC voltage source.

    V(node1) - V(node2) = voltage. The branch current is an extra MNA
    unknown at slot ``branch_index`` after the node rows.

    Args:
        node1: Positive terminal
        node2: Negative terminal
        voltage: Voltage in Volts
        branch_index: 0-based index among the circuit's voltage sources

    Example:
        vs = VoltageSource(1, 0, 5.0, 0)  # 5V from node 1 to ground
    """
    node1: int
    node2: int
    voltage: float
    branch_index: int

    kind = "VSource"


class Capacitor(NamedTuple):
    """
    Capacitor (backward-Euler companion model).

    Args:
        node1: First terminal (positive for voltage reference)
        node2: Second terminal
        capacitance: Capacitance in Farads
        time_step: Discretization step in seconds
    """
    node1: int
    node2: int
    capacitance: float
    time_step: float

    kind = "C"


class Inductor(NamedTuple):
    """
    Inductor (backward-Euler companion model).

    Args:
        node1: First terminal (current reference flows node1 -> node2)
        node2: Second terminal
        inductance: Inductance in Henrys
        time_step: Discretization step in seconds
    """
    node1: int
    node2: int
    inductance: float
    time_step: float

    kind = "L"


class JosephsonJunction(NamedTuple):
    """
    Josephson junction in the resistively and capacitively shunted model.

    The junction phase is an unknown of its own, held at ``phase_node``.
    That index has no physical terminal; it only reserves a matrix row.

    Args:
        node1: First terminal
        node2: Second terminal
        phase_node: Extra node index for the phase variable
        critical_current: Critical current Ic in Amperes
        resistance: Shunt resistance in Ohms
        capacitance: Shunt capacitance in Farads
        time_step: Discretization step in seconds

    Example:
        jj = JosephsonJunction(1, 0, 2, 1e-6, 100.0, 1e-12, 1e-12)
    """
    node1: int
    node2: int
    phase_node: int
    critical_current: float
    resistance: float
    capacitance: float
    time_step: float

    kind = "JJ"


Device = Union[Resistor, VoltageSource, Capacitor, Inductor, JosephsonJunction]


class CapacitorState(NamedTuple):
    """Capacitor history: terminal voltage after the last completed step."""
    prev_voltage: float = 0.0


class InductorState(NamedTuple):
    """Inductor history: branch current (node1 -> node2) after the last completed step."""
    prev_current: float = 0.0


class JunctionState(NamedTuple):
    """
    Josephson junction history.

    Two layers: the ``prev_*`` fields advance once per time step, while
    ``nr_phase`` is the phase estimate refined by each Newton iteration.
    """
    prev_voltage: float = 0.0   # junction voltage, last step
    prev_voltage2: float = 0.0  # junction voltage, two steps back
    prev_dvoltage: float = 0.0  # dV/dt estimate
    prev_phase: float = 0.0     # converged phase, last step
    nr_phase: float = 0.0       # Newton phase estimate, current step


DeviceState = Union[CapacitorState, InductorState, JunctionState, None]


def initial_state(device: Device) -> DeviceState:
    """Zero history for a freshly added device (None for stateless kinds)."""
    if device.kind == "C":
        return CapacitorState()
    elif device.kind == "L":
        return InductorState()
    elif device.kind == "JJ":
        return JunctionState()
    return None


def device_nodes(device: Device) -> tuple[int, ...]:
    """All node indices a device occupies, including a junction's phase node."""
    if device.kind == "JJ":
        return (device.node1, device.node2, device.phase_node)
    return (device.node1, device.node2)


def validate_device(device: Device) -> None:
    """
    Check node indices and parameter ranges.

    Raises:
        TopologyError: negative node index, or a junction phase node that
            collides with one of its own terminals.
        ValueError: non-physical parameter value.
    """
    for idx in device_nodes(device):
        if idx < 0:
            raise TopologyError(f"{device.kind}: node index must be >= 0, got {idx}")

    if device.kind == "R":
        if device.resistance <= 0:
            raise ValueError(f"Resistance must be > 0, got {device.resistance}")
    elif device.kind == "VSource":
        if device.branch_index < 0:
            raise TopologyError(f"Voltage source branch index must be >= 0, got {device.branch_index}")
    elif device.kind == "C":
        if device.capacitance <= 0 or device.time_step <= 0:
            raise ValueError("Capacitance and time step must be > 0")
    elif device.kind == "L":
        if device.inductance <= 0 or device.time_step <= 0:
            raise ValueError("Inductance and time step must be > 0")
    elif device.kind == "JJ":
        if device.phase_node == 0 or device.phase_node in (device.node1, device.node2):
            raise TopologyError(
                f"Junction phase node must be a dedicated non-ground index, got {device.phase_node}"
            )
        if device.resistance <= 0 or device.time_step <= 0:
            raise ValueError("Junction resistance and time step must be > 0")
        if device.capacitance < 0:
            raise ValueError(f"Junction capacitance must be >= 0, got {device.capacitance}")
    else:
        raise ValueError(f"Unknown component kind: {device.kind}")
