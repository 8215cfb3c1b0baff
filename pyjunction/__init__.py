"""pyjunction - JAX-based MNA circuit simulator with Josephson junctions.

Analyses:
    - DC: single assemble and solve
    - Transient: fixed-step companion models (backward Euler for C and L)
    - Junction transient: Newton-Raphson per step for Josephson junctions

Usage:
    from pyjunction import Circuit, Resistor, VoltageSource, Capacitor, ...
"""

import logging

from .config import SolverOptions, configure_precision, PHI_0

logger = logging.getLogger("pyjunction")

# Junction stamps need float64
configure_precision()

from .components import (  # noqa: E402
    Resistor,
    VoltageSource,
    Capacitor,
    Inductor,
    JosephsonJunction,
    CapacitorState,
    InductorState,
    JunctionState,
)
from .network import Circuit, NewtonResult  # noqa: E402
from .results import ResultHistory, StepStatus  # noqa: E402
from .solver import CircuitError, TopologyError, SingularMatrixError, solve  # noqa: E402

__version__ = "0.1.0"
__all__ = [
    # Devices
    "Resistor",
    "VoltageSource",
    "Capacitor",
    "Inductor",
    "JosephsonJunction",
    "CapacitorState",
    "InductorState",
    "JunctionState",
    # Simulation
    "Circuit",
    "NewtonResult",
    "ResultHistory",
    "StepStatus",
    "SolverOptions",
    "solve",
    # Errors
    "CircuitError",
    "TopologyError",
    "SingularMatrixError",
    # Config
    "PHI_0",
    "configure_precision",
    "__version__",
]
