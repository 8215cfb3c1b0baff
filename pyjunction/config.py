"""Default configuration values for pyjunction simulations.

Physical constants, Newton-Raphson defaults and solver options live here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import jax

logger = logging.getLogger(__name__)

# Magnetic flux quantum h/2e (Wb)
PHI_0 = 2.067833848e-15

# Newton-Raphson defaults for the junction solver
DEFAULT_NR_TOLERANCE = 1e-6
DEFAULT_NR_MAX_ITERATIONS = 100


@dataclass
class SolverOptions:
    """Newton-Raphson options used by ``Circuit.run_transient_jj``.

    Attributes:
        tolerance: Convergence threshold on the L1 norm of successive
            solution differences.
        max_iterations: Iteration bound per time step. Zero is allowed and
            reports non-convergence without solving.
    """

    tolerance: float = DEFAULT_NR_TOLERANCE
    max_iterations: int = DEFAULT_NR_MAX_ITERATIONS

    def __post_init__(self):
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")


def configure_precision(enable_x64: bool = True) -> bool:
    """Switch JAX between 64-bit and 32-bit floats.

    Junction stamps combine 2*pi/PHI_0 (~3e15) with microamp currents, so
    64-bit is the default. Call before building any circuit.

    Returns:
        True if x64 is enabled.
    """
    jax.config.update("jax_enable_x64", enable_x64)
    if enable_x64:
        logger.debug("Using 64-bit float precision")
    else:
        logger.warning("Using 32-bit float precision")
    return enable_x64
