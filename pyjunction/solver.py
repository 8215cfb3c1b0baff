"""Dense linear-solve adapter and circuit error types."""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.scipy.linalg import lu_factor, lu_solve


class CircuitError(Exception):
    """Base class for errors raised while assembling or solving a circuit."""


class TopologyError(CircuitError):
    """Netlist is inconsistent (bad node index, broken voltage-source numbering)."""


class SingularMatrixError(CircuitError):
    """MNA matrix is singular: floating node, missing ground, or a source loop."""


@jax.jit
def _lu_solve(A: Array, z: Array) -> tuple[Array, Array]:
    lu, piv = lu_factor(A)
    x = lu_solve((lu, piv), z)
    return x, jnp.min(jnp.abs(jnp.diag(lu)))


def pivot_tolerance(A: Array) -> float:
    """Smallest acceptable |U_ii|: n * eps * max|A_ij|."""
    n = A.shape[0]
    eps = float(jnp.finfo(A.dtype).eps)
    return n * eps * float(jnp.max(jnp.abs(A)))


def solve(A: Array, z: Array) -> Array:
    """
    Solve A x = z by LU factorization with partial pivoting.

    Args:
        A: Square MNA matrix (n, n)
        z: Right-hand side (n,)

    Returns:
        Solution vector x (n,)

    Raises:
        SingularMatrixError: if a pivot of U falls below ``pivot_tolerance(A)``
            or the solution comes back non-finite. A zero right-hand side on a
            floating block still raises.
    """
    if A.shape[0] == 0:
        return jnp.zeros(0, dtype=z.dtype)

    x, min_pivot = _lu_solve(A, z)
    min_pivot = float(min_pivot)
    tolerance = pivot_tolerance(A)
    if min_pivot <= tolerance:
        raise SingularMatrixError(
            f"MNA matrix of size {A.shape[0]} is singular "
            f"(smallest pivot {min_pivot:.3g} <= {tolerance:.3g}; check for "
            "floating nodes, a missing ground, or voltage-source loops)"
        )
    if not bool(jnp.all(jnp.isfinite(x))):
        raise SingularMatrixError(
            f"MNA matrix of size {A.shape[0]} produced a non-finite solution"
        )
    return x
