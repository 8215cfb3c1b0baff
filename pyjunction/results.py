"""Result history, Newton step status and delimited-text export."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, NamedTuple

import jax.numpy as jnp
from jax import Array

logger = logging.getLogger(__name__)


class StepStatus(NamedTuple):
    """Newton-Raphson outcome for one time step."""
    time: float
    converged: bool
    iterations: int
    error: float


class ResultHistory:
    """
    Append-only sequence of (time, solution) pairs in chronological order.

    Snapshots are JAX arrays, so stored entries cannot be mutated through
    the arrays handed out by ``entries()``.
    """

    def __init__(self):
        self._entries: list[tuple[float, Array]] = []

    def append(self, time: float, x: Array) -> None:
        self._entries.append((float(time), x))

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> tuple[tuple[float, Array], ...]:
        """Read-only view of the stored pairs."""
        return tuple(self._entries)

    def times(self) -> Array:
        return jnp.array([t for t, _ in self._entries])

    def snapshots(self) -> Array:
        """Stored solutions stacked as (n_steps, n_unknowns)."""
        if not self._entries:
            return jnp.zeros((0, 0))
        return jnp.stack([x for _, x in self._entries])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[float, Array]]:
        return iter(self.entries())

    def __getitem__(self, idx):
        return self._entries[idx]


def format_header(num_nodes: int, num_unknowns: int) -> str:
    """``Time, Node1..NodeN, Current1..CurrentM`` header line (no newline)."""
    cols = ["Time"]
    cols += [f"Node{i + 1}" for i in range(num_nodes)]
    cols += [f"Current{i + 1}" for i in range(num_unknowns - num_nodes)]
    return ", ".join(cols)


def format_row(time: float, x: Array) -> str:
    return ", ".join(f"{float(v):.12g}" for v in (time, *x.tolist()))


def write_results(
    path: str | Path,
    history: ResultHistory,
    num_nodes: int,
    num_unknowns: int,
) -> bool:
    """
    Write the history as a comma-space delimited table.

    Returns:
        True on success. On an I/O failure the error is logged and False is
        returned; the history is not touched.
    """
    try:
        with open(path, "w") as f:
            f.write(format_header(num_nodes, num_unknowns) + "\n")
            for t, x in history:
                f.write(format_row(t, x) + "\n")
    except OSError as e:
        logger.error("Could not open file %s for writing: %s", path, e)
        return False

    logger.debug("Wrote %d result rows to %s", len(history), path)
    return True
