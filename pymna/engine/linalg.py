"""Dense Gaussian elimination with partial pivoting.

The kernel works on copies of G and rhs (the system's own matrix is
never factored in place) and is reused for AC analysis through the
real 2n x 2n embedding of a complex n x n system.

Near-singular pivots are regularized instead of failing: floating or
disconnected nodes get a tiny conductance to ground.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array

from .. import config
from .mna import MNASystem


@jax.jit
def gauss_solve(A: Array, b: Array) -> Array:
    """
    Solve A x = b by Gaussian elimination with partial pivoting.

    For each column the largest-magnitude entry on or below the diagonal
    is swapped into the pivot row. If that magnitude is below
    config.PIVOT_FLOOR, config.REGULARIZATION is added to the diagonal
    entry and the column is eliminated without a swap. A zero diagonal
    left after elimination yields 0 for that unknown.

    Args:
        A: (n, n) matrix
        b: (n,) right-hand side

    Returns:
        x: (n,) solution
    """
    n = A.shape[0]
    rows = jnp.arange(n)

    def eliminate(col, carry):
        A, b = carry
        magnitude = jnp.where(rows >= col, jnp.abs(A[:, col]), -1.0)
        pivot_row = jnp.argmax(magnitude)
        singular = magnitude[pivot_row] < config.PIVOT_FLOOR
        pivot_row = jnp.where(singular, col, pivot_row)
        A = A.at[col, col].add(jnp.where(singular, config.REGULARIZATION, 0.0))

        perm = rows.at[col].set(pivot_row).at[pivot_row].set(col)
        A = A[perm]
        b = b[perm]

        pivot = A[col, col]
        factors = jnp.where(rows > col, A[:, col] / pivot, 0.0)
        A = A - factors[:, None] * A[col][None, :]
        b = b - factors * b[col]
        return A, b

    A, b = jax.lax.fori_loop(0, n, eliminate, (A, b))

    def back_substitute(k, x):
        row = n - 1 - k
        # x[j] is still 0 for j <= row, so the full dot product is safe
        residual = b[row] - jnp.dot(A[row], x)
        diag = A[row, row]
        value = jnp.where(diag != 0, residual / jnp.where(diag != 0, diag, 1.0), 0.0)
        return x.at[row].set(value)

    return jax.lax.fori_loop(0, n, back_substitute, jnp.zeros_like(b))


def solve(system: MNASystem) -> MNASystem:
    """Solve the assembled system; the solution replaces system.x."""
    if system.size == 0:
        return system
    return system._replace(x=gauss_solve(system.G, system.rhs))


def solve_complex(Gr: Array, Gi: Array, br: Array, bi: Array) -> tuple[Array, Array]:
    """
    Solve (Gr + j Gi)(xr + j xi) = br + j bi with the real kernel.

    The complex system is embedded as
        [[Gr, -Gi], [Gi, Gr]] [xr; xi] = [br; bi]

    Returns:
        (xr, xi)
    """
    n = Gr.shape[0]
    if n == 0:
        return jnp.zeros(0), jnp.zeros(0)
    A = jnp.block([[Gr, -Gi], [Gi, Gr]])
    b = jnp.concatenate([br, bi])
    x = gauss_solve(A, b)
    return x[:n], x[n:]


@jax.jit
def residual(A: Array, x: Array, b: Array) -> Array:
    """
    max |A x - b| relative to max |b|.

    Regularized pivots make gauss_solve return an x that does not
    satisfy the unregularized system; this measures by how much.
    """
    scale = jnp.maximum(jnp.max(jnp.abs(b)), config.RESIDUAL_FLOOR)
    return jnp.max(jnp.abs(A @ x - b)) / scale
