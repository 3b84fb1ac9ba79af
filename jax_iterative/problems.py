"""Linear system problem descriptions and standard test problems."""

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Union
import jax.numpy as jnp
from jax import Array

from jax_iterative.input_validation import (
    DimensionMismatch,
    ValidationError,
    validate_finite,
    validate_positive,
    validate_shape,
    validate_square,
)


@dataclass(frozen=True)
class LinearSystem:
    """Problem data for A x = b.

    A is assumed symmetric positive-definite. That precondition is not
    checked: an indefinite A shows up as non-convergence or a breakdown
    flag on the solver state, never as a construction error.

    Attributes:
        a: Square matrix (n, n)
        b: Right-hand side (n,)
    """

    a: Array
    b: Array

    def __post_init__(self):
        # Integer input is promoted so iterates are never truncated
        a = jnp.asarray(self.a)
        b = jnp.asarray(self.b)
        dtype = jnp.result_type(a, b)
        if not jnp.issubdtype(dtype, jnp.inexact):
            dtype = jnp.result_type(float)
        a = a.astype(dtype)
        b = b.astype(dtype)
        n = validate_square(a, "a")
        if b.ndim != 1:
            raise DimensionMismatch(
                f"b must be a vector, got {b.ndim}D array of shape {b.shape}"
            )
        validate_shape(b, (n,), "b")
        validate_finite(a, "a")
        validate_finite(b, "b")
        # Frozen dataclass: bypass __setattr__ to store the converted arrays
        object.__setattr__(self, "a", a)
        object.__setattr__(self, "b", b)

    @property
    def dim(self) -> int:
        return self.b.shape[0]

    def residual(self, x: Array) -> Array:
        """Return b - A x."""
        return self.b - jnp.dot(self.a, x)

    def cost(self, x: Array) -> float:
        """Quadratic cost 0.5 x^T A x - b^T x minimised by the solution."""
        return float(0.5 * jnp.dot(x, jnp.dot(self.a, x)) - jnp.dot(self.b, x))


def reference_system() -> LinearSystem:
    """3x3 SPD system with exact solution [-2/3, 4/3, -2/3].

    Every entry is a dyadic rational, so the first CG steps from x0 = 0 are
    exact in binary floating point: step 1 lands on [0, 1, 0] and step 2 on
    the solution.
    """
    a = jnp.array([
        [0.5, 0.25, 0.0],
        [0.25, 1.0, 0.25],
        [0.0, 0.25, 0.5],
    ])
    b = jnp.array([0.0, 1.0, 0.0])
    return LinearSystem(a, b)


def laplacian_1d(n: int, b: Union[Array, Sequence[float], None] = None) -> LinearSystem:
    """Tridiagonal (-1, 2, -1) 1D Laplacian with Dirichlet boundaries.

    Args:
        n: Number of interior points
        b: Right-hand side; defaults to A @ arange(n) so the solution is known

    Returns:
        LinearSystem of dimension n
    """
    validate_positive(n, "n")
    a = (
        2.0 * jnp.eye(n)
        - jnp.eye(n, k=1)
        - jnp.eye(n, k=-1)
    )
    if b is None:
        b = jnp.dot(a, jnp.arange(n, dtype=a.dtype))
    return LinearSystem(a, jnp.asarray(b, dtype=a.dtype))


def diagonal_system(diag: Union[Array, Sequence[float]],
                    b: Union[Array, Sequence[float]]) -> LinearSystem:
    """Diagonal system diag(d) x = b."""
    return LinearSystem(jnp.diag(jnp.asarray(diag)), jnp.asarray(b))


def system_from_config(config: Dict[str, Any]) -> LinearSystem:
    """Build a LinearSystem from the `problem` block of a YAML config.

    Supported forms:
        {matrix: [[...]], rhs: [...]}
        {generator: reference}
        {generator: laplacian_1d, n: 10}
        {generator: diagonal, diag: [...], rhs: [...]}
    """
    generator = config.get("generator")
    if generator is None:
        if "matrix" not in config or "rhs" not in config:
            raise ValidationError("problem needs either 'generator' or both 'matrix' and 'rhs'")
        return LinearSystem(jnp.asarray(config["matrix"], dtype=float),
                            jnp.asarray(config["rhs"], dtype=float))
    if generator == "reference":
        return reference_system()
    if generator == "laplacian_1d":
        rhs = config.get("rhs")
        return laplacian_1d(int(config["n"]),
                            None if rhs is None else jnp.asarray(rhs, dtype=float))
    if generator == "diagonal":
        return diagonal_system(jnp.asarray(config["diag"], dtype=float),
                               jnp.asarray(config["rhs"], dtype=float))
    raise ValueError(f"Unknown problem generator: {generator}")
