"""Run-to-completion Conjugate Gradient built on the streaming cursor."""

from dataclasses import dataclass
import logging
from typing import Optional, Union
import jax.numpy as jnp
from jax import Array

from jax_iterative.methods.cg import ConjugateGradientState, NumericalBreakdown
from jax_iterative.problems import LinearSystem
from jax_iterative.utils.stop import StopCondition, Take, any_of, residual_below, terminal

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CGResult:
    """Result of Conjugate Gradient solve."""
    x: Array           # Solution
    converged: bool    # Did it converge?
    iterations: int    # Iterations used
    residual: float    # Final |r|/|b| from the cached residual
    breakdown: bool    # Did the curvature p.Ap vanish?


def conjugate_gradient(
    a: Union[Array, LinearSystem],
    b: Optional[Array] = None,
    x0: Optional[Array] = None,
    tol: float = 1e-10,
    max_iter: int = 1000,
    breakdown_tol: float = 1e-14,
    raise_on_breakdown: bool = False,
) -> CGResult:
    """Solve Ax = b using Conjugate Gradient.

    Drives a ConjugateGradientState through StopCondition and Take until
    the relative residual |r|/|b| drops below `tol`, the method reaches a
    terminal state, or `max_iter` steps have run.

    Args:
        a: Matrix A, or a LinearSystem (then `b` must be omitted)
        b: Right-hand side vector
        x0: Initial guess (defaults to zeros)
        tol: Convergence tolerance for relative residual |r|/|b|
        max_iter: Maximum iterations
        breakdown_tol: Relative curvature threshold for breakdown detection
        raise_on_breakdown: Raise NumericalBreakdown instead of returning

    Returns:
        CGResult with solution and convergence info
    """
    if isinstance(a, LinearSystem):
        if b is not None:
            raise ValueError("b must be omitted when a LinearSystem is given")
        problem = a
    else:
        if b is None:
            raise ValueError("b is required when A is given as a matrix")
        problem = LinearSystem(a, b)

    # Norm of b for relative residual
    b_norm = float(jnp.linalg.norm(problem.b))
    b_norm = b_norm if b_norm > 1e-14 else 1.0
    threshold = (tol * b_norm) ** 2

    cg = ConjugateGradientState(problem, initial_x=x0, breakdown_tol=breakdown_tol)
    chain = StopCondition(
        Take(cg, max_iter),
        any_of(residual_below(threshold), terminal()),
    )
    for _ in chain:
        pass

    rs = float(cg.rs)
    if cg.breakdown:
        message = f"CG breakdown after {cg.iteration} iterations"
        if raise_on_breakdown:
            raise NumericalBreakdown(message)
        log.warning(message)

    return CGResult(
        x=cg.x,
        converged=cg.converged or rs < threshold,
        iterations=cg.iteration,
        residual=float(jnp.sqrt(rs)) / b_norm,
        breakdown=cg.breakdown,
    )
