"""Conjugate Gradient as a streaming-state cursor.

The cursor owns the full CG recurrence state and advances it one step per
`advance()` call. Nothing here decides when to stop, reports progress or
touches the filesystem; those concerns live in the wrappers of
`jax_iterative.utils` and in the driver.
"""

from dataclasses import dataclass, fields
import logging
from typing import Optional
import jax
import jax.numpy as jnp
from jax import Array

from jax_iterative.core.cursor import IterationCursor
from jax_iterative.input_validation import validate_non_negative, validate_shape
from jax_iterative.problems import LinearSystem

log = logging.getLogger(__name__)


class NumericalBreakdown(ArithmeticError):
    """Raised by callers that escalate a CG breakdown flag to an error."""
    pass


@jax.jit
def _curvature(a: Array, p: Array):
    """Return (A p, p^T A p, p^T p)."""
    ap = jnp.dot(a, p)
    return ap, jnp.dot(p, ap), jnp.dot(p, p)


@jax.jit
def _cg_update(x: Array, r: Array, p: Array, rs: Array, ap: Array, pap: Array):
    """Apply one CG update given the cached A p and p^T A p."""
    alpha = rs / pap
    x = x + alpha * p
    r = r - alpha * ap
    rsprev = rs
    rs = jnp.dot(r, r)
    p = r + (rs / rsprev) * p
    return x, r, p, rs, rsprev, alpha


@dataclass(frozen=True)
class CGSnapshot:
    """Detached copy of the observable CG state at one step."""
    a: Array
    b: Array
    x: Array                 # Solution estimate
    r: Array                 # Residual, approximately b - A x
    p: Array                 # Search direction
    rs: Array                # r^T r for the current step
    rsprev: Optional[Array]  # r^T r for the previous step
    ap: Optional[Array]      # A p from the most recent step
    alpha: Optional[Array]   # Step length from the most recent step
    iteration: int
    converged: bool
    breakdown: bool


class CGView:
    """Read-only view bound to a ConjugateGradientState.

    Properties read the cursor's current arrays without copying. Use
    `snapshot()` to keep the values of a particular step.
    """

    __slots__ = ("_cursor",)

    def __init__(self, cursor: "ConjugateGradientState"):
        object.__setattr__(self, "_cursor", cursor)

    def __setattr__(self, name, value):
        raise AttributeError(f"CGView is read-only (tried to set {name!r})")

    def __delattr__(self, name):
        raise AttributeError(f"CGView is read-only (tried to delete {name!r})")

    a = property(lambda self: self._cursor.a)
    b = property(lambda self: self._cursor.b)
    x = property(lambda self: self._cursor.x)
    r = property(lambda self: self._cursor.r)
    p = property(lambda self: self._cursor.p)
    rs = property(lambda self: self._cursor.rs)
    rsprev = property(lambda self: self._cursor.rsprev)
    ap = property(lambda self: self._cursor.ap)
    alpha = property(lambda self: self._cursor.alpha)
    iteration = property(lambda self: self._cursor.iteration)
    converged = property(lambda self: self._cursor.converged)
    breakdown = property(lambda self: self._cursor.breakdown)

    @property
    def residual_norm(self) -> float:
        """Euclidean norm of the cached residual."""
        return float(jnp.sqrt(self.rs))

    def snapshot(self) -> CGSnapshot:
        """Copy the current state into a detached CGSnapshot.

        JAX arrays are immutable, so holding references is enough to keep
        the values of this step after the cursor moves on.
        """
        return CGSnapshot(**{f.name: getattr(self, f.name) for f in fields(CGSnapshot)})

    def __repr__(self) -> str:
        return (f"CGView(iteration={self.iteration}, rs={float(self.rs):.3e}, "
                f"converged={self.converged}, breakdown={self.breakdown})")


class ConjugateGradientState(IterationCursor):
    """Conjugate Gradient for symmetric positive-definite A x = b.

    Each `advance()` performs, in order:
        ap = A p
        alpha = rs / (p . ap)
        x = x + alpha p
        r = r - alpha ap
        rsprev = rs
        rs = r . r
        p = r + (rs / rsprev) p

    The residual is updated incrementally, so r drifts from b - A x under
    floating point. The cursor never stops on its own. Two terminal
    conditions freeze the state instead of raising:

    - converged: rs is exactly zero, so the next direction update would
      divide by zero.
    - breakdown: |p . A p| <= breakdown_tol * (p . p), i.e. the curvature
      along p vanished (non-PD or badly conditioned A).

    Args:
        problem: LinearSystem with (a, b)
        initial_x: Initial guess (defaults to zeros)
        breakdown_tol: Relative curvature threshold for breakdown detection
    """

    def __init__(
        self,
        problem: LinearSystem,
        initial_x: Optional[Array] = None,
        breakdown_tol: float = 1e-14,
    ):
        validate_non_negative(breakdown_tol, "breakdown_tol")
        self.problem = problem
        self.breakdown_tol = breakdown_tol
        self.a = problem.a
        self.b = problem.b

        if initial_x is None:
            self.x = jnp.zeros_like(self.b)
        else:
            self.x = jnp.asarray(initial_x, dtype=self.b.dtype)
            validate_shape(self.x, self.b.shape, "initial_x")

        self.r = self.b - jnp.dot(self.a, self.x)
        self.p = self.r
        self.rs = jnp.dot(self.r, self.r)
        self.rsprev = None
        self.ap = None
        self.alpha = None
        self.iteration = 0
        self.converged = float(self.rs) == 0.0
        self.breakdown = False

    @classmethod
    def from_system(cls, problem: LinearSystem, initial_x: Optional[Array] = None,
                    **kwargs) -> "ConjugateGradientState":
        return cls(problem, initial_x=initial_x, **kwargs)

    @classmethod
    def from_snapshot(cls, snapshot: CGSnapshot,
                      breakdown_tol: float = 1e-14) -> "ConjugateGradientState":
        """Rebuild a cursor that continues exactly where `snapshot` left off."""
        state = cls(LinearSystem(snapshot.a, snapshot.b), breakdown_tol=breakdown_tol)
        state.x = jnp.asarray(snapshot.x)
        state.r = jnp.asarray(snapshot.r)
        state.p = jnp.asarray(snapshot.p)
        state.rs = jnp.asarray(snapshot.rs)
        state.rsprev = None if snapshot.rsprev is None else jnp.asarray(snapshot.rsprev)
        state.ap = None if snapshot.ap is None else jnp.asarray(snapshot.ap)
        state.alpha = None if snapshot.alpha is None else jnp.asarray(snapshot.alpha)
        state.iteration = int(snapshot.iteration)
        state.converged = bool(snapshot.converged)
        state.breakdown = bool(snapshot.breakdown)
        return state

    @property
    def terminal(self) -> bool:
        return self.converged or self.breakdown

    def advance(self) -> None:
        if self.terminal:
            return
        if float(self.rs) == 0.0:
            self.converged = True
            log.debug(f"CG converged exactly at iteration {self.iteration}")
            return

        ap, pap, pp = _curvature(self.a, self.p)
        if not jnp.isfinite(pap) or abs(float(pap)) <= self.breakdown_tol * float(pp):
            self.ap = ap
            self.breakdown = True
            log.warning(
                f"CG breakdown at iteration {self.iteration}: "
                f"p.Ap={float(pap):.3e}, p.p={float(pp):.3e}"
            )
            return

        (self.x, self.r, self.p, self.rs,
         self.rsprev, self.alpha) = _cg_update(self.x, self.r, self.p, self.rs, ap, pap)
        self.ap = ap
        self.iteration += 1

    def view(self) -> CGView:
        return CGView(self)

    def block_until_ready(self) -> None:
        jax.block_until_ready((self.x, self.r, self.p, self.rs))
