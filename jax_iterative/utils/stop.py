"""Stopping wrappers and predicates over observable solver state."""

from typing import Any, Callable, Optional

from jax_iterative.core.cursor import CursorWrapper, IterationCursor
from jax_iterative.input_validation import validate_non_negative

Predicate = Callable[[Any], bool]


class StopCondition(CursorWrapper):
    """Stop the inner sequence the first time `predicate(view)` holds.

    The step that satisfies the predicate is not surfaced: from then on
    `view()` returns None and `advance()` does nothing. An exhausted inner
    cursor stops the wrapper too. Once stopped, the wrapper never resumes.

    Args:
        inner: Cursor to wrap
        predicate: Function of the inner view returning True to stop
    """

    def __init__(self, inner: IterationCursor, predicate: Predicate):
        super().__init__(inner)
        self.predicate = predicate
        self.stopped = False

    def advance(self) -> None:
        if self.stopped:
            return
        self.inner.advance()
        state = self.inner.view()
        if state is None or self.predicate(state):
            self.stopped = True

    def view(self) -> Optional[Any]:
        if self.stopped:
            return None
        return self.inner.view()


class Take(CursorWrapper):
    """Surface at most `n` steps of the inner cursor."""

    def __init__(self, inner: IterationCursor, n: int):
        validate_non_negative(n, "n")
        super().__init__(inner)
        self.n = int(n)
        self.taken = 0

    @property
    def exhausted(self) -> bool:
        return self.taken > self.n

    def advance(self) -> None:
        if self.exhausted:
            return
        self.taken += 1
        if self.taken <= self.n:
            self.inner.advance()

    def view(self) -> Optional[Any]:
        if self.exhausted:
            return None
        return self.inner.view()


def residual_below(tol: float) -> Predicate:
    """True once the cached squared residual r.r drops below `tol`."""
    def predicate(state) -> bool:
        return float(state.rs) < tol
    return predicate


def terminal() -> Predicate:
    """True once the method reports convergence or breakdown."""
    def predicate(state) -> bool:
        return bool(state.converged or state.breakdown)
    return predicate


def any_of(*predicates: Predicate) -> Predicate:
    """Combine predicates; stop when any of them holds."""
    def predicate(state) -> bool:
        return any(p(state) for p in predicates)
    return predicate


def until_residual(inner: IterationCursor, tol: float) -> StopCondition:
    """Shorthand for StopCondition(inner, residual_below(tol))."""
    return StopCondition(inner, residual_below(tol))
