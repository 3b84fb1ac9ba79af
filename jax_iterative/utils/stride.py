"""Sampling wrapper that surfaces every n-th step of a cursor."""

from jax_iterative.core.cursor import CursorWrapper, IterationCursor
from jax_iterative.input_validation import validate_positive


class Stride(CursorWrapper):
    """Advance the inner cursor `n` times per outer step.

    Only every n-th underlying state is surfaced. If the inner cursor runs
    out part-way through a stride, the remaining inner advances are skipped
    and the inner None is surfaced.

    Args:
        inner: Cursor to wrap
        n: Number of inner steps per outer step (>= 1)
    """

    def __init__(self, inner: IterationCursor, n: int):
        validate_positive(n, "n")
        super().__init__(inner)
        self.n = int(n)

    def advance(self) -> None:
        for _ in range(self.n):
            self.inner.advance()
            if self.inner.view() is None:
                return
