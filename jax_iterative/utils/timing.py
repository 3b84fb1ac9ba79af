"""Wall-clock timing of the algorithmic work in a cursor chain."""

from dataclasses import dataclass
import time
from typing import Any, Callable, Optional

from jax_iterative.core.cursor import CursorWrapper, IterationCursor


@dataclass(frozen=True)
class TimedView:
    """Inner view plus timing of the advance that produced it.

    Attributes:
        state: View returned by the wrapped cursor
        last: Seconds spent in the most recent inner advance
        total: Seconds accumulated over all inner advances
        steps: Number of timed advances so far
    """
    state: Any
    last: float
    total: float
    steps: int

    def __getattr__(self, name):
        # Fields not defined here are looked up on the wrapped view
        if name == "state":
            raise AttributeError(name)
        return getattr(self.state, name)

    def snapshot(self):
        return self.state.snapshot()


class Timed(CursorWrapper):
    """Measure only the inner `advance()` call.

    JAX dispatches asynchronously, so the clock stops after
    `block_until_ready()` on the inner chain. Reporting and I/O done by the
    caller between steps is never counted.

    Args:
        inner: Cursor to wrap
        clock: Monotonic clock returning seconds
    """

    def __init__(self, inner: IterationCursor,
                 clock: Callable[[], float] = time.perf_counter):
        super().__init__(inner)
        self.clock = clock
        self.last = 0.0
        self.total = 0.0
        self.steps = 0

    def advance(self) -> None:
        start = self.clock()
        self.inner.advance()
        self.inner.block_until_ready()
        self.last = self.clock() - start
        self.total += self.last
        self.steps += 1

    def view(self) -> Optional[TimedView]:
        state = self.inner.view()
        if state is None:
            return None
        return TimedView(state=state, last=self.last, total=self.total, steps=self.steps)
