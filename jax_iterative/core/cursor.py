"""Streaming-state cursor contract for iterative methods."""

from abc import ABC, abstractmethod
from typing import Any, Iterator, Optional


class IterationCursor(ABC):
    """Pull-based, stateful cursor over the steps of an iterative method.

    A method implements `advance` (one unit of work, mutating internal state)
    and `view` (a read-only object reading that state in place). Callers and
    wrappers only ever see views; they never reach into method internals.

    The view shares storage with the cursor. It stays valid after the next
    `advance` but then shows the new state, so callers that need values
    across steps must take a snapshot.
    """

    @abstractmethod
    def advance(self) -> None:
        """Perform exactly one step of work."""
        raise NotImplementedError

    @abstractmethod
    def view(self) -> Optional[Any]:
        """Return a read-only view of the current state, or None if exhausted.

        Must not mutate state; repeated calls between advances are
        observably identical.
        """
        raise NotImplementedError

    def step(self) -> Optional[Any]:
        """Advance once and return the post-step view (None if exhausted)."""
        self.advance()
        return self.view()

    def block_until_ready(self) -> None:
        """Wait for any pending asynchronous computation in the state."""
        pass

    def __iter__(self) -> Iterator[Any]:
        while True:
            state = self.step()
            if state is None:
                return
            yield state


class CursorWrapper(IterationCursor):
    """Base for cursors that wrap exactly one inner cursor."""

    def __init__(self, inner: IterationCursor):
        self.inner = inner

    def advance(self) -> None:
        self.inner.advance()

    def view(self) -> Optional[Any]:
        return self.inner.view()

    def block_until_ready(self) -> None:
        self.inner.block_until_ready()
