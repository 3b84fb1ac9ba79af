"""Checkpointing wrapper that persists state after every step."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jax_iterative.core.cursor import CursorWrapper, IterationCursor
from jax_iterative.diagnostics.output import load_checkpoint, save_checkpoint
from jax_iterative.input_validation import validate_positive
from jax_iterative.methods.cg import ConjugateGradientState

log = logging.getLogger(__name__)


class Checkpointed(CursorWrapper):
    """Write the observable state to an HDF5 file after inner advances.

    With `every=1` a crash between steps loses at most one step. The write
    happens inside `advance()`, so it completes before the caller sees the
    new state. Nothing is written once the inner cursor is exhausted.

    Args:
        inner: Cursor whose views provide `snapshot()`
        path: Checkpoint file path
        every: Write after every `every`-th advance
        metadata: Extra attributes stored with each checkpoint
    """

    def __init__(self, inner: IterationCursor, path: Union[str, Path],
                 every: int = 1, metadata: Optional[Dict[str, Any]] = None):
        validate_positive(every, "every")
        super().__init__(inner)
        self.path = Path(path)
        self.every = int(every)
        self.metadata = dict(metadata or {})
        self.advances = 0
        self.writes = 0

    def advance(self) -> None:
        self.inner.advance()
        self.advances += 1
        if self.advances % self.every != 0:
            return
        state = self.inner.view()
        if state is None:
            return
        save_checkpoint(state.snapshot(), self.path, metadata=self.metadata)
        self.writes += 1

    @classmethod
    def resume(cls, path: Union[str, Path], every: int = 1,
               breakdown_tol: float = 1e-14,
               metadata: Optional[Dict[str, Any]] = None) -> "Checkpointed":
        """Rebuild a checkpointed CG cursor from the file at `path`."""
        snapshot, stored = load_checkpoint(path)
        log.info(f"Resuming from {path} at iteration {snapshot.iteration}")
        inner = ConjugateGradientState.from_snapshot(snapshot, breakdown_tol=breakdown_tol)
        merged = dict(stored)
        merged.update(metadata or {})
        return cls(inner, path, every=every, metadata=merged)


def resume_or_start(problem, path: Union[str, Path], initial_x=None,
                    every: int = 1, breakdown_tol: float = 1e-14) -> Checkpointed:
    """Resume from `path` if a checkpoint exists, otherwise start fresh."""
    if Path(path).exists():
        return Checkpointed.resume(path, every=every, breakdown_tol=breakdown_tol)
    inner = ConjugateGradientState(problem, initial_x=initial_x, breakdown_tol=breakdown_tol)
    return Checkpointed(inner, path, every=every)
