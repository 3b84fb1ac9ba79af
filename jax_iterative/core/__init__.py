"""Core abstractions shared by all iterative methods."""

from jax_iterative.core.cursor import IterationCursor, CursorWrapper

__all__ = ["IterationCursor", "CursorWrapper"]
