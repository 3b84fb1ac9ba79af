"""Iterative methods implemented as streaming-state cursors."""

from jax_iterative.methods.cg import (
    ConjugateGradientState,
    CGView,
    CGSnapshot,
    NumericalBreakdown,
)

__all__ = [
    "ConjugateGradientState",
    "CGView",
    "CGSnapshot",
    "NumericalBreakdown",
]
