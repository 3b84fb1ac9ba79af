"""Composable cursor wrappers: stopping, sampling, timing, checkpointing."""

from jax_iterative.utils.stop import (
    StopCondition,
    Take,
    residual_below,
    terminal,
    any_of,
    until_residual,
)
from jax_iterative.utils.stride import Stride
from jax_iterative.utils.timing import Timed, TimedView
from jax_iterative.utils.checkpoint import Checkpointed, resume_or_start

__all__ = [
    "StopCondition",
    "Take",
    "residual_below",
    "terminal",
    "any_of",
    "until_residual",
    "Stride",
    "Timed",
    "TimedView",
    "Checkpointed",
    "resume_or_start",
]
