"""jax-iterative: streaming-state iterative methods on JAX."""

__version__ = "0.1.0"

# Problem data and errors
from jax_iterative.input_validation import ValidationError, DimensionMismatch
from jax_iterative.problems import (
    LinearSystem,
    reference_system,
    laplacian_1d,
    diagonal_system,
    system_from_config,
)

# Cursor contract and methods
from jax_iterative.core.cursor import IterationCursor, CursorWrapper
from jax_iterative.methods.cg import (
    ConjugateGradientState,
    CGView,
    CGSnapshot,
    NumericalBreakdown,
)

# Wrappers
from jax_iterative.utils import (
    StopCondition,
    Take,
    Stride,
    Timed,
    Checkpointed,
    residual_below,
    terminal,
    any_of,
)

# Driving
from jax_iterative.driver import run, RunResult
from jax_iterative.solve import conjugate_gradient, CGResult

# Submodules for qualified imports
from jax_iterative import diagnostics
from jax_iterative import config

__all__ = [
    "ValidationError",
    "DimensionMismatch",
    "LinearSystem",
    "reference_system",
    "laplacian_1d",
    "diagonal_system",
    "system_from_config",
    "IterationCursor",
    "CursorWrapper",
    "ConjugateGradientState",
    "CGView",
    "CGSnapshot",
    "NumericalBreakdown",
    "StopCondition",
    "Take",
    "Stride",
    "Timed",
    "Checkpointed",
    "residual_below",
    "terminal",
    "any_of",
    "run",
    "RunResult",
    "conjugate_gradient",
    "CGResult",
    "diagnostics",
    "config",
]
