"""Diagnostics and output for iterative solves."""

from jax_iterative.diagnostics.report import format_report, ResidualReporter
from jax_iterative.diagnostics.output import (
    save_checkpoint,
    load_checkpoint,
    save_history,
    load_history,
)
from jax_iterative.diagnostics.plotting import plot_convergence

__all__ = [
    "format_report",
    "ResidualReporter",
    "save_checkpoint",
    "load_checkpoint",
    "save_history",
    "load_history",
    "plot_convergence",
]
