"""Convergence plots for iterative solves."""

from typing import Any, Dict, Optional
import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt

from jax_iterative.diagnostics.file_output import save_figure


def plot_convergence(
    history: Dict[str, Any],
    save_dir: Optional[str] = None,
    show: bool = False,
    format: str = 'png',
    title: str = "Conjugate Gradient",
) -> plt.Figure:
    """Plot squared residual against iteration on a log axis.

    Args:
        history: Dict with 'iteration' and 'rs' sequences (see driver.run)
        save_dir: Directory to save plot, or None to skip saving
        show: Whether to display interactively
        format: Output format ('png', 'pdf', or 'both')
        title: Figure title

    Returns:
        Matplotlib Figure object
    """
    if not history.get('iteration'):
        raise ValueError("History has no iterations to plot")

    iterations = np.asarray(history['iteration'])
    rs = np.asarray(history['rs'], dtype=float)
    # Exact zeros cannot be drawn on a log axis
    rs = np.where(rs > 0, rs, np.nan)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.semilogy(iterations, rs, marker='o', linewidth=2)
    ax.set_xlabel("Iteration")
    ax.set_ylabel(r"$\|r\|_2^2$")
    ax.set_title(title)
    ax.grid(True, which='both', alpha=0.3)
    fig.tight_layout()

    if save_dir is not None:
        save_figure(fig, "convergence", save_dir, format=format)

    if show:
        plt.show()

    return fig
