"""File output management for diagnostic plots."""

import os

import matplotlib.pyplot as plt


def save_figure(
    fig: plt.Figure,
    name: str,
    directory: str,
    format: str = 'png',
    dpi: int = 150
) -> str:
    """Save a matplotlib figure with consistent settings.

    Args:
        fig: Matplotlib figure to save
        name: Base name for the file (without extension)
        directory: Directory to save in
        format: Output format ('png', 'pdf', or 'both')
        dpi: Resolution for raster formats

    Returns:
        Path to saved file (or first file if 'both').
    """
    if format not in ('png', 'pdf', 'both'):
        raise ValueError(f"Unknown figure format: {format}")

    os.makedirs(directory, exist_ok=True)
    paths = []

    if format in ('png', 'both'):
        path = os.path.join(directory, f"{name}.png")
        fig.savefig(path, dpi=dpi, bbox_inches='tight')
        paths.append(path)

    if format in ('pdf', 'both'):
        path = os.path.join(directory, f"{name}.pdf")
        fig.savefig(path, bbox_inches='tight')
        paths.append(path)

    return paths[0]
