"""Pytest fixtures for iterative solver tests."""
import pytest
import jax
import jax.numpy as jnp
import sys
from pathlib import Path

jax.config.update("jax_enable_x64", True)

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from jax_iterative.problems import LinearSystem, reference_system, laplacian_1d


@pytest.fixture
def reference():
    """3x3 SPD system with solution [-2/3, 4/3, -2/3]."""
    return reference_system()


@pytest.fixture
def laplacian():
    """12-point 1D Laplacian whose solution is arange(12)."""
    return laplacian_1d(12)


@pytest.fixture
def indefinite():
    """diag(1, -1) system whose first curvature p.Ap is exactly zero."""
    return LinearSystem(jnp.diag(jnp.array([1.0, -1.0])), jnp.array([1.0, 1.0]))
