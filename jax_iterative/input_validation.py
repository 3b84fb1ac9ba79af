"""Input validation utilities for iterative solvers.

These functions provide runtime validation of problem data and solver
parameters to catch common errors early and provide helpful error messages.
"""

from typing import Tuple
import jax.numpy as jnp

Array = jnp.ndarray


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


class DimensionMismatch(ValidationError):
    """Raised when matrix and vector dimensions are inconsistent."""
    pass


def validate_positive(value: float, name: str) -> None:
    """Validate that a value is strictly positive.

    Args:
        value: The value to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If value <= 0
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")


def validate_non_negative(value: float, name: str) -> None:
    """Validate that a value is non-negative.

    Args:
        value: The value to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If value < 0
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")


def validate_square(matrix: Array, name: str = "a") -> int:
    """Validate that an array is a square matrix.

    Args:
        matrix: The array to check
        name: Array name for error messages

    Returns:
        The matrix dimension n for an (n, n) matrix

    Raises:
        DimensionMismatch: If matrix is not two-dimensional and square
    """
    if matrix.ndim != 2:
        raise DimensionMismatch(
            f"{name} must be a 2D matrix, got {matrix.ndim}D array of shape {matrix.shape}"
        )
    rows, cols = matrix.shape
    if rows != cols:
        raise DimensionMismatch(f"{name} must be square, got shape {matrix.shape}")
    return rows


def validate_shape(array: Array, expected_shape: Tuple[int, ...], name: str) -> None:
    """Validate that an array has the expected shape.

    Args:
        array: The array to check
        expected_shape: Expected shape tuple
        name: Array name for error messages

    Raises:
        DimensionMismatch: If shape doesn't match
    """
    if tuple(array.shape) != tuple(expected_shape):
        raise DimensionMismatch(
            f"{name} has wrong shape: expected {tuple(expected_shape)}, got {tuple(array.shape)}"
        )


def validate_finite(array: Array, name: str) -> None:
    """Validate that an array contains only finite values.

    Args:
        array: The array to check
        name: Array name for error messages

    Raises:
        ValidationError: If array contains NaN or Inf
    """
    if not jnp.all(jnp.isfinite(array)):
        n_nan = int(jnp.sum(jnp.isnan(array)))
        n_inf = int(jnp.sum(jnp.isinf(array)))
        raise ValidationError(
            f"{name} contains non-finite values: {n_nan} NaN, {n_inf} Inf"
        )
