"""Tests for LinearSystem construction and problem builders."""

import pytest
import jax.numpy as jnp

from jax_iterative.input_validation import DimensionMismatch, ValidationError
from jax_iterative.problems import (
    LinearSystem,
    diagonal_system,
    laplacian_1d,
    reference_system,
    system_from_config,
)


class TestLinearSystem:
    """Tests for LinearSystem validation."""

    def test_accepts_square_system(self):
        """Square A with matching b constructs."""
        system = LinearSystem(jnp.eye(3), jnp.ones(3))
        assert system.dim == 3
        assert system.a.shape == (3, 3)

    def test_converts_lists_to_arrays(self):
        """Nested lists are converted to JAX arrays."""
        system = LinearSystem([[2.0, 0.0], [0.0, 2.0]], [1.0, 1.0])
        assert isinstance(system.a, jnp.ndarray)
        assert system.b.shape == (2,)

    def test_promotes_integer_input(self):
        """Integer A and b become floating point."""
        system = LinearSystem([[4, 1], [1, 3]], [1, 2])
        assert jnp.issubdtype(system.a.dtype, jnp.floating)
        assert system.b.dtype == system.a.dtype
        assert jnp.array_equal(system.b, jnp.array([1.0, 2.0]))

    def test_rejects_non_square_matrix(self):
        """2x3 A with length-3 b is a dimension mismatch."""
        with pytest.raises(DimensionMismatch):
            LinearSystem(jnp.ones((2, 3)), jnp.ones(3))

    def test_rejects_wrong_rhs_length(self):
        """b must have the same length as A's dimension."""
        with pytest.raises(DimensionMismatch):
            LinearSystem(jnp.eye(3), jnp.ones(2))

    def test_rejects_matrix_rhs(self):
        """b must be a vector."""
        with pytest.raises(DimensionMismatch):
            LinearSystem(jnp.eye(3), jnp.ones((3, 1)))

    def test_rejects_vector_matrix(self):
        """A must be two-dimensional."""
        with pytest.raises(DimensionMismatch):
            LinearSystem(jnp.ones(3), jnp.ones(3))

    def test_dimension_mismatch_is_value_error(self):
        """DimensionMismatch is catchable as ValidationError and ValueError."""
        assert issubclass(DimensionMismatch, ValidationError)
        assert issubclass(DimensionMismatch, ValueError)

    def test_rejects_non_finite_entries(self):
        """NaN in problem data is rejected up front."""
        with pytest.raises(ValidationError):
            LinearSystem(jnp.array([[1.0, jnp.nan], [0.0, 1.0]]), jnp.ones(2))

    def test_does_not_check_definiteness(self):
        """Indefinite matrices are accepted; that is the caller's precondition."""
        system = LinearSystem(jnp.diag(jnp.array([1.0, -1.0])), jnp.ones(2))
        assert system.dim == 2

    def test_is_immutable(self):
        """Fields cannot be reassigned."""
        system = LinearSystem(jnp.eye(2), jnp.ones(2))
        with pytest.raises(AttributeError):
            system.b = jnp.zeros(2)

    def test_residual_and_cost(self):
        """residual is b - Ax; cost is 0.5 x.Ax - b.x."""
        system = LinearSystem(jnp.diag(jnp.array([2.0, 4.0])), jnp.array([2.0, 4.0]))
        x = jnp.array([1.0, 0.0])
        assert jnp.allclose(system.residual(x), jnp.array([0.0, 4.0]))
        assert system.cost(x) == pytest.approx(0.5 * 2.0 - 2.0)


class TestProblemBuilders:
    """Tests for standard test problems."""

    def test_reference_solution(self):
        """Reference system is solved by [-2/3, 4/3, -2/3]."""
        system = reference_system()
        x_true = jnp.array([-2.0 / 3.0, 4.0 / 3.0, -2.0 / 3.0])
        assert jnp.allclose(system.residual(x_true), 0.0, atol=1e-15)

    def test_reference_is_positive_definite(self):
        """All eigenvalues of the reference matrix are positive."""
        eigvals = jnp.linalg.eigvalsh(reference_system().a)
        assert jnp.all(eigvals > 0)

    def test_laplacian_default_rhs(self):
        """Default right-hand side makes arange(n) the solution."""
        system = laplacian_1d(6)
        assert jnp.allclose(system.residual(jnp.arange(6.0)), 0.0)
        assert float(system.a[0, 0]) == 2.0
        assert float(system.a[0, 1]) == -1.0

    def test_laplacian_rejects_zero_size(self):
        with pytest.raises(ValidationError):
            laplacian_1d(0)

    def test_diagonal_system(self):
        system = diagonal_system([2.0, 3.0], [4.0, 9.0])
        assert jnp.allclose(system.residual(jnp.array([2.0, 3.0])), 0.0)

    def test_from_config_explicit(self):
        """Explicit matrix/rhs config builds the system."""
        system = system_from_config({"matrix": [[4.0, 1.0], [1.0, 3.0]], "rhs": [1.0, 2.0]})
        assert system.dim == 2

    def test_from_config_generators(self):
        assert system_from_config({"generator": "reference"}).dim == 3
        assert system_from_config({"generator": "laplacian_1d", "n": 5}).dim == 5
        assert system_from_config(
            {"generator": "diagonal", "diag": [1.0, 2.0], "rhs": [1.0, 1.0]}
        ).dim == 2

    def test_from_config_mismatch_propagates(self):
        """Bad explicit data fails with DimensionMismatch."""
        with pytest.raises(DimensionMismatch):
            system_from_config({"matrix": [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], "rhs": [1.0, 1.0, 1.0]})

    def test_from_config_unknown_generator(self):
        with pytest.raises(ValueError, match="Unknown problem generator"):
            system_from_config({"generator": "poisson_3d"})

    def test_from_config_incomplete(self):
        with pytest.raises(ValidationError):
            system_from_config({"matrix": [[1.0]]})
