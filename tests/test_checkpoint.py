"""Tests for HDF5 checkpointing and resume."""

import pytest
import jax.numpy as jnp

from jax_iterative.diagnostics.output import load_checkpoint, save_checkpoint
from jax_iterative.input_validation import ValidationError
from jax_iterative.methods.cg import ConjugateGradientState
from jax_iterative.utils.checkpoint import Checkpointed, resume_or_start
from jax_iterative.utils.stop import Take
from jax_iterative.utils.timing import Timed


class TestCheckpointFile:
    """Tests for save_checkpoint / load_checkpoint."""

    def test_round_trip_initial_state(self, reference, tmp_path):
        """Optional fields that are still None survive the round trip."""
        snap = ConjugateGradientState(reference).view().snapshot()
        path = tmp_path / "cg.h5"
        save_checkpoint(snap, path)

        loaded, metadata = load_checkpoint(path)
        assert loaded.iteration == 0
        assert loaded.rsprev is None
        assert loaded.ap is None
        assert loaded.alpha is None
        assert jnp.array_equal(loaded.b, reference.b)
        assert metadata == {}

    def test_round_trip_after_steps(self, laplacian, tmp_path):
        cg = ConjugateGradientState(laplacian)
        for _ in range(3):
            cg.advance()
        snap = cg.view().snapshot()
        path = tmp_path / "nested" / "cg.h5"
        save_checkpoint(snap, path)

        loaded, _ = load_checkpoint(path)
        assert loaded.iteration == 3
        assert not loaded.converged
        assert not loaded.breakdown
        for name in ("a", "b", "x", "r", "p", "ap"):
            assert jnp.array_equal(getattr(loaded, name), getattr(snap, name))
        for name in ("rs", "rsprev", "alpha"):
            assert float(getattr(loaded, name)) == float(getattr(snap, name))

    def test_metadata_round_trip(self, reference, tmp_path):
        snap = ConjugateGradientState(reference).view().snapshot()
        path = tmp_path / "cg.h5"
        save_checkpoint(snap, path, metadata={"name": "reference", "n": 3,
                                              "settings": {"tol": 1e-8}})
        _, metadata = load_checkpoint(path)
        assert metadata["name"] == "reference"
        assert metadata["n"] == 3
        assert metadata["settings"] == {"tol": 1e-8}

    def test_no_temp_file_left_behind(self, reference, tmp_path):
        snap = ConjugateGradientState(reference).view().snapshot()
        save_checkpoint(snap, tmp_path / "cg.h5")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["cg.h5"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_checkpoint(tmp_path / "missing.h5")


class TestCheckpointed:
    """Tests for the Checkpointed wrapper."""

    def test_writes_after_each_advance(self, laplacian, tmp_path):
        path = tmp_path / "cg.h5"
        cursor = Checkpointed(ConjugateGradientState(laplacian), path)
        assert not path.exists()
        for expected in (1, 2, 3):
            cursor.advance()
            snap, _ = load_checkpoint(path)
            assert snap.iteration == expected
        assert cursor.writes == 3

    def test_every_n(self, laplacian, tmp_path):
        path = tmp_path / "cg.h5"
        cursor = Checkpointed(ConjugateGradientState(laplacian), path, every=2)
        cursor.advance()
        assert not path.exists()
        cursor.advance()
        cursor.advance()
        snap, _ = load_checkpoint(path)
        assert snap.iteration == 2
        assert cursor.writes == 1

    def test_rejects_non_positive_every(self, laplacian, tmp_path):
        with pytest.raises(ValidationError):
            Checkpointed(ConjugateGradientState(laplacian), tmp_path / "cg.h5", every=0)

    def test_skips_exhausted_inner(self, laplacian, tmp_path):
        path = tmp_path / "cg.h5"
        cursor = Checkpointed(Take(ConjugateGradientState(laplacian), 1), path)
        cursor.advance()
        cursor.advance()
        assert cursor.writes == 1
        assert cursor.view() is None

    def test_view_passes_through(self, reference, tmp_path):
        cursor = Checkpointed(ConjugateGradientState(reference), tmp_path / "cg.h5")
        view = cursor.step()
        assert view.iteration == 1
        assert jnp.array_equal(view.x, jnp.array([0.0, 1.0, 0.0]))

    def test_wraps_timed_cursor(self, reference, tmp_path):
        path = tmp_path / "cg.h5"
        cursor = Checkpointed(Timed(ConjugateGradientState(reference)), path)
        cursor.advance()
        snap, _ = load_checkpoint(path)
        assert snap.iteration == 1

    def test_resume_matches_uninterrupted_run(self, laplacian, tmp_path):
        """Saving after step k and resuming reproduces steps k+1.. exactly."""
        straight = ConjugateGradientState(laplacian)
        expected = [straight.step().snapshot() for _ in range(7)]

        path = tmp_path / "cg.h5"
        first = Checkpointed(ConjugateGradientState(laplacian), path)
        for _ in range(4):
            first.advance()
        del first

        resumed = Checkpointed.resume(path)
        assert resumed.view().iteration == 4
        for snap in expected[4:]:
            view = resumed.step()
            assert view.iteration == snap.iteration
            assert jnp.array_equal(view.x, snap.x)
            assert jnp.array_equal(view.r, snap.r)
            assert jnp.array_equal(view.p, snap.p)
            assert jnp.array_equal(view.ap, snap.ap)
            assert float(view.rs) == float(snap.rs)
            assert float(view.alpha) == float(snap.alpha)

    def test_resume_keeps_metadata(self, reference, tmp_path):
        path = tmp_path / "cg.h5"
        cursor = Checkpointed(ConjugateGradientState(reference), path,
                              metadata={"name": "reference"})
        cursor.advance()
        resumed = Checkpointed.resume(path)
        assert resumed.metadata["name"] == "reference"

    def test_resume_or_start(self, reference, tmp_path):
        path = tmp_path / "cg.h5"
        fresh = resume_or_start(reference, path)
        assert fresh.view().iteration == 0
        fresh.advance()

        resumed = resume_or_start(reference, path)
        assert resumed.view().iteration == 1
        assert jnp.array_equal(resumed.view().x, jnp.array([0.0, 1.0, 0.0]))
