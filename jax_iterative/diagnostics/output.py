"""Checkpoint and history output for iterative solves."""

from dataclasses import fields
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import jax.numpy as jnp
import h5py
import numpy as np

from jax_iterative.methods.cg import CGSnapshot

log = logging.getLogger(__name__)

_SCALAR_ATTRS = ("iteration", "converged", "breakdown")


def save_checkpoint(snapshot: CGSnapshot, path: Union[str, Path],
                    metadata: Optional[Dict[str, Any]] = None) -> None:
    """Save a CG snapshot to an HDF5 checkpoint file.

    The file is written next to the target and then moved into place, so an
    interrupted write leaves the previous checkpoint intact.

    Args:
        snapshot: State to persist
        path: Output file path (.h5 or .hdf5)
        metadata: Optional metadata dictionary
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")

    with h5py.File(tmp_path, 'w') as f:
        state_grp = f.create_group('state')
        for field in fields(CGSnapshot):
            value = getattr(snapshot, field.name)
            if field.name in _SCALAR_ATTRS:
                state_grp.attrs[field.name] = value
            elif value is not None:
                state_grp.create_dataset(field.name, data=jnp.asarray(value))

        if metadata:
            meta_grp = f.create_group('metadata')
            for key, value in metadata.items():
                if isinstance(value, (int, float, str)):
                    meta_grp.attrs[key] = value
                else:
                    meta_grp.attrs[key] = json.dumps(value)

    os.replace(tmp_path, path)
    log.debug(f"Wrote checkpoint for iteration {snapshot.iteration} to {path}")


def load_checkpoint(path: Union[str, Path]) -> Tuple[CGSnapshot, Dict[str, Any]]:
    """Load a CG snapshot from an HDF5 checkpoint file.

    Args:
        path: Input file path

    Returns:
        Tuple of (snapshot, metadata)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Checkpoint not found: {path}")

    with h5py.File(path, 'r') as f:
        state_grp = f['state']
        values = {}
        for field in fields(CGSnapshot):
            if field.name in _SCALAR_ATTRS:
                continue
            if field.name in state_grp:
                values[field.name] = jnp.asarray(state_grp[field.name][()])
            else:
                values[field.name] = None
        snapshot = CGSnapshot(
            iteration=int(state_grp.attrs['iteration']),
            converged=bool(state_grp.attrs['converged']),
            breakdown=bool(state_grp.attrs['breakdown']),
            **values,
        )

        metadata = {}
        if 'metadata' in f:
            meta_grp = f['metadata']
            for key in meta_grp.attrs:
                value = meta_grp.attrs[key]
                if hasattr(value, 'item'):
                    value = value.item()
                if isinstance(value, str) and value.startswith('{'):
                    try:
                        value = json.loads(value)
                    except json.JSONDecodeError:
                        pass
                metadata[key] = value

    return snapshot, metadata


# Columns a solve history may carry, with the type of each entry
HISTORY_COLUMNS = {
    "iteration": int,
    "rs": float,
    "elapsed": float,
}
_REQUIRED_COLUMNS = ("iteration", "rs")


def _history_columns(history: Dict[str, Sequence[Any]]) -> List[str]:
    """Validate a history dict and return its columns in schema order."""
    unknown = sorted(set(history) - set(HISTORY_COLUMNS))
    if unknown:
        raise ValueError(f"Unknown history columns: {unknown}")
    missing = [c for c in _REQUIRED_COLUMNS if c not in history]
    if missing:
        raise ValueError(f"History is missing columns: {missing}")

    columns = [c for c in HISTORY_COLUMNS if c in history]
    lengths = {len(history[c]) for c in columns}
    if len(lengths) != 1:
        sizes = {c: len(history[c]) for c in columns}
        raise ValueError(f"History columns have different lengths: {sizes}")
    return columns


def save_history(history: Dict[str, Sequence[Any]], path: Union[str, Path],
                 format: str = "csv") -> None:
    """Save the per-step history recorded by the driver.

    Columns are written in the order iteration, rs, elapsed; `elapsed` is
    only present for timed runs. Floats keep full precision in both formats.

    Args:
        history: Dict of equal-length columns from `RunResult.history`
        path: Output file path
        format: "csv" or "json"
    """
    if format not in ("csv", "json"):
        raise ValueError(f"Unknown format: {format}. Use 'csv' or 'json'.")
    columns = _history_columns(history)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if format == "csv":
        data = np.column_stack([np.asarray(history[c], dtype=np.float64) for c in columns])
        fmt = ["%d" if HISTORY_COLUMNS[c] is int else "%.17g" for c in columns]
        np.savetxt(path, data.reshape(-1, len(columns)), delimiter=",", fmt=fmt,
                   header=",".join(columns), comments="")
    else:
        typed = {c: [HISTORY_COLUMNS[c](v) for v in history[c]] for c in columns}
        with open(path, 'w') as f:
            json.dump(typed, f, indent=2)
    log.debug(f"Wrote {len(history['iteration'])} history rows to {path}")


def load_history(path: Union[str, Path]) -> Dict[str, List[Any]]:
    """Load a history written by `save_history`.

    The format follows the file suffix (.csv or .json). Iterations come back
    as ints and the other columns as floats.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"History file not found: {path}")

    if path.suffix == '.json':
        with open(path, 'r') as f:
            raw = json.load(f)
    elif path.suffix == '.csv':
        with open(path, 'r') as f:
            header = f.readline().strip().split(',')
        data = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
        if data.size == 0:
            raw = {c: [] for c in header}
        else:
            raw = {c: data[:, i].tolist() for i, c in enumerate(header)}
    else:
        raise ValueError(f"Unknown file format: {path.suffix}")

    columns = _history_columns(raw)
    return {c: [HISTORY_COLUMNS[c](v) for v in raw[c]] for c in columns}
