"""Configuration loading and validation."""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import yaml

from jax_iterative.input_validation import (
    ValidationError,
    validate_non_negative,
    validate_positive,
)


def load_config(path: Union[str, Path]) -> dict:
    """Load configuration from YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r') as f:
        config = yaml.safe_load(f)

    return config


def save_config(config: dict, path: Union[str, Path]) -> None:
    """Save configuration to YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


@dataclass
class SolveConfig:
    """Solver settings for the `solver` block of a run config.

    Attributes:
        tol: Stop once the squared residual r.r drops below this
        max_iter: Maximum number of surfaced steps
        stride: Report every `stride`-th CG step
        breakdown_tol: Relative curvature threshold for breakdown detection
        checkpoint: Optional HDF5 checkpoint path
        checkpoint_every: Checkpoint after every N CG steps
        report_interval: Print every N surfaced steps
    """

    tol: float = 1e-10
    max_iter: int = 1000
    stride: int = 1
    breakdown_tol: float = 1e-14
    checkpoint: Optional[str] = None
    checkpoint_every: int = 1
    report_interval: int = 1

    def __post_init__(self):
        validate_non_negative(self.tol, "tol")
        validate_non_negative(self.max_iter, "max_iter")
        validate_positive(self.stride, "stride")
        validate_non_negative(self.breakdown_tol, "breakdown_tol")
        validate_positive(self.checkpoint_every, "checkpoint_every")
        validate_positive(self.report_interval, "report_interval")

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]]) -> "SolveConfig":
        """Build from a dict, rejecting unknown keys."""
        config = dict(config or {})
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise ValidationError(f"Unknown solver options: {sorted(unknown)}")
        converters = {
            "tol": float,
            "max_iter": int,
            "stride": int,
            "breakdown_tol": float,
            "checkpoint_every": int,
            "report_interval": int,
        }
        for key, convert in converters.items():
            if key in config:
                config[key] = convert(config[key])
        return cls(**config)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
