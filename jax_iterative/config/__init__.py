"""Configuration loading and management for jax-iterative."""

from jax_iterative.config.loader import load_config, save_config, SolveConfig

__all__ = ["load_config", "save_config", "SolveConfig"]
