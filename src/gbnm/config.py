# ===--------------------------------------------------------------------------------------===#
#
# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the optimizer configuration and its YAML loader.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Any, Dict, Optional, Tuple

from dataclasses import dataclass, fields
import math
import pathlib

import yaml

from gbnm.geometry import Bounds, Point

CONFIG_SECTION: str = "OPTIMIZER_CONFIG"
BOUNDS_SECTION: str = "BOUNDS"


class ConfigError(ValueError):
    """Raised when the optimizer configuration or the search bounds are malformed."""


@dataclass(frozen=True)
class OptimizerConfig:
    """Tunables of the restarted Nelder-Mead search.

    Attributes:
        max_restarts: Maximum number of restarts.
        max_evals: Maximum number of objective evaluations over the whole run.
        random_points_per_restart: Extra random candidates drawn when choosing a
            restart point (``random_points_per_restart + 1`` are drawn in total).
        max_iterations_per_restart: Maximum simplex iterations within one restart.
        alpha: Reflection coefficient.
        beta: Contraction coefficient.
        gamma: Expansion coefficient.
        epsilon: Flat simplex threshold on the standard deviation of vertex values.
        sigma: Small simplex threshold, as a fraction of the domain range.
        degenerate_area: Simplex area below which the simplex counts as collapsed.
            Absolute, in squared domain units.
        gaussian_length: Length parameter of the restart density kernel, relative
            to the domain range.
        min_size_fraction: Smallest initial simplex size, as a fraction of the
            shorter domain side.
        max_size_fraction: Largest initial simplex size, as a fraction of the
            shorter domain side. Must not be below min_size_fraction.
        seed: Seed for the random generator, None for an unseeded run.
    """

    max_restarts: int = 15
    max_evals: int = 2500
    random_points_per_restart: int = 5
    max_iterations_per_restart: int = 250
    alpha: float = 1.0
    beta: float = 0.5
    gamma: float = 2.0
    epsilon: float = 1e-9
    sigma: float = 5e-4
    degenerate_area: float = 2.0
    gaussian_length: float = 0.01
    min_size_fraction: float = 0.02
    max_size_fraction: float = 0.10
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        for name in (
            "max_restarts",
            "max_evals",
            "random_points_per_restart",
            "max_iterations_per_restart",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}.")
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}.")

        for name in (
            "alpha",
            "beta",
            "gamma",
            "epsilon",
            "sigma",
            "degenerate_area",
            "gaussian_length",
            "min_size_fraction",
            "max_size_fraction",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number, got {value!r}.")
            if not math.isfinite(value) or value <= 0:
                raise ConfigError(f"{name} must be positive and finite, got {value}.")

        if self.max_size_fraction < self.min_size_fraction:
            raise ConfigError(
                f"max_size_fraction ({self.max_size_fraction}) must not be below "
                f"min_size_fraction ({self.min_size_fraction})."
            )

        if self.seed is not None and not isinstance(self.seed, int):
            raise ConfigError(f"seed must be an integer or None, got {self.seed!r}.")


def config_from_dict(raw: Optional[Dict[str, Any]]) -> OptimizerConfig:
    """Builds an OptimizerConfig, falling back to defaults for missing keys.

    Raises:
        ConfigError: If ``raw`` holds unknown keys or invalid values.
    """
    raw = raw or {}
    known: set = {f.name for f in fields(OptimizerConfig)}
    unknown: set = set(raw) - known
    if unknown:
        raise ConfigError(f"Unknown {CONFIG_SECTION} keys: {sorted(unknown)}.")

    default_cfg: OptimizerConfig = OptimizerConfig()
    return OptimizerConfig(
        **{name: raw.get(name, getattr(default_cfg, name)) for name in sorted(known)}
    )


def _point_from_value(value: Any, key: str) -> Point:
    try:
        x, y = value
        return Point(float(x), float(y))
    except (TypeError, ValueError) as err:
        raise ConfigError(f"{BOUNDS_SECTION}.{key} must be a pair of numbers, got {value!r}.") from err


def bounds_from_dict(raw: Optional[Dict[str, Any]]) -> Bounds:
    """Builds search Bounds from a ``{"min": [x, y], "max": [x, y]}`` mapping.

    Raises:
        ConfigError: If a corner is missing or malformed, or if the box does not
            have a positive extent along both axes.
    """
    if not raw or "min" not in raw or "max" not in raw:
        raise ConfigError(f"{BOUNDS_SECTION} requires both 'min' and 'max'.")

    try:
        bounds: Bounds = Bounds(_point_from_value(raw["min"], "min"), _point_from_value(raw["max"], "max"))
        bounds.validate_search_domain()
    except ValueError as err:
        if isinstance(err, ConfigError):
            raise
        raise ConfigError(str(err)) from err

    return bounds


def load_config(cfg_path: str | pathlib.Path) -> Tuple[OptimizerConfig, Bounds]:
    """Loads the optimizer configuration and search bounds from a YAML file.

    The file holds an ``OPTIMIZER_CONFIG`` mapping of tunables and a ``BOUNDS``
    mapping with ``min`` and ``max`` corners.

    Args:
        cfg_path: Path to the .yaml config file.

    Returns:
        The parsed (OptimizerConfig, Bounds) pair.

    Raises:
        ConfigError: If the file content is malformed.
        OSError: If the file cannot be read.
    """
    with open(cfg_path, "r") as f:
        try:
            config: Any = yaml.safe_load(f)
        except yaml.YAMLError as err:
            raise ConfigError(f"Could not parse '{cfg_path}': {err}") from err

    if not isinstance(config, dict):
        raise ConfigError(f"'{cfg_path}' must contain a mapping.")

    return config_from_dict(config.get(CONFIG_SECTION)), bounds_from_dict(config.get(BOUNDS_SECTION))
