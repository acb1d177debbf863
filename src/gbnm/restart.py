# ===--------------------------------------------------------------------------------------===#
#
# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the probabilistic restart used to pick new starting points.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Iterable, List, Sequence

import math
import random

import numpy as np

from gbnm.geometry import Bounds, Point

DEFAULT_GAUSSIAN_LENGTH: float = 0.01


def gaussian_density(
    x: Point,
    visited: Sequence[Point],
    bounds: Bounds,
    length: float = DEFAULT_GAUSSIAN_LENGTH,
) -> float:
    """Evaluates a sum of isotropic Gaussians centered at the visited points.

    Distances are measured relative to the domain range on each axis, so the
    kernel width scales with the domain.

    Args:
        x: Where to evaluate the density.
        visited: Centers of the Gaussian kernels.
        bounds: Search domain, used to normalize distances.
        length: Gaussian length parameter.

    Returns:
        The density at ``x``; 0 when nothing has been visited.
    """
    if not visited:
        return 0.0

    extent: Point = bounds.range()
    centers: np.ndarray = np.array([[p.x, p.y] for p in visited], dtype=np.float64)
    ratio: np.ndarray = (np.array([x.x, x.y], dtype=np.float64) - centers) / np.array(
        [extent.x, extent.y], dtype=np.float64
    )
    exponent: np.ndarray = np.sum(ratio**2, axis=1) / (-2 * length)
    divisor: float = 2 * math.pi * length * extent.x * extent.y
    return float(np.sum(np.exp(exponent)) / divisor)


def probabilistic_restart(
    visited: Iterable[Point],
    bounds: Bounds,
    num_points: int,
    random_state: random.Random,
    length: float = DEFAULT_GAUSSIAN_LENGTH,
) -> Point:
    """Picks a restart point away from the regions searched so far.

    Draws ``num_points + 1`` uniform candidates in ``bounds`` and keeps the one
    with the lowest Gaussian density over the visited points. Ties keep the
    earliest candidate, so with no history the first draw is returned.

    Args:
        visited: Initial and best points of the previous restarts.
        bounds: Search domain.
        num_points: Number of extra candidates to draw.
        random_state: Source of the uniform draws.
        length: Gaussian length parameter.

    Returns:
        The least crowded candidate.
    """
    centers: List[Point] = list(visited)
    extent: Point = bounds.range()

    best_density: float = math.inf
    best_point: Point = bounds.min
    for _ in range(num_points + 1):
        candidate: Point = Point(
            bounds.min.x + extent.x * random_state.random(),
            bounds.min.y + extent.y * random_state.random(),
        )
        density: float = gaussian_density(candidate, centers, bounds, length)
        if density < best_density:
            best_density = density
            best_point = candidate

    return best_point
