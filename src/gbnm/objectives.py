# ===--------------------------------------------------------------------------------------===#
#
# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements benchmark surfaces for trying the optimizer out.
#
# ===--------------------------------------------------------------------------------------===#

"""Benchmark surfaces over the 512x512 plot used by the prospecting game.

All surfaces are written in the maximizing sense of the game where that is
natural (``peaks``); the CLI negates them with ``--maximize``.
"""

from typing import Callable, Dict, List, Tuple

import math

import numpy as np

from gbnm.geometry import Point

BOWL_CENTER: Point = Point(250.0, 250.0)

# (center_x, center_y, height, width) of the deposits in the peaks surface
PEAKS: List[Tuple[float, float, float, float]] = [
    (120.0, 380.0, 60.0, 40.0),
    (400.0, 140.0, 100.0, 25.0),
    (300.0, 420.0, 45.0, 60.0),
]


def bowl(p: Point) -> float:
    """Quadratic bowl with its minimum at (250, 250)."""
    return (p.x - BOWL_CENTER.x) ** 2 + (p.y - BOWL_CENTER.y) ** 2


def flat(p: Point) -> float:
    return 0.0


def peaks(p: Point) -> float:
    """Sum of Gaussian deposits; the tallest one sits at (400, 140)."""
    params: np.ndarray = np.array(PEAKS, dtype=np.float64)
    sq_dist: np.ndarray = (params[:, 0] - p.x) ** 2 + (params[:, 1] - p.y) ** 2
    return float(np.sum(params[:, 2] * np.exp(-sq_dist / (2 * params[:, 3] ** 2))))


def rounded(objective: Callable[[Point], float]) -> Callable[[Point], float]:
    """Evaluates ``objective`` at the nearest integer grid coordinate."""

    def wrapper(p: Point) -> float:
        return objective(Point(float(math.floor(p.x + 0.5)), float(math.floor(p.y + 0.5))))

    return wrapper


OBJECTIVES: Dict[str, Callable[[Point], float]] = {
    "bowl": bowl,
    "flat": flat,
    "peaks": peaks,
}


def get_objective(name: str) -> Callable[[Point], float]:
    try:
        return OBJECTIVES[name]
    except KeyError as err:
        raise ValueError(f"Unknown objective '{name}', expected one of {sorted(OBJECTIVES)}.") from err
