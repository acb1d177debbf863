# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the probabilistic restart."""

import math
import random

import pytest

from gbnm.geometry import Bounds, Point
from gbnm.restart import gaussian_density, probabilistic_restart

BOUNDS = Bounds(Point(0.0, 0.0), Point(511.0, 511.0))


def _draw_candidates(seed: int, count: int):
    rng = random.Random(seed)
    extent = BOUNDS.range()
    return [
        Point(BOUNDS.min.x + extent.x * rng.random(), BOUNDS.min.y + extent.y * rng.random())
        for _ in range(count)
    ]


def test_density_without_history_is_zero():
    assert gaussian_density(Point(10.0, 10.0), [], BOUNDS) == 0.0


def test_density_peak_is_normalized():
    center = Point(100.0, 200.0)
    expected = 1 / (2 * math.pi * 0.01 * 511.0 * 511.0)
    assert gaussian_density(center, [center], BOUNDS) == pytest.approx(expected)
    assert gaussian_density(center, [center, center], BOUNDS) == pytest.approx(2 * expected)


def test_density_decreases_with_distance():
    visited = [Point(50.0, 50.0)]
    near = gaussian_density(Point(60.0, 60.0), visited, BOUNDS)
    far = gaussian_density(Point(400.0, 400.0), visited, BOUNDS)
    assert near > far > 0


def test_first_candidate_is_selected_without_history():
    expected = _draw_candidates(seed=11, count=1)[0]
    chosen = probabilistic_restart([], BOUNDS, num_points=5, random_state=random.Random(11))
    assert chosen == expected


def test_draws_num_points_plus_one_candidates():
    rng = random.Random(5)
    probabilistic_restart([], BOUNDS, num_points=3, random_state=rng)

    reference = random.Random(5)
    for _ in range(2 * 4):
        reference.random()
    assert rng.random() == reference.random()


def test_least_crowded_candidate_is_selected():
    visited = [Point(10.0, 10.0), Point(12.0, 8.0)]
    candidates = _draw_candidates(seed=2, count=31)
    expected = min(candidates, key=lambda c: gaussian_density(c, visited, BOUNDS))

    chosen = probabilistic_restart(visited, BOUNDS, num_points=30, random_state=random.Random(2))

    assert chosen == expected
    assert BOUNDS.contains(chosen)
    assert chosen.distance_to(Point(10.0, 10.0)) > 200
