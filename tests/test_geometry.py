# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the 2D geometry primitives."""

import math
import random

import pytest

from gbnm.geometry import (
    Bounds,
    EvaluatedSimplex,
    Point,
    Simplex,
    sort_simplex,
    standard_deviation,
)


def test_point_arithmetic():
    a = Point(1.0, 2.0)
    b = Point(3.0, -4.0)

    assert a + b == Point(4.0, -2.0)
    assert a - b == Point(-2.0, 6.0)
    assert a * 2 == Point(2.0, 4.0)
    assert 2 * a == Point(2.0, 4.0)
    assert a * b == Point(3.0, -8.0)
    assert b / 2 == Point(1.5, -2.0)
    assert b / Point(3.0, 2.0) == Point(1.0, -2.0)
    assert tuple(a) == (1.0, 2.0)


class TestBounds:
    """Tests for clamping and extent of axis-aligned boxes."""

    bounds = Bounds(Point(-0.5, 10.0), Point(511.5, 20.0))

    def test_snap_is_noop_inside(self):
        p = Point(3.25, 15.0)
        assert self.bounds.snap_to_bounds(p) == p

    def test_snap_clamps_each_axis(self):
        assert self.bounds.snap_to_bounds(Point(-3.0, 25.0)) == Point(-0.5, 20.0)
        assert self.bounds.snap_to_bounds(Point(600.0, 12.0)) == Point(511.5, 12.0)

    def test_snap_always_lands_inside(self):
        rng = random.Random(7)
        for _ in range(200):
            p = Point(rng.uniform(-1000, 1000), rng.uniform(-1000, 1000))
            snapped = self.bounds.snap_to_bounds(p)
            assert self.bounds.contains(snapped)

    def test_range(self):
        assert self.bounds.range() == Point(512.0, 10.0)

    def test_min_above_max_is_rejected(self):
        with pytest.raises(ValueError):
            Bounds(Point(1.0, 0.0), Point(0.0, 1.0))

    def test_zero_extent_is_not_a_search_domain(self):
        flat = Bounds(Point(0.0, 0.0), Point(5.0, 0.0))
        with pytest.raises(ValueError):
            flat.validate_search_domain()
        self.bounds.validate_search_domain()


class TestSimplex:
    """Tests for simplex area, bounding box and sorting."""

    def test_area_of_right_triangle(self):
        s = Simplex(Point(0.0, 0.0), Point(4.0, 0.0), Point(0.0, 3.0))
        assert s.area() == pytest.approx(6.0)

    def test_area_is_unsigned(self):
        s = Simplex(Point(0.0, 0.0), Point(0.0, 3.0), Point(4.0, 0.0))
        assert s.area() == pytest.approx(6.0)

    def test_coincident_points_have_zero_area(self):
        s = Simplex(Point(1.5, 2.5), Point(1.5, 2.5), Point(9.0, -4.0))
        assert s.area() == 0.0

    def test_area_is_never_negative(self):
        rng = random.Random(3)
        for _ in range(100):
            s = Simplex(*(Point(rng.uniform(-10, 10), rng.uniform(-10, 10)) for _ in range(3)))
            assert s.area() >= 0

    def test_bounds(self):
        s = Simplex(Point(1.0, 5.0), Point(-2.0, 3.0), Point(4.0, 4.0))
        assert s.bounds() == Bounds(Point(-2.0, 3.0), Point(4.0, 5.0))

    def test_sort_orders_points_with_values(self):
        s = Simplex(Point(0.0, 0.0), Point(1.0, 0.0), Point(0.0, 1.0))
        v = EvaluatedSimplex(3.0, 1.0, 2.0)

        sorted_s, sorted_v = sort_simplex(s, v)

        assert sorted_s == Simplex(Point(1.0, 0.0), Point(0.0, 1.0), Point(0.0, 0.0))
        assert sorted_v == EvaluatedSimplex(1.0, 2.0, 3.0)

    def test_sort_is_stable(self):
        s = Simplex(Point(0.0, 0.0), Point(1.0, 0.0), Point(0.0, 1.0))
        v = EvaluatedSimplex(2.0, 1.0, 2.0)

        sorted_s, _ = sort_simplex(s, v)

        assert sorted_s == Simplex(Point(1.0, 0.0), Point(0.0, 0.0), Point(0.0, 1.0))

    def test_sort_is_idempotent(self):
        s = Simplex(Point(0.0, 0.0), Point(1.0, 0.0), Point(0.0, 1.0))
        v = EvaluatedSimplex(5.0, 5.0, -1.0)

        once = sort_simplex(s, v)
        twice = sort_simplex(*once)

        assert once == twice

    def test_sort_requires_values(self):
        s = Simplex(Point(0.0, 0.0), Point(1.0, 0.0), Point(0.0, 1.0))
        with pytest.raises(ValueError):
            sort_simplex(s, EvaluatedSimplex(1.0, None, 2.0))


def test_standard_deviation():
    assert standard_deviation(EvaluatedSimplex(4.0, 4.0, 4.0)) == 0.0
    assert standard_deviation(EvaluatedSimplex(1.0, 2.0, 3.0)) == pytest.approx(math.sqrt(2 / 3))
    assert standard_deviation(EvaluatedSimplex(1.0, None, 3.0)) == math.inf
    assert standard_deviation(EvaluatedSimplex(1.0, math.inf, 3.0)) == math.inf
