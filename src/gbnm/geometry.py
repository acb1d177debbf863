# ===--------------------------------------------------------------------------------------===#
#
# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the 2D geometry primitives used by the simplex search.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Iterator, Optional, Tuple, Union

from dataclasses import dataclass
import math

import numpy as np

Scalar = Union[int, float]


@dataclass(frozen=True)
class Point:
    """A 2D vector with component-wise arithmetic.

    Multiplication and division accept either a scalar or another Point, in which
    case the operation is applied per component.

    Attributes:
        x: First coordinate.
        y: Second coordinate.
    """

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, other: Union["Point", Scalar]) -> "Point":
        if isinstance(other, Point):
            return Point(self.x * other.x, self.y * other.y)
        return Point(self.x * other, self.y * other)

    __rmul__ = __mul__

    def __truediv__(self, other: Union["Point", Scalar]) -> "Point":
        if isinstance(other, Point):
            return Point(self.x / other.x, self.y / other.y)
        return Point(self.x / other, self.y / other)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def to_list(self) -> list:
        return [float(self.x), float(self.y)]


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box delimited by a ``min`` and a ``max`` corner.

    The corners must satisfy ``min <= max`` component-wise. Whether the box has a
    strictly positive extent, which the optimizer requires, is checked separately
    by :meth:`validate_search_domain` so that degenerate boxes (e.g. the bounding
    box of a collapsed simplex) remain representable.

    Attributes:
        min: Lower-left corner.
        max: Upper-right corner.
    """

    min: Point
    max: Point

    def __post_init__(self) -> None:
        if self.min.x > self.max.x or self.min.y > self.max.y:
            raise ValueError(f"Bounds min {self.min} exceeds max {self.max}.")

    def snap_to_bounds(self, p: Point) -> Point:
        """Clamps each coordinate of ``p`` independently into the box."""
        return Point(
            max(min(p.x, self.max.x), self.min.x),
            max(min(p.y, self.max.y), self.min.y),
        )

    def range(self) -> Point:
        """Returns the extent of the box per axis."""
        return self.max - self.min

    def contains(self, p: Point) -> bool:
        return self.min.x <= p.x <= self.max.x and self.min.y <= p.y <= self.max.y

    def validate_search_domain(self) -> None:
        """Raises ValueError unless the box has a finite, strictly positive extent."""
        extent: Point = self.range()
        if not (self.min.is_finite() and self.max.is_finite()):
            raise ValueError(f"Search bounds must be finite, got {self}.")
        if extent.x <= 0 or extent.y <= 0:
            raise ValueError(f"Search bounds must have a positive range, got {extent}.")


@dataclass(frozen=True)
class Simplex:
    """A 2D simplex, i.e. a triangle given by three ordered vertices."""

    p1: Point
    p2: Point
    p3: Point

    def __iter__(self) -> Iterator[Point]:
        yield self.p1
        yield self.p2
        yield self.p3

    def bounds(self) -> Bounds:
        """Returns the tightest axis-aligned box containing the three vertices."""
        return Bounds(
            Point(min(self.p1.x, self.p2.x, self.p3.x), min(self.p1.y, self.p2.y, self.p3.y)),
            Point(max(self.p1.x, self.p2.x, self.p3.x), max(self.p1.y, self.p2.y, self.p3.y)),
        )

    def area(self) -> float:
        """Unsigned triangle area from the shoelace formula."""
        p1, p2, p3 = self.p1, self.p2, self.p3
        return abs((p1.x - p3.x) * (p2.y - p3.y) - (p2.x - p3.x) * (p1.y - p3.y)) / 2

    def replace(self, **vertices: Point) -> "Simplex":
        return Simplex(
            vertices.get("p1", self.p1), vertices.get("p2", self.p2), vertices.get("p3", self.p3)
        )


@dataclass(frozen=True)
class EvaluatedSimplex:
    """Objective values at the vertices of a :class:`Simplex`.

    A value of None marks a stale vertex, one that moved (during a shrink) and has
    not been evaluated at its new position yet.
    """

    v1: Optional[float]
    v2: Optional[float]
    v3: Optional[float]

    def __iter__(self) -> Iterator[Optional[float]]:
        yield self.v1
        yield self.v2
        yield self.v3

    def is_complete(self) -> bool:
        return all(v is not None for v in self)

    def replace(self, **values: Optional[float]) -> "EvaluatedSimplex":
        return EvaluatedSimplex(
            values.get("v1", self.v1), values.get("v2", self.v2), values.get("v3", self.v3)
        )


def sort_simplex(
    simplex: Simplex, values: EvaluatedSimplex
) -> Tuple[Simplex, EvaluatedSimplex]:
    """Orders a simplex and its values together from best (lowest) to worst.

    The sort is stable, so vertices with equal values keep their relative order.
    Every vertex must carry a value.

    Args:
        simplex: The simplex to reorder.
        values: The values at the simplex vertices, in the same order.

    Returns:
        A new (Simplex, EvaluatedSimplex) pair with p1 holding the lowest value and
        p3 the highest.
    """
    if not values.is_complete():
        raise ValueError("Cannot sort a simplex with unevaluated vertices.")

    ranked = sorted(zip(simplex, values), key=lambda pair: pair[1])
    return (
        Simplex(ranked[0][0], ranked[1][0], ranked[2][0]),
        EvaluatedSimplex(ranked[0][1], ranked[1][1], ranked[2][1]),
    )


def standard_deviation(values: EvaluatedSimplex) -> float:
    """Population standard deviation of the three vertex values.

    Returns +inf when a value is missing or not finite, so such a simplex never
    counts as flat.
    """
    if not values.is_complete() or not all(math.isfinite(v) for v in values):
        return math.inf
    return float(np.std(np.array(list(values), dtype=np.float64)))
