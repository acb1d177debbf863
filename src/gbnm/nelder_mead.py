# ===--------------------------------------------------------------------------------------===#
#
# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements a single bounded Nelder-Mead descent, i.e. one restart.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Optional, Tuple

from dataclasses import dataclass
from enum import Enum
import logging
import math
import random

from gbnm.budget import EvaluationBudget, Evaluation
from gbnm.config import OptimizerConfig
from gbnm.geometry import (
    Bounds,
    EvaluatedSimplex,
    Point,
    Simplex,
    sort_simplex,
    standard_deviation,
)

SQRT2: float = math.sqrt(2)
SQRT3: float = math.sqrt(3)


class Termination(Enum):
    """Why a restart stopped."""

    FLAT = "flat"
    SMALL = "small"
    DEGENERATE = "degenerate"
    MAX_ITERATIONS = "max_iterations"
    BUDGET_EXHAUSTED = "budget_exhausted"


@dataclass(frozen=True)
class RestartOutcome:
    """Result of one Nelder-Mead descent.

    The value and best point fields are None only when the budget ran out before
    the initial point could be evaluated.

    Attributes:
        initial_point: Where the descent started.
        value_at_initial_point: Objective value at ``initial_point``.
        best_point: Lowest-valued evaluated vertex when the descent stopped.
        value_at_best_point: Objective value at ``best_point``.
        termination: Reason the descent stopped.
        iterations: Number of iterations started.
        num_evals: Objective evaluations spent by this descent.
    """

    initial_point: Point
    value_at_initial_point: Optional[float]
    best_point: Optional[Point]
    value_at_best_point: Optional[float]
    termination: Termination
    iterations: int
    num_evals: int

    @property
    def evaluated(self) -> bool:
        return self.value_at_initial_point is not None


def simplex_size(bounds: Bounds, config: OptimizerConfig, random_state: random.Random) -> float:
    """Draws the initial simplex size as a random fraction of the shorter domain side."""
    extent: Point = bounds.range()
    span: float = config.max_size_fraction - config.min_size_fraction
    fraction: float = config.min_size_fraction + span * random_state.random()
    return fraction * min(extent.x, extent.y)


def initial_simplex_around_point(p1: Point, a: float, bounds: Bounds) -> Simplex:
    """Builds a regular simplex of edge length ``a`` with ``p1`` as first vertex.

    The two other vertices are clamped into ``bounds``, which may shrink or
    flatten the simplex near the domain border.
    """
    p: float = a * (SQRT3 + 1) / (2 * SQRT2)
    q: float = a * (SQRT3 - 1) / (2 * SQRT2)
    return Simplex(
        p1,
        bounds.snap_to_bounds(Point(p1.x + p, p1.y + q)),
        bounds.snap_to_bounds(Point(p1.x + q, p1.y + p)),
    )


def _evaluate_stale_vertices(
    simplex: Simplex, values: EvaluatedSimplex, budget: EvaluationBudget
) -> Tuple[EvaluatedSimplex, bool]:
    """Evaluates every vertex without a value, in vertex order.

    Returns the updated values and whether the budget ran out. Values obtained
    before the budget ran out are kept.
    """
    for name, point, value in zip(("v1", "v2", "v3"), simplex, values):
        if value is not None:
            continue
        evaluation: Evaluation = budget.evaluate(point)
        if evaluation.exhausted:
            return values, True
        values = values.replace(**{name: evaluation.value})
    return values, False


def _convergence_check(
    simplex: Simplex, values: EvaluatedSimplex, extent: Point, config: OptimizerConfig
) -> Optional[Termination]:
    if standard_deviation(values) < config.epsilon:
        return Termination.FLAT

    box: Bounds = simplex.bounds()
    box_extent: Point = box.range()
    if max(box_extent.x / extent.x, box_extent.y / extent.y) < config.sigma:
        return Termination.SMALL

    if simplex.area() < config.degenerate_area:
        return Termination.DEGENERATE

    return None


def _transform(
    simplex: Simplex,
    values: EvaluatedSimplex,
    budget: EvaluationBudget,
    bounds: Bounds,
    config: OptimizerConfig,
    logger: logging.Logger,
) -> Tuple[Simplex, EvaluatedSimplex, bool]:
    """Applies one reflect/expand/contract/shrink step to a sorted simplex.

    Returns the new simplex, its values (None for vertices moved by a shrink) and
    whether the budget ran out during the step.
    """
    best, middle, worst = simplex
    centroid: Point = (best + middle) / 2

    reflection: Point = bounds.snap_to_bounds(centroid + (centroid - worst) * config.alpha)
    evaluation: Evaluation = budget.evaluate(reflection)
    if evaluation.exhausted:
        return simplex, values, True
    value_at_reflection: float = evaluation.value

    if value_at_reflection < values.v1:
        expansion: Point = bounds.snap_to_bounds(centroid + (reflection - centroid) * config.gamma)
        evaluation = budget.evaluate(expansion)
        if evaluation.exhausted:
            # the reflection is already known to beat the best vertex
            return simplex.replace(p3=reflection), values.replace(v3=value_at_reflection), True

        if evaluation.value < value_at_reflection:
            logger.debug(f"Expansion to {expansion} ({evaluation.value}).")
            return simplex.replace(p3=expansion), values.replace(v3=evaluation.value), False

        logger.debug(f"Reflection to {reflection} ({value_at_reflection}), expansion rejected.")
        return simplex.replace(p3=reflection), values.replace(v3=value_at_reflection), False

    if value_at_reflection <= values.v2:
        logger.debug(f"Reflection to {reflection} ({value_at_reflection}).")
        return simplex.replace(p3=reflection), values.replace(v3=value_at_reflection), False

    # first stage: a reflection that beats the worst vertex replaces it provisionally
    if value_at_reflection < values.v3:
        simplex = simplex.replace(p3=reflection)
        values = values.replace(v3=value_at_reflection)

    # second stage: contract the original worst vertex towards the centroid
    contraction: Point = centroid + (worst - centroid) * config.beta
    evaluation = budget.evaluate(contraction)
    if evaluation.exhausted:
        return simplex, values, True

    if evaluation.value <= values.v2:
        logger.debug(f"Contraction to {contraction} ({evaluation.value}).")
        return simplex.replace(p3=contraction), values.replace(v3=evaluation.value), False

    logger.debug(f"Shrinking towards {best}.")
    shrunk: Simplex = simplex.replace(p2=(simplex.p2 + best) / 2, p3=(simplex.p3 + best) / 2)
    return shrunk, values.replace(v2=None, v3=None), False


def _best_vertex(
    simplex: Simplex, values: EvaluatedSimplex
) -> Tuple[Optional[Point], Optional[float]]:
    best_point: Optional[Point] = None
    best_value: Optional[float] = None
    for point, value in zip(simplex, values):
        if value is not None and (best_value is None or value < best_value):
            best_point, best_value = point, value
    return best_point, best_value


def run_restart(
    initial_point: Point,
    size: float,
    budget: EvaluationBudget,
    bounds: Bounds,
    config: OptimizerConfig,
    logger: Optional[logging.Logger] = None,
) -> RestartOutcome:
    """Runs one bounded Nelder-Mead descent from ``initial_point``.

    Each iteration evaluates the vertices lacking a value, sorts the simplex from
    best to worst, checks the flat, small and degenerate simplex tests in that
    order, then transforms the simplex. The descent stops on the first test that
    fires, after ``config.max_iterations_per_restart`` iterations, or as soon as
    the shared budget runs out.

    Args:
        initial_point: First vertex of the initial simplex.
        size: Edge length of the initial simplex.
        budget: Evaluation budget shared across the run.
        bounds: Search domain.
        config: Optimizer tunables.
        logger: Logger for per-iteration details.

    Returns:
        A RestartOutcome describing the descent.
    """
    logger = logger if logger is not None else logging.getLogger(__name__)
    extent: Point = bounds.range()
    evals_at_start: int = budget.num_evals

    simplex: Simplex = initial_simplex_around_point(initial_point, size, bounds)
    values: EvaluatedSimplex = EvaluatedSimplex(None, None, None)
    value_at_initial_point: Optional[float] = None

    def outcome(termination: Termination, iterations: int) -> RestartOutcome:
        best_point, best_value = _best_vertex(simplex, values)
        return RestartOutcome(
            initial_point=initial_point,
            value_at_initial_point=value_at_initial_point,
            best_point=best_point,
            value_at_best_point=best_value,
            termination=termination,
            iterations=iterations,
            num_evals=budget.num_evals - evals_at_start,
        )

    for iteration in range(1, config.max_iterations_per_restart + 1):
        values, exhausted = _evaluate_stale_vertices(simplex, values, budget)
        if iteration == 1:
            value_at_initial_point = values.v1
        if exhausted:
            return outcome(Termination.BUDGET_EXHAUSTED, iteration)

        simplex, values = sort_simplex(simplex, values)
        logger.debug(
            f"Iteration {iteration}: best={simplex.p1} ({values.v1}), "
            f"spread={standard_deviation(values):.6g}, area={simplex.area():.6g}"
        )

        termination: Optional[Termination] = _convergence_check(simplex, values, extent, config)
        if termination is not None:
            logger.debug(f"Stopping restart: {termination.value} simplex.")
            return outcome(termination, iteration)

        simplex, values, exhausted = _transform(simplex, values, budget, bounds, config, logger)
        if exhausted:
            return outcome(Termination.BUDGET_EXHAUSTED, iteration)

    return outcome(Termination.MAX_ITERATIONS, config.max_iterations_per_restart)
