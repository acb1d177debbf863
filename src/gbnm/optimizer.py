# ===--------------------------------------------------------------------------------------===#
#
# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the restart loop of the globalized bounded Nelder-Mead optimizer.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Iterator, List, Optional

from dataclasses import dataclass, field
import logging
import random

from gbnm.budget import EvaluationBudget, Objective
from gbnm.config import OptimizerConfig
from gbnm.geometry import Bounds, Point
from gbnm.nelder_mead import RestartOutcome, Termination, run_restart, simplex_size
from gbnm.restart import probabilistic_restart


@dataclass(frozen=True)
class RestartRecord:
    """Summary of one completed restart.

    Attributes:
        initial_point: Starting point chosen by the probabilistic restart.
        value_at_initial_point: Objective value at ``initial_point``.
        best_point: Best point found by the restart.
        value_at_best_point: Objective value at ``best_point``.
        termination: Reason the restart stopped.
        iterations: Simplex iterations started during the restart.
        num_evals: Objective evaluations spent by the restart.
    """

    initial_point: Point
    value_at_initial_point: float
    best_point: Point
    value_at_best_point: float
    termination: Termination
    iterations: int
    num_evals: int

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}"
            "("
            f"initial_point=({self.initial_point.x:.3f},{self.initial_point.y:.3f}),"
            f"value_at_initial_point={self.value_at_initial_point:.6g},"
            f"best_point=({self.best_point.x:.3f},{self.best_point.y:.3f}),"
            f"value_at_best_point={self.value_at_best_point:.6g},"
            f"termination={self.termination.value},"
            f"num_evals={self.num_evals}"
            ")"
        )

    def to_dict(self) -> dict:
        return {
            "initial_point": self.initial_point.to_list(),
            "value_at_initial_point": float(self.value_at_initial_point),
            "best_point": self.best_point.to_list(),
            "value_at_best_point": float(self.value_at_best_point),
            "termination": self.termination.value,
            "iterations": self.iterations,
            "num_evals": self.num_evals,
        }


@dataclass
class OptimizationResult:
    """Ordered restart records of one optimization run.

    Attributes:
        restarts: One record per restart, in restart order.
        num_evals: Objective evaluations spent over the whole run.
        budget_exhausted: Whether the run stopped because the evaluation budget
            ran out rather than because every restart was used.
    """

    restarts: List[RestartRecord] = field(default_factory=list)
    num_evals: int = 0
    budget_exhausted: bool = False

    def __len__(self) -> int:
        return len(self.restarts)

    def __iter__(self) -> Iterator[RestartRecord]:
        return iter(self.restarts)

    def best(self) -> Optional[RestartRecord]:
        """Returns the record with the lowest best value, None if there is none."""
        if not self.restarts:
            return None
        return min(self.restarts, key=lambda record: record.value_at_best_point)

    def visited_points(self) -> List[Point]:
        """Initial and best points of every restart, used to steer the next restart."""
        points: List[Point] = []
        for record in self.restarts:
            points.append(record.best_point)
            points.append(record.initial_point)
        return points

    def to_dict(self) -> dict:
        return {
            "num_evals": self.num_evals,
            "budget_exhausted": self.budget_exhausted,
            "restarts": [record.to_dict() for record in self.restarts],
        }


def _record_from_outcome(outcome: RestartOutcome) -> RestartRecord:
    return RestartRecord(
        initial_point=outcome.initial_point,
        value_at_initial_point=outcome.value_at_initial_point,
        best_point=outcome.best_point,
        value_at_best_point=outcome.value_at_best_point,
        termination=outcome.termination,
        iterations=outcome.iterations,
        num_evals=outcome.num_evals,
    )


def minimize(
    objective: Objective,
    bounds: Bounds,
    config: Optional[OptimizerConfig] = None,
    random_state: Optional[random.Random] = None,
    logger: Optional[logging.Logger] = None,
) -> OptimizationResult:
    """Minimizes a 2D objective with restarted, bounded Nelder-Mead descents.

    Every restart starts from the point proposed by the probabilistic restart,
    which favours regions far from the initial and best points of previous
    restarts, and runs one Nelder-Mead descent from a randomly sized simplex.
    The run ends when ``config.max_restarts`` restarts are done or when the
    shared evaluation budget runs out, whichever comes first. Budget exhaustion
    is a normal way to finish: the restart in progress is recorded if its initial
    point was evaluated, and dropped otherwise.

    Args:
        objective: Function to minimize. Negate it to maximize.
        bounds: Search domain; must have a positive range along both axes.
        config: Optimizer tunables, defaults to OptimizerConfig().
        random_state: Random generator. When None, a new one is created and
            seeded with ``config.seed``.
        logger: Logger for progress messages, defaults to the "gbnm" logger.

    Returns:
        The OptimizationResult holding every recorded restart.

    Raises:
        ValueError: If ``bounds`` does not have a positive range.
    """
    config = config if config is not None else OptimizerConfig()
    logger = logger if logger is not None else logging.getLogger("gbnm")
    bounds.validate_search_domain()

    if random_state is None:
        random_state = random.Random()
        if config.seed is not None:
            random_state.seed(config.seed)

    budget: EvaluationBudget = EvaluationBudget(objective, config.max_evals, logger=logger)
    result: OptimizationResult = OptimizationResult()

    logger.info(f"Minimizing over {bounds} with {config}")
    for restart in range(1, config.max_restarts + 1):
        initial_point: Point = probabilistic_restart(
            result.visited_points(),
            bounds,
            config.random_points_per_restart,
            random_state,
            length=config.gaussian_length,
        )
        size: float = simplex_size(bounds, config, random_state)
        logger.info(f"Restart {restart} at {initial_point} with simplex size {size:.4g}.")

        outcome: RestartOutcome = run_restart(initial_point, size, budget, bounds, config, logger)
        if outcome.evaluated:
            record: RestartRecord = _record_from_outcome(outcome)
            result.restarts.append(record)
            logger.info(f"Restart {restart} done: {record}")

        if outcome.termination is Termination.BUDGET_EXHAUSTED:
            result.budget_exhausted = True
            logger.info(f"Evaluation budget of {config.max_evals} exhausted at restart {restart}.")
            break

    result.num_evals = budget.num_evals
    best: Optional[RestartRecord] = result.best()
    logger.info(
        f"Finished after {len(result)} restarts and {result.num_evals} evaluations. Best: {best}"
    )
    return result
