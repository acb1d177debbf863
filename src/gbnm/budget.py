# ===--------------------------------------------------------------------------------------===#
#
# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the evaluation budget shared by all restarts of a run.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Callable, Optional

from dataclasses import dataclass
from enum import Enum
import logging
import math

from gbnm.geometry import Point

Objective = Callable[[Point], float]


class EvalStatus(Enum):
    OK = "ok"
    BUDGET_EXHAUSTED = "budget_exhausted"


@dataclass(frozen=True)
class Evaluation:
    """Outcome of a single budgeted evaluation.

    Attributes:
        status: OK when the objective was called, BUDGET_EXHAUSTED otherwise.
        value: The objective value, None when the budget was exhausted.
    """

    status: EvalStatus
    value: Optional[float] = None

    @property
    def exhausted(self) -> bool:
        return self.status is EvalStatus.BUDGET_EXHAUSTED


EXHAUSTED: Evaluation = Evaluation(status=EvalStatus.BUDGET_EXHAUSTED)


class EvaluationBudget:
    """Counts calls to an objective and refuses them past a global cap.

    One instance is shared by every restart of an optimization run, so the cap
    applies to the run as a whole. Once ``max_evals`` calls have been made, every
    further :meth:`evaluate` returns an exhausted :class:`Evaluation` without
    touching the objective.

    Attributes:
        objective: Caller-supplied function to minimize.
        max_evals: Maximum number of objective calls.
        num_evals: Number of objective calls made so far.
    """

    def __init__(
        self, objective: Objective, max_evals: int, logger: Optional[logging.Logger] = None
    ) -> None:
        if max_evals <= 0:
            raise ValueError(f"max_evals must be positive, got {max_evals}.")

        self.objective: Objective = objective
        self.max_evals: int = max_evals
        self.num_evals: int = 0
        self.logger: logging.Logger = logger if logger is not None else logging.getLogger(__name__)

    @property
    def remaining(self) -> int:
        return self.max_evals - self.num_evals

    @property
    def exhausted(self) -> bool:
        return self.num_evals >= self.max_evals

    def evaluate(self, point: Point) -> Evaluation:
        """Evaluates the objective at ``point`` if the budget allows it.

        Exceptions raised by the objective propagate to the caller; the call is
        counted regardless. NaN values are mapped to +inf so that they always rank
        last.

        Args:
            point: Where to evaluate the objective.

        Returns:
            An OK Evaluation holding the value, or an exhausted Evaluation.
        """
        if self.exhausted:
            return EXHAUSTED

        self.num_evals += 1
        value: float = float(self.objective(point))
        if math.isnan(value):
            self.logger.warning(f"Objective returned NaN at {point}, treating it as +inf.")
            value = math.inf

        return Evaluation(status=EvalStatus.OK, value=value)
