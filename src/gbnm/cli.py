# ===--------------------------------------------------------------------------------------===#
#
# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the command-line interface of GBNM.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Any, Callable, Dict, List, Optional

import argparse
import dataclasses
import logging
import os
from pathlib import Path
import sys

import yaml

from gbnm.config import ConfigError, load_config
from gbnm.geometry import Point
from gbnm.objectives import OBJECTIVES, get_objective, rounded
from gbnm.optimizer import OptimizationResult, RestartRecord, minimize
from gbnm.utils.logging_utils import get_logger


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses command-line arguments for a GBNM run.

    Returns:
        Parsed arguments with the config path, objective name and output options.
    """
    parser = argparse.ArgumentParser(
        description="Globalized bounded Nelder-Mead search over a 2D domain."
    )
    parser.add_argument("--cfg_path", type=str, help="path to .yaml config file.", required=True)
    parser.add_argument(
        "--objective",
        type=str,
        choices=sorted(OBJECTIVES),
        default="bowl",
        help="built-in surface to optimize.",
    )
    parser.add_argument(
        "--out_dir",
        type=str,
        default=None,
        help="if given, directory receiving results.log and result.yaml.",
    )
    parser.add_argument(
        "--maximize",
        action="store_true",
        help="search for the highest value instead of the lowest.",
    )
    parser.add_argument(
        "--grid",
        action="store_true",
        help="evaluate the surface at the nearest integer coordinates.",
    )
    parser.add_argument("--seed", type=int, default=None, help="overrides the config seed.")
    parser.add_argument("--verbose", action="store_true", help="log every simplex iteration.")

    return parser.parse_args(argv)


def _reported_value(value: float, maximize: bool) -> float:
    return -value if maximize else value


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point: loads the config, runs the optimizer and reports the best restart."""
    args: Dict[str, Any] = vars(parse_args(argv))

    out_dir: Optional[Path] = Path(args["out_dir"]) if args["out_dir"] else None
    if out_dir is not None:
        os.makedirs(out_dir, exist_ok=True)

    logger: logging.Logger = get_logger(
        name="gbnm.cli",
        results_dir=out_dir,
        level=logging.DEBUG if args["verbose"] else logging.INFO,
    )

    try:
        config, bounds = load_config(args["cfg_path"])
        if args["seed"] is not None:
            config = dataclasses.replace(config, seed=args["seed"])
    except (ConfigError, OSError) as err:
        logger.error(str(err))
        return 1

    surface: Callable[[Point], float] = get_objective(args["objective"])
    if args["grid"]:
        surface = rounded(surface)

    maximize: bool = args["maximize"]

    def objective(p: Point) -> float:
        value: float = surface(p)
        return -value if maximize else value

    result: OptimizationResult = minimize(objective, bounds, config, logger=logger)

    best: Optional[RestartRecord] = result.best()
    if best is None:
        logger.info("No restart was completed.")
    else:
        logger.info(
            f"Best point ({best.best_point.x:.3f}, {best.best_point.y:.3f}) "
            f"with value {_reported_value(best.value_at_best_point, maximize):.6g} "
            f"after {result.num_evals} evaluations."
        )

    if out_dir is not None:
        report: Dict[str, Any] = result.to_dict()
        for record in report["restarts"]:
            for key in ("value_at_initial_point", "value_at_best_point"):
                record[key] = _reported_value(record[key], maximize)
        report["objective"] = args["objective"]
        report["maximize"] = maximize
        with open(out_dir.joinpath("result.yaml"), "w") as f:
            yaml.safe_dump(report, f, sort_keys=False)
        logger.info(f"Saved results at '{out_dir.joinpath('result.yaml')}'.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
