# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the command-line interface."""

import yaml

from gbnm.cli import main


def _write_cfg(path, optimizer_cfg, bounds=None):
    path.write_text(
        yaml.safe_dump(
            {
                "OPTIMIZER_CONFIG": optimizer_cfg,
                "BOUNDS": bounds or {"min": [0.0, 0.0], "max": [511.0, 511.0]},
            }
        )
    )
    return path


def test_cli_writes_results(tmp_path):
    cfg_path = _write_cfg(tmp_path / "cfg.yaml", {"max_restarts": 4, "max_evals": 50})
    out_dir = tmp_path / "out"

    code = main(
        ["--cfg_path", str(cfg_path), "--objective", "flat", "--out_dir", str(out_dir), "--seed", "3"]
    )

    assert code == 0
    report = yaml.safe_load((out_dir / "result.yaml").read_text())
    assert report["objective"] == "flat"
    assert report["num_evals"] == 12
    assert len(report["restarts"]) == 4
    assert all(r["termination"] == "flat" for r in report["restarts"])
    assert (out_dir / "results.log").exists()


def test_cli_maximize_on_grid(tmp_path):
    cfg_path = _write_cfg(
        tmp_path / "cfg.yaml",
        {"max_restarts": 100, "max_evals": 60, "epsilon": 1.0, "seed": 9},
        {"min": [-0.5, -0.5], "max": [511.5, 511.5]},
    )
    out_dir = tmp_path / "out"

    code = main(
        ["--cfg_path", str(cfg_path), "--objective", "peaks", "--maximize", "--grid",
         "--out_dir", str(out_dir)]
    )

    assert code == 0
    report = yaml.safe_load((out_dir / "result.yaml").read_text())
    assert report["maximize"] is True
    assert report["budget_exhausted"] is True
    for record in report["restarts"]:
        assert record["value_at_best_point"] >= 0.0
        assert record["value_at_best_point"] >= record["value_at_initial_point"]


def test_cli_rejects_bad_config(tmp_path):
    cfg_path = _write_cfg(tmp_path / "cfg.yaml", {"max_evals": 0})
    assert main(["--cfg_path", str(cfg_path)]) == 1


def test_cli_rejects_missing_config(tmp_path):
    assert main(["--cfg_path", str(tmp_path / "missing.yaml")]) == 1
