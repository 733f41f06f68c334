from __future__ import annotations

import numpy as np
from click.testing import CliRunner

from spiralode import __version__
from spiralode.cli import main


def test_version_option():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_generate_data_writes_npz(tmp_path):
    output = tmp_path / "spiral.npz"
    result = CliRunner().invoke(
        main,
        ["generate-data", "--num-samples", "12", "--seed", "3", "-o", str(output)],
    )
    assert result.exit_code == 0, result.output
    with np.load(output) as data:
        assert data["ts"].shape == (12,)
        assert data["states"].shape == (12, 2)


def test_generate_data_rejects_invalid_config(tmp_path):
    result = CliRunner().invoke(
        main,
        ["generate-data", "--num-samples", "1", "-o", str(tmp_path / "bad.npz")],
    )
    assert result.exit_code != 0


def test_train_writes_artifacts(tmp_path):
    out_dir = tmp_path / "run"
    result = CliRunner().invoke(
        main,
        [
            "train",
            "--num-samples",
            "10",
            "--adam-iters",
            "3",
            "--lbfgs-iters",
            "1",
            "--no-plot",
            "-o",
            str(out_dir),
        ],
    )
    assert result.exit_code == 0, result.output
    assert "LBFGS loss" in result.output
    assert "Final RMSE" in result.output
    for name in ("trajectory.npz", "model.eqx", "loss.png", "fit.png", "states.png"):
        assert (out_dir / name).exists()
    with np.load(out_dir / "trajectory.npz") as data:
        assert data["prediction"].shape == (10, 2)
