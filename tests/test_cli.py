"""Tests for deer_sirs.cli: command line runs."""

import pandas as pd

from deer_sirs.cli import main


def test_writes_summary_and_trajectories(tmp_path, capsys):
    out = tmp_path / "summary.csv"
    traj = tmp_path / "traj.csv"
    code = main([
        "--context", "Rural wild", "--draws", "3", "--days", "10", "--seed", "1", "--lhs",
        "--out", str(out), "--trajectories", str(traj),
    ])
    assert code == 0
    summary = pd.read_csv(out)
    assert len(summary) == 3
    assert len(pd.read_csv(traj)) == 3 * 11
    assert "Saved results" in capsys.readouterr().out


def test_configuration_error_exit_code(tmp_path, capsys):
    samples = tmp_path / "samples.csv"
    pd.DataFrame({"gamma": [0.1]}).to_csv(samples, index=False)
    code = main(["--context", "Rural wild", "--draws", "1", "--samples", str(samples), "--out", str(tmp_path / "o.csv")])
    assert code == 2
    assert "Configuration error" in capsys.readouterr().err
