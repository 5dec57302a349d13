"""
Headless CLI Tests
"""

import csv
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import run_filter
from ukf_fusion.io.exporter import BASE_COLUMNS, TRUTH_COLUMNS, generate_output_filename


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["run_filter.py", *args])
    return run_filter.main()


class TestHeadlessCLI:
    def test_simulate_quiet(self, monkeypatch, capsys, tmp_path):
        output = tmp_path / "estimates.csv"
        code = run_cli(
            monkeypatch, "--simulate", "--steps", "60", "--seed", "4", "--quiet",
            "--output", str(output),
        )

        assert code == 0
        rmse = [float(v) for v in capsys.readouterr().out.split()]
        assert len(rmse) == 4
        with open(output, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == BASE_COLUMNS + TRUTH_COLUMNS
        assert len(rows) == 61

    def test_summary_output(self, monkeypatch, capsys):
        code = run_cli(monkeypatch, "--simulate", "--steps", "40", "--seed", "1", "--no-radar")

        out = capsys.readouterr().out
        assert code == 0
        assert "RADAR updates: off" in out
        assert "LIDAR NIS" in out
        assert "RADAR NIS" not in out

    def test_timestamped_output(self, monkeypatch, capsys, tmp_path):
        monkeypatch.chdir(tmp_path)
        code = run_cli(monkeypatch, "--simulate", "--steps", "10", "--quiet", "--output")

        assert code == 0
        written = list(tmp_path.glob("estimates_*.csv"))
        assert len(written) == 1

    def test_data_file(self, monkeypatch, capsys, tmp_path):
        data = tmp_path / "input.txt"
        data.write_text("L 1.0 1.0 0\nR 1.5 0.8 0.2 50000\nL 1.1 1.05 100000\n")

        code = run_cli(monkeypatch, "--data", str(data), "--quiet")

        assert code == 0
        # No ground truth, no RMSE line
        assert capsys.readouterr().out == ""

    def test_missing_data_file(self, monkeypatch, capsys, tmp_path):
        code = run_cli(monkeypatch, "--data", str(tmp_path / "missing.txt"))
        assert code == 1
        assert "not found" in capsys.readouterr().out

    def test_source_required(self, monkeypatch):
        with pytest.raises(SystemExit):
            run_cli(monkeypatch)


def test_generate_output_filename():
    name = generate_output_filename("run")
    assert name.startswith("run_") and name.endswith(".csv")
