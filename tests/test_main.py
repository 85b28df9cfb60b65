"""Tests for the command-line entry point."""

import json
import logging

import pytest

from main import EXIT_DATA_ERROR, EXIT_VALIDATION_ERROR, main
from src.market_data.repository import CSV_COLUMNS


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def prices_csv(tmp_path, repo):
    """The reference scenario stocks written out as a prices CSV."""
    lines = [",".join(CSV_COLUMNS)]
    for symbol in repo.list_symbols():
        for p in repo.get_prices(symbol):
            lines.append(f"{symbol},{p.date},{p.open},{p.high},{p.low},{p.close},{p.volume}")
    path = tmp_path / "prices.csv"
    path.write_text("\n".join(lines) + "\n")
    return str(path)


class TestSimulateCommand:
    def test_report(self, prices_csv, capsys):
        code = main([
            "simulate", "--prices", prices_csv, "--symbol", "ccc",
            "--amount", "10000000", "--start-date", "2024-01-01",
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "BUY-AND-HOLD SIMULATION: CCC" in out
        assert "+50.00%" in out

    def test_json(self, prices_csv, capsys):
        code = main([
            "--json", "simulate", "--prices", prices_csv, "--symbol", "CCC",
            "--amount", "10000000", "--start-date", "2024-01-01", "--end-date", "2024-01-03",
        ])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["returns"]["percent_return"] == "20.0000"
        assert data["investment"]["end_date"] == "2024-01-03"

    def test_amount_below_minimum(self, prices_csv, capsys):
        code = main([
            "simulate", "--prices", prices_csv, "--symbol", "CCC",
            "--amount", "5", "--start-date", "2024-01-01",
        ])
        assert code == EXIT_VALIDATION_ERROR
        assert "Invalid input" in capsys.readouterr().err

    def test_bad_date(self, prices_csv):
        code = main([
            "simulate", "--prices", prices_csv, "--symbol", "CCC",
            "--amount", "10000000", "--start-date", "01/01/2024",
        ])
        assert code == EXIT_VALIDATION_ERROR

    def test_unknown_symbol(self, prices_csv, capsys):
        code = main([
            "simulate", "--prices", prices_csv, "--symbol", "ZZZ",
            "--amount", "10000000", "--start-date", "2024-01-01",
        ])
        assert code == EXIT_DATA_ERROR
        assert "ZZZ" in capsys.readouterr().err


class TestCompareCommand:
    def test_ranked(self, prices_csv, capsys):
        code = main([
            "--json", "compare", "--prices", prices_csv, "--symbols", "DDD", "CCC",
            "--amount", "10000000", "--start-date", "2024-01-01",
        ])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert [c["symbol"] for c in data["comparison"]] == ["CCC", "DDD"]

    def test_missing_data(self, prices_csv, capsys):
        code = main([
            "compare", "--prices", prices_csv, "--symbols", "CCC", "EEE",
            "--amount", "10000000", "--start-date", "2024-01-01",
        ])
        assert code == EXIT_DATA_ERROR
        assert "EEE" in capsys.readouterr().err

    def test_duplicate_symbols(self, prices_csv):
        code = main([
            "compare", "--prices", prices_csv, "--symbols", "CCC", "ccc",
            "--amount", "10000000", "--start-date", "2024-01-01",
        ])
        assert code == EXIT_VALIDATION_ERROR


class TestDetectCommand:
    def test_json(self, prices_csv, capsys):
        code = main(["--json", "detect", "--prices", prices_csv])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["stocks_processed"] == 5
        assert data["alerts_created"] == 2
        assert data["errors"] == 0
        assert {a["symbol"] for a in data["anomalies"]} == {"AAA", "CCC"}

    def test_report(self, prices_csv, capsys):
        assert main(["detect", "--prices", prices_csv, "--threshold", "100"]) == 0
        out = capsys.readouterr().out
        assert "Alerts created:   1" in out
        assert "Volume anomaly detected for AAA" in out


class TestBadInput:
    @pytest.mark.parametrize(
        "flags",
        [["--window", "0"], ["--window", "-2"], ["--threshold", "0"], ["--threshold", "-1.5"]],
    )
    def test_invalid_detector_options(self, prices_csv, capsys, flags):
        code = main(["detect", "--prices", prices_csv, *flags])
        assert code == EXIT_VALIDATION_ERROR
        assert "Invalid input" in capsys.readouterr().err

    def test_missing_prices_file(self, tmp_path, capsys):
        code = main(["detect", "--prices", str(tmp_path / "nope.csv")])
        assert code == EXIT_DATA_ERROR
        assert "cannot read prices file" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "row",
        [
            "CCC,notadate,10,10,10,10,100",
            "CCC,2024-01-01,10,10,10,10,lots",
            "CCC,2024-01-01,10,10,10,10,1.5",
            "CCC,2024-01-01,10,10,10,10,",
        ],
    )
    def test_malformed_rows(self, tmp_path, capsys, row):
        path = tmp_path / "bad.csv"
        path.write_text(",".join(CSV_COLUMNS) + "\n" + row + "\n")
        code = main(["detect", "--prices", str(path)])
        assert code == EXIT_VALIDATION_ERROR
        assert "Invalid input" in capsys.readouterr().err

    def test_empty_prices_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        assert main(["detect", "--prices", str(path)]) == EXIT_VALIDATION_ERROR
