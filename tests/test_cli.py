"""
Tests for the command line interface.
"""

import csv
import json

import pytest
from click.testing import CliRunner

from mortgage_calc.main import cli, parse_amount, parse_lump_sum, parse_scenario_opts


@pytest.fixture
def runner():
    return CliRunner()


class TestParsers:
    """Test option value parsing."""

    def test_parse_amount_suffixes(self):
        assert parse_amount("500k") == 500000
        assert parse_amount("1.5m") == 1500000
        assert parse_amount("300,000") == 300000

    def test_parse_lump_sum(self):
        lump = parse_lump_sum("2027-01-15:25k")
        assert lump.amount == 25000
        assert lump.date.isoformat() == "2027-01-15"

    def test_parse_scenario_opts(self):
        params = parse_scenario_opts("--name Fast -p 300k -r 5 -t 360 --overpayment 200")
        assert params == {
            "name": "Fast",
            "principal": "300k",
            "rate": 5.0,
            "term": 360,
            "overpayment": "200",
        }


class TestCommands:
    """Test each command end to end."""

    def test_emi(self, runner):
        result = runner.invoke(cli, ["emi", "-p", "300k", "-r", "5", "-t", "360"])
        assert result.exit_code == 0, result.output
        assert "1610.46" in result.output
        assert "30y 0m" in result.output

    def test_invalid_rate(self, runner):
        result = runner.invoke(cli, ["emi", "-p", "300k", "-r", "45", "-t", "360"])
        assert result.exit_code == 2
        assert "Annual rate" in result.output

    def test_schedule_json_export(self, runner, tmp_path):
        out = tmp_path / "schedule.json"
        result = runner.invoke(cli, ["schedule", "-p", "100k", "-r", "5", "-t", "120", "--output", str(out)])
        assert result.exit_code == 0, result.output
        assert "Schedule exported" in result.output
        data = json.loads(out.read_text())
        assert len(data["schedule"]) == 120
        assert data["terms"]["principal"] == 100000

    def test_schedule_csv_export(self, runner, tmp_path):
        out = tmp_path / "schedule.csv"
        result = runner.invoke(cli, ["schedule", "-p", "100k", "-r", "5", "-t", "120", "--output", str(out)])
        assert result.exit_code == 0, result.output
        with out.open() as f:
            rows = list(csv.reader(f))
        assert rows[0] == ["Month", "Year", "Payment", "Principal", "Interest", "Balance"]
        assert len(rows) == 121

    def test_unsupported_output(self, runner, tmp_path):
        out = tmp_path / "schedule.xlsx"
        result = runner.invoke(cli, ["schedule", "-p", "100k", "-r", "5", "-t", "120", "--output", str(out)])
        assert result.exit_code == 2

    def test_overpayment(self, runner):
        result = runner.invoke(cli, ["overpayment", "-p", "100k", "-r", "5", "-t", "120", "--overpayment", "100"])
        assert result.exit_code == 0, result.output
        assert "Tenure saved" in result.output
        assert "Interest saved" in result.output

    def test_part_payment_warns_above_limit(self, runner):
        result = runner.invoke(
            cli,
            [
                "part-payment",
                "-b", "100k",
                "--remaining-term", "120",
                "-r", "5",
                "--lump-sum", "15k",
                "--original-amount", "100k",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Warning" in result.output

    def test_part_payment_term_mode(self, runner):
        result = runner.invoke(
            cli,
            [
                "part-payment",
                "-b", "100k",
                "--remaining-term", "120",
                "-r", "5",
                "--lump-sum", "5k",
                "--original-amount", "100k",
                "--mode", "term",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Warning" not in result.output

    def test_fixed_rate(self, runner):
        result = runner.invoke(
            cli,
            ["fixed-rate", "-p", "300k", "-t", "360", "--fixed-rate", "3", "--fixed-months", "24",
             "--post-fixed-rate", "6"],
        )
        assert result.exit_code == 0, result.output
        assert "EMI after fixed" in result.output

    def test_advanced_with_lump_sum(self, runner):
        result = runner.invoke(
            cli,
            ["advanced", "-p", "300k", "-r", "5", "-t", "360", "-s", "2026-01-01",
             "--lump-sum", "2027-01-15:25000", "--show-schedule"],
        )
        assert result.exit_code == 0, result.output
        assert "Total lump sum" in result.output
        assert "25000.00" in result.output

    def test_advanced_fixed_months_need_rates(self, runner):
        result = runner.invoke(
            cli, ["advanced", "-p", "300k", "-r", "5", "-t", "360", "-s", "2026-01-01", "--fixed-months", "24"]
        )
        assert result.exit_code == 2

    def test_advanced_csv_export(self, runner, tmp_path):
        out = tmp_path / "advanced.csv"
        result = runner.invoke(
            cli,
            ["advanced", "-p", "100k", "-r", "5", "-t", "120", "-s", "2026-01-01",
             "--extra-payment", "200:2026-01-01:2026-12-31", "--output", str(out)],
        )
        assert result.exit_code == 0, result.output
        with out.open() as f:
            rows = list(csv.reader(f))
        assert rows[0][1] == "Date"
        assert rows[1][7] == "True"

    def test_compare(self, runner):
        result = runner.invoke(
            cli,
            [
                "compare",
                "--scenario", "--name Plain -p 300k -r 5 -t 360",
                "--scenario", "-p 300k -r 5 -t 360 --overpayment 200",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Plain" in result.output
        assert "Scenario 2" in result.output
        assert "Difference to Plain" in result.output

    def test_compare_bad_scenario(self, runner):
        result = runner.invoke(cli, ["compare", "--scenario", "-p 300k -r 5"])
        assert result.exit_code == 2
