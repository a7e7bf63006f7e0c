"""
chronofuel/tests/test_cli.py

Tests for the click command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

from chronofuel.cli import main


@pytest.fixture
def runner():
    return CliRunner()


class TestShowConfig:
    """Tests for show-config."""

    def test_defaults(self, runner):
        result = runner.invoke(main, ["show-config"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["base_cooldown_seconds"] == 900

    def test_env_override(self, runner):
        result = runner.invoke(
            main, ["show-config"], env={"CHRONOFUEL_MIN_COOLDOWN_SECONDS": "30"}
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["min_cooldown_seconds"] == 30

    def test_malformed_env_override(self, runner):
        """Test a non-integer override exits with a usage error instead of a traceback."""
        result = runner.invoke(
            main, ["show-config"], env={"CHRONOFUEL_BASE_RATE_PER_HOUR": "abc"}
        )
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert "base_rate_per_hour" in result.output
        assert isinstance(result.exception, SystemExit)


class TestSimulate:
    """Tests for simulate."""

    def test_simulation_summary(self, runner):
        result = runner.invoke(
            main, ["simulate", "--participants", "3", "--days", "2", "--seed", "7"]
        )
        assert result.exit_code == 0, result.output

        summary = json.loads(result.output)
        assert summary["participants"] == 3
        assert summary["stakes"] == 3
        # One claim per participant per hourly step
        assert summary["claims"] == 3 * 48
        assert sum(summary["claims_by_tier"].values()) == summary["claims"]
        assert summary["halvings_applied"] == 2
        assert all(balance > 0 for balance in summary["balances"].values())

    def test_simulation_is_deterministic(self, runner):
        args = ["simulate", "--participants", "2", "--days", "1", "--seed", "11"]
        first = runner.invoke(main, args)
        second = runner.invoke(main, args)
        assert first.exit_code == 0
        assert first.output == second.output

    def test_simulation_with_burn_and_metrics(self, runner):
        result = runner.invoke(
            main,
            ["simulate", "--participants", "2", "--days", "1", "--burn", "100",
             "--seed", "3", "--metrics"],
        )
        assert result.exit_code == 0, result.output
        assert "chronofuel_boost_burns_total 2" in result.output
        assert "chronofuel_claims_total" in result.output
