"""
Tests for chronofuel/config.py, chronofuel/clock.py and chronofuel/wiring.py
"""

import pytest

from chronofuel.clock import ManualClock, SystemClock
from chronofuel.config import SCALE, EmissionConfig
from chronofuel.errors import AlreadyConfiguredError, ChronofuelError, ValidationError
from chronofuel.wiring import bind_once


class TestEmissionConfig:
    """Tests for EmissionConfig."""

    def test_defaults(self):
        config = EmissionConfig()
        assert config.base_rate_per_hour == SCALE
        assert config.base_cooldown_seconds == 900
        assert config.min_cooldown_seconds == 60
        assert config.cooldown_reduction_per_active == 12
        assert config.activity_window_seconds == 86400
        assert config.max_time_reward == 24 * SCALE

    def test_validation(self):
        with pytest.raises(ValidationError):
            EmissionConfig(base_rate_per_hour=0)
        with pytest.raises(ValidationError):
            EmissionConfig(base_cooldown_seconds=30, min_cooldown_seconds=60)
        with pytest.raises(ChronofuelError):
            EmissionConfig(activity_window_seconds=0)

    def test_from_dict_ignores_unknown(self):
        config = EmissionConfig.from_dict({"min_cooldown_seconds": "30", "unknown": 1})
        assert config.min_cooldown_seconds == 30

    def test_dict_round_trip(self):
        config = EmissionConfig(base_rate_per_hour=2 * SCALE)
        assert EmissionConfig.from_dict(config.to_dict()) == config

    def test_from_env(self):
        config = EmissionConfig.from_env({
            "CHRONOFUEL_BASE_RATE_PER_HOUR": str(2 * SCALE),
            "CHRONOFUEL_MIN_COOLDOWN_SECONDS": "30",
            "OTHER_VARIABLE": "ignored",
        })
        assert config.base_rate_per_hour == 2 * SCALE
        assert config.min_cooldown_seconds == 30
        assert config.base_cooldown_seconds == 900

    def test_from_env_invalid_value(self):
        with pytest.raises(ValidationError):
            EmissionConfig.from_env({"CHRONOFUEL_MAX_REWARD_HOURS": "0"})

    def test_non_integer_value_names_key(self):
        """Test a malformed override is reported as a validation error for its key."""
        with pytest.raises(ValidationError) as exc_info:
            EmissionConfig.from_env({"CHRONOFUEL_BASE_RATE_PER_HOUR": "abc"})
        assert "base_rate_per_hour" in str(exc_info.value)
        assert "'abc'" in str(exc_info.value)

        with pytest.raises(ValidationError):
            EmissionConfig.from_dict({"max_reward_hours": None})


class TestClocks:
    """Tests for clock implementations."""

    def test_manual_clock(self):
        clock = ManualClock(100)
        assert clock() == 100
        assert clock.advance(50) == 150
        assert clock.set(200) == 200
        assert clock.now == 200

    def test_manual_clock_monotonic(self):
        clock = ManualClock(100)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(99)

    def test_system_clock(self):
        assert isinstance(SystemClock()(), int)


class TestBindOnce:
    """Tests for one-time binding."""

    def test_first_binding(self):
        assert bind_once(None, "engine", "x") == "engine"

    def test_same_value(self):
        assert bind_once("engine", "engine", "x") == "engine"

    def test_different_value(self):
        with pytest.raises(AlreadyConfiguredError):
            bind_once("engine", "other", "x")

    def test_null_value(self):
        with pytest.raises(ValidationError):
            bind_once(None, None, "x")
        with pytest.raises(ValidationError):
            bind_once(None, "", "x")
