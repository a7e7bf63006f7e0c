"""
chronofuel/config.py

Configuration constants and data classes for chronofuel.

All amounts are integers. Token amounts are in wei (10^18 per token) and
ratios/multipliers use a fixed-point factor of 10^10.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import logging
import os

from .errors import ValidationError


logger = logging.getLogger("chronofuel.config")


# Token scale: 1 token = 10^18 wei
SCALE = 10 ** 18

# Fixed-point factor for ratios and boosts
PRECISION = 10 ** 10

# Genesis supply minted to the owner (21 million tokens)
INITIAL_SUPPLY = 21_000_000 * SCALE

# Default emission rate: 1 token per hour of waiting
DEFAULT_BASE_RATE_PER_HOUR = 1 * SCALE

# Cooldown parameters (seconds)
COOLDOWN_PARAMS = {
    "base_seconds": 900,            # 15 minutes with nobody active
    "min_seconds": 60,              # never below one minute
    "reduction_per_active": 12,     # 0.2 minutes per active participant
}

# Activity window for counting active participants
ACTIVITY_WINDOW_SECONDS = 24 * 60 * 60

# Time reward ceiling
MAX_REWARD_HOURS = 24

# Burn boost: 1 + 0.7 * sqrt(cumulative burned)
BURN_BOOST_NUMERATOR = 7
BURN_BOOST_DENOMINATOR = 10

# Certificate points per burned token
DAO_POINTS_PER_TOKEN = 4
AIRDROP_RIGHTS_PER_TOKEN = 1

# Halving parameters
HALVING_PARAMS = {
    "initial_threshold": 21_000_000 * SCALE,
    "burn_scale": 2_100_000_000 * SCALE,
    "base_rate_percent": 50,
    "max_rate_percent": 80,
    "stake_ratio_divisor": 10,
}

# Rate reduction granted by a Legendary tier
LEGENDARY_RATE_REDUCTION = 3

# Environment variable prefix
ENV_PREFIX = "CHRONOFUEL_"


@dataclass
class EmissionConfig:
    """Tunable parameters of the reward engine."""
    base_rate_per_hour: int = DEFAULT_BASE_RATE_PER_HOUR
    base_cooldown_seconds: int = COOLDOWN_PARAMS["base_seconds"]
    min_cooldown_seconds: int = COOLDOWN_PARAMS["min_seconds"]
    cooldown_reduction_per_active: int = COOLDOWN_PARAMS["reduction_per_active"]
    activity_window_seconds: int = ACTIVITY_WINDOW_SECONDS
    max_reward_hours: int = MAX_REWARD_HOURS

    def __post_init__(self):
        if self.base_rate_per_hour <= 0:
            raise ValidationError("base_rate_per_hour must be positive")
        if self.min_cooldown_seconds < 0:
            raise ValidationError("min_cooldown_seconds must not be negative")
        if self.base_cooldown_seconds < self.min_cooldown_seconds:
            raise ValidationError(
                "base_cooldown_seconds must be >= min_cooldown_seconds"
            )
        if self.activity_window_seconds <= 0:
            raise ValidationError("activity_window_seconds must be positive")
        if self.max_reward_hours <= 0:
            raise ValidationError("max_reward_hours must be positive")

    @property
    def max_time_reward(self) -> int:
        """Time reward ceiling (the 24h cap) in wei."""
        return self.base_rate_per_hour * self.max_reward_hours

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmissionConfig":
        """Create from dictionary, ignoring unknown keys."""
        known = {}
        for key, value in data.items():
            if key not in cls.__dataclass_fields__:
                continue
            try:
                known[key] = int(value)
            except (TypeError, ValueError):
                raise ValidationError(f"{key}: expected an integer, got {value!r}")
        return cls(**known)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "EmissionConfig":
        """
        Build configuration from CHRONOFUEL_* environment variables.

        Example:
            CHRONOFUEL_BASE_RATE_PER_HOUR=2000000000000000000
            CHRONOFUEL_MIN_COOLDOWN_SECONDS=30

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            EmissionConfig with overrides applied
        """
        environ = os.environ if environ is None else environ
        overrides = {}
        for name in cls.__dataclass_fields__:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in environ:
                overrides[name] = environ[key]
                logger.debug(f"Config override from {key}")
        return cls.from_dict(overrides)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI and example use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s [CHRONOFUEL] %(levelname)s %(name)s: %(message)s'
    )
