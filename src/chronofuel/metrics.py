"""
chronofuel/metrics.py

Prometheus metrics collection for chronofuel.

Exposes engine and halving state (stake, activity, cooldown, claim and
tier counters, minted rewards, halving progress) in the Prometheus text
format. Counters are fed from the engine's committed events.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from .economics.events import (
    BurnedForBoost,
    Event,
    RewardClaimed,
    Staked,
    Unstaked,
)
from .economics.tiers import RewardTier

if TYPE_CHECKING:
    from .economics.engine import RewardEngine
    from .economics.halving import HalvingController

logger = logging.getLogger("chronofuel.metrics")


class EmissionMetrics:
    """
    Prometheus metrics collector for the emission engine.

    Usage:
        metrics = EmissionMetrics(engine, halving)
        engine.claim_reward("alice")

        prometheus_output = metrics.collect()
    """

    # Metric definitions
    METRICS = {
        "chronofuel_total_staked": {
            "type": "gauge",
            "help": "Total amount staked with the engine (wei)",
        },
        "chronofuel_participants": {
            "type": "gauge",
            "help": "Number of participants that ever staked",
        },
        "chronofuel_active_participants": {
            "type": "gauge",
            "help": "Participants active within the rolling window",
        },
        "chronofuel_cooldown_seconds": {
            "type": "gauge",
            "help": "Current claim cooldown in seconds",
        },
        "chronofuel_claims_total": {
            "type": "counter",
            "help": "Total number of successful claims",
        },
        "chronofuel_claims_by_tier_total": {
            "type": "counter",
            "help": "Successful claims per reward tier",
        },
        "chronofuel_rewards_minted_total": {
            "type": "counter",
            "help": "Total reward minted by claims (wei)",
        },
        "chronofuel_stake_operations_total": {
            "type": "counter",
            "help": "Stake and unstake operations",
        },
        "chronofuel_boost_burns_total": {
            "type": "counter",
            "help": "Total number of boost burns",
        },
        "chronofuel_boost_burned_total": {
            "type": "counter",
            "help": "Total amount burned for boost (wei)",
        },
        "chronofuel_halving_count": {
            "type": "gauge",
            "help": "Number of halvings applied",
        },
        "chronofuel_halving_threshold": {
            "type": "gauge",
            "help": "Minted supply at which the next halving triggers (wei)",
        },
        "chronofuel_halving_key_effect_percent": {
            "type": "gauge",
            "help": "Cumulative halving rate reduction in percent",
        },
        "chronofuel_halving_rate_percent": {
            "type": "gauge",
            "help": "Advisory adjusted halving rate in percent",
        },
        "chronofuel_shields_outstanding": {
            "type": "gauge",
            "help": "Anti-halving shields granted and not yet consumed",
        },
    }

    def __init__(self, engine: "RewardEngine", halving: Optional["HalvingController"] = None):
        """
        Initialize metrics collector.

        Args:
            engine: RewardEngine to collect metrics from
            halving: HalvingController (defaults to the engine's)
        """
        self.engine = engine
        self.halving = halving or engine.halving

        self._claims = 0
        self._claims_by_tier = {tier.name.lower(): 0 for tier in RewardTier}
        self._rewards_minted = 0
        self._stakes = 0
        self._unstakes = 0
        self._burns = 0
        self._burned = 0

        engine.events.subscribe(self.record_event)

    def record_event(self, event: Event) -> None:
        """Update counters from a committed event."""
        if isinstance(event, RewardClaimed):
            self._claims += 1
            self._claims_by_tier[RewardTier.from_id(event.tier_id).name.lower()] += 1
            self._rewards_minted += event.final_reward
        elif isinstance(event, Staked):
            self._stakes += 1
        elif isinstance(event, Unstaked):
            self._unstakes += 1
        elif isinstance(event, BurnedForBoost):
            self._burns += 1
            self._burned += event.amount

    def collect(self) -> str:
        """
        Collect all metrics and return in Prometheus format.

        Returns:
            Prometheus-formatted metrics string
        """
        lines = []

        def add_header(name: str):
            metric_def = self.METRICS.get(name, {})
            lines.append(f"# HELP {name} {metric_def.get('help', '')}")
            lines.append(f"# TYPE {name} {metric_def.get('type', 'gauge')}")

        def add_metric(name: str, value: Any, labels: Dict[str, str] = None):
            add_header(name)
            if labels:
                label_str = ",".join(f'{k}="{v}"' for k, v in labels.items())
                lines.append(f"{name}{{{label_str}}} {value}")
            else:
                lines.append(f"{name} {value}")

        try:
            add_metric("chronofuel_total_staked", self.engine.total_staked)
            add_metric("chronofuel_participants", self.engine.participants())
            add_metric("chronofuel_active_participants", self.engine.active_count())
            add_metric("chronofuel_cooldown_seconds", self.engine.cooldown())

            add_metric("chronofuel_claims_total", self._claims)
            add_header("chronofuel_claims_by_tier_total")
            for tier, count in self._claims_by_tier.items():
                lines.append(f'chronofuel_claims_by_tier_total{{tier="{tier}"}} {count}')
            add_metric("chronofuel_rewards_minted_total", self._rewards_minted)

            add_header("chronofuel_stake_operations_total")
            lines.append(f'chronofuel_stake_operations_total{{operation="stake"}} {self._stakes}')
            lines.append(f'chronofuel_stake_operations_total{{operation="unstake"}} {self._unstakes}')
            add_metric("chronofuel_boost_burns_total", self._burns)
            add_metric("chronofuel_boost_burned_total", self._burned)

            if self.halving is not None:
                add_metric("chronofuel_halving_count", self.halving.halving_count)
                add_metric("chronofuel_halving_threshold", self.halving.current_threshold)
                add_metric(
                    "chronofuel_halving_key_effect_percent",
                    self.halving.halving_key_effect_percent,
                )
                if self.halving.engine is not None:
                    add_metric("chronofuel_halving_rate_percent", self.halving.adjusted_rate())
                add_metric("chronofuel_shields_outstanding", len(self.halving.shield_holders))

        except Exception as e:
            logger.error(f"Error collecting metrics: {e}")
            lines.append(f"# Error collecting metrics: {e}")

        return "\n".join(lines) + "\n"

    def get_stats(self) -> Dict[str, Any]:
        """
        Get metrics as a dictionary (for JSON output).

        Returns:
            Dictionary of metric values
        """
        stats = dict(self.engine.get_stats())
        stats.update({
            "claims": self._claims,
            "claims_by_tier": dict(self._claims_by_tier),
            "rewards_minted": self._rewards_minted,
            "stakes": self._stakes,
            "unstakes": self._unstakes,
            "boost_burns": self._burns,
            "boost_burned": self._burned,
        })
        if self.halving is not None:
            stats["halving"] = self.halving.get_stats()
        return stats

    def reset_counters(self) -> None:
        """Reset all counters (useful for testing)."""
        self._claims = 0
        self._claims_by_tier = {tier.name.lower(): 0 for tier in RewardTier}
        self._rewards_minted = 0
        self._stakes = 0
        self._unstakes = 0
        self._burns = 0
        self._burned = 0
