"""
chronofuel/economics/

Reward computation and adaptive halving.
"""

from .fixed_point import (
    integer_sqrt,
    log10_bracket,
    stake_boost_of,
    burn_boost_of,
    to_base_units,
)
from .activity import ActivityTracker, ActiveWindowEntry
from .tiers import (
    RewardTier,
    TierEffect,
    TierDraw,
    EntropySource,
    SystemEntropySource,
    FixedEntropySource,
    RandomTierSelector,
    tier_for_roll,
)
from .events import (
    EventLog,
    Event,
    Staked,
    Unstaked,
    RewardClaimed,
    BurnedForBoost,
    HalvingTriggered,
    ShieldGranted,
    ShieldConsumed,
    RateReduced,
)
from .halving import HalvingController
from .engine import RewardEngine, ParticipantAccount, ClaimResult

__all__ = [
    # Fixed-point math
    "integer_sqrt",
    "log10_bracket",
    "stake_boost_of",
    "burn_boost_of",
    "to_base_units",
    # Activity
    "ActivityTracker",
    "ActiveWindowEntry",
    # Tiers
    "RewardTier",
    "TierEffect",
    "TierDraw",
    "EntropySource",
    "SystemEntropySource",
    "FixedEntropySource",
    "RandomTierSelector",
    "tier_for_roll",
    # Events
    "EventLog",
    "Event",
    "Staked",
    "Unstaked",
    "RewardClaimed",
    "BurnedForBoost",
    "HalvingTriggered",
    "ShieldGranted",
    "ShieldConsumed",
    "RateReduced",
    # Controllers
    "HalvingController",
    "RewardEngine",
    "ParticipantAccount",
    "ClaimResult",
]
