"""
chronofuel - Token-emission economic engine

Participants stake tokens, wait, and claim rewards from a bounded emission
schedule:
- Time reward capped at 24h of emission per claim
- Integer log10 stake boost and sqrt burn boost (fixed-point, no floats)
- Randomized reward tiers (Common / Rare / Epic / Legendary)
- Congestion-sensitive cooldown driven by a rolling 24h active set
- Adaptive halving threshold driven by global burns and stake ratio

Usage:
    from chronofuel import build_system, SCALE
    from chronofuel.clock import ManualClock

    clock = ManualClock(1_700_000_000)
    system = build_system(owner="owner", clock=clock)

    system.ledger.transfer("owner", "alice", 1000 * SCALE)
    system.ledger.approve("alice", system.engine.address, 1000 * SCALE)
    system.engine.stake("alice", 100 * SCALE)

    clock.advance(24 * 3600)
    result = system.engine.claim_reward("alice")

Metrics Usage:
    from chronofuel.metrics import EmissionMetrics

    metrics = EmissionMetrics(system.engine)
    prometheus_output = metrics.collect()
"""

from .config import (
    SCALE,
    PRECISION,
    INITIAL_SUPPLY,
    EmissionConfig,
)
from .errors import (
    ChronofuelError,
    ValidationError,
    AuthorizationError,
    StateError,
    AlreadyConfiguredError,
)
from .clock import SystemClock, ManualClock
from .economics import (
    RewardEngine,
    HalvingController,
    ActivityTracker,
    RandomTierSelector,
    RewardTier,
    EntropySource,
    FixedEntropySource,
    SystemEntropySource,
    EventLog,
    ClaimResult,
)
from .ledger import (
    Ledger,
    CertificateRegistry,
    InMemoryLedger,
    InMemoryCertificateRegistry,
    BurnBoostRecord,
)
from .metrics import EmissionMetrics
from .system import EmissionSystem, build_system

__version__ = "1.0.0"
__all__ = [
    # Config
    "SCALE",
    "PRECISION",
    "INITIAL_SUPPLY",
    "EmissionConfig",
    # Errors
    "ChronofuelError",
    "ValidationError",
    "AuthorizationError",
    "StateError",
    "AlreadyConfiguredError",
    # Clock
    "SystemClock",
    "ManualClock",
    # Economics
    "RewardEngine",
    "HalvingController",
    "ActivityTracker",
    "RandomTierSelector",
    "RewardTier",
    "EntropySource",
    "FixedEntropySource",
    "SystemEntropySource",
    "EventLog",
    "ClaimResult",
    # Collaborators
    "Ledger",
    "CertificateRegistry",
    "InMemoryLedger",
    "InMemoryCertificateRegistry",
    "BurnBoostRecord",
    # Metrics & wiring
    "EmissionMetrics",
    "EmissionSystem",
    "build_system",
]
