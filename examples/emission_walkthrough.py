"""
chronofuel/examples/emission_walkthrough.py

Walk through one participant's lifecycle against an in-memory system.

This shows how a host application uses chronofuel to:
1. Link ledger, certificate registry, halving controller and engine
2. Burn tokens for a permanent boost and read the certificate
3. Stake and claim on a cooldown
4. Trigger a halving and read the advisory rate

Usage:
    python examples/emission_walkthrough.py
"""

import logging

from chronofuel import SCALE, ManualClock, build_system
from chronofuel.errors import CooldownActiveError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [WALKTHROUGH] %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)

DAY = 24 * 3600


def tokens(amount: int) -> str:
    return f"{amount / SCALE:,.4f}"


def example_participant():
    """Burn, stake and claim for a single participant."""
    clock = ManualClock(1_700_000_000)
    system = build_system(owner="treasury", clock=clock)
    engine = system.engine

    system.ledger.transfer("treasury", "alice", 300 * SCALE)
    system.ledger.approve("alice", engine.address, 300 * SCALE)

    record_id = engine.boost_burn("alice", 100 * SCALE)
    record = system.certificates.get(record_id)
    logger.info(
        f"Certificate #{record_id}: burned {tokens(record.amount_burned)}, "
        f"dao points {record.dao_points}, airdrop rights {record.airdrop_rights}"
    )

    engine.stake("alice", 100 * SCALE)

    for day in range(3):
        result = engine.claim_reward("alice")
        logger.info(
            f"Day {day}: {result.tier.name.lower()} claim of {tokens(result.final_reward)} "
            f"(stake boost {result.stake_boost}x, cooldown {result.cooldown_used}s)"
        )
        try:
            engine.claim_reward("alice")
        except CooldownActiveError as e:
            logger.info(f"Second claim refused, retry at {e.retry_at}")
        clock.advance(DAY)

    return system


def example_halving(system):
    """Apply a halving and report the advisory rate."""
    if system.engine.check_halving():
        stats = system.halving.get_stats()
        logger.info(
            f"Halving #{stats['halving_count']}: threshold {tokens(stats['current_threshold'])}, "
            f"rate {system.halving.adjusted_rate()}%"
        )


if __name__ == "__main__":
    system = example_participant()
    example_halving(system)
    logger.info(f"Final balance: {tokens(system.ledger.balance_of('alice'))}")
