"""
chronofuel/economics/tiers.py

Randomized reward tiers.

Each claim draws a tier that multiplies the effective mint power:

| Roll     | Tier      | Multiplier | Side effect              |
|----------|-----------|------------|--------------------------|
| 0 - 69   | Common    | 1.0x       | -                        |
| 70 - 91  | Rare      | 1.8x       | -                        |
| 92 - 98  | Epic      | 3.5x       | anti-halving shield      |
| 99       | Legendary | 8.0x       | halving rate reduced 3%  |

Multipliers are held in tenths (10/18/35/80) so the math stays integer.

The seed is sha256(entropy | timestamp | identity | nonce). The nonce is
per identity and strictly increasing, so two draws by the same identity
in the same second never share a seed.
"""

import hashlib
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

from .atomic import Transactional, deep_snapshot

logger = logging.getLogger("chronofuel.economics.tiers")


# ============================================================================
# TIERS
# ============================================================================

class TierEffect(Enum):
    """Halving-controller side effect attached to a tier."""
    NONE = "none"
    GRANT_SHIELD = "grant_shield"
    REDUCE_RATE = "reduce_rate"


class RewardTier(Enum):
    """Reward tiers: (tier id, upper roll bound, multiplier in tenths, effect)."""
    COMMON = (0, 70, 10, TierEffect.NONE)
    RARE = (1, 92, 18, TierEffect.NONE)
    EPIC = (2, 99, 35, TierEffect.GRANT_SHIELD)
    LEGENDARY = (3, 100, 80, TierEffect.REDUCE_RATE)

    def __init__(self, tier_id: int, upper_bound: int, multiplier_tenths: int, effect: TierEffect):
        self.tier_id = tier_id
        self.upper_bound = upper_bound
        self.multiplier_tenths = multiplier_tenths
        self.effect = effect

    @classmethod
    def from_id(cls, tier_id: int) -> "RewardTier":
        for tier in cls:
            if tier.tier_id == tier_id:
                return tier
        raise ValueError(f"Unknown reward tier: {tier_id}")

    def apply(self, mint_power: int) -> int:
        """Multiply mint power by this tier's multiplier."""
        return mint_power * self.multiplier_tenths // 10


ROLL_MODULUS = 100


def tier_for_roll(roll: int) -> RewardTier:
    """Map a roll in [0, 100) to its tier band."""
    if not 0 <= roll < ROLL_MODULUS:
        raise ValueError(f"Roll out of range: {roll}")
    for tier in RewardTier:
        if roll < tier.upper_bound:
            return tier
    # Unreachable, Legendary's bound is the modulus
    return RewardTier.LEGENDARY


@dataclass(frozen=True)
class TierDraw:
    """Outcome of a single draw."""
    reward: int
    tier: RewardTier
    roll: int
    nonce: int

    @property
    def tier_id(self) -> int:
        return self.tier.tier_id


# ============================================================================
# ENTROPY SOURCES
# ============================================================================

class EntropySource(ABC):
    """Per-operation unpredictable value supplied by the host."""

    @abstractmethod
    def current(self) -> bytes:
        pass


class SystemEntropySource(EntropySource):
    """Entropy from the operating system CSPRNG."""

    def __init__(self, num_bytes: int = 32):
        self.num_bytes = num_bytes

    def current(self) -> bytes:
        return os.urandom(self.num_bytes)


class FixedEntropySource(EntropySource):
    """
    Deterministic entropy for tests and simulations.

    Given a single value it always returns it; given a sequence it cycles
    through it.
    """

    def __init__(self, values: Union[bytes, str, int, Iterable[Union[bytes, str, int]]] = b"chronofuel"):
        if isinstance(values, (bytes, str, int)):
            values = [values]
        self._values: List[bytes] = [self._to_bytes(v) for v in values]
        if not self._values:
            raise ValueError("FixedEntropySource needs at least one value")
        self._position = 0

    @staticmethod
    def _to_bytes(value: Union[bytes, str, int]) -> bytes:
        if isinstance(value, bytes):
            return value
        if isinstance(value, int):
            return value.to_bytes(32, "big", signed=False)
        return value.encode()

    def current(self) -> bytes:
        value = self._values[self._position % len(self._values)]
        self._position += 1
        return value


# ============================================================================
# SELECTOR
# ============================================================================

class RandomTierSelector(Transactional):
    """
    Draws a reward tier per claim.

    Usage:
        selector = RandomTierSelector(SystemEntropySource())
        draw = selector.draw("alice", mint_power, now)
        draw.reward, draw.tier
    """

    def __init__(self, entropy: Optional[EntropySource] = None):
        self.entropy = entropy or SystemEntropySource()
        self._nonces: Dict[str, int] = {}

    def nonce_of(self, identity: str) -> int:
        return self._nonces.get(identity, 0)

    def roll(self, identity: str, now: int) -> tuple:
        """Advance the identity's nonce and derive a roll in [0, 100)."""
        nonce = self._nonces.get(identity, 0) + 1
        self._nonces[identity] = nonce

        hasher = hashlib.sha256()
        hasher.update(self.entropy.current())
        hasher.update(int(now).to_bytes(8, "big", signed=False))
        hasher.update(identity.encode())
        hasher.update(nonce.to_bytes(8, "big", signed=False))
        seed = int.from_bytes(hasher.digest(), "big")
        return seed % ROLL_MODULUS, nonce

    def draw(self, identity: str, mint_power: int, now: int) -> TierDraw:
        """
        Draw a tier and apply its multiplier.

        Args:
            identity: Claiming participant
            mint_power: Effective mint power in wei
            now: Claim timestamp

        Returns:
            TierDraw with reward = mint_power * multiplier
        """
        roll, nonce = self.roll(identity, now)
        tier = tier_for_roll(roll)
        reward = tier.apply(mint_power)
        logger.debug(f"Tier draw for {identity}: roll={roll} tier={tier.name} reward={reward}")
        return TierDraw(reward=reward, tier=tier, roll=roll, nonce=nonce)

    def snapshot(self):
        return deep_snapshot(self._nonces)

    def restore(self, state) -> None:
        (self._nonces,) = state
