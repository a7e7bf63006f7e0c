"""
chronofuel/economics/halving.py

Adaptive halving controller.

Owns the emission threshold and the advisory halving rate:

- When cumulative minted supply reaches the current threshold, a halving
  triggers and the threshold is recomputed from cumulative burns:

      threshold = INITIAL * (1 + total_burned / BURN_SCALE)

- The advisory rate starts at 50% and rises with the share of supply
  staked, less any "halving key" reductions granted by Legendary claims:

      rate = min(80, max(0, 50 * (1 + staking_ratio / 10) - key_effect))

- Epic claims grant a one-shot anti-halving shield that the holder (or
  the owner) can later consume.

Mutating operations are restricted to the owner and the bound engine.
Each holds a non-reentrant guard; build_system gives that guard the
same lock as the engine.
"""

import logging
import threading
from typing import TYPE_CHECKING, Optional, Set

from ..config import PRECISION, HALVING_PARAMS
from ..errors import (
    AuthorizationError,
    NotConfiguredError,
    ShieldNotFoundError,
    ValidationError,
)
from ..wiring import bind_once
from .atomic import NonReentrantGuard, Transactional, atomic, deep_snapshot
from .events import (
    EventLog,
    HalvingTriggered,
    RateReduced,
    ShieldConsumed,
    ShieldGranted,
)

if TYPE_CHECKING:
    from ..ledger.interfaces import Ledger
    from .engine import RewardEngine

logger = logging.getLogger("chronofuel.economics.halving")


INITIAL_THRESHOLD = HALVING_PARAMS["initial_threshold"]
BURN_SCALE = HALVING_PARAMS["burn_scale"]
BASE_RATE_PERCENT = HALVING_PARAMS["base_rate_percent"]
MAX_RATE_PERCENT = HALVING_PARAMS["max_rate_percent"]
STAKE_RATIO_DIVISOR = HALVING_PARAMS["stake_ratio_divisor"]


class HalvingController(Transactional):
    """
    Emission threshold, halving count, key effect and shields.

    Usage:
        halving = HalvingController(ledger, owner="owner")
        halving.set_engine(engine)
        engine.set_halving_controller(halving)

        halving.check_and_apply(caller="owner")
        halving.adjusted_rate()
    """

    def __init__(
        self,
        ledger: Optional["Ledger"],
        owner: str,
        events: Optional[EventLog] = None,
        lock: Optional["threading.RLock"] = None,
    ):
        if not owner:
            raise ValidationError("HalvingController: owner cannot be null")
        self.ledger = ledger
        self.owner = owner
        self.events = events or EventLog()
        self._engine: Optional["RewardEngine"] = None
        self._guard = NonReentrantGuard("HalvingController", lock)

        self.current_threshold: int = INITIAL_THRESHOLD
        self.halving_count: int = 0
        self.halving_key_effect_percent: int = 0
        self._shield_holders: Set[str] = set()

    # ========================================================================
    # WIRING
    # ========================================================================

    @property
    def engine(self) -> Optional["RewardEngine"]:
        return self._engine

    def set_engine(self, engine: "RewardEngine") -> None:
        """Bind the reward engine (one-time)."""
        self._engine = bind_once(self._engine, engine, "HalvingController.engine")

    def _require_authorized(self, caller: str) -> None:
        if caller == self.owner:
            return
        if self._engine is not None and caller == self._engine.address:
            return
        raise AuthorizationError(f"HalvingController: unauthorized caller {caller}")

    # ========================================================================
    # HALVING
    # ========================================================================

    def check_and_apply(self, caller: str) -> bool:
        """
        Trigger a halving if minted supply has reached the threshold.

        Returns:
            True if a halving was applied
        """
        with self._guard.enter("check_and_apply"), self.events.deferred(), atomic(self):
            self._require_authorized(caller)
            if self.ledger is None:
                raise NotConfiguredError("HalvingController: ledger not configured")

            total_minted = self.ledger.total_minted()
            if total_minted < self.current_threshold:
                logger.debug(f"No halving: minted {total_minted} < threshold {self.current_threshold}")
                return False

            self.halving_count += 1
            burn_factor = PRECISION + self.ledger.total_burned() * PRECISION // BURN_SCALE
            self.current_threshold = INITIAL_THRESHOLD * burn_factor // PRECISION
            rate = self.adjusted_rate()
            self.events.emit(HalvingTriggered(
                new_threshold=self.current_threshold,
                new_rate=rate,
                count=self.halving_count,
            ))

        logger.info(
            f"Halving #{self.halving_count} triggered: "
            f"threshold={self.current_threshold} rate={rate}%"
        )
        return True

    def adjusted_rate(self) -> int:
        """
        Advisory halving rate in percent, in [0, 80].

        Reported only; it does not feed back into the engine's base rate.
        """
        if self._engine is None:
            raise NotConfiguredError("HalvingController: engine not configured")
        if self.ledger is None:
            raise NotConfiguredError("HalvingController: ledger not configured")

        total_supply = self.ledger.total_supply()
        if total_supply == 0:
            staking_ratio = 0
        else:
            staking_ratio = self._engine.total_staked * PRECISION // total_supply

        rate = BASE_RATE_PERCENT * (PRECISION + staking_ratio // STAKE_RATIO_DIVISOR) // PRECISION
        rate = max(0, rate - self.halving_key_effect_percent)
        return min(rate, MAX_RATE_PERCENT)

    def reduce_rate(self, percent: int, caller: str) -> int:
        """
        Accumulate a halving-key rate reduction.

        Returns:
            New cumulative key effect
        """
        if percent <= 0:
            raise ValidationError("HalvingController: reduction must be positive")

        with self._guard.enter("reduce_rate"):
            self._require_authorized(caller)
            self.halving_key_effect_percent += percent
            cumulative = self.halving_key_effect_percent
            self.events.emit(RateReduced(delta=percent, cumulative=cumulative))

        logger.info(f"Halving rate reduced by {percent}% (cumulative {cumulative}%)")
        return cumulative

    # ========================================================================
    # SHIELDS
    # ========================================================================

    def grant_shield(self, identity: str, caller: str) -> None:
        """Grant an anti-halving shield; granting twice leaves one shield."""
        if not identity:
            raise ValidationError("HalvingController: identity cannot be null")

        with self._guard.enter("grant_shield"):
            self._require_authorized(caller)
            self._shield_holders.add(identity)
            self.events.emit(ShieldGranted(identity=identity))

        logger.info(f"Anti-halving shield granted to {identity}")

    def consume_shield(self, identity: str, caller: str) -> None:
        """Consume a previously granted shield."""
        with self._guard.enter("consume_shield"):
            self._require_authorized(caller)
            if identity not in self._shield_holders:
                raise ShieldNotFoundError(f"HalvingController: {identity} holds no shield")
            self._shield_holders.discard(identity)
            self.events.emit(ShieldConsumed(identity=identity))

        logger.info(f"Anti-halving shield consumed by {identity}")

    def has_shield(self, identity: str) -> bool:
        return identity in self._shield_holders

    @property
    def shield_holders(self) -> Set[str]:
        return set(self._shield_holders)

    # ========================================================================
    # STATE
    # ========================================================================

    def get_stats(self) -> dict:
        return {
            "current_threshold": self.current_threshold,
            "halving_count": self.halving_count,
            "halving_key_effect_percent": self.halving_key_effect_percent,
            "shield_holders": len(self._shield_holders),
        }

    def snapshot(self):
        return deep_snapshot(
            self.current_threshold,
            self.halving_count,
            self.halving_key_effect_percent,
            self._shield_holders,
        )

    def restore(self, state) -> None:
        (
            self.current_threshold,
            self.halving_count,
            self.halving_key_effect_percent,
            self._shield_holders,
        ) = state
