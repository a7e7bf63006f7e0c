"""
chronofuel/economics/engine.py

Reward engine: stake, wait, claim.

Participants lock tokens with the engine and periodically claim a reward
whose size depends on:

- Time waited since the last claim (capped at 24h of emission)
- Stake size (integer log10 boost, 1x to 10x)
- Cumulative burn history (1 + 0.7 * sqrt(tokens burned))
- A randomized tier (1.0x / 1.8x / 3.5x / 8.0x)

Claim pipeline:

    cooldown check -> activity refresh -> time reward -> stake boost
      -> burn boost -> effective mint power -> tier draw -> mint

The cooldown shrinks as more participants are active:

    cooldown = max(60, 900 - 12 * active_count) seconds

Every public mutating operation is non-reentrant and atomic: it either
applies completely (engine bookkeeping, halving side effects, ledger and
certificate writes, events) or not at all.

Usage:
    from chronofuel.economics.engine import RewardEngine
    from chronofuel.ledger import InMemoryLedger

    ledger = InMemoryLedger(owner="owner")
    engine = RewardEngine(ledger)
    ledger.set_engine(engine.address)

    engine.stake("alice", 100 * SCALE)
    result = engine.claim_reward("alice")
"""

import logging
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, asdict
from typing import TYPE_CHECKING, Callable, Dict, Iterator, Optional

from ..clock import SystemClock
from ..config import (
    AIRDROP_RIGHTS_PER_TOKEN,
    DAO_POINTS_PER_TOKEN,
    LEGENDARY_RATE_REDUCTION,
    EmissionConfig,
)
from ..errors import (
    CooldownActiveError,
    InsufficientStakeError,
    NoActiveStakeError,
    NotConfiguredError,
    ValidationError,
)
from ..wiring import bind_once
from .activity import ActivityTracker
from .atomic import NonReentrantGuard, Transactional, atomic, deep_snapshot
from .events import BurnedForBoost, EventLog, RewardClaimed, Staked, Unstaked
from .fixed_point import (
    apply_fixed_point,
    burn_boost_of,
    stake_boost_of,
    to_base_units,
)
from .tiers import EntropySource, RandomTierSelector, RewardTier, TierEffect

if TYPE_CHECKING:
    from ..ledger.interfaces import CertificateRegistry, Ledger
    from .halving import HalvingController

logger = logging.getLogger("chronofuel.economics.engine")


DEFAULT_ENGINE_ADDRESS = "reward-engine"


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class ParticipantAccount:
    """Per-participant stake bookkeeping."""
    identity: str
    staked_amount: int = 0
    last_claim_timestamp: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ClaimResult:
    """Every intermediate value of a successful claim."""
    identity: str
    claimed_at: int
    elapsed: int
    cooldown_used: int
    staked_amount: int
    time_reward: int
    stake_boost: int
    burn_boost: int
    raw_mint_power: int
    effective_mint_power: int
    final_reward: int
    tier: RewardTier

    @property
    def tier_id(self) -> int:
        return self.tier.tier_id

    def to_dict(self) -> dict:
        data = asdict(self)
        data["tier"] = self.tier.name.lower()
        data["tier_id"] = self.tier_id
        return data


# ============================================================================
# REWARD ENGINE
# ============================================================================

class RewardEngine(Transactional):
    """
    Stake bookkeeping and cooldown-gated reward claims.

    Collaborators:
        ledger: token ledger (required)
        certificate_registry: needed only for boost_burn
        halving: receives shield/rate side effects of rare tiers

    Pass the lock shared with the collaborators when other threads may
    call them directly; build_system does this.
    """

    def __init__(
        self,
        ledger: "Ledger",
        address: str = DEFAULT_ENGINE_ADDRESS,
        config: Optional[EmissionConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        entropy: Optional[EntropySource] = None,
        events: Optional[EventLog] = None,
        certificate_registry: Optional["CertificateRegistry"] = None,
        halving: Optional["HalvingController"] = None,
        lock: Optional["threading.RLock"] = None,
    ):
        if ledger is None:
            raise ValidationError("RewardEngine: ledger cannot be null")
        if not address:
            raise ValidationError("RewardEngine: address cannot be null")

        self.ledger = ledger
        self.address = address
        self.config = config or EmissionConfig()
        self.clock = clock or SystemClock()
        self.events = events or EventLog()

        self.activity = ActivityTracker(self.config.activity_window_seconds)
        self.selector = RandomTierSelector(entropy)

        self._accounts: Dict[str, ParticipantAccount] = {}
        self._total_staked = 0
        self._guard = NonReentrantGuard("RewardEngine", lock)

        self._certificate_registry: Optional["CertificateRegistry"] = None
        self._halving: Optional["HalvingController"] = None
        if certificate_registry is not None:
            self.set_certificate_registry(certificate_registry)
        if halving is not None:
            self.set_halving_controller(halving)

    # ========================================================================
    # WIRING
    # ========================================================================

    @property
    def certificate_registry(self) -> Optional["CertificateRegistry"]:
        return self._certificate_registry

    @property
    def halving(self) -> Optional["HalvingController"]:
        return self._halving

    def set_certificate_registry(self, registry: "CertificateRegistry") -> None:
        self._certificate_registry = bind_once(
            self._certificate_registry, registry, "RewardEngine.certificate_registry"
        )

    def set_halving_controller(self, halving: "HalvingController") -> None:
        self._halving = bind_once(self._halving, halving, "RewardEngine.halving")

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        """Guard + event buffering + rollback for one public operation."""
        with ExitStack() as stack:
            stack.enter_context(self._guard.enter(name))
            stack.enter_context(self.events.deferred())
            if self._halving is not None and self._halving.events is not self.events:
                stack.enter_context(self._halving.events.deferred())
            stack.enter_context(atomic(
                self,
                self.activity,
                self.selector,
                self._halving,
                self.ledger,
                self._certificate_registry,
            ))
            yield

    # ========================================================================
    # QUERIES
    # ========================================================================

    @property
    def total_staked(self) -> int:
        return self._total_staked

    def account(self, identity: str) -> Optional[ParticipantAccount]:
        account = self._accounts.get(identity)
        if account is None:
            return None
        return ParticipantAccount(**account.to_dict())

    def staked_amount_of(self, identity: str) -> int:
        account = self._accounts.get(identity)
        return account.staked_amount if account else 0

    def last_claim_of(self, identity: str) -> int:
        account = self._accounts.get(identity)
        return account.last_claim_timestamp if account else 0

    def participants(self) -> int:
        return len(self._accounts)

    def active_count(self) -> int:
        return self.activity.active_count()

    def cooldown(self) -> int:
        """Seconds between claims, shrinking with the active count."""
        reduction = self.config.cooldown_reduction_per_active * self.activity.active_count()
        return max(
            self.config.min_cooldown_seconds,
            self.config.base_cooldown_seconds - reduction,
        )

    def next_claim_at(self, identity: str) -> int:
        """Earliest timestamp at which identity may claim again."""
        return self.last_claim_of(identity) + self.cooldown()

    def time_reward_for(self, elapsed: int) -> int:
        """
        Emission earned by waiting `elapsed` seconds, capped at 24h.

        Any positive wait earns at least one wei.
        """
        rate = self.config.base_rate_per_hour
        reward = min(elapsed * rate // 3600, self.config.max_time_reward)
        if elapsed > 0 and reward == 0:
            reward = 1
        return reward

    def stake_boost_of(self, staked_amount: int) -> int:
        return stake_boost_of(staked_amount)

    def mint_power_snapshot(self, identity: str, cumulative_burned: int) -> int:
        """Full-day mint power for identity's current stake and a given burn history."""
        stake_boost = stake_boost_of(self.staked_amount_of(identity))
        burn_boost = burn_boost_of(cumulative_burned)
        return apply_fixed_point(self.config.max_time_reward * stake_boost, burn_boost)

    # ========================================================================
    # STAKING
    # ========================================================================

    def stake(self, identity: str, amount: int) -> None:
        """Lock `amount` wei of identity's tokens with the engine."""
        with self._operation("stake"):
            if amount <= 0:
                raise ValidationError("RewardEngine: stake amount must be positive")
            if not identity:
                raise ValidationError("RewardEngine: identity cannot be null")

            account = self._accounts.get(identity)
            if account is None:
                account = ParticipantAccount(identity=identity)
                self._accounts[identity] = account
            account.staked_amount += amount
            self._total_staked += amount

            self.ledger.transfer_in(identity, amount, caller=self.address)
            self.events.emit(Staked(identity=identity, amount=amount))

        logger.info(f"{identity} staked {amount} (total staked {self._total_staked})")

    def unstake(self, identity: str, amount: int) -> None:
        """Release `amount` wei of identity's stake back to them."""
        with self._operation("unstake"):
            if amount <= 0:
                raise ValidationError("RewardEngine: unstake amount must be positive")

            account = self._accounts.get(identity)
            staked = account.staked_amount if account else 0
            if amount > staked:
                raise InsufficientStakeError(
                    f"RewardEngine: {identity} has {staked} staked, cannot unstake {amount}"
                )
            account.staked_amount -= amount
            self._total_staked -= amount

            self.ledger.transfer_out(identity, amount, caller=self.address)
            self.events.emit(Unstaked(identity=identity, amount=amount))

        logger.info(f"{identity} unstaked {amount} (total staked {self._total_staked})")

    # ========================================================================
    # CLAIMING
    # ========================================================================

    def claim_reward(self, identity: str) -> ClaimResult:
        """
        Claim the reward accrued since the last claim.

        Raises:
            NoActiveStakeError: identity has nothing staked
            CooldownActiveError: the cooldown since the last claim has not passed
        """
        with self._operation("claim_reward"):
            now = self.clock()
            account = self._accounts.get(identity)
            if account is None or account.staked_amount == 0:
                raise NoActiveStakeError(f"RewardEngine: no active stake for {identity}")

            cooldown = self.cooldown()
            ready_at = account.last_claim_timestamp + cooldown
            if now < ready_at:
                raise CooldownActiveError(
                    f"RewardEngine: cooldown not yet passed for {identity} "
                    f"({ready_at - now}s remaining)",
                    retry_at=ready_at,
                )

            self.activity.refresh(identity, now)

            elapsed = now - account.last_claim_timestamp
            time_reward = self.time_reward_for(elapsed)
            stake_boost = stake_boost_of(account.staked_amount)
            burn_boost = burn_boost_of(self.ledger.burned_amount_of(identity))
            raw_mint_power = time_reward * stake_boost
            effective_mint_power = apply_fixed_point(raw_mint_power, burn_boost)

            draw = self.selector.draw(identity, effective_mint_power, now)

            # Bookkeeping is committed before any external call
            account.last_claim_timestamp = now
            self._apply_tier_effect(identity, draw.tier)
            if draw.reward > 0:
                self.ledger.mint(identity, draw.reward, caller=self.address)

            result = ClaimResult(
                identity=identity,
                claimed_at=now,
                elapsed=elapsed,
                cooldown_used=cooldown,
                staked_amount=account.staked_amount,
                time_reward=time_reward,
                stake_boost=stake_boost,
                burn_boost=burn_boost,
                raw_mint_power=raw_mint_power,
                effective_mint_power=effective_mint_power,
                final_reward=draw.reward,
                tier=draw.tier,
            )
            self.events.emit(RewardClaimed(
                identity=identity,
                elapsed=elapsed,
                staked_amount=account.staked_amount,
                effective_mint_power=effective_mint_power,
                final_reward=draw.reward,
                tier_id=draw.tier_id,
                cooldown_used=cooldown,
            ))

        logger.info(
            f"{identity} claimed {result.final_reward} "
            f"({result.tier.name.lower()}, elapsed {elapsed}s, cooldown {cooldown}s)"
        )
        return result

    def _apply_tier_effect(self, identity: str, tier: RewardTier) -> None:
        if tier.effect is TierEffect.NONE:
            return
        if self._halving is None:
            logger.warning(f"{tier.name} tier for {identity} has no halving controller, effect skipped")
            return
        if tier.effect is TierEffect.GRANT_SHIELD:
            self._halving.grant_shield(identity, caller=self.address)
        elif tier.effect is TierEffect.REDUCE_RATE:
            self._halving.reduce_rate(LEGENDARY_RATE_REDUCTION, caller=self.address)

    # ========================================================================
    # BURN BOOST
    # ========================================================================

    def boost_burn(self, identity: str, amount: int) -> int:
        """
        Burn tokens to raise future burn boost and receive a certificate.

        The burn is applied first so an insufficient balance or allowance
        fails before anything else happens. The certificate's mint power
        snapshot uses the burn history from before this burn.

        Returns:
            Certificate record id
        """
        with self._operation("boost_burn"):
            if amount <= 0:
                raise ValidationError("RewardEngine: burn amount must be positive")
            registry = self._certificate_registry
            if registry is None:
                raise NotConfiguredError("RewardEngine: certificate registry not configured")

            self.ledger.burn_from(identity, amount, spender=self.address)
            burned_before = self.ledger.burned_amount_of(identity) - amount

            mint_power_before_burn = self.mint_power_snapshot(identity, burned_before)
            tokens = to_base_units(amount)
            record_id = registry.issue(
                identity,
                amount,
                mint_power_before_burn,
                tokens * DAO_POINTS_PER_TOKEN,
                tokens * AIRDROP_RIGHTS_PER_TOKEN,
                caller=self.address,
            )
            self.events.emit(BurnedForBoost(identity=identity, amount=amount, record_id=record_id))

        logger.info(f"{identity} burned {amount} for boost, certificate #{record_id}")
        return record_id

    # ========================================================================
    # HALVING
    # ========================================================================

    def check_halving(self) -> bool:
        """Ask the halving controller to apply a halving if one is due."""
        with self._operation("check_halving"):
            if self._halving is None:
                raise NotConfiguredError("RewardEngine: halving controller not configured")
            return self._halving.check_and_apply(caller=self.address)

    # ========================================================================
    # STATE
    # ========================================================================

    def get_stats(self) -> dict:
        return {
            "address": self.address,
            "participants": len(self._accounts),
            "total_staked": self._total_staked,
            "active_count": self.activity.active_count(),
            "cooldown": self.cooldown(),
        }

    def snapshot(self):
        return deep_snapshot(self._accounts, self._total_staked)

    def restore(self, state) -> None:
        self._accounts, self._total_staked = state
