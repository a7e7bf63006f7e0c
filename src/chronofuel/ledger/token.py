"""
chronofuel/ledger/token.py

In-memory reference ledger for the emission token.

Implements only what the engine and its tests need: balances, a direct
transfer, allowances, burns with per-holder cumulative burn tracking, and
engine-restricted minting. The genesis supply is minted to the owner and
counts toward total_minted.

Mutations run under `lock`; pass the lock the engine uses so a rolled
back engine operation cannot overwrite a transfer another thread made
while it was running.
"""

import logging
import threading
from collections import defaultdict
from typing import Dict, Optional, Tuple

from ..config import INITIAL_SUPPLY
from ..errors import (
    AuthorizationError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    ValidationError,
)
from ..wiring import bind_once
from ..economics.atomic import Transactional, deep_snapshot
from .interfaces import Ledger

logger = logging.getLogger("chronofuel.ledger.token")


class InMemoryLedger(Ledger, Transactional):
    """
    Dictionary-backed token ledger.

    Usage:
        ledger = InMemoryLedger(owner="owner")
        ledger.transfer("owner", "alice", 1000 * SCALE)
        ledger.approve("alice", engine.address, 1000 * SCALE)
        ledger.set_engine(engine.address)
    """

    def __init__(
        self,
        owner: str,
        initial_supply: int = INITIAL_SUPPLY,
        lock: Optional["threading.RLock"] = None,
    ):
        if not owner:
            raise ValidationError("InMemoryLedger: owner cannot be null")
        if initial_supply < 0:
            raise ValidationError("InMemoryLedger: initial supply cannot be negative")

        self.owner = owner
        self._lock = lock if lock is not None else threading.RLock()
        self._engine_address: Optional[str] = None
        self._balances: Dict[str, int] = defaultdict(int)
        self._allowances: Dict[Tuple[str, str], int] = defaultdict(int)
        self._burned: Dict[str, int] = defaultdict(int)
        self._total_minted = 0
        self._total_burned = 0
        self._total_supply = 0

        if initial_supply:
            self._credit_mint(owner, initial_supply)

    # ========================================================================
    # WIRING
    # ========================================================================

    @property
    def engine_address(self) -> Optional[str]:
        return self._engine_address

    def set_engine(self, address: str) -> None:
        """Register the only identity allowed to mint (one-time)."""
        with self._lock:
            self._engine_address = bind_once(self._engine_address, address, "InMemoryLedger.engine")

    # ========================================================================
    # QUERIES
    # ========================================================================

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def allowance(self, holder: str, spender: str) -> int:
        return self._allowances.get((holder, spender), 0)

    def burned_amount_of(self, identity: str) -> int:
        return self._burned.get(identity, 0)

    def total_minted(self) -> int:
        return self._total_minted

    def total_burned(self) -> int:
        return self._total_burned

    def total_supply(self) -> int:
        return self._total_supply

    # ========================================================================
    # MUTATIONS
    # ========================================================================

    def transfer(self, sender: str, to: str, amount: int) -> None:
        self._require_positive(amount)
        with self._lock:
            self._debit(sender, amount)
            self._balances[to] += amount

    def approve(self, holder: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise ValidationError("InMemoryLedger: allowance cannot be negative")
        with self._lock:
            self._allowances[(holder, spender)] = amount

    def burn(self, holder: str, amount: int) -> None:
        self._require_positive(amount)
        with self._lock:
            self._debit(holder, amount)
            self._record_burn(holder, amount)

    def burn_from(self, holder: str, amount: int, spender: str) -> None:
        self._require_positive(amount)
        with self._lock:
            self._spend_allowance(holder, spender, amount)
            self._debit(holder, amount)
            self._record_burn(holder, amount)

    def transfer_in(self, holder: str, amount: int, caller: str) -> None:
        self._require_positive(amount)
        with self._lock:
            self._spend_allowance(holder, caller, amount)
            self._debit(holder, amount)
            self._balances[caller] += amount

    def transfer_out(self, to: str, amount: int, caller: str) -> None:
        self._require_positive(amount)
        with self._lock:
            self._debit(caller, amount)
            self._balances[to] += amount

    def mint(self, to: str, amount: int, caller: str) -> None:
        if self._engine_address is None or caller != self._engine_address:
            raise AuthorizationError(f"InMemoryLedger: {caller} is not allowed to mint")
        self._require_positive(amount)
        with self._lock:
            self._credit_mint(to, amount)

    # ========================================================================
    # INTERNALS
    # ========================================================================

    @staticmethod
    def _require_positive(amount: int) -> None:
        if amount <= 0:
            raise ValidationError("InMemoryLedger: amount must be positive")

    def _debit(self, holder: str, amount: int) -> None:
        balance = self._balances.get(holder, 0)
        if balance < amount:
            raise InsufficientBalanceError(
                f"InMemoryLedger: {holder} has {balance}, needs {amount}"
            )
        self._balances[holder] = balance - amount

    def _spend_allowance(self, holder: str, spender: str, amount: int) -> None:
        if holder == spender:
            return
        allowed = self._allowances.get((holder, spender), 0)
        if allowed < amount:
            raise InsufficientAllowanceError(
                f"InMemoryLedger: {spender} may spend {allowed} of {holder}, needs {amount}"
            )
        self._allowances[(holder, spender)] = allowed - amount

    def _record_burn(self, holder: str, amount: int) -> None:
        self._burned[holder] += amount
        self._total_burned += amount
        self._total_supply -= amount
        logger.debug(f"Burned {amount} from {holder}")

    def _credit_mint(self, to: str, amount: int) -> None:
        self._balances[to] += amount
        self._total_minted += amount
        self._total_supply += amount
        logger.debug(f"Minted {amount} to {to}")

    def snapshot(self):
        return deep_snapshot(
            self._balances,
            self._allowances,
            self._burned,
            self._total_minted,
            self._total_burned,
            self._total_supply,
        )

    def restore(self, state) -> None:
        (
            self._balances,
            self._allowances,
            self._burned,
            self._total_minted,
            self._total_burned,
            self._total_supply,
        ) = state
