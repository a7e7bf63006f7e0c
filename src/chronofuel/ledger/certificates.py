"""
chronofuel/ledger/certificates.py

Burn-boost certificate registry.

Every boost burn produces an immutable certificate recording who burned,
how much, the burner's mint power just before the burn, and the DAO
points and airdrop rights it earned. Certificates can change hands; their
contents never change.

Issue and transfer run under `lock`, shared with the engine when built
through build_system.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, asdict
from typing import Callable, Dict, List, Optional

from ..clock import SystemClock
from ..errors import (
    AuthorizationError,
    RecordIndexError,
    StateError,
    ValidationError,
)
from ..wiring import bind_once
from ..economics.atomic import Transactional, deep_snapshot
from .interfaces import CertificateRegistry

logger = logging.getLogger("chronofuel.ledger.certificates")


@dataclass(frozen=True)
class BurnBoostRecord:
    """Immutable burn certificate."""
    record_id: int
    burner: str
    amount_burned: int              # wei
    mint_power_before_burn: int     # wei, 24h snapshot before this burn
    dao_points: int                 # whole tokens burned * 4
    airdrop_rights: int             # whole tokens burned
    created_at: int

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "BurnBoostRecord":
        return cls(**data)


class InMemoryCertificateRegistry(CertificateRegistry, Transactional):
    """
    Dictionary-backed certificate store with per-holder enumeration.

    Usage:
        registry = InMemoryCertificateRegistry()
        registry.set_engine(engine.address)
        engine.set_certificate_registry(registry)

        record_id = engine.boost_burn("alice", 50 * SCALE)
        registry.get(record_id).dao_points
    """

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        lock: Optional["threading.RLock"] = None,
    ):
        self.clock = clock or SystemClock()
        self._lock = lock if lock is not None else threading.RLock()
        self._engine_address: Optional[str] = None
        self._records: Dict[int, BurnBoostRecord] = {}
        self._holders: Dict[int, str] = {}
        self._owned: Dict[str, List[int]] = defaultdict(list)
        self._next_id = 1

    def set_engine(self, address: str) -> None:
        """Register the only identity allowed to issue (one-time)."""
        with self._lock:
            self._engine_address = bind_once(
                self._engine_address, address, "CertificateRegistry.engine"
            )

    def issue(
        self,
        burner: str,
        amount_burned: int,
        mint_power_before_burn: int,
        dao_points: int,
        airdrop_rights: int,
        caller: str,
    ) -> int:
        if self._engine_address is None or caller != self._engine_address:
            raise AuthorizationError(f"CertificateRegistry: {caller} is not allowed to issue")
        if not burner:
            raise ValidationError("CertificateRegistry: burner cannot be null")

        with self._lock:
            record = BurnBoostRecord(
                record_id=self._next_id,
                burner=burner,
                amount_burned=amount_burned,
                mint_power_before_burn=mint_power_before_burn,
                dao_points=dao_points,
                airdrop_rights=airdrop_rights,
                created_at=self.clock(),
            )
            self._next_id += 1
            self._records[record.record_id] = record
            self._holders[record.record_id] = burner
            self._owned[burner].append(record.record_id)

        logger.info(f"Burn certificate #{record.record_id} issued to {burner}")
        return record.record_id

    def get(self, record_id: int) -> BurnBoostRecord:
        record = self._records.get(record_id)
        if record is None:
            raise StateError(f"CertificateRegistry: unknown record {record_id}")
        return record

    def holder_of(self, record_id: int) -> str:
        self.get(record_id)
        return self._holders[record_id]

    def balance_of(self, holder: str) -> int:
        return len(self._owned.get(holder, []))

    def record_of_holder_by_index(self, holder: str, index: int) -> int:
        owned = self._owned.get(holder, [])
        if index < 0 or index >= len(owned):
            raise RecordIndexError(
                f"CertificateRegistry: index {index} out of range for {holder} ({len(owned)} records)"
            )
        return owned[index]

    def records_of(self, holder: str) -> List[BurnBoostRecord]:
        return [self._records[rid] for rid in self._owned.get(holder, [])]

    def transfer(self, caller: str, sender: str, to: str, record_id: int) -> None:
        """Move a certificate; only its current holder may do so."""
        if not to:
            raise ValidationError("CertificateRegistry: recipient cannot be null")
        with self._lock:
            holder = self.holder_of(record_id)
            if caller != holder or sender != holder:
                raise AuthorizationError(
                    f"CertificateRegistry: {caller} cannot move record {record_id} held by {holder}"
                )
            self._owned[holder].remove(record_id)
            self._owned[to].append(record_id)
            self._holders[record_id] = to
        logger.info(f"Burn certificate #{record_id} moved {holder} -> {to}")

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self):
        return deep_snapshot(self._records, self._holders, self._owned, self._next_id)

    def restore(self, state) -> None:
        self._records, self._holders, self._owned, self._next_id = state
