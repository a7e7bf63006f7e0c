"""
chronofuel/economics/atomic.py

All-or-nothing execution for public mutating operations.

Every public mutating operation runs as one unit: engine bookkeeping,
halving state, pending events and any collaborator that can snapshot
itself are captured on entry and restored if anything raises. Partial
application (a minted reward without the claim timestamp advancing, a
burn without its certificate) is never observable.

Usage:
    guard = NonReentrantGuard("RewardEngine")

    with guard.enter("claim_reward"):
        with atomic(engine, tracker, ledger):
            ...
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple

from ..errors import ReentrancyError

logger = logging.getLogger("chronofuel.economics.atomic")


class Transactional(ABC):
    """
    State holder that can roll itself back.

    snapshot() must return a value that restore() accepts; it is treated
    as opaque by the caller.
    """

    @abstractmethod
    def snapshot(self) -> Any:
        pass

    @abstractmethod
    def restore(self, state: Any) -> None:
        pass


def supports_snapshot(obj: Any) -> bool:
    """True if obj can take part in an atomic unit."""
    return callable(getattr(obj, "snapshot", None)) and callable(getattr(obj, "restore", None))


def deep_snapshot(*values: Any) -> Tuple[Any, ...]:
    """Deep copy helper for snapshot() implementations."""
    return copy.deepcopy(values)


@contextmanager
def atomic(*participants: Optional[Any]) -> Iterator[None]:
    """
    Run the enclosed block as one unit across participants.

    Participants that are None or do not implement snapshot/restore are
    skipped. On any exception every snapshotted participant is restored,
    in reverse order, and the exception propagates unchanged.
    """
    captured: List[Tuple[Any, Any]] = []
    seen = set()
    for participant in participants:
        if participant is None or id(participant) in seen:
            continue
        seen.add(id(participant))
        if supports_snapshot(participant):
            captured.append((participant, participant.snapshot()))

    try:
        yield
    except BaseException as e:
        for participant, state in reversed(captured):
            participant.restore(state)
        logger.debug(f"Rolled back {len(captured)} participants after {type(e).__name__}")
        raise


class NonReentrantGuard:
    """
    Exclusive execution guard.

    The lock serializes callers on different threads. Components that
    roll back each other's state must share one lock (see
    system.build_system), otherwise a rollback in one thread can undo
    work another thread committed in the meantime. The lock is
    re-entrant so one component's guard may call into another's; a
    nested call into the *same* guard from the thread holding it is
    rejected with ReentrancyError.

    Usage:
        lock = threading.RLock()
        engine_guard = NonReentrantGuard("RewardEngine", lock)
        halving_guard = NonReentrantGuard("HalvingController", lock)
    """

    def __init__(self, name: str, lock: Optional["threading.RLock"] = None):
        self.name = name
        self._lock = lock if lock is not None else threading.RLock()
        self._holder: Optional[int] = None
        self._operation: Optional[str] = None

    @property
    def lock(self) -> "threading.RLock":
        return self._lock

    @property
    def active(self) -> bool:
        return self._holder is not None

    @contextmanager
    def enter(self, operation: str) -> Iterator[None]:
        ident = threading.get_ident()
        if self._holder == ident:
            raise ReentrancyError(
                f"{self.name}: re-entry into {operation} while {self._operation} is running"
            )
        with self._lock:
            self._holder = ident
            self._operation = operation
            try:
                yield
            finally:
                self._holder = None
                self._operation = None
