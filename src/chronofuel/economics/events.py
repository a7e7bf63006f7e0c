"""
chronofuel/economics/events.py

Records emitted for downstream observers and indexers.

Events raised inside an operation are buffered and only published once
the operation commits; a failed operation publishes nothing.

Usage:
    log = EventLog()
    log.subscribe(lambda event: print(event.to_dict()))

    engine = RewardEngine(ledger, events=log)
    engine.stake("alice", 100 * SCALE)

    last = log.last(Staked)
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from typing import Callable, Iterator, List, Optional, Type, TypeVar

logger = logging.getLogger("chronofuel.economics.events")

E = TypeVar("E", bound="Event")


# ============================================================================
# EVENT RECORDS
# ============================================================================

@dataclass(frozen=True)
class Event:
    """Base class for emitted records."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        data = asdict(self)
        data["event"] = self.name
        return data


@dataclass(frozen=True)
class Staked(Event):
    identity: str
    amount: int


@dataclass(frozen=True)
class Unstaked(Event):
    identity: str
    amount: int


@dataclass(frozen=True)
class RewardClaimed(Event):
    identity: str
    elapsed: int
    staked_amount: int
    effective_mint_power: int
    final_reward: int
    tier_id: int
    cooldown_used: int


@dataclass(frozen=True)
class BurnedForBoost(Event):
    identity: str
    amount: int
    record_id: int


@dataclass(frozen=True)
class HalvingTriggered(Event):
    new_threshold: int
    new_rate: int
    count: int


@dataclass(frozen=True)
class ShieldGranted(Event):
    identity: str


@dataclass(frozen=True)
class ShieldConsumed(Event):
    identity: str


@dataclass(frozen=True)
class RateReduced(Event):
    delta: int
    cumulative: int


# ============================================================================
# EVENT LOG
# ============================================================================

class EventLog:
    """
    Ordered history of committed events with subscriber callbacks.

    Subscriber errors are logged and never abort the operation that
    produced the event.
    """

    def __init__(self):
        self._history: List[Event] = []
        self._pending: List[Event] = []
        self._depth = 0
        self._subscribers: List[Callable[[Event], None]] = []

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        """Register a callback invoked for every committed event."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Event], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(self, event: Event) -> None:
        """Emit an event, buffering it while an operation is open."""
        if self._depth > 0:
            self._pending.append(event)
        else:
            self._publish(event)

    @contextmanager
    def deferred(self) -> Iterator[None]:
        """
        Buffer events for the duration of an operation.

        Nested blocks share the buffer; only the outermost successful exit
        publishes. Any exception discards events buffered inside the block.
        """
        mark = len(self._pending)
        self._depth += 1
        try:
            yield
        except BaseException:
            del self._pending[mark:]
            raise
        finally:
            self._depth -= 1

        if self._depth == 0:
            pending, self._pending = self._pending, []
            for event in pending:
                self._publish(event)

    def _publish(self, event: Event) -> None:
        self._history.append(event)
        logger.debug(f"Event {event.name}: {event.to_dict()}")
        for callback in self._subscribers:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Event subscriber error on {event.name}: {e}")

    @property
    def history(self) -> List[Event]:
        return list(self._history)

    def of_type(self, event_type: Type[E]) -> List[E]:
        """All committed events of a given type, oldest first."""
        return [e for e in self._history if isinstance(e, event_type)]

    def last(self, event_type: Type[E]) -> Optional[E]:
        """Most recent committed event of a given type."""
        for event in reversed(self._history):
            if isinstance(event, event_type):
                return event
        return None

    def __len__(self) -> int:
        return len(self._history)
