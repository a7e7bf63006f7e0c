"""
chronofuel/economics/activity.py

Rolling 24h set of active participants.

The active count feeds the congestion-sensitive claim cooldown: the more
participants claimed recently, the shorter everyone's cooldown.

Membership is evaluated lazily. Stale entries are pruned on the next
refresh() call, not on a timer. Each refresh is a full linear scan over
the active set; fine at modest participant counts.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..config import ACTIVITY_WINDOW_SECONDS
from .atomic import Transactional, deep_snapshot

logger = logging.getLogger("chronofuel.economics.activity")


@dataclass
class ActiveWindowEntry:
    """A participant seen within the activity window."""
    identity: str
    last_activity_timestamp: int


class ActivityTracker(Transactional):
    """
    Tracks which participants acted within the rolling window.

    Entries live in a compact list with an identity -> index map so that
    eviction is swap-with-last and O(1) per entry.
    """

    def __init__(self, window_seconds: int = ACTIVITY_WINDOW_SECONDS):
        self.window_seconds = window_seconds
        self._entries: List[ActiveWindowEntry] = []
        self._index: Dict[str, int] = {}

    def refresh(self, identity: str, now: int) -> None:
        """
        Record activity for identity and prune stale entries.

        An identity that is absent, or whose recorded activity is older than
        the window, is (re)inserted with timestamp `now`. A fresh entry keeps
        its original timestamp.
        """
        idx = self._index.get(identity)
        if idx is None:
            self._entries.append(ActiveWindowEntry(identity, now))
            self._index[identity] = len(self._entries) - 1
        elif now - self._entries[idx].last_activity_timestamp > self.window_seconds:
            self._entries[idx].last_activity_timestamp = now

        i = 0
        while i < len(self._entries):
            entry = self._entries[i]
            if now - entry.last_activity_timestamp > self.window_seconds:
                self._remove_at(i)
                # Re-check slot i, it now holds the former last entry
            else:
                i += 1

    def _remove_at(self, i: int) -> None:
        removed = self._entries[i]
        last = self._entries.pop()
        if last is not removed:
            self._entries[i] = last
            self._index[last.identity] = i
        del self._index[removed.identity]
        logger.debug(f"Evicted inactive participant {removed.identity}")

    def active_count(self) -> int:
        return len(self._entries)

    def is_active(self, identity: str) -> bool:
        return identity in self._index

    def last_activity(self, identity: str) -> Optional[int]:
        idx = self._index.get(identity)
        if idx is None:
            return None
        return self._entries[idx].last_activity_timestamp

    def snapshot(self):
        return deep_snapshot(self._entries, self._index)

    def restore(self, state) -> None:
        self._entries, self._index = state
