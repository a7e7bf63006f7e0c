"""
Tests for chronofuel/economics/events.py and chronofuel/economics/atomic.py
"""

import threading

import pytest

from chronofuel.errors import ReentrancyError
from chronofuel.economics.atomic import NonReentrantGuard, Transactional, atomic, deep_snapshot
from chronofuel.economics.events import EventLog, ShieldGranted, Staked


class Counter(Transactional):
    def __init__(self):
        self.value = 0
        self.items = []

    def snapshot(self):
        return deep_snapshot(self.value, self.items)

    def restore(self, state):
        self.value, self.items = state


# ============================================================================
# EVENT LOG TESTS
# ============================================================================

class TestEventLog:
    """Tests for EventLog."""

    def test_emit_outside_operation_publishes(self):
        log = EventLog()
        log.emit(Staked(identity="alice", amount=1))
        assert len(log) == 1
        assert log.last(Staked).identity == "alice"

    def test_deferred_publishes_on_exit(self):
        log = EventLog()
        seen = []
        log.subscribe(seen.append)

        with log.deferred():
            log.emit(Staked(identity="alice", amount=1))
            assert seen == []
        assert [e.identity for e in seen] == ["alice"]

    def test_nested_publishes_at_outermost(self):
        log = EventLog()
        with log.deferred():
            with log.deferred():
                log.emit(Staked(identity="alice", amount=1))
            assert len(log) == 0
        assert len(log) == 1

    def test_exception_discards(self):
        log = EventLog()
        with pytest.raises(RuntimeError):
            with log.deferred():
                log.emit(Staked(identity="alice", amount=1))
                raise RuntimeError("boom")
        assert len(log) == 0

        # The log is usable again afterwards
        with log.deferred():
            log.emit(Staked(identity="bob", amount=1))
        assert len(log) == 1

    def test_subscriber_error_is_contained(self):
        log = EventLog()
        seen = []

        def broken(event):
            raise RuntimeError("subscriber failure")

        log.subscribe(broken)
        log.subscribe(seen.append)
        log.emit(Staked(identity="alice", amount=1))

        assert len(seen) == 1
        assert len(log) == 1

    def test_unsubscribe(self):
        log = EventLog()
        seen = []
        log.subscribe(seen.append)
        log.unsubscribe(seen.append)
        log.emit(Staked(identity="alice", amount=1))
        assert seen == []

    def test_of_type_and_dict(self):
        log = EventLog()
        log.emit(Staked(identity="alice", amount=1))
        log.emit(ShieldGranted(identity="bob"))

        assert [e.identity for e in log.of_type(ShieldGranted)] == ["bob"]
        data = log.history[0].to_dict()
        assert data["event"] == "Staked"
        assert data["amount"] == 1


# ============================================================================
# ATOMIC TESTS
# ============================================================================

class TestAtomic:
    """Tests for atomic()."""

    def test_commit_keeps_changes(self):
        counter = Counter()
        with atomic(counter):
            counter.value = 5
        assert counter.value == 5

    def test_rollback_restores_all(self):
        a, b = Counter(), Counter()
        a.items.append("kept")

        with pytest.raises(ValueError):
            with atomic(a, None, b, a):
                a.value = 1
                a.items.append("dropped")
                b.value = 2
                raise ValueError("fail")

        assert a.value == 0
        assert a.items == ["kept"]
        assert b.value == 0

    def test_non_transactional_skipped(self):
        counter = Counter()
        with pytest.raises(ValueError):
            with atomic(counter, object()):
                counter.value = 3
                raise ValueError("fail")
        assert counter.value == 0


class TestNonReentrantGuard:
    """Tests for NonReentrantGuard."""

    def test_same_thread_reentry(self):
        guard = NonReentrantGuard("test")
        with guard.enter("outer"):
            assert guard.active
            with pytest.raises(ReentrancyError):
                with guard.enter("inner"):
                    pass
        assert not guard.active

    def test_released_after_exception(self):
        guard = NonReentrantGuard("test")
        with pytest.raises(ValueError):
            with guard.enter("op"):
                raise ValueError("fail")
        with guard.enter("op"):
            pass

    def test_other_threads_serialized(self):
        guard = NonReentrantGuard("test")
        counter = {"value": 0}

        def work():
            for _ in range(200):
                with guard.enter("increment"):
                    current = counter["value"]
                    counter["value"] = current + 1

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter["value"] == 800
