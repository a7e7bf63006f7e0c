"""
Tests for chronofuel/ledger

Tests the in-memory token ledger and the burn-boost certificate registry.
"""

import pytest

from chronofuel.clock import ManualClock
from chronofuel.config import INITIAL_SUPPLY, SCALE
from chronofuel.errors import (
    AlreadyConfiguredError,
    AuthorizationError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    RecordIndexError,
    StateError,
    ValidationError,
)
from chronofuel.ledger import BurnBoostRecord, InMemoryCertificateRegistry, InMemoryLedger

ENGINE = "reward-engine"
T0 = 1_700_000_000


# ============================================================================
# TEST DATA
# ============================================================================

def create_ledger(initial_supply=INITIAL_SUPPLY):
    ledger = InMemoryLedger(owner="owner", initial_supply=initial_supply)
    ledger.set_engine(ENGINE)
    return ledger


def create_registry():
    registry = InMemoryCertificateRegistry(clock=ManualClock(T0))
    registry.set_engine(ENGINE)
    return registry


def issue(registry, burner="alice", tokens=10):
    return registry.issue(
        burner,
        tokens * SCALE,
        72 * SCALE,
        tokens * 4,
        tokens,
        caller=ENGINE,
    )


# ============================================================================
# LEDGER TESTS
# ============================================================================

class TestInMemoryLedger:
    """Tests for InMemoryLedger."""

    def test_genesis_supply(self):
        """Test the genesis amount goes to the owner and counts as minted."""
        ledger = create_ledger()
        assert ledger.balance_of("owner") == INITIAL_SUPPLY
        assert ledger.total_supply() == INITIAL_SUPPLY
        assert ledger.total_minted() == INITIAL_SUPPLY
        assert ledger.total_burned() == 0

    def test_transfer(self):
        ledger = create_ledger()
        ledger.transfer("owner", "alice", 5 * SCALE)
        assert ledger.balance_of("alice") == 5 * SCALE
        assert ledger.balance_of("owner") == INITIAL_SUPPLY - 5 * SCALE

    def test_transfer_insufficient(self):
        ledger = create_ledger()
        with pytest.raises(InsufficientBalanceError):
            ledger.transfer("alice", "bob", 1)

    def test_non_positive_amounts(self):
        ledger = create_ledger()
        with pytest.raises(ValidationError):
            ledger.transfer("owner", "alice", 0)
        with pytest.raises(ValidationError):
            ledger.burn("owner", -1)
        with pytest.raises(ValidationError):
            ledger.approve("owner", ENGINE, -1)

    def test_burn_tracks_cumulative(self):
        ledger = create_ledger()
        ledger.transfer("owner", "alice", 10 * SCALE)
        ledger.burn("alice", 3 * SCALE)
        ledger.burn("alice", 2 * SCALE)

        assert ledger.burned_amount_of("alice") == 5 * SCALE
        assert ledger.total_burned() == 5 * SCALE
        assert ledger.total_supply() == INITIAL_SUPPLY - 5 * SCALE
        assert ledger.total_minted() == INITIAL_SUPPLY

    def test_burn_from_spends_allowance(self):
        ledger = create_ledger()
        ledger.transfer("owner", "alice", 10 * SCALE)
        ledger.approve("alice", ENGINE, 4 * SCALE)

        ledger.burn_from("alice", 3 * SCALE, spender=ENGINE)
        assert ledger.allowance("alice", ENGINE) == SCALE

        with pytest.raises(InsufficientAllowanceError):
            ledger.burn_from("alice", 2 * SCALE, spender=ENGINE)

    def test_transfer_in_and_out(self):
        ledger = create_ledger()
        ledger.transfer("owner", "alice", 10 * SCALE)
        ledger.approve("alice", ENGINE, 10 * SCALE)

        ledger.transfer_in("alice", 10 * SCALE, caller=ENGINE)
        assert ledger.balance_of(ENGINE) == 10 * SCALE

        ledger.transfer_out("alice", 4 * SCALE, caller=ENGINE)
        assert ledger.balance_of("alice") == 4 * SCALE
        assert ledger.balance_of(ENGINE) == 6 * SCALE

    def test_mint_restricted_to_engine(self):
        ledger = create_ledger()
        ledger.mint("alice", SCALE, caller=ENGINE)
        assert ledger.balance_of("alice") == SCALE
        assert ledger.total_minted() == INITIAL_SUPPLY + SCALE

        with pytest.raises(AuthorizationError):
            ledger.mint("alice", SCALE, caller="owner")

    def test_mint_before_binding(self):
        ledger = InMemoryLedger(owner="owner")
        with pytest.raises(AuthorizationError):
            ledger.mint("alice", SCALE, caller=ENGINE)

    def test_engine_binding_once(self):
        ledger = create_ledger()
        ledger.set_engine(ENGINE)
        with pytest.raises(AlreadyConfiguredError):
            ledger.set_engine("other-engine")
        assert ledger.engine_address == ENGINE

    def test_snapshot_restore(self):
        ledger = create_ledger()
        state = ledger.snapshot()
        ledger.transfer("owner", "alice", SCALE)
        ledger.burn("alice", SCALE)
        ledger.restore(state)

        assert ledger.balance_of("alice") == 0
        assert ledger.total_burned() == 0
        assert ledger.total_supply() == INITIAL_SUPPLY


# ============================================================================
# CERTIFICATE TESTS
# ============================================================================

class TestCertificateRegistry:
    """Tests for InMemoryCertificateRegistry."""

    def test_issue(self):
        registry = create_registry()
        record_id = issue(registry)

        assert record_id == 1
        record = registry.get(record_id)
        assert record.burner == "alice"
        assert record.amount_burned == 10 * SCALE
        assert record.mint_power_before_burn == 72 * SCALE
        assert record.dao_points == 40
        assert record.airdrop_rights == 10
        assert record.created_at == T0
        assert registry.holder_of(record_id) == "alice"
        assert len(registry) == 1

    def test_ids_increase(self):
        registry = create_registry()
        assert [issue(registry) for _ in range(3)] == [1, 2, 3]

    def test_issue_restricted_to_engine(self):
        registry = create_registry()
        with pytest.raises(AuthorizationError):
            registry.issue("alice", SCALE, 0, 4, 1, caller="alice")

    def test_enumeration(self):
        registry = create_registry()
        first = issue(registry, "alice")
        issue(registry, "bob")
        third = issue(registry, "alice")

        assert registry.balance_of("alice") == 2
        assert registry.record_of_holder_by_index("alice", 0) == first
        assert registry.record_of_holder_by_index("alice", 1) == third
        assert [r.record_id for r in registry.records_of("alice")] == [first, third]

    def test_index_out_of_range(self):
        registry = create_registry()
        issue(registry, "alice")
        with pytest.raises(RecordIndexError):
            registry.record_of_holder_by_index("alice", 1)
        with pytest.raises(RecordIndexError):
            registry.record_of_holder_by_index("bob", 0)

    def test_unknown_record(self):
        registry = create_registry()
        with pytest.raises(StateError):
            registry.get(99)

    def test_transfer_keeps_metadata(self):
        registry = create_registry()
        record_id = issue(registry, "alice")

        registry.transfer("alice", "alice", "bob", record_id)

        assert registry.holder_of(record_id) == "bob"
        assert registry.balance_of("alice") == 0
        assert registry.balance_of("bob") == 1
        assert registry.get(record_id).burner == "alice"

    def test_transfer_by_non_holder(self):
        registry = create_registry()
        record_id = issue(registry, "alice")
        with pytest.raises(AuthorizationError):
            registry.transfer("mallory", "alice", "mallory", record_id)
        assert registry.holder_of(record_id) == "alice"

    def test_record_dict_round_trip(self):
        registry = create_registry()
        record = registry.get(issue(registry))
        assert BurnBoostRecord.from_dict(record.to_dict()) == record
