"""
Unit tests for the reference collaborators (clocks, ledger, registry, supplies).
"""

import pytest

from gda.core.assets import (
    AssetSupply,
    Clock,
    FungibleLedger,
    FungibleMintableSupply,
    InMemoryLedger,
    InMemoryUniqueAssetRegistry,
    ManualClock,
    SequentialTokenSupply,
    SystemClock,
    UniqueAssetRegistry,
)
from gda.core.errors import (
    DomainError,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidQuantity,
    NotOwner,
    SupplyExceeded,
)


@pytest.fixture
def ledger():
    ledger = InMemoryLedger()
    ledger.mint("alice", 1000)
    return ledger


@pytest.fixture
def registry():
    registry = InMemoryUniqueAssetRegistry()
    registry.mint("alice", 1)
    registry.mint("alice", 2)
    return registry


# =============================================================================
# Clock Tests
# =============================================================================


class TestClocks:
    """Tests for clock implementations."""

    def test_manual_clock(self):
        clock = ManualClock(start=100)
        assert clock.now() == 100
        assert clock.advance(30) == 130
        clock.set(500)
        assert clock.now() == 500

    def test_manual_clock_never_rewinds_by_advance(self):
        with pytest.raises(ValueError):
            ManualClock().advance(-1)

    def test_system_clock(self):
        assert SystemClock().now() > 1_600_000_000

    def test_protocols(self):
        assert isinstance(ManualClock(), Clock)
        assert isinstance(InMemoryLedger(), FungibleLedger)
        assert isinstance(InMemoryUniqueAssetRegistry(), UniqueAssetRegistry)
        assert isinstance(FungibleMintableSupply(), AssetSupply)
        assert isinstance(SequentialTokenSupply(), AssetSupply)
        assert not isinstance(SequentialTokenSupply(), UniqueAssetRegistry)


# =============================================================================
# Ledger Tests
# =============================================================================


class TestInMemoryLedger:
    """Tests for the payment ledger."""

    def test_direct_transfer(self, ledger):
        ledger.transfer("alice", "bob", 300)
        assert ledger.balance_of("alice") == 700
        assert ledger.balance_of("bob") == 300
        assert ledger.total_supply() == 1000

    def test_insufficient_balance(self, ledger):
        with pytest.raises(InsufficientBalance):
            ledger.transfer("alice", "bob", 1001)
        assert ledger.balance_of("alice") == 1000

    def test_operator_consumes_allowance(self, ledger):
        ledger.approve("alice", "engine", 500)
        ledger.transfer("alice", "engine", 200, operator="engine")
        assert ledger.allowance("alice", "engine") == 300
        assert ledger.balance_of("engine") == 200

    def test_operator_without_allowance(self, ledger):
        with pytest.raises(InsufficientAllowance):
            ledger.transfer("alice", "engine", 1, operator="engine")
        assert ledger.balance_of("alice") == 1000

    def test_allowance_checked_before_balance(self, ledger):
        ledger.approve("alice", "engine", 5000)
        with pytest.raises(InsufficientBalance):
            ledger.transfer("alice", "engine", 2000, operator="engine")
        assert ledger.allowance("alice", "engine") == 5000

    def test_invalid_amounts(self, ledger):
        with pytest.raises(DomainError):
            ledger.transfer("alice", "bob", -1)
        with pytest.raises(DomainError):
            ledger.transfer("alice", "", 1)

    def test_revert_transfer(self, ledger):
        ledger.approve("alice", "engine", 500)
        ledger.transfer("alice", "engine", 400, operator="engine")
        ledger.mint("carol", 10)
        ledger.transfer("carol", "dave", 3)

        ledger.revert_transfer("alice", "engine", 400, operator="engine")

        assert ledger.balance_of("alice") == 1000
        assert ledger.balance_of("engine") == 0
        assert ledger.allowance("alice", "engine") == 500
        # unrelated activity survives the revert
        assert ledger.balance_of("carol") == 7
        assert ledger.balance_of("dave") == 3

    def test_revert_transfer_needs_funds(self, ledger):
        ledger.transfer("alice", "bob", 100)
        ledger.transfer("bob", "carol", 60)
        with pytest.raises(InsufficientBalance):
            ledger.revert_transfer("alice", "bob", 100)
        assert ledger.balance_of("bob") == 40
        assert ledger.balance_of("alice") == 900


# =============================================================================
# Registry Tests
# =============================================================================


class TestUniqueAssetRegistry:
    """Tests for the unique asset registry."""

    def test_owner_delivers(self, registry):
        registry.deliver("bob", 1, operator="alice")
        assert registry.owner_of(1) == "bob"
        assert registry.tokens_of("alice") == [2]

    def test_approved_operator_delivers(self, registry):
        registry.set_approval_for_all("alice", "engine")
        registry.deliver("bob", 2, operator="engine")
        assert registry.owner_of(2) == "bob"

    def test_unapproved_operator(self, registry):
        with pytest.raises(NotOwner):
            registry.deliver("bob", 1, operator="engine")
        registry.set_approval_for_all("alice", "engine")
        registry.set_approval_for_all("alice", "engine", approved=False)
        with pytest.raises(NotOwner):
            registry.deliver("bob", 1, operator="engine")

    def test_missing_token(self, registry):
        assert registry.owner_of(99) is None
        with pytest.raises(NotOwner):
            registry.deliver("bob", 99, operator="alice")

    def test_duplicate_mint(self, registry):
        with pytest.raises(ValueError):
            registry.mint("bob", 1)

    def test_revert_delivery(self, registry):
        previous = registry.deliver("bob", 1, operator="alice")
        assert previous == "alice"
        registry.deliver("carol", 2, operator="alice")

        registry.revert_delivery("bob", 1, previous)

        assert registry.owner_of(1) == "alice"
        assert registry.owner_of(2) == "carol"

    def test_revert_delivery_after_resale(self, registry):
        registry.deliver("bob", 1, operator="alice")
        registry.deliver("carol", 1, operator="bob")
        with pytest.raises(NotOwner):
            registry.revert_delivery("bob", 1, "alice")
        assert registry.owner_of(1) == "carol"


# =============================================================================
# Supply Tests
# =============================================================================


class TestSupplies:
    """Tests for mintable supplies."""

    def test_fungible_supply(self):
        supply = FungibleMintableSupply(max_supply=10)
        supply.deliver("bob", 4)
        assert supply.balance_of("bob") == 4
        assert supply.remaining == 6
        with pytest.raises(SupplyExceeded):
            supply.deliver("bob", 7)
        assert supply.issued == 4

    def test_fungible_supply_unbounded(self):
        supply = FungibleMintableSupply()
        supply.deliver("bob", 10**30)
        assert supply.remaining is None

    def test_zero_quantity(self):
        with pytest.raises(InvalidQuantity):
            FungibleMintableSupply().deliver("bob", 0)
        with pytest.raises(InvalidQuantity):
            SequentialTokenSupply().deliver("bob", 0)

    def test_sequential_tokens(self):
        supply = SequentialTokenSupply(max_supply=5)
        supply.deliver("bob", 2)
        supply.deliver("carol", 1)
        assert supply.registry.tokens_of("bob") == [0, 1]
        assert supply.registry.owner_of(2) == "carol"
        assert supply.minted == 3
        with pytest.raises(SupplyExceeded):
            supply.deliver("bob", 3)
        assert supply.next_token_id == 3

    def test_fungible_revert_delivery(self):
        supply = FungibleMintableSupply(max_supply=10)
        receipt = supply.deliver("bob", 4)
        supply.deliver("carol", 2)

        supply.revert_delivery("bob", receipt)

        assert supply.balance_of("bob") == 0
        assert supply.balance_of("carol") == 2
        assert supply.remaining == 8

    def test_sequential_revert_reuses_ids(self):
        supply = SequentialTokenSupply()
        token_ids = supply.deliver("bob", 3)
        assert token_ids == [0, 1, 2]

        supply.revert_delivery("bob", token_ids)

        assert supply.next_token_id == 0
        assert supply.minted == 0
        assert supply.registry.owner_of(0) is None
        assert supply.deliver("carol", 1) == [0]

    def test_sequential_revert_after_later_delivery(self):
        supply = SequentialTokenSupply(max_supply=3)
        token_ids = supply.deliver("bob", 2)
        supply.deliver("carol", 1)

        supply.revert_delivery("bob", token_ids)

        assert supply.registry.tokens_of("bob") == []
        assert supply.registry.owner_of(2) == "carol"
        assert supply.minted == 1
        assert supply.deliver("dave", 2) == [3, 4]
