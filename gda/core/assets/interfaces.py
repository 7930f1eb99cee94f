"""
Collaborator Interfaces - What the settlement engine needs from the outside.

The engine never owns balances or assets. It reads time from a Clock,
moves payment through a FungibleLedger and hands out goods through either
an AssetSupply (GDA auctions) or a UniqueAssetRegistry (single-item Dutch
auctions).

Rollback:
--------
Every mutating operation the engine calls has a matching revert_* operation
that undoes that one call and nothing else. When a later step of an exchange
fails, the engine reverts the completed steps newest first. Other activity
on the same collaborator in the meantime is never touched.
"""

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Monotonic source of integer time readings (seconds or steps)."""

    def now(self) -> int:
        ...


@runtime_checkable
class FungibleLedger(Protocol):
    """
    Payment token ledger, amounts in base units (WAD).

    transfer() raises InsufficientBalance when `source` cannot cover the
    amount, and InsufficientAllowance when `operator` (if different from
    `source`) was not approved for it. revert_transfer() takes the same
    arguments as the transfer it undoes, moves the amount back and gives
    back any allowance that transfer consumed.
    """

    def balance_of(self, account: str) -> int:
        ...

    def transfer(
        self,
        source: str,
        destination: str,
        amount: int,
        operator: Optional[str] = None,
    ) -> None:
        ...

    def revert_transfer(
        self,
        source: str,
        destination: str,
        amount: int,
        operator: Optional[str] = None,
    ) -> None:
        ...


@runtime_checkable
class AssetSupply(Protocol):
    """
    Source of newly issued units.

    deliver() raises SupplyExceeded when it cannot issue `quantity` units and
    returns a receipt; revert_delivery() takes that receipt back.
    """

    def deliver(self, recipient: str, quantity: int) -> Any:
        ...

    def revert_delivery(self, recipient: str, receipt: Any) -> None:
        ...


@runtime_checkable
class UniqueAssetRegistry(Protocol):
    """
    Registry of unique tokens.

    deliver() moves `token_id` from its current owner to `recipient`, raises
    NotOwner unless `operator` is the owner or approved by it, and returns
    the previous owner. revert_delivery() hands the token back to them.
    """

    def owner_of(self, token_id: int) -> Optional[str]:
        ...

    def deliver(self, recipient: str, token_id: int, operator: str) -> str:
        ...

    def revert_delivery(self, recipient: str, token_id: int, previous_owner: str) -> None:
        ...
