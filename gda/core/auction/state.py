"""
Auction State - The mutable progress record of one auction.

State machines:
- GDA variants: ACTIVE only. Supply is open-ended until the asset source
  refuses to deliver, which surfaces as SupplyExceeded, not a transition.
- Linear Dutch: ACTIVE -> SOLD on the first successful purchase, terminal.

The settlement engine is the only writer, and only after a purchase has
fully settled. Transitions return a new record so a failed settlement
never leaves a half-updated state behind.
"""

from dataclasses import dataclass, replace
from enum import IntEnum

from gda.core.errors import AlreadySold, InvalidQuantity


class AuctionStatus(IntEnum):
    """Lifecycle status of an auction."""
    ACTIVE = 0
    SOLD = 1


@dataclass(frozen=True)
class AuctionState:
    """
    Progress of one auction.

    Attributes:
        quantity_sold: Units sold so far, never decreases
        sold: Terminal flag of single-item auctions, never reverts
    """
    quantity_sold: int = 0
    sold: bool = False

    @property
    def status(self) -> AuctionStatus:
        return AuctionStatus.SOLD if self.sold else AuctionStatus.ACTIVE

    def record_sale(self, quantity: int) -> "AuctionState":
        """State after selling `quantity` more units of an open supply."""
        if quantity <= 0:
            raise InvalidQuantity(f"Quantity must be positive, got {quantity}")
        return replace(self, quantity_sold=self.quantity_sold + quantity)

    def record_single_sale(self) -> "AuctionState":
        """State after the one item of a single-item auction is sold."""
        if self.sold:
            raise AlreadySold("Auction already sold")
        return replace(self, quantity_sold=self.quantity_sold + 1, sold=True)
