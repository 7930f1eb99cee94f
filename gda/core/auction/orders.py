"""
Orders - Transient request/result records scoped to one settlement call.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PurchaseRequest:
    """
    A buyer's request against one auction.

    Attributes:
        quantity: Units to buy (exactly 1 for single-item auctions)
        max_payment: Most the buyer will pay (WAD)
        recipient: Address receiving the asset
        buyer: Address paying, i.e. the authenticated caller
    """
    quantity: int
    max_payment: int
    recipient: str
    buyer: str


@dataclass(frozen=True)
class SettlementResult:
    """
    Outcome of a successful purchase.

    The buyer's net balance change is exactly -actual_price:
    max_payment is pulled, refund is returned.
    """
    auction_id: str
    actual_price: int
    refund: int
    quantity: int
    quantity_sold: int
    buyer: str
    recipient: str
    timestamp: int

    @property
    def max_payment(self) -> int:
        return self.actual_price + self.refund
