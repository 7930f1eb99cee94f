"""
Errors - Exception taxonomy for auction pricing and settlement.

Every failure is raised synchronously to the caller and never retried
internally. A rejected purchase leaves auction state and every ledger
exactly as it was before the call.

    AuctionError
    ├── DomainError            input outside the validated numeric range
    ├── Overflow               result/intermediate exceeds representable range
    ├── InvalidQuantity        zero quantity, or != 1 for a single-item auction
    ├── InsufficientPayment    bid below the computed price
    ├── SupplyExceeded         not enough remaining emission or stock
    ├── AlreadySold            single-item auction already settled
    ├── AlreadyInitialized     auction id already in use
    ├── NotOwner               seller/operator does not control the asset
    ├── SelfPurchase           seller buying from their own auction
    ├── AuctionNotFound        unknown auction id
    ├── InsufficientBalance    payment ledger: balance too low
    └── InsufficientAllowance  payment ledger: operator not approved for amount
"""


class AuctionError(Exception):
    """Base exception for all auction pricing and settlement errors."""
    pass


class DomainError(AuctionError, ValueError):
    """Raised when an input pushes a computation outside its validated range."""
    pass


class Overflow(AuctionError, ArithmeticError):
    """Raised when a value would exceed the representable fixed-point range."""
    pass


class InvalidQuantity(AuctionError, ValueError):
    """Raised for a zero quantity, or a quantity other than 1 on a single-item auction."""
    pass


class InsufficientPayment(AuctionError):
    """Raised when the buyer's maximum payment is below the computed price."""

    def __init__(self, price: int, max_payment: int):
        self.price = price
        self.max_payment = max_payment
        super().__init__(f"Price {price} exceeds max payment {max_payment}")


class SupplyExceeded(AuctionError):
    """Raised when the asset source cannot deliver the requested quantity."""
    pass


class AlreadySold(AuctionError):
    """Raised on any query or purchase against a settled single-item auction."""
    pass


class AlreadyInitialized(AuctionError):
    """Raised when initializing an auction id that already exists."""
    pass


class NotOwner(AuctionError):
    """Raised when the seller or operator does not control the asset."""
    pass


class SelfPurchase(AuctionError):
    """Raised when an auction's seller tries to buy from it."""
    pass


class AuctionNotFound(AuctionError, KeyError):
    """Raised for an auction id the engine does not know about."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class InsufficientBalance(AuctionError):
    """Raised when a ledger account cannot cover a transfer."""
    pass


class InsufficientAllowance(AuctionError):
    """Raised when an operator moves more than the owner approved."""
    pass
