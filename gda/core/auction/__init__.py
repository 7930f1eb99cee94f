"""
GDA Auction Module.

Data model of an auction:
- Immutable parameters (one tagged variant per pricing model)
- Mutable progress state
- Purchase requests and settlement results
"""

from gda.core.auction.params import (
    AuctionParameters,
    ContinuousGDAParams,
    DiscreteGDAParams,
    LinearDutchParams,
    parse_parameters,
    parameters_to_json,
    parameters_from_json,
)

from gda.core.auction.state import (
    AuctionState,
    AuctionStatus,
)

from gda.core.auction.orders import (
    PurchaseRequest,
    SettlementResult,
)

__all__ = [
    # Parameters
    "AuctionParameters",
    "ContinuousGDAParams",
    "DiscreteGDAParams",
    "LinearDutchParams",
    "parse_parameters",
    "parameters_to_json",
    "parameters_from_json",
    # State
    "AuctionState",
    "AuctionStatus",
    # Orders
    "PurchaseRequest",
    "SettlementResult",
]
