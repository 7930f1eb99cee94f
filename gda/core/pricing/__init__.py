"""
GDA Pricing Module.

Pure price functions, one per auction model, plus a dispatcher that
checks the request against the auction's state and clock:

- continuous_gda_price: fungible batches on an exponential emission curve
- discrete_gda_price:   unique assets on a geometric price sequence
- linear_dutch_price:   one unique asset with a linear discount

All prices are WAD integers rounded down. Nothing here mutates state.
"""

from gda.core.auction.params import (
    AuctionParameters,
    ContinuousGDAParams,
    DiscreteGDAParams,
    LinearDutchParams,
)
from gda.core.auction.state import AuctionState
from gda.core.errors import AlreadySold, DomainError, InvalidQuantity
from gda.core.pricing.continuous import continuous_gda_price, emitted_units
from gda.core.pricing.discrete import discrete_gda_price
from gda.core.pricing.linear_dutch import linear_dutch_price
from gda.utils.logger import get_logger
from gda.utils.validation import validate_quantity

logger = get_logger("pricing")


def elapsed_since_start(params: AuctionParameters, now: int) -> int:
    """
    Time units since the auction started.

    Raises:
        DomainError: start time unset, or clock reading before it
    """
    if params.start_time is None:
        raise DomainError("Auction has no start time")
    elapsed = now - params.start_time
    if elapsed < 0:
        raise DomainError(f"Clock reading {now} precedes start time {params.start_time}")
    return elapsed


def evaluate(
    params: AuctionParameters,
    state: AuctionState,
    quantity: int,
    now: int,
) -> int:
    """
    Price of buying `quantity` units right now.

    Args:
        params: Auction parameters with a start time
        state: Current auction progress
        quantity: Units requested
        now: Current clock reading

    Returns:
        Price in WAD, rounded down

    Raises:
        InvalidQuantity: non-integer or non-positive quantity, or != 1 for linear Dutch
        AlreadySold: linear Dutch auction already settled
        DomainError / Overflow: from the fixed-point math
    """
    valid, err = validate_quantity(quantity)
    if not valid:
        raise InvalidQuantity(err)

    elapsed = elapsed_since_start(params, now)

    if isinstance(params, ContinuousGDAParams):
        price = continuous_gda_price(params, state.quantity_sold, quantity, elapsed)
    elif isinstance(params, DiscreteGDAParams):
        price = discrete_gda_price(params, state.quantity_sold, quantity, elapsed)
    elif isinstance(params, LinearDutchParams):
        if state.sold:
            raise AlreadySold("Auction already sold")
        if quantity != 1:
            raise InvalidQuantity(f"Single-item auction sells exactly 1 unit, got {quantity}")
        price = linear_dutch_price(params, elapsed)
    else:
        raise TypeError(f"Unknown auction parameters: {type(params).__name__}")

    logger.debug(
        f"{params.kind}: sold={state.quantity_sold} qty={quantity} "
        f"elapsed={elapsed} -> price={price}"
    )
    return price


__all__ = [
    "continuous_gda_price",
    "discrete_gda_price",
    "linear_dutch_price",
    "emitted_units",
    "elapsed_since_start",
    "evaluate",
]
