"""Linear Dutch - single item, price falls by a fixed amount per step."""

from gda.core.auction.params import LinearDutchParams


def linear_dutch_price(params: LinearDutchParams, elapsed: int) -> int:
    """
    max(0, starting_price - discount_rate_per_step * elapsed).

    Decay continues past duration_steps; the clamp keeps it at zero.
    """
    discount = params.discount_rate_per_step * elapsed
    return max(0, params.starting_price - discount)
