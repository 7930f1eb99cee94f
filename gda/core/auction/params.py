"""
Auction Parameters - Immutable configuration of one auction.

Three variants, tagged by `kind` and dispatched by the pricing module:

- continuous_gda: fungible supply, price integrates an exponential curve
  over the quantity range and decays continuously with time
- discrete_gda:   unique assets, price follows a geometric sequence indexed
  by units already sold, with optional time decay
- linear_dutch:   one unique asset, price falls linearly per step

Units:
-----
Prices and rates are WAD fixed-point integers (see gda.core.math).
Quantities, token ids, steps and clock readings are plain integers.
Models are strict: floats are rejected rather than coerced, so no floating
point value can leak into pricing.
"""

import json
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from gda.core.math import MAX_UINT256, WAD


# =============================================================================
# Field Types
# =============================================================================

Amount = Annotated[int, Field(ge=0, le=MAX_UINT256)]
PositiveAmount = Annotated[int, Field(gt=0, le=MAX_UINT256)]
ClockReading = Annotated[int, Field(ge=0)]


class _Parameters(BaseModel):
    """Shared model configuration: frozen, strict, no unknown fields."""

    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    start_time: Optional[ClockReading] = None

    def with_start_time(self, now: int):
        """Pin an unset start time to the clock reading at initialization."""
        if self.start_time is not None:
            return self
        return self.model_copy(update={"start_time": now})


# =============================================================================
# Variants
# =============================================================================


class ContinuousGDAParams(_Parameters):
    """
    Continuous Gradual Dutch Auction for a fungible, mintable supply.

    Attributes:
        initial_price: Price of the first unit at time zero (WAD)
        decay_constant: Price decay rate per time unit (WAD)
        emission_rate: Units emitted per time unit (WAD)
        limit_to_emissions: Refuse sales beyond emission_rate * elapsed
    """

    kind: Literal["continuous_gda"] = "continuous_gda"
    initial_price: PositiveAmount
    decay_constant: Amount
    emission_rate: PositiveAmount
    limit_to_emissions: bool = False


class DiscreteGDAParams(_Parameters):
    """
    Discrete Gradual Dutch Auction for unique assets sold one id at a time.

    Attributes:
        initial_price: Price of the first unit at time zero (WAD)
        scale_factor: Per-unit price multiplier, at least 1.0 (WAD)
        decay_constant: Price decay rate per time unit (WAD), 0 disables decay
    """

    kind: Literal["discrete_gda"] = "discrete_gda"
    initial_price: PositiveAmount
    scale_factor: Annotated[int, Field(ge=WAD, le=MAX_UINT256)]
    decay_constant: Amount = 0


class LinearDutchParams(_Parameters):
    """
    Single-item Dutch auction with a linear per-step discount.

    The price keeps falling past duration_steps and is clamped at zero;
    duration_steps bounds the discount schedule at creation time.
    """

    kind: Literal["linear_dutch"] = "linear_dutch"
    token_id: Annotated[int, Field(ge=0)]
    starting_price: Amount
    discount_rate_per_step: Amount
    duration_steps: Annotated[int, Field(ge=0)]

    @model_validator(mode="after")
    def check_schedule(self):
        if self.starting_price < self.discount_rate_per_step * self.duration_steps:
            raise ValueError("starting_price must cover discount_rate_per_step * duration_steps")
        return self


AuctionParameters = Annotated[
    Union[ContinuousGDAParams, DiscreteGDAParams, LinearDutchParams],
    Field(discriminator="kind"),
]

_ADAPTER = TypeAdapter(AuctionParameters)


# =============================================================================
# Serialization
# =============================================================================


def parse_parameters(data: dict) -> AuctionParameters:
    """Build the right variant from a plain dict carrying a `kind` tag."""
    return _ADAPTER.validate_python(data)


def parameters_to_json(params: AuctionParameters) -> str:
    """Serialize parameters; 256-bit integers survive as JSON numbers."""
    return json.dumps(params.model_dump(), sort_keys=True)


def parameters_from_json(text: str) -> AuctionParameters:
    return parse_parameters(json.loads(text))


__all__ = [
    "AuctionParameters",
    "ContinuousGDAParams",
    "DiscreteGDAParams",
    "LinearDutchParams",
    "parse_parameters",
    "parameters_to_json",
    "parameters_from_json",
]
