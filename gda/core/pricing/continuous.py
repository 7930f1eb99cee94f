"""
Continuous GDA - Price of a batch on an exponential emission curve.

With k0 units already sold, k units requested, t time units elapsed,
decay constant L and emission rate r:

    price = P * e^(L*k0/r - L*t) * (e^(L*k/r) - 1) / (e^(L/r) - 1)

This integrates the curve e^(L*q/r) over [k0, k0 + k), scaled so that the
first unit at time zero costs exactly P. The growth factor is evaluated as
k * exprel(L*k/r) / exprel(L/r), where the L/r factors cancel exactly, so a
tiny L/r keeps full precision and L == 0 degrades to P * k.
"""

from gda.core.auction.params import ContinuousGDAParams
from gda.core.errors import DomainError
from gda.core.math import (
    EXP_MAX_HP,
    HP,
    HP_PER_WAD,
    WAD,
    check_uint256,
    exp_decompose,
    exprel_hp,
    mul_div_pow2_down,
)


def continuous_gda_price(
    params: ContinuousGDAParams,
    quantity_sold: int,
    quantity: int,
    elapsed: int,
) -> int:
    """
    Price (WAD, rounded down) of `quantity` more units.

    Raises:
        DomainError: an exponent above the validated exp range
        Overflow: price above 256 bits
    """
    decay = params.decay_constant
    rate = params.emission_rate

    if decay == 0:
        return check_uint256(params.initial_price * quantity, "price")

    unit_exponent = decay * HP // rate
    batch_exponent = decay * quantity * HP // rate
    if batch_exponent > EXP_MAX_HP:
        raise DomainError(f"Batch of {quantity} units is outside the exp range")

    # e^(L*k0/r - L*t), kept as mantissa * 2**shift
    offset_exponent = decay * quantity_sold * HP // rate - decay * elapsed * HP_PER_WAD
    mantissa, shift = exp_decompose(offset_exponent)

    numerator = params.initial_price * quantity * mantissa * exprel_hp(batch_exponent)
    denominator = HP * exprel_hp(unit_exponent)
    return check_uint256(mul_div_pow2_down(numerator, denominator, shift), "price")


def emitted_units(params: ContinuousGDAParams, elapsed: int) -> int:
    """Whole units released by the emission schedule after `elapsed` time units."""
    return params.emission_rate * elapsed // WAD
