"""
Discrete GDA - Price of a batch on a geometric sequence.

Unit i (0-based, counted over the whole auction) costs P * a^i, so buying
k units after k0 have sold costs

    price = P * a^k0 * (a^k - 1) / (a - 1) * e^(-L*t)

The geometric factor is summed by doubling (geometric_sum_hp) instead of
dividing by (a - 1); a == 1 is special-cased to the exact limit P * k.
"""

from gda.core.auction.params import DiscreteGDAParams
from gda.core.math import (
    HP,
    HP_PER_WAD,
    WAD,
    check_uint256,
    exp_decompose,
    geometric_sum_hp,
    mul_div_pow2_down,
    pow_hp,
)


def discrete_gda_price(
    params: DiscreteGDAParams,
    quantity_sold: int,
    quantity: int,
    elapsed: int,
) -> int:
    """
    Price (WAD, rounded down) of `quantity` more units.

    Raises:
        Overflow: a^k0 or the geometric sum beyond 512 bits, or price beyond 256 bits
    """
    if params.scale_factor == WAD:
        offset = HP
        growth = quantity * HP
    else:
        ratio = params.scale_factor * HP_PER_WAD
        offset = pow_hp(ratio, quantity_sold)
        growth = geometric_sum_hp(ratio, quantity)

    mantissa, shift = exp_decompose(-params.decay_constant * elapsed * HP_PER_WAD)

    numerator = params.initial_price * offset * growth * mantissa
    return check_uint256(mul_div_pow2_down(numerator, HP**3, shift), "price")
