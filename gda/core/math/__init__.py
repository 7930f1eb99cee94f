"""
Fixed-point math primitives for auction pricing.

Deterministic integer arithmetic only; see fixed_point for scales,
representable ranges and error bounds.
"""

from gda.core.math.fixed_point import (
    # Scales and ranges
    WAD,
    HP,
    HP_PER_WAD,
    MAX_UINT256,
    MAX_INTERMEDIATE,
    LN2_HP,
    EXP_MAX_WAD,
    EXP_MAX_HP,
    # Range checks
    check_uint256,
    # Multiplication / division
    mul_div_down,
    mul_div_up,
    mul_wad_down,
    mul_wad_up,
    div_wad_down,
    div_wad_up,
    mul_div_pow2_down,
    # Exponential
    exp_decompose,
    exp_hp,
    exp_wad,
    exprel_hp,
    # Powers
    pow_hp,
    pow_wad,
    geometric_sum_hp,
    # Conversion
    to_wad,
    format_wad,
)

__all__ = [
    "WAD",
    "HP",
    "HP_PER_WAD",
    "MAX_UINT256",
    "MAX_INTERMEDIATE",
    "LN2_HP",
    "EXP_MAX_WAD",
    "EXP_MAX_HP",
    "check_uint256",
    "mul_div_down",
    "mul_div_up",
    "mul_wad_down",
    "mul_wad_up",
    "div_wad_down",
    "div_wad_up",
    "mul_div_pow2_down",
    "exp_decompose",
    "exp_hp",
    "exp_wad",
    "exprel_hp",
    "pow_hp",
    "pow_wad",
    "geometric_sum_hp",
    "to_wad",
    "format_wad",
]
