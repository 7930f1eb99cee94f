"""
Fixed-Point Math - Deterministic exponentiation for auction pricing.

All values are integers interpreted against an implicit scale:

- WAD (10**18): public amounts, prices and rates (18 decimals)
- HP  (10**36): internal precision used while evaluating curves

No floating point is used anywhere, so every price is reproducible and
auditable bit for bit.

Representable range:
-------------------
- Public results (prices, payments) must fit in 256 bits (MAX_UINT256).
- Intermediate terms must fit in 512 bits (MAX_INTERMEDIATE), the usual
  full-precision mul-div convention.
Exceeding either raises Overflow instead of wrapping.

Exponential:
-----------
exp(x) uses range reduction x = n*ln2 + r with |r| <= ln2/2, a Taylor series
for e**r evaluated at HP precision, and a binary shift by n. Arguments above
EXP_MAX (~135.306, the largest x with e**x * 1e18 < 2**255) raise DomainError.
Negative arguments of any size are valid and decay to zero.

Error bounds:
------------
- exp_decompose / exp_hp / exprel_hp: relative error below 1e-33.
- pow_hp / geometric_sum_hp: relative error below 1e-30 for exponents
  up to 2**64 with ratio >= 1.
- Prices built from these primitives round down once, at the end, and
  satisfy |computed - exact| <= 1 wei + exact * 1e-27. Any price of at
  least 1e-9 token (1e9 wei) is therefore within 1e-9 relative error.
"""

from typing import Tuple, Union

from gda.core.errors import DomainError, Overflow
from gda.utils.logger import get_logger

logger = get_logger("math")


# =============================================================================
# Constants
# =============================================================================

# Public fixed-point scale (18 decimals)
WAD = 10**18

# Internal precision (36 decimals)
HP = 10**36
HP_PER_WAD = HP // WAD

# Representable ranges
MAX_UINT256 = 2**256 - 1
MAX_INTERMEDIATE = 2**512 - 1

# ln(2) at HP precision (36 correct decimals)
LN2_HP = 693147180559945309417232121458176568

# Largest exp() argument: e**x * 1e18 must stay below 2**255
EXP_MAX_WAD = 135305999368893231588
EXP_MAX_HP = EXP_MAX_WAD * HP_PER_WAD


# =============================================================================
# Integer Helpers
# =============================================================================


def _div_round(a: int, b: int) -> int:
    """Divide by a positive integer, rounding to nearest (ties up)."""
    return (2 * a + b) // (2 * b)


def _div_trunc(a: int, b: int) -> int:
    """Divide by a positive integer, rounding toward zero."""
    q = abs(a) // b
    return q if a >= 0 else -q


def _check_intermediate(value: int) -> int:
    if value > MAX_INTERMEDIATE or value < -MAX_INTERMEDIATE:
        logger.debug(f"Intermediate overflow: {value.bit_length()} bits")
        raise Overflow("Intermediate value exceeds 512-bit range")
    return value


def check_uint256(value: int, name: str = "value") -> int:
    """
    Ensure a public result fits in the unsigned 256-bit range.

    Raises:
        DomainError: value is negative
        Overflow: value exceeds MAX_UINT256
    """
    if value < 0:
        raise DomainError(f"{name} must be non-negative, got {value}")
    if value > MAX_UINT256:
        raise Overflow(f"{name} exceeds 256-bit range")
    return value


# =============================================================================
# Multiplication / Division
# =============================================================================


def mul_div_down(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) with a 512-bit intermediate product."""
    check_uint256(a, "a")
    check_uint256(b, "b")
    if denominator <= 0:
        raise DomainError(f"Denominator must be positive, got {denominator}")
    return check_uint256((a * b) // denominator, "result")


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator) with a 512-bit intermediate product."""
    check_uint256(a, "a")
    check_uint256(b, "b")
    if denominator <= 0:
        raise DomainError(f"Denominator must be positive, got {denominator}")
    return check_uint256(-((-a * b) // denominator), "result")


def mul_wad_down(a: int, b: int) -> int:
    return mul_div_down(a, b, WAD)


def mul_wad_up(a: int, b: int) -> int:
    return mul_div_up(a, b, WAD)


def div_wad_down(a: int, b: int) -> int:
    return mul_div_down(a, WAD, b)


def div_wad_up(a: int, b: int) -> int:
    return mul_div_up(a, WAD, b)


def mul_div_pow2_down(numerator: int, denominator: int, shift: int) -> int:
    """
    floor(numerator * 2**shift / denominator) for non-negative numerator.

    Large negative shifts short-circuit to zero instead of building a
    denominator of millions of bits.
    """
    if numerator < 0 or denominator <= 0:
        raise DomainError("mul_div_pow2_down expects numerator >= 0 and denominator > 0")
    if shift >= 0:
        return (numerator << shift) // denominator
    if -shift > numerator.bit_length():
        return 0
    return numerator // (denominator << -shift)


# =============================================================================
# Exponential
# =============================================================================


def exp_decompose(x: int) -> Tuple[int, int]:
    """
    Evaluate e**(x / HP) as a (mantissa, shift) pair.

    The value is mantissa * 2**shift / HP, with mantissa in
    [HP / sqrt(2), HP * sqrt(2)]. Keeping the power of two separate lets
    callers multiply everything first and shift once, so tiny results
    (large negative x) lose no relative precision.

    Args:
        x: Exponent at HP precision

    Returns:
        (mantissa, shift)

    Raises:
        DomainError: x above EXP_MAX_HP
    """
    if x > EXP_MAX_HP:
        logger.debug(f"exp argument out of range: {x}")
        raise DomainError(
            f"exp argument {format_wad(x // HP_PER_WAD)} above maximum {format_wad(EXP_MAX_WAD)}"
        )

    # Range reduction: x = shift * ln2 + r, |r| <= ln2 / 2
    shift = _div_round(x, LN2_HP)
    r = x - shift * LN2_HP

    # Taylor series for e**r; terms shrink by at least r/n < 0.35/n
    term = HP
    mantissa = HP
    n = 1
    while term != 0:
        term = _div_trunc(term * r, HP * n)
        mantissa += term
        n += 1

    return mantissa, shift


def exp_hp(x: int) -> int:
    """e**(x / HP), returned at HP precision (floored)."""
    mantissa, shift = exp_decompose(x)
    return _check_intermediate(mul_div_pow2_down(mantissa, 1, shift))


def exp_wad(x: int) -> int:
    """e**(x / WAD), returned at WAD precision (floored)."""
    mantissa, shift = exp_decompose(x * HP_PER_WAD)
    return check_uint256(mul_div_pow2_down(mantissa, HP_PER_WAD, shift), "exp result")


def exprel_hp(y: int) -> int:
    """
    (e**y - 1) / y at HP precision, for y >= 0.

    Uses the series sum(y**j / (j+1)!) below 1 so that the result keeps
    full relative precision however small y is; exprel(0) == 1.
    """
    if y < 0:
        raise DomainError(f"exprel expects a non-negative argument, got {y}")
    if y == 0:
        return HP
    if y < HP:
        term = HP
        total = HP
        n = 2
        while term != 0:
            term = (term * y) // (HP * n)
            total += term
            n += 1
        return total
    return _div_round((exp_hp(y) - HP) * HP, y)


# =============================================================================
# Powers
# =============================================================================


def pow_hp(base: int, exponent: int) -> int:
    """
    base**exponent for an HP-scaled base and a non-negative integer exponent.

    Square-and-multiply with round-to-nearest after every product.

    Raises:
        DomainError: negative base or exponent
        Overflow: an intermediate exceeds 512 bits
    """
    if base < 0:
        raise DomainError(f"pow base must be non-negative, got {base}")
    if exponent < 0:
        raise DomainError(f"pow exponent must be non-negative, got {exponent}")

    result = HP
    while exponent:
        if exponent & 1:
            result = _check_intermediate(_div_round(result * base, HP))
        exponent >>= 1
        if exponent:
            base = _check_intermediate(_div_round(base * base, HP))
    return result


def pow_wad(base: int, exponent: int) -> int:
    """base**exponent for a WAD-scaled base, returned at WAD precision."""
    check_uint256(base, "base")
    result = pow_hp(base * HP_PER_WAD, exponent)
    return check_uint256(result // HP_PER_WAD, "pow result")


def geometric_sum_hp(ratio: int, n: int) -> int:
    """
    Sum of ratio**i for i in [0, n), HP-scaled.

    Binary doubling on the bits of n:
        S(2m)   = S(m) * (1 + ratio**m)
        S(2m+1) = S(2m) + ratio**(2m)
    No subtraction and no division by (ratio - 1), so ratio == 1 is exact
    (returns n * HP) and ratios close to 1 keep full precision.
    """
    if ratio < 0:
        raise DomainError(f"geometric ratio must be non-negative, got {ratio}")
    if n < 0:
        raise DomainError(f"geometric term count must be non-negative, got {n}")

    total = 0
    power = HP
    for bit in bin(n)[2:]:
        total = _check_intermediate(_div_round(total * (HP + power), HP))
        power = _check_intermediate(_div_round(power * power, HP))
        if bit == "1":
            total = _check_intermediate(total + power)
            power = _check_intermediate(_div_round(power * ratio, HP))
    return total


# =============================================================================
# Conversion
# =============================================================================


def to_wad(value: Union[int, str]) -> int:
    """
    Convert an integer or decimal string to WAD without floating point.

    Examples:
        >>> to_wad(3)
        3000000000000000000
        >>> to_wad("0.5")
        500000000000000000
    """
    if isinstance(value, bool):
        raise DomainError("Booleans are not amounts")
    if isinstance(value, int):
        return value * WAD
    if not isinstance(value, str):
        raise DomainError(f"Expected int or decimal string, got {type(value).__name__}")

    text = value.strip().replace("_", "")
    negative = text.startswith("-")
    if text[:1] in "+-" and text:
        text = text[1:]

    whole, _, fraction = text.partition(".")
    digits = whole + fraction
    if not digits or not (digits.isascii() and digits.isdigit()):
        raise DomainError(f"Invalid decimal amount: {value!r}")
    if len(fraction) > 18:
        raise DomainError(f"More than 18 decimals: {value!r}")

    wad = int(whole or "0") * WAD + int(fraction.ljust(18, "0") or "0")
    return -wad if negative else wad


def format_wad(value: int, decimals: int = 18) -> str:
    """Render a WAD integer as a decimal string (truncated to `decimals`)."""
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), WAD)
    digits = f"{fraction:018d}"[:decimals].rstrip("0")
    return f"{sign}{whole}.{digits}" if digits else f"{sign}{whole}"
