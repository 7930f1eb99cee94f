"""
Input Validation - Checks on values crossing the engine boundary.

Every validator returns (is_valid, error_message) so callers decide which
exception to raise; the settlement engine maps failures onto the auction
error taxonomy.
"""

import re
from typing import Any, Tuple

from gda.core.math import MAX_UINT256

# =============================================================================
# Constants
# =============================================================================

MAX_ADDRESS_LENGTH = 128
MAX_AUCTION_ID_LENGTH = 64
AUCTION_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.:-]*$"


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = 0,
    max_val: int = MAX_UINT256,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass; a flag is never an amount
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_amount(amount: Any, name: str = "amount") -> Tuple[bool, str]:
    """Validate a WAD amount (unsigned 256-bit)."""
    return validate_integer(amount, name, 0, MAX_UINT256)


def validate_quantity(quantity: Any) -> Tuple[bool, str]:
    """Validate a purchase quantity (at least one unit)."""
    return validate_integer(quantity, "quantity", 1, MAX_UINT256)


def validate_string(
    value: Any,
    name: str,
    max_length: int,
    pattern: str = None,
) -> Tuple[bool, str]:
    """
    Validate string input.

    Args:
        value: Value to validate
        name: Field name for errors
        max_length: Maximum string length
        pattern: Optional regex pattern

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    if not value:
        return False, f"{name} must not be empty"

    if len(value) > max_length:
        return False, f"{name} exceeds max length {max_length}"

    if pattern and not re.fullmatch(pattern, value):
        return False, f"{name} does not match required pattern"

    return True, ""


def validate_address(address: Any, name: str = "address") -> Tuple[bool, str]:
    """Validate an account address (opaque non-empty string)."""
    return validate_string(address, name, MAX_ADDRESS_LENGTH)


def validate_auction_id(auction_id: Any) -> Tuple[bool, str]:
    """Validate an auction identifier."""
    return validate_string(auction_id, "auction_id", MAX_AUCTION_ID_LENGTH, AUCTION_ID_PATTERN)


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_integer",
    "validate_amount",
    "validate_quantity",
    "validate_string",
    "validate_address",
    "validate_auction_id",
    "MAX_ADDRESS_LENGTH",
    "MAX_AUCTION_ID_LENGTH",
]
