"""
Unit tests for input validation helpers.
"""

import pytest

from gda.core.math import MAX_UINT256
from gda.utils.validation import (
    validate_address,
    validate_amount,
    validate_auction_id,
    validate_integer,
    validate_quantity,
)


class TestValidation:
    """Tests for (is_valid, error) validators."""

    def test_integer_bounds(self):
        assert validate_integer(5, "x", 0, 10) == (True, "")
        valid, err = validate_integer(11, "x", 0, 10)
        assert not valid
        assert "<= 10" in err

    @pytest.mark.parametrize("value", [True, 1.0, "1", None])
    def test_integer_type(self, value):
        valid, err = validate_integer(value, "x")
        assert not valid
        assert "must be int" in err

    def test_amount(self):
        assert validate_amount(0)[0]
        assert validate_amount(MAX_UINT256)[0]
        assert not validate_amount(MAX_UINT256 + 1)[0]
        assert not validate_amount(-1)[0]

    def test_quantity(self):
        assert validate_quantity(1)[0]
        valid, err = validate_quantity(0)
        assert not valid
        assert err.startswith("quantity")

    def test_address(self):
        assert validate_address("0xabc")[0]
        assert not validate_address("")[0]
        assert not validate_address(b"alice")[0]
        assert not validate_address("a" * 129)[0]

    @pytest.mark.parametrize("auction_id, ok", [
        ("drop-1", True),
        ("ns:auction_2.v1", True),
        ("-leading", False),
        ("drop\n", False),
        ("with space", False),
        ("x" * 64, True),
        ("x" * 65, False),
    ])
    def test_auction_id(self, auction_id, ok):
        assert validate_auction_id(auction_id)[0] is ok
