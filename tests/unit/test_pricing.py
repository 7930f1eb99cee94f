"""
Unit tests for the pricing models.

Prices are compared against an 80-digit decimal evaluation of the closed
form; every price must satisfy |computed - exact| <= 1 wei + exact * 1e-27.
"""

import pytest
from decimal import Decimal, localcontext

from gda.core.auction import (
    AuctionState,
    ContinuousGDAParams,
    DiscreteGDAParams,
    LinearDutchParams,
)
from gda.core.errors import AlreadySold, DomainError, InvalidQuantity, Overflow
from gda.core.math import MAX_UINT256, WAD, to_wad
from gda.core.pricing import (
    continuous_gda_price,
    discrete_gda_price,
    elapsed_since_start,
    emitted_units,
    evaluate,
    linear_dutch_price,
)


def within_bound(got: int, exact: Decimal) -> bool:
    with localcontext() as ctx:
        ctx.prec = 80
        return got >= 0 and abs(Decimal(got) - exact) <= 1 + exact / Decimal(10) ** 27


def reference_continuous(price, decay, rate, sold, quantity, elapsed) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = 80
        lam = Decimal(decay) / Decimal(WAD)
        u = lam / (Decimal(rate) / Decimal(WAD))
        if u == 0:
            growth = Decimal(quantity)
        else:
            growth = ((u * quantity).exp() - 1) / (u.exp() - 1)
        return Decimal(price) * (u * sold - lam * elapsed).exp() * growth


def reference_discrete(price, scale, decay, sold, quantity, elapsed) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = 80
        alpha = Decimal(scale) / Decimal(WAD)
        lam = Decimal(decay) / Decimal(WAD)
        if alpha == 1:
            growth = Decimal(quantity)
        else:
            growth = (alpha ** quantity - 1) / (alpha - 1)
        return Decimal(price) * alpha ** sold * growth * (-lam * elapsed).exp()


def continuous(initial_price=1000, decay=5, rate=10, start_time=0, **kwargs):
    return ContinuousGDAParams(
        initial_price=to_wad(initial_price),
        decay_constant=to_wad(decay),
        emission_rate=to_wad(rate),
        start_time=start_time,
        **kwargs,
    )


def discrete(initial_price=1000, scale=10, decay=0, start_time=0):
    return DiscreteGDAParams(
        initial_price=to_wad(initial_price),
        scale_factor=to_wad(scale),
        decay_constant=to_wad(decay),
        start_time=start_time,
    )


@pytest.fixture
def dutch():
    return LinearDutchParams(
        token_id=1,
        starting_price=to_wad(500),
        discount_rate_per_step=to_wad(1),
        duration_steps=30,
        start_time=0,
    )


# =============================================================================
# Continuous GDA Tests
# =============================================================================


class TestContinuousGDA:
    """Tests for the continuous GDA price curve."""

    def test_first_unit_costs_initial_price(self):
        """1000 / decay 5 / rate 10: the first unit at t=0 costs 1000."""
        assert evaluate(continuous(), AuctionState(), 1, 0) == to_wad(1000)

    @pytest.mark.parametrize("price, decay, rate, sold, quantity, elapsed", [
        (1000, 5, 10, 3, 4, 2),
        ("0.37", "0.001", 1000, 10, 7, 100),
        (1000, "0.5", 10, 0, 25, 0),
        (42, "0.02", "0.5", 60, 3, 3000),
    ])
    def test_matches_reference(self, price, decay, rate, sold, quantity, elapsed):
        params = continuous(price, decay, rate)
        got = continuous_gda_price(params, sold, quantity, elapsed)
        exact = reference_continuous(
            params.initial_price, params.decay_constant, params.emission_rate,
            sold, quantity, elapsed,
        )
        assert within_bound(got, exact)

    def test_tiny_decay_keeps_precision(self):
        """decay/rate of 1e-18 must not cancel to a zero growth factor."""
        params = ContinuousGDAParams(
            initial_price=to_wad(1000), decay_constant=1, emission_rate=WAD, start_time=0
        )
        got = continuous_gda_price(params, 0, 5, 0)
        exact = reference_continuous(params.initial_price, 1, WAD, 0, 5, 0)
        assert within_bound(got, exact)
        assert got >= to_wad(5000)

    def test_zero_decay_is_linear(self):
        params = continuous(decay=0)
        assert continuous_gda_price(params, 7, 3, 50) == to_wad(3000)

    def test_long_elapsed_decays_to_zero(self):
        params = continuous(decay=1, rate=1)
        assert continuous_gda_price(params, 0, 1, 10**6) == 0

    def test_monotone_in_time(self):
        params = continuous(decay="0.3", rate=2)
        prices = [evaluate(params, AuctionState(quantity_sold=4), 2, t) for t in range(0, 40)]
        assert prices == sorted(prices, reverse=True)

    def test_monotone_in_quantity_sold(self):
        params = continuous(decay="0.3", rate=2)
        prices = [evaluate(params, AuctionState(quantity_sold=k), 2, 5) for k in range(0, 40)]
        assert prices == sorted(prices)

    def test_batch_equals_sum_of_parts(self):
        """Integral over [0, 3) equals [0, 1) plus [1, 3), up to rounding."""
        params = continuous(decay="0.7", rate=3)
        whole = continuous_gda_price(params, 0, 3, 4)
        parts = continuous_gda_price(params, 0, 1, 4) + continuous_gda_price(params, 1, 2, 4)
        assert abs(whole - parts) <= 3 + whole // 10**27

    def test_batch_exponent_out_of_range(self):
        with pytest.raises(DomainError):
            continuous_gda_price(continuous(decay=1, rate=1), 0, 200, 0)

    def test_offset_exponent_out_of_range(self):
        with pytest.raises(DomainError):
            continuous_gda_price(continuous(decay=1, rate=1), 200, 1, 0)

    def test_price_overflow(self):
        params = ContinuousGDAParams(
            initial_price=MAX_UINT256, decay_constant=0, emission_rate=WAD, start_time=0
        )
        with pytest.raises(Overflow):
            continuous_gda_price(params, 0, 2, 0)

    def test_emitted_units(self):
        params = continuous(rate="2.5")
        assert emitted_units(params, 0) == 0
        assert emitted_units(params, 4) == 10
        assert emitted_units(params, 5) == 12


# =============================================================================
# Discrete GDA Tests
# =============================================================================


class TestDiscreteGDA:
    """Tests for the discrete GDA price sequence."""

    def test_example_sequence(self):
        """1000, x10: first token 1000, second 10000."""
        params = discrete()
        assert evaluate(params, AuctionState(), 1, 0) == to_wad(1000)
        assert evaluate(params, AuctionState(quantity_sold=1), 1, 0) == to_wad(10000)

    def test_unit_scale_is_linear(self):
        """scale_factor 1 degrades to price * quantity without dividing by zero."""
        params = discrete(scale=1)
        assert discrete_gda_price(params, 3, 5, 0) == to_wad(5000)

    def test_unit_scale_with_decay(self):
        params = discrete(scale=1, decay="0.05")
        got = discrete_gda_price(params, 3, 5, 12)
        exact = reference_discrete(params.initial_price, WAD, params.decay_constant, 3, 5, 12)
        assert within_bound(got, exact)

    def test_exact_integer_ratio(self):
        params = discrete(initial_price=7, scale=2)
        assert discrete_gda_price(params, 20, 4, 0) == to_wad(7) * 2**20 * 15

    @pytest.mark.parametrize("scale, decay, sold, quantity, elapsed", [
        ("1.1", "0.01", 5, 3, 10),
        ("1.0001", 0, 1000, 50, 0),
        ("3.5", "0.2", 12, 2, 40),
    ])
    def test_matches_reference(self, scale, decay, sold, quantity, elapsed):
        params = discrete(scale=scale, decay=decay)
        got = discrete_gda_price(params, sold, quantity, elapsed)
        exact = reference_discrete(
            params.initial_price, params.scale_factor, params.decay_constant,
            sold, quantity, elapsed,
        )
        assert within_bound(got, exact)

    def test_monotone(self):
        params = discrete(scale="1.2", decay="0.1")
        by_time = [discrete_gda_price(params, 3, 1, t) for t in range(30)]
        by_sold = [discrete_gda_price(params, k, 1, 5) for k in range(30)]
        assert by_time == sorted(by_time, reverse=True)
        assert by_sold == sorted(by_sold)

    def test_price_overflow(self):
        with pytest.raises(Overflow):
            discrete_gda_price(discrete(), 100, 1, 0)

    def test_intermediate_overflow(self):
        with pytest.raises(Overflow):
            discrete_gda_price(discrete(), 200, 1, 0)


# =============================================================================
# Linear Dutch Tests
# =============================================================================


class TestLinearDutch:
    """Tests for the single-item linear Dutch auction."""

    def test_example_price(self, dutch):
        """500 - 1 per step: 470 after 30 steps."""
        assert evaluate(dutch, AuctionState(), 1, 30) == to_wad(470)
        assert evaluate(dutch, AuctionState(), 1, 0) == to_wad(500)

    def test_clamps_at_zero(self, dutch):
        assert linear_dutch_price(dutch, 499) == to_wad(1)
        assert linear_dutch_price(dutch, 500) == 0
        assert linear_dutch_price(dutch, 10**9) == 0

    def test_sold_rejects_queries(self, dutch):
        with pytest.raises(AlreadySold):
            evaluate(dutch, AuctionState(quantity_sold=1, sold=True), 1, 30)

    def test_quantity_must_be_one(self, dutch):
        with pytest.raises(InvalidQuantity):
            evaluate(dutch, AuctionState(), 2, 30)


# =============================================================================
# Dispatch Tests
# =============================================================================


class TestEvaluate:
    """Tests for request checks shared by every model."""

    @pytest.mark.parametrize("params", [continuous(), discrete()])
    def test_zero_quantity_rejected(self, params):
        with pytest.raises(InvalidQuantity):
            evaluate(params, AuctionState(), 0, 10)

    def test_zero_quantity_rejected_dutch(self, dutch):
        with pytest.raises(InvalidQuantity):
            evaluate(dutch, AuctionState(), 0, 10)

    @pytest.mark.parametrize("quantity", [1.5, True, "2"])
    def test_non_integer_quantity_rejected(self, quantity):
        with pytest.raises(InvalidQuantity):
            evaluate(continuous(), AuctionState(), quantity, 10)

    def test_query_before_start(self):
        params = continuous(start_time=100)
        with pytest.raises(DomainError):
            evaluate(params, AuctionState(), 1, 99)
        assert elapsed_since_start(params, 130) == 30

    def test_missing_start_time(self):
        params = continuous(start_time=None)
        with pytest.raises(DomainError):
            evaluate(params, AuctionState(), 1, 0)

    def test_idempotent_reads(self):
        params = continuous(decay="0.3", rate=2)
        state = AuctionState(quantity_sold=9)
        first = evaluate(params, state, 4, 17)
        assert all(evaluate(params, state, 4, 17) == first for _ in range(5))
        assert state == AuctionState(quantity_sold=9)

    def test_sale_moves_price(self):
        """After recording a sale of k, the next quote starts at k0 + k."""
        params = discrete(scale=2)
        state = AuctionState().record_sale(3)
        assert evaluate(params, state, 1, 0) == to_wad(1000) * 8
