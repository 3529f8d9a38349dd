"""Tests for swap curves and single-venue simulation."""

from decimal import Decimal

import pytest

from intent_solver.amm import (
    constant_product,
    dynamic_fee,
    exceeds_liquidity_bound,
    is_candidate,
    simulate_swap,
    weighted,
)
from intent_solver.models.venue import CurveType
from tests.helpers import ETH, USDC, WBTC, make_venue


class TestConstantProduct:
    """Tests for the constant product curve."""

    def test_known_output(self) -> None:
        out = constant_product.get_amount_out(
            Decimal(100), Decimal(10000), Decimal(10000), Decimal("0.003")
        )
        # 99.7 * 10000 / 10099.7
        assert float(out) == pytest.approx(98.7158, abs=1e-4)

    def test_output_below_reserve(self) -> None:
        out = constant_product.get_amount_out(
            Decimal(10**9), Decimal(100), Decimal(100), Decimal(0)
        )
        assert out < 100

    def test_output_increases_with_input(self) -> None:
        outputs = [
            constant_product.get_amount_out(
                Decimal(amount), Decimal(1000), Decimal(1000), Decimal("0.003")
            )
            for amount in (1, 10, 100, 300)
        ]
        assert outputs == sorted(outputs)
        assert len(set(outputs)) == len(outputs)

    def test_output_decreases_with_fee(self) -> None:
        outputs = [
            constant_product.get_amount_out(
                Decimal(10), Decimal(1000), Decimal(1000), Decimal(fee)
            )
            for fee in ("0", "0.001", "0.003", "0.01")
        ]
        assert outputs == sorted(outputs, reverse=True)
        assert len(set(outputs)) == len(outputs)

    def test_degenerate_inputs_return_zero(self) -> None:
        assert constant_product.get_amount_out(Decimal(0), Decimal(1), Decimal(1), Decimal(0)) == 0
        assert constant_product.get_amount_out(Decimal(1), Decimal(0), Decimal(1), Decimal(0)) == 0


class TestWeighted:
    """Tests for the weighted product curve."""

    def test_equal_weights_match_constant_product(self) -> None:
        args = (Decimal(10), Decimal(1000), Decimal(2000), Decimal("0.003"))
        diff = weighted.get_amount_out(*args) - constant_product.get_amount_out(*args)
        assert abs(diff) < Decimal("1e-60")

    def test_heavier_input_weight_gives_more_output(self) -> None:
        args = (Decimal(10), Decimal(1000), Decimal(1000), Decimal("0.003"))
        balanced = weighted.get_amount_out(*args)
        skewed = weighted.get_amount_out(*args, weight_in=Decimal("0.8"), weight_out=Decimal("0.2"))
        assert skewed > balanced

    def test_simulate_uses_venue_weights(self) -> None:
        venue = make_venue(
            "w",
            ETH,
            USDC,
            "1000",
            "1000",
            kind=CurveType.WEIGHTED,
            weights={ETH: "0.8", USDC: "0.2"},
        )
        result = simulate_swap(venue, ETH, USDC, Decimal(10))
        assert result is not None
        expected = weighted.get_amount_out(
            Decimal(10),
            Decimal(1000),
            Decimal(1000),
            Decimal("0.003"),
            weight_in=Decimal("0.8"),
            weight_out=Decimal("0.2"),
        )
        assert result.amount_out == expected


class TestSimulateSwap:
    """Tests for simulate_swap feasibility rules."""

    def test_feasible_swap(self) -> None:
        venue = make_venue("v", "x", "y", "10000", "10000")
        result = simulate_swap(venue, "x", "y", Decimal(100))
        assert result is not None
        assert result.venue_id == "v"
        assert result.token_out == "y"
        assert float(result.amount_out) == pytest.approx(98.7158, abs=1e-4)

    def test_liquidity_bound_makes_swap_infeasible(self) -> None:
        venue = make_venue("v", "x", "y", "200", "200")
        # 100 > 0.3 * 200
        assert simulate_swap(venue, "x", "y", Decimal(100)) is None

    def test_exactly_at_bound_is_feasible(self) -> None:
        venue = make_venue("v", "x", "y", "200", "200")
        assert simulate_swap(venue, "x", "y", Decimal(60)) is not None

    def test_custom_liquidity_fraction(self) -> None:
        venue = make_venue("v", "x", "y", "200", "200")
        assert simulate_swap(venue, "x", "y", Decimal(100), liquidity_fraction=Decimal(1)) is not None

    def test_unknown_token_is_infeasible(self) -> None:
        assert simulate_swap(make_venue("v"), WBTC, USDC, Decimal(1)) is None

    def test_same_token_is_infeasible(self) -> None:
        assert simulate_swap(make_venue("v"), ETH, ETH, Decimal(1)) is None

    def test_non_positive_amount_is_infeasible(self) -> None:
        assert simulate_swap(make_venue("v"), ETH, USDC, Decimal(0)) is None

    def test_zero_reserve_is_infeasible(self) -> None:
        venue = make_venue("v", reserve_b="0")
        assert simulate_swap(venue, ETH, USDC, Decimal(1)) is None

    def test_token_case_is_ignored(self) -> None:
        assert simulate_swap(make_venue("v"), "ETH", "UsDc", Decimal(1)) is not None

    def test_simulation_is_pure(self) -> None:
        venue = make_venue("v")
        first = simulate_swap(venue, ETH, USDC, Decimal("1.5"))
        second = simulate_swap(venue, ETH, USDC, Decimal("1.5"))
        assert first == second
        assert venue.reserves[ETH] == Decimal(100)

    def test_dynamic_fee_lowers_output(self) -> None:
        venue = make_venue("v")
        static = simulate_swap(venue, ETH, USDC, Decimal(10))
        dynamic = simulate_swap(venue, ETH, USDC, Decimal(10), use_dynamic_fee=True)
        assert static is not None and dynamic is not None
        assert dynamic.amount_out < static.amount_out

    def test_gas_cost_reduces_utility(self) -> None:
        venue = make_venue("v", gas_cost="5")
        result = simulate_swap(venue, ETH, USDC, Decimal(1))
        assert result is not None
        assert result.utility == result.amount_out - 5


class TestHelpers:
    """Tests for the fee and bound helpers."""

    def test_dynamic_fee_grows_with_utilization(self) -> None:
        venue = make_venue("v", reserve_a="100")
        assert dynamic_fee(venue, ETH, Decimal(10)) == Decimal("0.003") * Decimal("1.1")

    def test_dynamic_fee_is_capped(self) -> None:
        venue = make_venue("v", reserve_a="1", fee="0.9")
        assert dynamic_fee(venue, ETH, Decimal(100)) < 1

    def test_exceeds_liquidity_bound(self) -> None:
        assert exceeds_liquidity_bound(Decimal(200), Decimal(61))
        assert not exceeds_liquidity_bound(Decimal(200), Decimal(60))

    def test_is_candidate(self) -> None:
        assert not is_candidate(None)
        venue = make_venue("v", gas_cost="1000000")
        assert not is_candidate(simulate_swap(venue, ETH, USDC, Decimal(1)))
        assert is_candidate(simulate_swap(make_venue("v2"), ETH, USDC, Decimal(1)))
