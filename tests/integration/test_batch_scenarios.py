"""End-to-end batch runs over small, hand-checked scenarios.

These exercise the whole pipeline (catalog snapshot, CoW pass, routing,
plan emission) through BatchOptimizer.optimize.
"""

from decimal import Decimal

import pytest

from intent_solver.config import SolverConfig
from intent_solver.models.plan import MatchType
from intent_solver.optimizer import BatchOptimizer
from intent_solver.venues.snapshot import EMPTY_SNAPSHOT, VenueSnapshot
from tests.helpers import (
    ARBITRUM,
    DAI,
    ETH,
    NOW,
    USDC,
    WBTC,
    make_intent,
    make_venue,
)


def _snapshot(*venues) -> VenueSnapshot:
    return VenueSnapshot(venues=tuple(venues))


class TestScenarios:
    """Reference scenarios with known outcomes."""

    def test_opposite_intents_settle_as_cow(self, optimizer) -> None:
        a = make_intent(ETH, USDC, "1", min_buy_amount="1800")
        b = make_intent(USDC, ETH, "1900", min_buy_amount="0.9")

        plan = optimizer.optimize([a, b], EMPTY_SNAPSHOT, now=NOW)

        assert [e.match_type for e in plan.executions] == [MatchType.COW, MatchType.COW]
        assert plan.for_intent(a.id).counterparty_intent_id == b.id
        assert plan.for_intent(b.id).counterparty_intent_id == a.id

    def test_no_venues_queues_intent(self, optimizer) -> None:
        intent = make_intent(ETH, USDC, "1")

        plan = optimizer.optimize([intent], EMPTY_SNAPSHOT, now=NOW)

        assert len(plan.executions) == 1
        execution = plan.executions[0]
        assert execution.match_type == MatchType.QUEUED
        assert execution.expected_output == 0
        assert execution.net_value == 0

    def test_swap_beyond_liquidity_bound_is_queued(self, optimizer) -> None:
        intent = make_intent("x", "y", "100")
        venue = make_venue("x-y", "x", "y", "200", "200")

        plan = optimizer.optimize([intent], _snapshot(venue), now=NOW)

        assert plan.executions[0].match_type == MatchType.QUEUED

    def test_single_venue_swap_output(self, optimizer) -> None:
        intent = make_intent("x", "y", "100")
        venue = make_venue("x-y", "x", "y", "10000", "10000")

        plan = optimizer.optimize([intent], _snapshot(venue), now=NOW)

        execution = plan.executions[0]
        assert execution.match_type == MatchType.POOL
        assert execution.venue_ids == ["x-y"]
        assert execution.token_path == ["x", "y"]
        # 99.7 * 10000 / 10099.7
        assert float(execution.expected_output) == pytest.approx(98.7158, abs=1e-4)

    def test_competing_intents_never_exceed_reserve(self) -> None:
        config = SolverConfig(mode="global", liquidity_fraction=Decimal(1))
        optimizer = BatchOptimizer(config)
        first = make_intent("x", "y", "60")
        second = make_intent("x", "y", "60")
        venue = make_venue("x-y", "x", "y", "100", "100")

        plan = optimizer.optimize([first, second], _snapshot(venue), now=NOW)

        granted = [e for e in plan.executions if e.match_type == MatchType.POOL]
        assert len(granted) == 1
        assert plan.queued_count == 1
        allocated = sum(e.intent.sell_amount for e in granted)
        assert allocated <= venue.reserves["x"]


class TestPlanProperties:
    """Properties every plan must satisfy."""

    @pytest.fixture
    def mixed_batch(self):
        return [
            make_intent(ETH, USDC, "1", min_buy_amount="1800"),
            make_intent(USDC, ETH, "1900", min_buy_amount="0.9"),
            make_intent(ETH, DAI, "2"),
            make_intent(DAI, USDC, "5000"),
            make_intent(WBTC, USDC, "1"),
            make_intent(ETH, USDC, "50"),
            make_intent(ETH, USDC, "0.5", min_buy_amount="5000"),
        ]

    @pytest.fixture
    def cross_chain_snapshot(self, mainnet_venues, arbitrum_venues) -> VenueSnapshot:
        return _snapshot(*mainnet_venues, *arbitrum_venues)

    @pytest.mark.parametrize("mode", ["direct", "global"])
    def test_one_execution_per_intent(self, mode, mixed_batch, cross_chain_snapshot) -> None:
        optimizer = BatchOptimizer(SolverConfig(mode=mode))
        plan = optimizer.optimize(mixed_batch, cross_chain_snapshot, now=NOW)

        assert len(plan.executions) == len(mixed_batch)
        assert [e.intent.id for e in plan.executions] == [i.id for i in mixed_batch]

    @pytest.mark.parametrize("mode", ["direct", "global"])
    def test_no_non_positive_routed_value(self, mode, mixed_batch, cross_chain_snapshot) -> None:
        optimizer = BatchOptimizer(SolverConfig(mode=mode))
        plan = optimizer.optimize(mixed_batch, cross_chain_snapshot, now=NOW)

        routed = [
            e
            for e in plan.executions
            if e.match_type in (MatchType.POOL, MatchType.CROSS_CHAIN_POOL)
        ]
        assert routed
        assert all(e.expected_output - e.total_cost > 0 for e in routed)

    def test_cow_pairs_are_symmetric(self, optimizer, mixed_batch, cross_chain_snapshot) -> None:
        plan = optimizer.optimize(mixed_batch, cross_chain_snapshot, now=NOW)
        by_id = {e.intent.id: e for e in plan.executions}

        for execution in plan.executions:
            if execution.match_type != MatchType.COW:
                continue
            other = by_id[execution.counterparty_intent_id].intent
            assert execution.intent.sell_token == other.buy_token
            assert execution.intent.buy_token == other.sell_token
            assert by_id[other.id].counterparty_intent_id == execution.intent.id

    def test_cross_chain_only_with_margin(self, mainnet_venues, arbitrum_venues) -> None:
        optimizer = BatchOptimizer(SolverConfig(bridge_base_fee=Decimal(10)))
        intent = make_intent(ETH, USDC, "5")
        plan = optimizer.optimize(
            [intent], _snapshot(*mainnet_venues, *arbitrum_venues), now=NOW
        )

        execution = plan.executions[0]
        assert execution.match_type == MatchType.CROSS_CHAIN_POOL
        assert execution.requires_cross_chain
        assert execution.target_chain == ARBITRUM

        local_only = BatchOptimizer().optimize([intent], _snapshot(*mainnet_venues), now=NOW)
        local_value = local_only.executions[0].net_value
        margin = optimizer.config.min_cross_chain_improvement
        assert execution.net_value >= local_value * (1 + margin)

    def test_optimize_is_repeatable(self, optimizer, mixed_batch, cross_chain_snapshot) -> None:
        first = optimizer.optimize(mixed_batch, cross_chain_snapshot, now=NOW, batch_id="b")
        second = optimizer.optimize(mixed_batch, cross_chain_snapshot, now=NOW, batch_id="b")

        assert first.executions == second.executions
