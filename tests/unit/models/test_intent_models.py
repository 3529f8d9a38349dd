"""Tests for intent, venue and plan models."""

from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from intent_solver.models import (
    CurveType,
    Execution,
    ExecutionPlan,
    Intent,
    IntentStatus,
    MatchType,
    Venue,
)
from tests.helpers import ETH, FAR_FUTURE, MAINNET, NOW, PAST, USDC, make_intent, make_venue


class TestIntent:
    """Tests for the Intent model."""

    def test_parses_camel_case_payload(self) -> None:
        intent = Intent.model_validate(
            {
                "id": 7,
                "userAddress": "0xAbC",
                "chainId": 1,
                "sellToken": "ETH",
                "buyToken": " USDC ",
                "sellAmount": "1.5",
                "minBuyAmount": 2900,
                "deadline": "2030-01-01T00:00:00Z",
            }
        )
        assert intent.id == "7"
        assert intent.sell_token == "eth"
        assert intent.buy_token == "usdc"
        assert intent.sell_amount == Decimal("1.5")
        assert intent.min_buy_amount == Decimal(2900)
        assert intent.status == IntentStatus.PENDING

    def test_float_amount_keeps_decimal_representation(self) -> None:
        intent = make_intent(sell_amount=Decimal("0.1"))
        intent2 = Intent.model_validate(
            {
                "id": "x",
                "userAddress": "u",
                "chainId": 1,
                "sellToken": ETH,
                "buyToken": USDC,
                "sellAmount": 0.1,
                "deadline": FAR_FUTURE,
            }
        )
        assert intent2.sell_amount == intent.sell_amount == Decimal("0.1")

    def test_null_min_buy_means_no_minimum(self) -> None:
        intent = Intent.model_validate(
            {
                "id": "x",
                "userAddress": "u",
                "chainId": 1,
                "sellToken": ETH,
                "buyToken": USDC,
                "sellAmount": "1",
                "minBuyAmount": None,
                "deadline": FAR_FUTURE,
            }
        )
        assert intent.min_buy_amount == 0

    def test_rejects_zero_sell_amount(self) -> None:
        with pytest.raises(ValidationError):
            make_intent(sell_amount="0")

    def test_rejects_negative_amount(self) -> None:
        with pytest.raises(ValidationError):
            make_intent(min_buy_amount="-1")

    def test_rejects_same_token_pair(self) -> None:
        with pytest.raises(ValidationError):
            make_intent(sell_token=ETH, buy_token="ETH")

    def test_rejects_bool_amount(self) -> None:
        with pytest.raises(ValidationError):
            make_intent(sell_amount=True)  # type: ignore[arg-type]

    def test_naive_deadline_is_utc(self) -> None:
        intent = make_intent(deadline=datetime(2030, 1, 1))
        assert intent.deadline.tzinfo is not None

    def test_eligibility(self) -> None:
        assert make_intent(deadline=FAR_FUTURE).is_eligible(NOW)
        assert not make_intent(deadline=PAST).is_eligible(NOW)
        assert not make_intent(status=IntentStatus.MATCHED).is_eligible(NOW)

    def test_deadline_equal_to_now_is_expired(self) -> None:
        assert make_intent(deadline=NOW).is_expired(NOW)

    def test_naive_now_is_utc(self) -> None:
        assert make_intent(deadline=PAST).is_expired(NOW.replace(tzinfo=None))
        assert not make_intent(deadline=FAR_FUTURE).is_expired(NOW.replace(tzinfo=None))


class TestVenue:
    """Tests for the Venue model."""

    def test_parses_type_alias_and_normalizes(self) -> None:
        venue = Venue.model_validate(
            {
                "id": "v1",
                "chainId": 1,
                "tokens": ["ETH", "USDC"],
                "reserves": {"ETH": "10", "USDC": "20000"},
                "fee": 0.003,
                "type": "weighted",
                "weights": {"ETH": 0.8, "USDC": 0.2},
            }
        )
        assert venue.tokens == ("eth", "usdc")
        assert venue.kind == CurveType.WEIGHTED
        assert venue.fee == Decimal("0.003")
        assert venue.get_weights("eth") == (Decimal("0.8"), Decimal("0.2"))

    def test_address_defaults_to_id(self) -> None:
        assert make_venue("v1").address == "v1"
        venue = Venue(
            id="v2", address="0xpool", chain_id=1, tokens=(ETH, USDC), reserves={ETH: 1, USDC: 1}
        )
        assert venue.address == "0xpool"

    def test_non_string_tokens_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Venue(id="v", chain_id=1, tokens=(1, 2), reserves={"1": "1", "2": "1"})

    def test_reserves_must_cover_tokens(self) -> None:
        with pytest.raises(ValidationError):
            Venue(id="v", chain_id=1, tokens=(ETH, USDC), reserves={ETH: "1"})

    def test_fee_must_be_below_one(self) -> None:
        with pytest.raises(ValidationError):
            make_venue("v", fee="1")

    def test_get_reserves_orders_by_input(self) -> None:
        venue = make_venue("v", ETH, USDC, "10", "20000")
        assert venue.get_reserves(USDC) == (Decimal(20000), Decimal(10))
        assert venue.other_token("ETH") == USDC

    def test_other_token_rejects_unknown(self) -> None:
        with pytest.raises(ValueError):
            make_venue("v").other_token("wbtc")

    def test_default_weights(self) -> None:
        assert make_venue("v").get_weights(ETH) == (Decimal("0.5"), Decimal("0.5"))

    def test_zero_reserve_is_unusable(self) -> None:
        assert not make_venue("v", reserve_a="0").is_usable

    def test_venue_is_immutable(self) -> None:
        venue = make_venue("v")
        with pytest.raises(ValidationError):
            venue.fee = Decimal("0.01")  # type: ignore[misc]


class TestExecutionPlan:
    """Tests for Execution and ExecutionPlan."""

    def test_queued_execution_has_zero_value(self) -> None:
        execution = Execution.queued(make_intent(), error="boom")
        assert execution.is_queued
        assert execution.net_value == 0
        assert execution.error == "boom"
        assert execution.target_chain == MAINNET

    def test_counts_and_total_value(self) -> None:
        a, b, c = make_intent(), make_intent(), make_intent()
        plan = ExecutionPlan(
            batch_id="b1",
            mode="direct",
            executions=[
                Execution(
                    intent=a,
                    match_type=MatchType.POOL,
                    expected_output=Decimal("10"),
                    total_cost=Decimal("1"),
                    target_chain=MAINNET,
                ),
                Execution(
                    intent=b,
                    match_type=MatchType.COW,
                    expected_output=Decimal("5"),
                    target_chain=MAINNET,
                ),
                Execution.queued(c),
            ],
        )
        assert plan.pool_count == 1
        assert plan.cow_count == 1
        assert plan.queued_count == 1
        assert plan.cross_chain_count == 0
        assert plan.total_value == Decimal("14")
        assert plan.for_intent(c.id).is_queued
        assert plan.for_intent("missing") is None

    def test_serializes_with_aliases(self) -> None:
        plan = ExecutionPlan(batch_id="b1", mode="direct", executions=[Execution.queued(make_intent())])
        data = plan.model_dump(by_alias=True)
        assert data["batchId"] == "b1"
        assert data["executions"][0]["matchType"] == MatchType.QUEUED
