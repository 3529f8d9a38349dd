"""Single-venue swap simulation.

`simulate_swap` is the entry point the router and the optimizer use to price
a hop. It is pure: same inputs, same output, no I/O. An
infeasible swap is signalled by returning None, never by raising, so that
routing code can simply move on to the next candidate.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

import structlog

from intent_solver.amm.base import SwapCalculator, SwapResult
from intent_solver.amm.constant_product import constant_product
from intent_solver.amm.weighted import weighted
from intent_solver.constants import DEFAULT_LIQUIDITY_FRACTION
from intent_solver.models.types import DECIMAL_HIGH_PREC_CONTEXT, normalize_token
from intent_solver.models.venue import CurveType, Venue

logger = structlog.get_logger()

# Curve dispatch; stable venues price with the constant product placeholder
CURVES: dict[CurveType, SwapCalculator] = {
    CurveType.CONSTANT_PRODUCT: constant_product,
    CurveType.STABLE: constant_product,
    CurveType.WEIGHTED: weighted,
}


def dynamic_fee(venue: Venue, token_in: str, amount_in: Decimal) -> Decimal:
    """Fee that grows with utilization: fee * (1 + amount_in / reserve_in).

    The result is capped just below 1 so the curve math stays defined.
    """
    reserve_in, _ = venue.get_reserves(token_in)
    if reserve_in <= 0:
        return venue.fee
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        fee = venue.fee * (1 + amount_in / reserve_in)
    return min(fee, Decimal("0.999999"))


def exceeds_liquidity_bound(
    reserve_in: Decimal,
    amount_in: Decimal,
    liquidity_fraction: Decimal = DEFAULT_LIQUIDITY_FRACTION,
) -> bool:
    """True if the input is larger than the allowed share of the input reserve."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return amount_in > liquidity_fraction * reserve_in


def simulate_swap(
    venue: Venue,
    token_in: str,
    token_out: str,
    amount_in: Decimal,
    liquidity_fraction: Decimal = DEFAULT_LIQUIDITY_FRACTION,
    use_dynamic_fee: bool = False,
) -> SwapResult | None:
    """Simulate an exact-input swap against one venue.

    The swap is infeasible (None) when:
    - either token is not in the venue
    - a reserve is zero or negative
    - amount_in is not positive
    - amount_in exceeds liquidity_fraction of the input reserve

    Args:
        venue: Venue to swap against
        token_in: Token sold into the venue
        token_out: Token bought from the venue
        amount_in: Amount sold
        liquidity_fraction: Max share of the input reserve one swap may take
        use_dynamic_fee: Price with a utilization-dependent fee

    Returns:
        SwapResult, or None if the swap is infeasible
    """
    token_in_norm = normalize_token(token_in)
    token_out_norm = normalize_token(token_out)

    if not venue.has_token(token_in_norm) or not venue.has_token(token_out_norm):
        return None
    if token_in_norm == token_out_norm:
        return None
    if amount_in <= 0:
        return None

    reserve_in, reserve_out = venue.get_reserves(token_in_norm)
    if reserve_in <= 0 or reserve_out <= 0:
        return None

    if exceeds_liquidity_bound(reserve_in, amount_in, liquidity_fraction):
        logger.debug(
            "swap_exceeds_liquidity_bound",
            venue=venue.id,
            amount_in=str(amount_in),
            reserve_in=str(reserve_in),
            liquidity_fraction=str(liquidity_fraction),
        )
        return None

    fee = dynamic_fee(venue, token_in_norm, amount_in) if use_dynamic_fee else venue.fee
    result = CURVES[venue.kind].simulate_swap(venue, token_in_norm, amount_in, fee=fee)

    if result.amount_out <= 0:
        return None
    return result


def is_candidate(result: SwapResult | None) -> bool:
    """A swap is a routing candidate only if its utility is strictly positive."""
    return result is not None and result.utility > 0


__all__ = [
    "CURVES",
    "dynamic_fee",
    "exceeds_liquidity_bound",
    "is_candidate",
    "simulate_swap",
]
