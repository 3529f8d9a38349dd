"""Weighted product AMM (Balancer-style, simplified).

    amount_out = reserve_out * (1 - (reserve_in / (reserve_in + effective_in)) ** (w_in / w_out))

With equal weights this reduces to the constant product formula.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

from intent_solver.amm.base import AMM, SwapResult
from intent_solver.constants import DEFAULT_WEIGHT
from intent_solver.models.types import DECIMAL_HIGH_PREC_CONTEXT
from intent_solver.models.venue import Venue


class WeightedAMM(AMM):
    """Weighted product curve math."""

    def get_amount_out(
        self,
        amount_in: Decimal,
        reserve_in: Decimal,
        reserve_out: Decimal,
        fee: Decimal,
        weight_in: Decimal = DEFAULT_WEIGHT,
        weight_out: Decimal = DEFAULT_WEIGHT,
    ) -> Decimal:
        if amount_in <= 0:
            return Decimal(0)
        if reserve_in <= 0 or reserve_out <= 0:
            return Decimal(0)
        if weight_in <= 0 or weight_out <= 0:
            return Decimal(0)

        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            effective_in = amount_in * (1 - fee)
            ratio = reserve_in / (reserve_in + effective_in)
            return reserve_out * (1 - ratio ** (weight_in / weight_out))

    def simulate_swap(
        self,
        venue: Venue,
        token_in: str,
        amount_in: Decimal,
        fee: Decimal | None = None,
    ) -> SwapResult:
        reserve_in, reserve_out = venue.get_reserves(token_in)
        weight_in, weight_out = venue.get_weights(token_in)
        amount_out = self.get_amount_out(
            amount_in,
            reserve_in,
            reserve_out,
            venue.fee if fee is None else fee,
            weight_in=weight_in,
            weight_out=weight_out,
        )
        return SwapResult(
            venue_id=venue.id,
            chain_id=venue.chain_id,
            token_in=token_in,
            token_out=venue.other_token(token_in),
            amount_in=amount_in,
            amount_out=amount_out,
            gas_cost=venue.gas_cost,
        )


# Singleton instance
weighted = WeightedAMM()

__all__ = ["WeightedAMM", "weighted"]
