"""Constant product AMM (x * y = k).

The fee is taken from the input before it reaches the curve:
    effective_in = amount_in * (1 - fee)
    amount_out = effective_in * reserve_out / (reserve_in + effective_in)
"""

from __future__ import annotations

import decimal
from decimal import Decimal

from intent_solver.amm.base import AMM, SwapResult
from intent_solver.models.types import DECIMAL_HIGH_PREC_CONTEXT
from intent_solver.models.venue import Venue


class ConstantProductAMM(AMM):
    """Constant product curve math.

    Also serves stable venues: real StableSwap invariant math is out of
    scope and the constant product curve is used as the placeholder.
    """

    def get_amount_out(
        self,
        amount_in: Decimal,
        reserve_in: Decimal,
        reserve_out: Decimal,
        fee: Decimal,
    ) -> Decimal:
        if amount_in <= 0:
            return Decimal(0)
        if reserve_in <= 0 or reserve_out <= 0:
            return Decimal(0)

        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            effective_in = amount_in * (1 - fee)
            return (effective_in * reserve_out) / (reserve_in + effective_in)

    def simulate_swap(
        self,
        venue: Venue,
        token_in: str,
        amount_in: Decimal,
        fee: Decimal | None = None,
    ) -> SwapResult:
        """Simulate a swap through a venue (exact input).

        Args:
            venue: The venue to swap against
            token_in: Input token
            amount_in: Amount to swap
            fee: Fee override (defaults to the venue's fee)

        Returns:
            SwapResult with amounts and venue info
        """
        reserve_in, reserve_out = venue.get_reserves(token_in)
        amount_out = self.get_amount_out(
            amount_in, reserve_in, reserve_out, venue.fee if fee is None else fee
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
constant_product = ConstantProductAMM()

__all__ = ["ConstantProductAMM", "constant_product"]
