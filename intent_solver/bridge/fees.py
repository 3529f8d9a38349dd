"""Cross-chain bridge cost estimates.

The estimate is static: a base fee (or a per-route override) scaled by an
overhead multiplier that covers fee volatility between planning and
settlement. Estimates are cached per (source, target) route with a TTL so a
future live fee lookup plugs in behind the same cache.
"""

from __future__ import annotations

import decimal
import time
from collections.abc import Callable, Mapping
from decimal import Decimal

import structlog

from intent_solver.constants import (
    DEFAULT_BRIDGE_BASE_FEE,
    DEFAULT_BRIDGE_FEE_TTL_SECONDS,
    DEFAULT_BRIDGE_OVERHEAD_MULTIPLIER,
)
from intent_solver.models.types import DECIMAL_HIGH_PREC_CONTEXT

logger = structlog.get_logger()


class BridgeFeeEstimator:
    """Estimates the cost of settling an intent on another chain.

    Costs are in output-token units so they can be subtracted from a route's
    expected output directly.

    Args:
        base_fee: Flat fee used for routes without an override
        overhead_multiplier: Safety factor applied to every estimate
        ttl_seconds: How long an estimate stays cached
        route_fees: Per-(source, target) base fee overrides
        clock: Monotonic clock in seconds (injectable for tests)
    """

    def __init__(
        self,
        base_fee: Decimal = DEFAULT_BRIDGE_BASE_FEE,
        overhead_multiplier: Decimal = DEFAULT_BRIDGE_OVERHEAD_MULTIPLIER,
        ttl_seconds: float = DEFAULT_BRIDGE_FEE_TTL_SECONDS,
        route_fees: Mapping[tuple[int, int], Decimal] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.base_fee = base_fee
        self.overhead_multiplier = overhead_multiplier
        self.ttl_seconds = ttl_seconds
        self.route_fees = dict(route_fees or {})
        self._clock = clock
        self._cache: dict[tuple[int, int], tuple[Decimal, float]] = {}

    def _base_fee_for(self, source_chain: int, target_chain: int) -> Decimal:
        return self.route_fees.get((source_chain, target_chain), self.base_fee)

    def estimate(self, source_chain: int, target_chain: int) -> Decimal:
        """Cost of bridging from source_chain to target_chain.

        Same-chain routes cost nothing.
        """
        if source_chain == target_chain:
            return Decimal(0)

        key = (source_chain, target_chain)
        now = self._clock()
        cached = self._cache.get(key)
        if cached is not None and now - cached[1] < self.ttl_seconds:
            return cached[0]

        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            fee = self._base_fee_for(source_chain, target_chain) * self.overhead_multiplier

        self._cache[key] = (fee, now)
        logger.debug(
            "bridge_fee_estimated",
            source_chain=source_chain,
            target_chain=target_chain,
            fee=str(fee),
        )
        return fee

    def clear_cache(self) -> None:
        self._cache.clear()


__all__ = ["BridgeFeeEstimator"]
