"""Adaptive tuning of the liquidity bound from observed batches.

Keeps exponential moving averages of two per-batch statistics:
- slippage: mean amount_in / reserve_in over the first hop of executed routes
- utility: total net value of the plan

After each batch the liquidity fraction moves one step down when the
slippage average is above target and one step up otherwise, clamped to the
configured bounds. Plans without pool executions do not move the parameter.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import Decimal

import structlog

from intent_solver.config import DEFAULT_SOLVER_CONFIG, SolverConfig
from intent_solver.errors import ConfigError
from intent_solver.models.plan import ExecutionPlan, MatchType
from intent_solver.models.types import DECIMAL_HIGH_PREC_CONTEXT
from intent_solver.venues.snapshot import VenueSnapshot

logger = structlog.get_logger()


@dataclass(frozen=True)
class TuningBounds:
    """Range the tuner may move the liquidity fraction within."""

    min_liquidity_fraction: Decimal = Decimal("0.05")
    max_liquidity_fraction: Decimal = Decimal("0.5")
    step: Decimal = Decimal("0.05")

    def clamp(self, value: Decimal) -> Decimal:
        return max(self.min_liquidity_fraction, min(self.max_liquidity_fraction, value))


DEFAULT_TUNING_BOUNDS = TuningBounds()


class ParameterTuner:
    """EMA-based tuner producing new solver configs.

    Args:
        config: Starting configuration
        alpha: EMA smoothing factor in (0, 1]
        target_slippage: Slippage average the tuner steers towards
        bounds: Limits and step size for the liquidity fraction
    """

    def __init__(
        self,
        config: SolverConfig = DEFAULT_SOLVER_CONFIG,
        alpha: Decimal = Decimal("0.1"),
        target_slippage: Decimal = Decimal("0.01"),
        bounds: TuningBounds = DEFAULT_TUNING_BOUNDS,
    ) -> None:
        if not Decimal(0) < alpha <= Decimal(1):
            raise ConfigError(f"alpha must be in (0, 1], got {alpha}")
        self.config = config
        self.alpha = alpha
        self.target_slippage = target_slippage
        self.bounds = bounds
        self.slippage_ema: Decimal | None = None
        self.utility_ema: Decimal | None = None

    def _ema(self, previous: Decimal | None, value: Decimal) -> Decimal:
        if previous is None:
            return value
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            return self.alpha * value + (1 - self.alpha) * previous

    @staticmethod
    def batch_slippage(plan: ExecutionPlan, snapshot: VenueSnapshot) -> Decimal | None:
        """Mean first-hop input share of the reserve over pool executions."""
        samples = []
        for execution in plan.executions:
            if execution.match_type not in (MatchType.POOL, MatchType.CROSS_CHAIN_POOL):
                continue
            if not execution.venue_ids:
                continue
            venue = snapshot.get(execution.venue_ids[0])
            if venue is None:
                continue
            reserve_in, _ = venue.get_reserves(execution.intent.sell_token)
            if reserve_in > 0:
                with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                    samples.append(execution.intent.sell_amount / reserve_in)
        if not samples:
            return None
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            return sum(samples, Decimal(0)) / len(samples)

    def observe(self, plan: ExecutionPlan, snapshot: VenueSnapshot) -> SolverConfig:
        """Update the averages with one batch and return the adjusted config."""
        self.utility_ema = self._ema(self.utility_ema, plan.total_value)

        slippage = self.batch_slippage(plan, snapshot)
        if slippage is None:
            return self.config
        self.slippage_ema = self._ema(self.slippage_ema, slippage)

        current = self.config.liquidity_fraction
        if self.slippage_ema > self.target_slippage:
            proposed = current - self.bounds.step
        else:
            proposed = current + self.bounds.step
        updated = self.bounds.clamp(proposed)

        if updated != current:
            self.config = self.config.with_updates(liquidity_fraction=updated)
            logger.info(
                "liquidity_fraction_tuned",
                previous=str(current),
                updated=str(updated),
                slippage_ema=str(self.slippage_ema),
                utility_ema=str(self.utility_ema),
            )
        return self.config


__all__ = ["DEFAULT_TUNING_BOUNDS", "ParameterTuner", "TuningBounds"]
