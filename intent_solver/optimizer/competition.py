"""Plan competition: keep the most valuable of several candidate plans."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from intent_solver.models.plan import ExecutionPlan

logger = structlog.get_logger()


def select_best_plan(plans: Sequence[ExecutionPlan]) -> ExecutionPlan:
    """Pick the plan with the highest total net value.

    Ties go to the earliest plan, so callers list their preferred mode first.

    Raises:
        ValueError: If no plans are given
    """
    if not plans:
        raise ValueError("select_best_plan needs at least one plan")

    best = plans[0]
    for plan in plans[1:]:
        if plan.total_value > best.total_value:
            best = plan

    logger.info(
        "plan_competition_complete",
        candidates=[(p.mode, str(p.total_value)) for p in plans],
        winner=best.mode,
        batch_id=best.batch_id,
    )
    return best


__all__ = ["select_best_plan"]
