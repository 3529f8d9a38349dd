"""Route evaluation: simulate a venue path hop by hop."""

from __future__ import annotations

import decimal
from collections.abc import Sequence
from decimal import Decimal

import structlog

from intent_solver.amm.simulator import simulate_swap
from intent_solver.constants import DEFAULT_LIQUIDITY_FRACTION, DEFAULT_MAX_HOPS, DEFAULT_MAX_PATHS
from intent_solver.errors import IntentEvaluationError
from intent_solver.models.intent import Intent
from intent_solver.models.types import DECIMAL_HIGH_PREC_CONTEXT
from intent_solver.models.venue import Venue
from intent_solver.routing.pathfinding import PathFinder
from intent_solver.routing.types import HopResult, Route

logger = structlog.get_logger()


def evaluate_route(
    path: Sequence[Venue],
    intent: Intent,
    liquidity_fraction: Decimal = DEFAULT_LIQUIDITY_FRACTION,
    dynamic_fees: bool = False,
) -> Route | None:
    """Simulate an intent's sell amount through a venue path.

    Each hop's output becomes the next hop's input. The path is discarded
    (None) as soon as one hop is infeasible.

    Args:
        path: Venues in hop order, starting at the intent's sell token
        intent: Intent being routed
        liquidity_fraction: Max share of a hop's input reserve
        dynamic_fees: Price hops with utilization-dependent fees

    Returns:
        The evaluated Route, or None if any hop fails

    Raises:
        IntentEvaluationError: If the path spans more than one chain
    """
    if not path:
        return None
    if len({venue.chain_id for venue in path}) > 1:
        raise IntentEvaluationError(f"Path for {intent.short_id} mixes chains")

    hops: list[HopResult] = []
    token_path = [intent.sell_token]
    current_token = intent.sell_token
    current_amount = intent.sell_amount
    utility = Decimal(0)
    gas_cost = Decimal(0)

    for i, venue in enumerate(path):
        if not venue.has_token(current_token):
            return None
        token_out = venue.other_token(current_token)

        result = simulate_swap(
            venue,
            current_token,
            token_out,
            current_amount,
            liquidity_fraction=liquidity_fraction,
            use_dynamic_fee=dynamic_fees,
        )
        if result is None:
            logger.debug(
                "route_hop_infeasible",
                intent=intent.short_id,
                venue=venue.id,
                hop=i,
                amount_in=str(current_amount),
            )
            return None

        hops.append(
            HopResult(
                venue=venue,
                token_in=current_token,
                token_out=token_out,
                amount_in=current_amount,
                amount_out=result.amount_out,
            )
        )
        # Utility is the additive sum of hop outputs, a ranking proxy only
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            utility += result.amount_out
            gas_cost += result.gas_cost
        current_token = token_out
        current_amount = result.amount_out
        token_path.append(token_out)

    if current_token != intent.buy_token:
        return None

    return Route(
        venues=tuple(path),
        token_path=tuple(token_path),
        amount_in=intent.sell_amount,
        amount_out=current_amount,
        utility=utility,
        gas_cost=gas_cost,
        hops=tuple(hops),
    )


def find_routes(
    intent: Intent,
    venues: Sequence[Venue],
    max_hops: int = DEFAULT_MAX_HOPS,
    max_paths: int = DEFAULT_MAX_PATHS,
    liquidity_fraction: Decimal = DEFAULT_LIQUIDITY_FRACTION,
    dynamic_fees: bool = False,
    path_finder: PathFinder | None = None,
) -> list[Route]:
    """Enumerate and evaluate all routes for an intent over a venue set.

    Args:
        intent: Intent to route
        venues: Venues to route through (callers pass one chain at a time)
        max_hops: Maximum venues in one route
        max_paths: Cap on enumerated paths
        liquidity_fraction: Max share of a hop's input reserve
        dynamic_fees: Price hops with utilization-dependent fees
        path_finder: Reuse a finder (and its cache) built over `venues`

    Returns:
        Feasible routes in enumeration order (shorter paths first)
    """
    finder = path_finder or PathFinder(venues)
    paths = finder.find_all_paths(
        intent.sell_token, intent.buy_token, max_hops=max_hops, max_paths=max_paths
    )

    routes = []
    for path in paths:
        route = evaluate_route(path, intent, liquidity_fraction, dynamic_fees)
        if route is not None:
            routes.append(route)

    logger.debug(
        "routes_evaluated",
        intent=intent.short_id,
        paths=len(paths),
        feasible=len(routes),
    )
    return routes


__all__ = ["evaluate_route", "find_routes"]
