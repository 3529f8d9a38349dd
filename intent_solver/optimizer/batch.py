"""Batch optimizer: turns a set of pending intents into an execution plan.

A batch run has four phases:
1. start: drop intents that are not eligible (not pending, or expired)
2. cow_pass: match intents directly against each other
3. route_pass: route the unmatched intents through venues, either one intent
   at a time (direct mode) or jointly under venue capacity (global mode)
4. emit: one execution per planned intent, in input order

The run is a pure function of (intents, snapshot, config, now): it reads one
venue snapshot and never mutates intents or venues.
"""

from __future__ import annotations

import decimal
import time
import uuid
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

import structlog

from intent_solver.bridge.fees import BridgeFeeEstimator
from intent_solver.config import DEFAULT_SOLVER_CONFIG, SolverConfig
from intent_solver.constants import (
    BATCH_TIMEOUT_ERROR,
    COW_CONFIDENCE,
    CROSS_CHAIN_CONFIDENCE_FACTOR,
    MODE_DIRECT,
    MODE_GLOBAL,
    POOL_HOP_CONFIDENCE,
    ROUTING_MODES,
)
from intent_solver.errors import AllocationError, ConfigError
from intent_solver.matching.cow import CowMatcher, Match
from intent_solver.models.intent import Intent
from intent_solver.models.plan import Execution, ExecutionPlan, MatchType
from intent_solver.models.types import DECIMAL_HIGH_PREC_CONTEXT
from intent_solver.models.venue import Venue
from intent_solver.optimizer.allocation import AssignmentProblem, Candidate, solve_assignment
from intent_solver.optimizer.competition import select_best_plan
from intent_solver.routing.evaluate import evaluate_route, find_routes
from intent_solver.routing.pathfinding import PathFinder
from intent_solver.routing.types import Route
from intent_solver.venues.snapshot import VenueSnapshot

logger = structlog.get_logger()


class BatchPhase(str, Enum):
    """Phases of a batch run, used as a log field."""

    START = "start"
    COW_PASS = "cow_pass"
    ROUTE_PASS = "route_pass"
    EMIT = "emit"


def cow_executions(match: Match) -> tuple[Execution, Execution]:
    """Build the two mirror executions of a direct match.

    Each side receives the counterparty's whole sell amount at zero cost.
    """
    a, b = match.intent_a, match.intent_b
    return (
        Execution(
            intent=a,
            match_type=MatchType.COW,
            counterparty=b.user_address,
            counterparty_intent_id=b.id,
            token_path=[a.sell_token, a.buy_token],
            expected_output=b.sell_amount,
            target_chain=a.chain_id,
            confidence=COW_CONFIDENCE,
        ),
        Execution(
            intent=b,
            match_type=MatchType.COW,
            counterparty=a.user_address,
            counterparty_intent_id=a.id,
            token_path=[b.sell_token, b.buy_token],
            expected_output=a.sell_amount,
            target_chain=b.chain_id,
            confidence=COW_CONFIDENCE,
        ),
    )


def route_execution(candidate: Candidate) -> Execution:
    """Build the pool execution for a selected route candidate."""
    route = candidate.route
    cross_chain = candidate.requires_cross_chain
    confidence = POOL_HOP_CONFIDENCE**route.hop_count
    if cross_chain:
        confidence *= CROSS_CHAIN_CONFIDENCE_FACTOR
    return Execution(
        intent=candidate.intent,
        match_type=MatchType.CROSS_CHAIN_POOL if cross_chain else MatchType.POOL,
        venue_ids=route.venue_ids,
        token_path=list(route.token_path),
        expected_output=route.amount_out,
        total_cost=candidate.total_cost,
        requires_cross_chain=cross_chain,
        target_chain=route.chain_id,
        confidence=confidence,
    )


def _duplicate_ids(intents: Sequence[Intent]) -> list[str]:
    seen: set[str] = set()
    duplicates = []
    for intent in intents:
        if intent.id in seen and intent.id not in duplicates:
            duplicates.append(intent.id)
        seen.add(intent.id)
    return duplicates


class BatchOptimizer:
    """Plans one batch of intents against one venue snapshot.

    Args:
        config: Solver parameters
        matcher: Direct matcher (defaults to CowMatcher)
        bridge_fees: Cross-chain cost estimator (defaults to one built from config)
        clock: Monotonic clock in seconds used for the batch deadline
    """

    def __init__(
        self,
        config: SolverConfig = DEFAULT_SOLVER_CONFIG,
        matcher: CowMatcher | None = None,
        bridge_fees: BridgeFeeEstimator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.matcher = matcher or CowMatcher()
        self.bridge_fees = bridge_fees or BridgeFeeEstimator(
            base_fee=config.bridge_base_fee,
            overhead_multiplier=config.bridge_overhead_multiplier,
        )
        self._clock = clock

    def optimize(
        self,
        intents: Sequence[Intent],
        snapshot: VenueSnapshot,
        *,
        now: datetime | None = None,
        mode: str | None = None,
        batch_id: str | None = None,
    ) -> ExecutionPlan:
        """Build the execution plan for a batch.

        Args:
            intents: Intents in batch order (callers pass pending ones)
            snapshot: Venue snapshot to route against
            now: Reference time for expiry checks
            mode: Routing mode override, "direct" or "global"
            batch_id: Plan identifier (generated if omitted)

        Returns:
            ExecutionPlan with exactly one execution per eligible intent

        Raises:
            ConfigError: If mode is not a known routing mode
            ValueError: If two intents share an id
        """
        routing_mode = mode or self.config.mode
        if routing_mode not in ROUTING_MODES:
            raise ConfigError(f"Unknown routing mode: {routing_mode!r}")
        duplicates = _duplicate_ids(intents)
        if duplicates:
            raise ValueError(f"Duplicate intent ids in batch: {duplicates}")

        current_time = now or datetime.now(UTC)
        if current_time.tzinfo is None:
            current_time = current_time.replace(tzinfo=UTC)
        deadline = self._clock() + self.config.batch_timeout_seconds
        plan_id = batch_id or uuid.uuid4().hex

        # Phase: start
        eligible = []
        for intent in intents:
            if intent.is_eligible(current_time):
                eligible.append(intent)
            else:
                logger.debug(
                    "intent_not_eligible",
                    intent=intent.short_id,
                    status=intent.status.value,
                    phase=BatchPhase.START.value,
                )
        logger.info(
            "batch_started",
            batch_id=plan_id,
            mode=routing_mode,
            intents=len(intents),
            eligible=len(eligible),
            venues=len(snapshot),
            phase=BatchPhase.START.value,
        )

        # Phase: cow_pass
        executions: dict[str, Execution] = {}
        for match in self.matcher.find_matches(eligible):
            for execution in cow_executions(match):
                executions[execution.intent.id] = execution
        unmatched = [i for i in eligible if i.id not in executions]
        logger.info(
            "cow_pass_complete",
            batch_id=plan_id,
            matched=len(executions),
            unmatched=len(unmatched),
            phase=BatchPhase.COW_PASS.value,
        )

        # Phase: route_pass
        if unmatched:
            if snapshot.is_empty:
                logger.info(
                    "route_pass_skipped_no_venues",
                    batch_id=plan_id,
                    phase=BatchPhase.ROUTE_PASS.value,
                )
                routed: dict[str, Execution] = {}
            elif routing_mode == MODE_GLOBAL:
                routed = self._route_global(unmatched, snapshot, deadline)
            else:
                routed = self._route_direct(unmatched, snapshot, deadline)
            executions.update(routed)

        # Phase: emit
        plan = ExecutionPlan(
            batch_id=plan_id,
            mode=routing_mode,
            executions=[
                executions.get(intent.id) or Execution.queued(intent) for intent in eligible
            ],
        )
        logger.info(
            "batch_complete",
            batch_id=plan_id,
            cow=plan.cow_count,
            pool=plan.pool_count,
            cross_chain=plan.cross_chain_count,
            queued=plan.queued_count,
            total_value=str(plan.total_value),
            phase=BatchPhase.EMIT.value,
        )
        return plan

    def compete(
        self,
        intents: Sequence[Intent],
        snapshot: VenueSnapshot,
        *,
        now: datetime | None = None,
    ) -> ExecutionPlan:
        """Plan the batch in every routing mode and keep the most valuable plan."""
        plans = [
            self.optimize(intents, snapshot, now=now, mode=routing_mode)
            for routing_mode in (MODE_DIRECT, MODE_GLOBAL)
        ]
        return select_best_plan(plans)

    # -- direct mode -----------------------------------------------------

    def _route_direct(
        self,
        intents: Sequence[Intent],
        snapshot: VenueSnapshot,
        deadline: float,
    ) -> dict[str, Execution]:
        """Route each intent through its best single venue."""
        routed: dict[str, Execution] = {}
        for position, intent in enumerate(intents):
            if self._clock() >= deadline:
                routed.update(self._timed_out(intents[position:]))
                break
            try:
                candidate = self._best_direct(intent, snapshot)
            except Exception as e:
                logger.exception("intent_evaluation_failed", intent=intent.short_id, error=str(e))
                routed[intent.id] = Execution.queued(intent, error=str(e))
                continue
            if candidate is not None:
                routed[intent.id] = route_execution(candidate)
        return routed

    def _best_direct(self, intent: Intent, snapshot: VenueSnapshot) -> Candidate | None:
        """Best local and cross-chain single-venue swaps, then the cross-chain rule."""
        local, cross_chain = snapshot.partition(intent.chain_id)
        best_local = self._best_single_venue(intent, local)
        best_cross = self._best_single_venue(intent, cross_chain)
        return self._prefer(best_local, best_cross)

    def _best_single_venue(self, intent: Intent, venues: Sequence[Venue]) -> Candidate | None:
        best: Candidate | None = None
        for venue in venues:
            if not (venue.has_token(intent.sell_token) and venue.has_token(intent.buy_token)):
                continue
            route = evaluate_route(
                [venue], intent, self.config.liquidity_fraction, self.config.dynamic_fees
            )
            if route is None:
                continue
            candidate = self._make_candidate(intent, route)
            if candidate is None:
                continue
            # Strict comparison keeps the first venue on ties
            if best is None or candidate.net_value > best.net_value:
                best = candidate
        return best

    # -- global mode -----------------------------------------------------

    def _route_global(
        self,
        intents: Sequence[Intent],
        snapshot: VenueSnapshot,
        deadline: float,
    ) -> dict[str, Execution]:
        """Route all intents jointly through the assignment problem."""
        routed: dict[str, Execution] = {}
        problem = AssignmentProblem(slot_capacity_fraction=self.config.slot_capacity_fraction)
        finders = {
            chain_id: PathFinder(snapshot.for_chain(chain_id)) for chain_id in snapshot.chain_ids()
        }
        considered: list[Intent] = []

        for position, intent in enumerate(intents):
            if self._clock() >= deadline:
                routed.update(self._timed_out(intents[position:]))
                break
            try:
                candidates = self._global_candidates(intent, finders)
            except Exception as e:
                logger.exception("intent_evaluation_failed", intent=intent.short_id, error=str(e))
                routed[intent.id] = Execution.queued(intent, error=str(e))
                continue
            for candidate in candidates:
                problem.add_candidate(candidate)
            considered.append(intent)

        if not len(problem):
            return routed

        try:
            solution = solve_assignment(problem, time_limit=max(deadline - self._clock(), 0.0))
        except AllocationError as e:
            logger.warning(
                "allocation_failed_falling_back_to_direct",
                error=str(e),
                intents=len(considered),
            )
            routed.update(self._route_direct(considered, snapshot, deadline))
            return routed

        for key in solution.selected:
            candidate = problem.candidates[key]
            routed[key.intent_id] = route_execution(candidate)

        logger.info(
            "route_pass_complete",
            mode=MODE_GLOBAL,
            candidates=len(problem),
            selected=len(solution.selected),
            phase=BatchPhase.ROUTE_PASS.value,
        )
        return routed

    def _global_candidates(
        self,
        intent: Intent,
        finders: dict[int, PathFinder],
    ) -> list[Candidate]:
        """All viable multi-hop candidates for one intent, one chain at a time.

        Cross-chain candidates are kept only when they beat the best local
        candidate by the configured margin.
        """
        local: list[Candidate] = []
        cross_chain: list[Candidate] = []
        for chain_id, finder in finders.items():
            routes = find_routes(
                intent,
                [],
                max_hops=self.config.max_hops,
                max_paths=self.config.max_paths,
                liquidity_fraction=self.config.liquidity_fraction,
                dynamic_fees=self.config.dynamic_fees,
                path_finder=finder,
            )
            for route in routes:
                candidate = self._make_candidate(intent, route)
                if candidate is None:
                    continue
                if chain_id == intent.chain_id:
                    local.append(candidate)
                else:
                    cross_chain.append(candidate)

        best_local_value = max((c.net_value for c in local), default=None)
        return local + [
            c for c in cross_chain if self._beats_local(c.net_value, best_local_value)
        ]

    # -- shared helpers --------------------------------------------------

    def _make_candidate(self, intent: Intent, route: Route) -> Candidate | None:
        """Wrap a route with its bridge cost; None if it is not worth executing."""
        if route.amount_out - route.gas_cost <= 0:
            return None
        if route.amount_out < intent.min_buy_amount:
            return None
        bridge_cost = self.bridge_fees.estimate(intent.chain_id, route.chain_id)
        candidate = Candidate(intent=intent, route=route, bridge_cost=bridge_cost)
        if candidate.net_value <= 0 or candidate.objective_value <= 0:
            return None
        return candidate

    def _beats_local(self, cross_value: Decimal, local_value: Decimal | None) -> bool:
        """Cross-chain must clear the local value by the improvement margin."""
        if local_value is None:
            return True
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            threshold = local_value * (1 + self.config.min_cross_chain_improvement)
        return cross_value >= threshold

    def _prefer(self, local: Candidate | None, cross_chain: Candidate | None) -> Candidate | None:
        if cross_chain is not None:
            if self._beats_local(cross_chain.net_value, local.net_value if local else None):
                return cross_chain
        return local

    def _timed_out(self, intents: Sequence[Intent]) -> dict[str, Execution]:
        logger.warning("batch_deadline_reached", remaining_intents=len(intents))
        return {
            intent.id: Execution.queued(intent, error=BATCH_TIMEOUT_ERROR) for intent in intents
        }


__all__ = ["BatchOptimizer", "BatchPhase", "cow_executions", "route_execution"]
