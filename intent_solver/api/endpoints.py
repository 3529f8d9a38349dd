"""API endpoints for the intent solver."""

import asyncio
import uuid

import structlog
from fastapi import APIRouter, Depends

from intent_solver.config import SolverConfig
from intent_solver.constants import SERVICE_TIMEOUT_GRACE_SECONDS
from intent_solver.models.plan import Execution, ExecutionPlan
from intent_solver.models.request import SolveRequest
from intent_solver.optimizer.batch import BatchOptimizer
from intent_solver.venues.snapshot import VenueSnapshot

logger = structlog.get_logger()

router = APIRouter()

_default_optimizer: BatchOptimizer | None = None


def get_optimizer() -> BatchOptimizer:
    """Dependency provider for the batch optimizer.

    Override this in tests to inject a mock optimizer:
        app.dependency_overrides[get_optimizer] = lambda: mock_optimizer

    The default optimizer is built once from INTENT_SOLVER_* environment
    variables.
    """
    global _default_optimizer
    if _default_optimizer is None:
        _default_optimizer = BatchOptimizer(SolverConfig.from_env())
    return _default_optimizer


def queued_plan(request: SolveRequest, mode: str, error: str) -> ExecutionPlan:
    """All-Queued plan returned when the optimizer cannot produce one."""
    return ExecutionPlan(
        batch_id=uuid.uuid4().hex,
        mode=mode,
        executions=[Execution.queued(intent, error=error) for intent in request.intents],
    )


@router.post("/solve")
async def solve(
    request: SolveRequest,
    optimizer: BatchOptimizer = Depends(get_optimizer),
) -> ExecutionPlan:
    """Plan a batch of intents against the given venues.

    Error Handling:
        - Invalid request schema: Returns 422 Validation Error (Pydantic)
        - Optimizer timeout: Returns an all-Queued plan
        - Optimizer exception: Logs error, returns an all-Queued plan
    """
    mode = request.mode or optimizer.config.mode
    logger.info(
        "received_batch",
        intent_count=request.intent_count,
        venue_count=len(request.venues),
        mode=mode,
    )

    snapshot = VenueSnapshot(venues=tuple(request.venues))
    timeout_seconds = optimizer.config.batch_timeout_seconds + SERVICE_TIMEOUT_GRACE_SECONDS

    try:
        loop = asyncio.get_event_loop()
        plan = await asyncio.wait_for(
            loop.run_in_executor(
                None, lambda: optimizer.optimize(request.intents, snapshot, mode=mode)
            ),
            timeout=timeout_seconds,
        )
    except TimeoutError:
        logger.warning(
            "solver_timeout",
            intent_count=request.intent_count,
            timeout_seconds=timeout_seconds,
            message="Optimizer exceeded deadline, returning queued plan",
        )
        return queued_plan(request, mode, "batch_timeout")
    except Exception as e:
        logger.exception(
            "solver_error",
            intent_count=request.intent_count,
            message="Optimizer raised an exception, returning queued plan",
        )
        return queued_plan(request, mode, str(e))

    logger.info(
        "returning_plan",
        batch_id=plan.batch_id,
        cow=plan.cow_count,
        pool=plan.pool_count,
        cross_chain=plan.cross_chain_count,
        queued=plan.queued_count,
    )
    return plan
