"""Batch scheduling: run the optimizer on a timer or when intents arrive.

At most one batch runs at a time. A trigger that arrives while a batch is
running is skipped, not queued: the next timer tick picks up whatever is
still pending.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

import structlog

from intent_solver.config import DEFAULT_SOLVER_CONFIG, SolverConfig
from intent_solver.constants import BATCH_TIMEOUT_ERROR, SERVICE_TIMEOUT_GRACE_SECONDS
from intent_solver.intents.pool import IntentPool
from intent_solver.models.plan import Execution, ExecutionPlan
from intent_solver.optimizer.batch import BatchOptimizer
from intent_solver.tuning import ParameterTuner
from intent_solver.venues.catalog import VenueCatalog

logger = structlog.get_logger()


@runtime_checkable
class SettlementSink(Protocol):
    """Receives finished plans for on-chain settlement."""

    def submit(self, plan: ExecutionPlan) -> None: ...


class NullSettlementSink:
    """Sink that only logs plans; settlement happens elsewhere."""

    def __init__(self) -> None:
        self.submitted: list[ExecutionPlan] = []

    def submit(self, plan: ExecutionPlan) -> None:
        self.submitted.append(plan)
        logger.info(
            "plan_ready_for_settlement",
            batch_id=plan.batch_id,
            executions=len(plan.executions),
            queued=plan.queued_count,
        )


class BatchService:
    """Drives batch runs over an intent pool.

    Args:
        pool: Source of pending intents, updated with each plan
        catalog: Venue catalog, refreshed when stale before each run
        optimizer: Batch optimizer (its config is replaced when tuning)
        sink: Receives each non-empty plan
        config: Solver parameters (timeout, interval)
        tuner: Optional adaptive tuner fed with each plan
    """

    def __init__(
        self,
        pool: IntentPool,
        catalog: VenueCatalog,
        optimizer: BatchOptimizer | None = None,
        sink: SettlementSink | None = None,
        config: SolverConfig = DEFAULT_SOLVER_CONFIG,
        tuner: ParameterTuner | None = None,
    ) -> None:
        self.pool = pool
        self.catalog = catalog
        self.config = config
        self.optimizer = optimizer or BatchOptimizer(config)
        self.sink = sink or NullSettlementSink()
        self.tuner = tuner
        self._run_lock = asyncio.Lock()
        self._trigger = asyncio.Event()
        self._stopped = asyncio.Event()
        self._inflight: asyncio.Future[ExecutionPlan] | None = None

    @property
    def is_running(self) -> bool:
        """True while a batch or an abandoned optimizer run is still computing."""
        if self._run_lock.locked():
            return True
        return self._inflight is not None and not self._inflight.done()

    async def run_once(self, now: datetime | None = None) -> ExecutionPlan | None:
        """Run one batch over the pending intents.

        Returns:
            The plan, or None if a batch was already running or nothing was pending
        """
        if self.is_running:
            logger.info("batch_skipped_already_running")
            return None

        async with self._run_lock:
            current = now or datetime.now(UTC)
            self.pool.sweep_expired(current)
            intents = self.pool.get_pending_intents(current)
            if not intents:
                logger.debug("batch_skipped_no_pending_intents")
                return None

            loop = asyncio.get_event_loop()
            snapshot = await loop.run_in_executor(None, self.catalog.ensure_fresh)

            timeout_seconds = self.config.batch_timeout_seconds + SERVICE_TIMEOUT_GRACE_SECONDS
            # The worker thread cannot be cancelled; a timed out run stays in
            # flight and blocks new batches until it finishes
            self._inflight = loop.run_in_executor(
                None,
                lambda: self.optimizer.optimize(intents, snapshot, now=current),
            )
            try:
                plan = await asyncio.wait_for(
                    asyncio.shield(self._inflight), timeout=timeout_seconds
                )
            except TimeoutError:
                logger.warning(
                    "batch_timeout",
                    intents=len(intents),
                    timeout_seconds=timeout_seconds,
                    message="Optimizer exceeded its deadline, intents stay pending",
                )
                return ExecutionPlan(
                    batch_id="timeout",
                    mode=self.optimizer.config.mode,
                    executions=[Execution.queued(i, error=BATCH_TIMEOUT_ERROR) for i in intents],
                )

            # Intents are marked matched only once settlement accepted the plan
            if plan.queued_count < len(plan.executions):
                self.sink.submit(plan)
            self.pool.apply_plan(plan)

            if self.tuner is not None:
                self.optimizer.config = self.tuner.observe(plan, snapshot)

            return plan

    def notify_new_intent(self) -> None:
        """Wake the loop early; used when a new intent arrives."""
        self._trigger.set()

    def stop(self) -> None:
        self._stopped.set()
        self._trigger.set()

    async def run_forever(self, interval: float | None = None) -> None:
        """Run batches every `interval` seconds or on trigger until stopped.

        Batch errors are logged and the loop retries on the next tick.
        """
        period = interval if interval is not None else self.config.batch_interval_seconds
        logger.info("batch_loop_started", interval_seconds=period)

        while not self._stopped.is_set():
            try:
                await asyncio.wait_for(self._trigger.wait(), timeout=period)
            except TimeoutError:
                pass
            self._trigger.clear()
            if self._stopped.is_set():
                break

            try:
                await self.run_once()
            except Exception:
                logger.exception("batch_failed", message="Retrying on next tick")

        logger.info("batch_loop_stopped")


__all__ = ["BatchService", "NullSettlementSink", "SettlementSink"]
