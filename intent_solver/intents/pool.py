"""In-memory intent pool.

Stands in for the external intent store: intents arrive via `add`, batches
read the pending ones, and applied plans move them to Matched. The pool owns
every status transition; the optimizer never changes an intent's status.

Allowed transitions:
- Pending -> Matched (a CoW, Pool or CrossChainPool execution was planned)
- Pending -> Expired (the deadline passed before a match)
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import UTC, datetime

import structlog

from intent_solver.errors import IntentStateError
from intent_solver.models.intent import Intent, IntentStatus
from intent_solver.models.plan import ExecutionPlan

logger = structlog.get_logger()


class IntentPool:
    """Thread-safe store of intents keyed by id, in arrival order."""

    def __init__(self, intents: Iterable[Intent] = ()) -> None:
        self._intents: dict[str, Intent] = {}
        self._lock = threading.Lock()
        for intent in intents:
            self.add(intent)

    def __len__(self) -> int:
        return len(self._intents)

    def __contains__(self, intent_id: object) -> bool:
        return intent_id in self._intents

    def add(self, intent: Intent) -> None:
        """Add a new intent.

        Raises:
            IntentStateError: If an intent with the same id already exists
        """
        with self._lock:
            if intent.id in self._intents:
                raise IntentStateError(f"Intent {intent.id} already exists")
            self._intents[intent.id] = intent
        logger.debug("intent_added", intent=intent.short_id, chain_id=intent.chain_id)

    def get(self, intent_id: str) -> Intent | None:
        return self._intents.get(intent_id)

    def all(self) -> list[Intent]:
        return list(self._intents.values())

    def get_pending_intents(self, now: datetime | None = None) -> list[Intent]:
        """Pending intents whose deadline has not passed, in arrival order."""
        current = now or datetime.now(UTC)
        return [i for i in self._intents.values() if i.is_eligible(current)]

    def sweep_expired(self, now: datetime | None = None) -> list[Intent]:
        """Move pending intents past their deadline to Expired.

        Returns:
            The intents that were expired by this sweep
        """
        current = now or datetime.now(UTC)
        expired = []
        with self._lock:
            for intent_id, intent in self._intents.items():
                if intent.is_pending and intent.is_expired(current):
                    updated = intent.model_copy(update={"status": IntentStatus.EXPIRED})
                    self._intents[intent_id] = updated
                    expired.append(updated)
        if expired:
            logger.info("intents_expired", count=len(expired))
        return expired

    def mark_matched(self, intent_id: str) -> Intent:
        """Move one intent from Pending to Matched.

        Raises:
            IntentStateError: If the intent is unknown or not pending
        """
        with self._lock:
            intent = self._intents.get(intent_id)
            if intent is None:
                raise IntentStateError(f"Unknown intent {intent_id}")
            if not intent.is_pending:
                raise IntentStateError(
                    f"Intent {intent_id} cannot be matched from status {intent.status.value}"
                )
            updated = intent.model_copy(update={"status": IntentStatus.MATCHED})
            self._intents[intent_id] = updated
        return updated

    def apply_plan(self, plan: ExecutionPlan) -> list[Intent]:
        """Mark every non-queued execution's intent as Matched.

        Queued executions leave their intent Pending for the next batch.

        Returns:
            The intents matched by this plan

        Raises:
            IntentStateError: If a planned intent is not pending in the pool
        """
        matched = [
            self.mark_matched(execution.intent.id)
            for execution in plan.executions
            if not execution.is_queued
        ]
        logger.info(
            "plan_applied",
            batch_id=plan.batch_id,
            matched=len(matched),
            queued=plan.queued_count,
        )
        return matched


__all__ = ["IntentPool"]
