"""Pydantic models for the execution plan handed to settlement."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from intent_solver.models.intent import Intent


class MatchType(str, Enum):
    """How an intent is resolved in a batch."""

    COW = "CoW"
    POOL = "Pool"
    CROSS_CHAIN_POOL = "CrossChainPool"
    QUEUED = "Queued"


class Execution(BaseModel):
    """The final per-intent decision of a batch run.

    For CoW executions `counterparty` is the other user's address and
    `counterparty_intent_id` the matched intent. For pool executions
    `venue_ids` lists the route in hop order. Queued executions carry zero
    value and keep the intent eligible for the next run.
    """

    intent: Intent
    match_type: MatchType = Field(alias="matchType")
    counterparty: str | None = None
    counterparty_intent_id: str | None = Field(default=None, alias="counterpartyIntentId")
    venue_ids: list[str] = Field(default_factory=list, alias="venueIds")
    token_path: list[str] = Field(default_factory=list, alias="tokenPath")
    expected_output: Decimal = Field(default=Decimal(0), alias="expectedOutput")
    total_cost: Decimal = Field(default=Decimal(0), alias="totalCost")
    requires_cross_chain: bool = Field(default=False, alias="requiresCrossChain")
    target_chain: int = Field(alias="targetChain")
    confidence: float = 0.0
    error: str | None = None

    model_config = {"populate_by_name": True}

    @property
    def net_value(self) -> Decimal:
        """Expected output minus execution cost."""
        return self.expected_output - self.total_cost

    @property
    def is_queued(self) -> bool:
        return self.match_type == MatchType.QUEUED

    @classmethod
    def queued(cls, intent: Intent, error: str | None = None) -> Execution:
        """Build a zero-value execution that leaves the intent for the next batch."""
        return cls(
            intent=intent,
            match_type=MatchType.QUEUED,
            target_chain=intent.chain_id,
            error=error,
        )


class ExecutionPlan(BaseModel):
    """Result of one batch run: one execution per planned intent."""

    batch_id: str = Field(alias="batchId")
    mode: str
    executions: list[Execution] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), alias="createdAt")

    model_config = {"populate_by_name": True}

    def _count(self, match_type: MatchType) -> int:
        return sum(1 for e in self.executions if e.match_type == match_type)

    @property
    def cow_count(self) -> int:
        return self._count(MatchType.COW)

    @property
    def pool_count(self) -> int:
        return self._count(MatchType.POOL)

    @property
    def cross_chain_count(self) -> int:
        return self._count(MatchType.CROSS_CHAIN_POOL)

    @property
    def queued_count(self) -> int:
        return self._count(MatchType.QUEUED)

    @property
    def total_value(self) -> Decimal:
        """Sum of net values over all resolved executions."""
        return sum((e.net_value for e in self.executions if not e.is_queued), Decimal(0))

    def for_intent(self, intent_id: str) -> Execution | None:
        """Get the execution planned for an intent, if any."""
        for execution in self.executions:
            if execution.intent.id == intent_id:
                return execution
        return None


__all__ = ["Execution", "ExecutionPlan", "MatchType"]
