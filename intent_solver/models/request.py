"""Request body for the solve endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from intent_solver.constants import ROUTING_MODES
from intent_solver.models.intent import Intent
from intent_solver.models.venue import Venue


class SolveRequest(BaseModel):
    """A batch to plan: intents plus the venue snapshot to route against."""

    intents: list[Intent] = Field(default_factory=list)
    venues: list[Venue] = Field(default_factory=list)
    mode: str | None = Field(default=None, description='"direct", "global" or omitted')

    @field_validator("mode")
    @classmethod
    def _check_mode(cls, value: str | None) -> str | None:
        if value is not None and value not in ROUTING_MODES:
            raise ValueError(f"mode must be one of {sorted(ROUTING_MODES)}")
        return value

    @field_validator("intents")
    @classmethod
    def _unique_ids(cls, value: list[Intent]) -> list[Intent]:
        seen: set[str] = set()
        for intent in value:
            if intent.id in seen:
                raise ValueError(f"Duplicate intent id: {intent.id}")
            seen.add(intent.id)
        return value

    @property
    def intent_count(self) -> int:
        return len(self.intents)


__all__ = ["SolveRequest"]
