"""Pydantic models for user swap intents."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from intent_solver.models.types import Amount, ChainId, normalize_token


class IntentStatus(str, Enum):
    """Lifecycle state of an intent."""

    PENDING = "pending"
    MATCHED = "matched"
    EXPIRED = "expired"


class Intent(BaseModel):
    """A user's swap request awaiting matching or routing.

    Tokens are normalized on validation so that CoW matching and venue
    lookups compare identifiers from a single namespace.
    """

    id: str = Field(description="Unique identifier, stable across a batch.")
    user_address: str = Field(alias="userAddress")
    chain_id: ChainId = Field(alias="chainId")
    sell_token: str = Field(alias="sellToken")
    buy_token: str = Field(alias="buyToken")
    sell_amount: Amount = Field(alias="sellAmount")
    min_buy_amount: Amount = Field(default=Decimal(0), alias="minBuyAmount")
    deadline: datetime = Field(description="Absolute expiry (epoch seconds/ms or ISO 8601).")
    status: IntentStatus = IntentStatus.PENDING

    model_config = {"populate_by_name": True}

    @field_validator("id", "user_address", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("sell_token", "buy_token")
    @classmethod
    def _normalize_token(cls, value: str) -> str:
        return normalize_token(value)

    @field_validator("min_buy_amount", mode="before")
    @classmethod
    def _default_min_buy(cls, value: Any) -> Any:
        # Absent and null both mean "no minimum"
        return Decimal(0) if value is None else value

    @field_validator("deadline")
    @classmethod
    def _aware_deadline(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _check_invariants(self) -> Intent:
        if self.sell_amount <= 0:
            raise ValueError(f"sellAmount must be positive, got {self.sell_amount}")
        if self.sell_token == self.buy_token:
            raise ValueError(f"sellToken and buyToken must differ, both are {self.sell_token}")
        return self

    @property
    def is_pending(self) -> bool:
        return self.status == IntentStatus.PENDING

    def is_expired(self, now: datetime | None = None) -> bool:
        """True if the deadline has passed."""
        current = now or datetime.now(UTC)
        if current.tzinfo is None:
            current = current.replace(tzinfo=UTC)
        return self.deadline <= current

    def is_eligible(self, now: datetime | None = None) -> bool:
        """True if the intent may take part in a batch run."""
        return self.is_pending and not self.is_expired(now)

    @property
    def short_id(self) -> str:
        """Identifier truncated for log lines."""
        return self.id if len(self.id) <= 18 else self.id[:18] + "..."


__all__ = ["Intent", "IntentStatus"]
