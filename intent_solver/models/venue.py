"""Pydantic model for liquidity venues (CFMM pools)."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from intent_solver.constants import DEFAULT_WEIGHT
from intent_solver.models.types import Amount, ChainId, normalize_token


class CurveType(str, Enum):
    """Swap curve a venue prices with."""

    CONSTANT_PRODUCT = "constantProduct"
    STABLE = "stable"
    WEIGHTED = "weighted"


class Venue(BaseModel):
    """A two-token liquidity pool snapshot.

    Reserves are a point-in-time snapshot taken by the venue catalog. The
    solver never patches them; a refresh replaces the whole venue set.

    For weighted venues, `weights` maps each token to its normalized weight.
    Missing weights default to 0.5/0.5, which makes the weighted curve
    coincide with the constant product one.
    """

    id: str
    address: str | None = None
    chain_id: ChainId = Field(alias="chainId")
    tokens: tuple[str, str]
    reserves: dict[str, Amount]
    fee: Decimal = Field(default=Decimal("0.003"), ge=0, lt=1)
    kind: CurveType = Field(default=CurveType.CONSTANT_PRODUCT, alias="type")
    weights: dict[str, Decimal] | None = None
    gas_cost: Amount = Field(
        default=Decimal(0),
        alias="gasCost",
        description="Execution cost charged against the output, in output-token units.",
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _default_address(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("address") is None and "id" in data:
            return {**data, "address": data["id"]}
        return data

    @field_validator("fee", mode="before")
    @classmethod
    def _parse_fee(cls, value: Any) -> Any:
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @field_validator("tokens", mode="before")
    @classmethod
    def _normalize_tokens(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(normalize_token(t) for t in value)
        return value

    @field_validator("reserves", "weights", mode="before")
    @classmethod
    def _normalize_keys(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {normalize_token(k): v for k, v in value.items()}
        return value

    @field_validator("weights", mode="before")
    @classmethod
    def _parse_weights(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: Decimal(str(v)) if isinstance(v, float) else v for k, v in value.items()}
        return value

    @model_validator(mode="after")
    def _check_tokens(self) -> Venue:
        token_a, token_b = self.tokens
        if token_a == token_b:
            raise ValueError(f"Venue {self.id} lists the same token twice: {token_a}")
        missing = [t for t in self.tokens if t not in self.reserves]
        if missing:
            raise ValueError(f"Venue {self.id} has no reserve for {missing}")
        if self.weights is not None:
            for token in self.tokens:
                weight = self.weights.get(token)
                if weight is None or weight <= 0:
                    raise ValueError(f"Venue {self.id} needs a positive weight for {token}")
        return self

    @property
    def is_usable(self) -> bool:
        """True if both reserves are positive."""
        return all(self.reserves[t] > 0 for t in self.tokens)

    def has_token(self, token: str) -> bool:
        return normalize_token(token) in self.tokens

    def other_token(self, token: str) -> str:
        """Get the output token for a given input token."""
        token_norm = normalize_token(token)
        token_a, token_b = self.tokens
        if token_norm == token_a:
            return token_b
        elif token_norm == token_b:
            return token_a
        else:
            raise ValueError(f"Token {token} not in venue {self.id}")

    def get_reserves(self, token_in: str) -> tuple[Decimal, Decimal]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        token_out = self.other_token(token_in)
        return self.reserves[normalize_token(token_in)], self.reserves[token_out]

    def get_weights(self, token_in: str) -> tuple[Decimal, Decimal]:
        """Get weights ordered as (weight_in, weight_out)."""
        token_out = self.other_token(token_in)
        if self.weights is None:
            return DEFAULT_WEIGHT, DEFAULT_WEIGHT
        return self.weights[normalize_token(token_in)], self.weights[token_out]


__all__ = ["CurveType", "Venue"]
