"""Shared type definitions for intent and venue models."""

import decimal
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

# 78 digits of precision, enough for uint256-sized amounts
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)


def validate_amount(value: Any) -> Decimal:
    """Validate that a value is a finite, non-negative decimal amount.

    Args:
        value: Value to validate (str, int, float or Decimal)

    Returns:
        The amount as a Decimal

    Raises:
        ValueError: If the value is not a finite non-negative number
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a number, got bool")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        # Go through str so 0.1 stays 0.1 rather than its binary expansion
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation as err:
            raise ValueError(f"Amount must be a decimal string: '{value}'") from err
    else:
        raise ValueError(f"Amount must be a number or string, got {type(value).__name__}")

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value}")
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {value}")

    return amount


# Non-negative decimal amount (token units, not base units)
Amount = Annotated[
    Decimal,
    BeforeValidator(validate_amount),
    Field(description="Non-negative decimal token amount"),
]

ChainId = Annotated[int, Field(ge=0, description="EVM chain id")]


def normalize_token(token: str) -> str:
    """Normalize a token identifier into the shared namespace.

    Symbols ("ETH") and addresses ("0xAbC...") are both accepted; they are
    compared case-insensitively, so everything is lowercased and stripped.

    Raises:
        ValueError: If the identifier is not a string or is empty
    """
    if not isinstance(token, str):
        raise ValueError(f"Token identifier must be a string, got {type(token).__name__}")
    normalized = token.strip().lower()
    if not normalized:
        raise ValueError("Token identifier cannot be empty")
    return normalized


def to_float(amount: Decimal) -> float:
    """Convert an amount for numeric backends (LP solvers) that need floats."""
    return float(amount)


__all__ = [
    "Amount",
    "ChainId",
    "DECIMAL_HIGH_PREC_CONTEXT",
    "normalize_token",
    "to_float",
    "validate_amount",
]
