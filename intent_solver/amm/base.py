"""Base classes for swap curve implementations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable

from intent_solver.models.venue import Venue


@dataclass(frozen=True)
class SwapResult:
    """Result of simulating a swap through one venue."""

    venue_id: str
    chain_id: int
    token_in: str
    token_out: str
    amount_in: Decimal
    amount_out: Decimal
    # Execution cost in output-token units
    gas_cost: Decimal = Decimal(0)

    @property
    def utility(self) -> Decimal:
        """Output net of execution cost."""
        return self.amount_out - self.gas_cost


class AMM(ABC):
    """Abstract base class for swap curves.

    Implementations may extend `get_amount_out` with curve-specific optional
    parameters, as WeightedAMM does with token weights.
    """

    @abstractmethod
    def get_amount_out(
        self,
        amount_in: Decimal,
        reserve_in: Decimal,
        reserve_out: Decimal,
        fee: Decimal,
    ) -> Decimal:
        """Calculate output amount for a given input.

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in the venue
            reserve_out: Reserve of output token in the venue
            fee: Proportional fee in [0, 1)

        Returns:
            Output token amount (0 when the inputs are degenerate)
        """
        ...


@runtime_checkable
class SwapCalculator(Protocol):
    """Protocol for anything that can simulate a swap against a venue."""

    def simulate_swap(
        self,
        venue: Venue,
        token_in: str,
        amount_in: Decimal,
        fee: Decimal | None = None,
    ) -> SwapResult | None:
        """Simulate an exact-input swap.

        Returns:
            SwapResult, or None if the swap is infeasible
        """
        ...
