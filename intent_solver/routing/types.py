"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from intent_solver.models.venue import Venue


@dataclass(frozen=True)
class HopResult:
    """Result of a single hop in a route."""

    venue: Venue
    token_in: str
    token_out: str
    amount_in: Decimal
    amount_out: Decimal


@dataclass(frozen=True)
class Route:
    """An evaluated path for one intent.

    `utility` is the sum of the per-hop output amounts. It is an additive
    proxy used to rank routes, not an end-to-end net value; `net_value` is
    the final output minus the accumulated venue gas costs.
    """

    venues: tuple[Venue, ...]
    token_path: tuple[str, ...]
    amount_in: Decimal
    amount_out: Decimal
    utility: Decimal
    gas_cost: Decimal = Decimal(0)
    hops: tuple[HopResult, ...] = field(default_factory=tuple)

    @property
    def chain_id(self) -> int:
        return self.venues[0].chain_id

    @property
    def venue_ids(self) -> list[str]:
        return [v.id for v in self.venues]

    @property
    def hop_count(self) -> int:
        return len(self.venues)

    @property
    def is_multihop(self) -> bool:
        return len(self.venues) > 1

    @property
    def net_value(self) -> Decimal:
        """Final output net of execution cost."""
        return self.amount_out - self.gas_cost


__all__ = ["HopResult", "Route"]
