"""Immutable venue snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from intent_solver.models.venue import Venue


@dataclass(frozen=True)
class VenueSnapshot:
    """A point-in-time set of venues.

    A batch run reads exactly one snapshot. Refreshing the catalog builds a
    new snapshot instead of mutating this one, so a run in progress never
    sees reserves change under it.
    """

    venues: tuple[Venue, ...] = ()
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_empty(self) -> bool:
        return not self.venues

    def __len__(self) -> int:
        return len(self.venues)

    def for_chain(self, chain_id: int) -> list[Venue]:
        """Venues deployed on one chain, in snapshot order."""
        return [v for v in self.venues if v.chain_id == chain_id]

    def chain_ids(self) -> list[int]:
        """Distinct chain ids in first-seen order."""
        seen: dict[int, None] = {}
        for venue in self.venues:
            seen.setdefault(venue.chain_id, None)
        return list(seen)

    def partition(self, chain_id: int) -> tuple[list[Venue], list[Venue]]:
        """Split venues into (local, cross_chain) relative to a chain."""
        local = []
        cross_chain = []
        for venue in self.venues:
            if venue.chain_id == chain_id:
                local.append(venue)
            else:
                cross_chain.append(venue)
        return local, cross_chain

    def get(self, venue_id: str) -> Venue | None:
        for venue in self.venues:
            if venue.id == venue_id:
                return venue
        return None


EMPTY_SNAPSHOT = VenueSnapshot()

__all__ = ["EMPTY_SNAPSHOT", "VenueSnapshot"]
