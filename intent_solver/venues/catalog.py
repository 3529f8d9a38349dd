"""Venue catalog: a TTL-refreshed snapshot of the venues the solver may use."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from intent_solver.constants import DEFAULT_VENUE_TTL_SECONDS
from intent_solver.errors import VenueFetchError
from intent_solver.venues.snapshot import EMPTY_SNAPSHOT, VenueSnapshot
from intent_solver.venues.sources import VenueSource

logger = structlog.get_logger()


class VenueCatalog:
    """Holds the current venue snapshot and refreshes it when stale.

    The snapshot reference is swapped in one assignment, so readers always
    see either the old or the new snapshot in full. A failed refresh never
    raises: the previous snapshot is kept if there is one, otherwise the
    catalog serves an empty snapshot and batches run CoW-only.

    Args:
        source: Where venues come from
        ttl_seconds: Snapshot age after which it is considered stale
        clock: Monotonic clock in seconds (injectable for tests)
    """

    def __init__(
        self,
        source: VenueSource,
        ttl_seconds: float = DEFAULT_VENUE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot = EMPTY_SNAPSHOT
        self._refreshed_at: float | None = None
        self._refresh_lock = threading.Lock()

    def get(self) -> VenueSnapshot:
        """Current snapshot (possibly stale or empty)."""
        return self._snapshot

    def age(self) -> float | None:
        """Seconds since the last successful refresh, None if never refreshed."""
        if self._refreshed_at is None:
            return None
        return self._clock() - self._refreshed_at

    def is_stale(self) -> bool:
        """True if the snapshot is empty or older than the TTL."""
        age = self.age()
        if age is None or self._snapshot.is_empty:
            return True
        return age > self.ttl_seconds

    def refresh(self) -> VenueSnapshot:
        """Fetch venues and swap in a new snapshot.

        Returns:
            The snapshot in effect after the refresh attempt
        """
        with self._refresh_lock:
            try:
                venues = self.source.fetch_venues()
            except VenueFetchError as e:
                logger.warning(
                    "venue_refresh_failed",
                    error=str(e),
                    kept_venues=len(self._snapshot),
                )
                return self._snapshot
            except Exception:
                logger.exception(
                    "venue_refresh_failed",
                    kept_venues=len(self._snapshot),
                    message="Unexpected venue source error, keeping previous snapshot",
                )
                return self._snapshot

            self._snapshot = VenueSnapshot(venues=tuple(venues), fetched_at=datetime.now(UTC))
            self._refreshed_at = self._clock()
            logger.info(
                "venue_snapshot_refreshed",
                venues=len(venues),
                chains=self._snapshot.chain_ids(),
            )
            return self._snapshot

    def ensure_fresh(self) -> VenueSnapshot:
        """Refresh only if stale, then return the current snapshot."""
        if self.is_stale():
            return self.refresh()
        return self._snapshot


__all__ = ["VenueCatalog"]
