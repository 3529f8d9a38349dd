"""Venue sources: where the catalog gets its venue data from."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

import httpx
import structlog
from pydantic import ValidationError

from intent_solver.errors import VenueFetchError
from intent_solver.models.venue import Venue

logger = structlog.get_logger()


@runtime_checkable
class VenueSource(Protocol):
    """Anything that can produce the current list of venues."""

    def fetch_venues(self) -> list[Venue]:
        """Fetch all venues.

        Raises:
            VenueFetchError: If the venues cannot be retrieved
        """
        ...


class StaticVenueSource:
    """A fixed venue list, for offline runs and tests."""

    def __init__(self, venues: Iterable[Venue] = ()) -> None:
        self._venues = list(venues)

    def set_venues(self, venues: Iterable[Venue]) -> None:
        self._venues = list(venues)

    def fetch_venues(self) -> list[Venue]:
        return list(self._venues)


def parse_venues(payload: Any) -> list[Venue]:
    """Parse a chain reader payload into venues.

    Accepts either a JSON list of venue objects or an object with a "venues"
    key. Records that fail validation are logged and skipped so that one bad
    pool does not hide the rest.

    Raises:
        VenueFetchError: If the payload has neither shape
    """
    if isinstance(payload, dict):
        payload = payload.get("venues")
    if not isinstance(payload, list):
        raise VenueFetchError("Venue payload must be a list or an object with 'venues'")

    venues = []
    for record in payload:
        try:
            venues.append(Venue.model_validate(record))
        except ValidationError as e:
            record_id = record.get("id") if isinstance(record, dict) else None
            logger.warning("venue_record_invalid", venue=record_id, error=str(e))
    return venues


class HttpVenueSource:
    """Reads venues from a chain reader over HTTP.

    Args:
        url: Endpoint returning the venue list as JSON
        timeout: Request timeout in seconds
        client: Optional preconfigured httpx client (tests pass a mock transport)
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self._client = client or httpx.Client(timeout=timeout)

    def fetch_venues(self) -> list[Venue]:
        try:
            response = self._client.get(self.url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise VenueFetchError(f"Failed to fetch venues from {self.url}: {e}") from e
        except ValueError as e:
            raise VenueFetchError(f"Venue response from {self.url} is not JSON") from e

        venues = parse_venues(payload)
        logger.debug("venues_fetched", url=self.url, count=len(venues))
        return venues

    def close(self) -> None:
        self._client.close()


__all__ = ["HttpVenueSource", "StaticVenueSource", "VenueSource", "parse_venues"]
