"""Venue catalog: snapshots, sources and TTL refresh."""

from intent_solver.venues.catalog import VenueCatalog
from intent_solver.venues.snapshot import EMPTY_SNAPSHOT, VenueSnapshot
from intent_solver.venues.sources import (
    HttpVenueSource,
    StaticVenueSource,
    VenueSource,
    parse_venues,
)

__all__ = [
    "EMPTY_SNAPSHOT",
    "HttpVenueSource",
    "StaticVenueSource",
    "VenueCatalog",
    "VenueSnapshot",
    "VenueSource",
    "parse_venues",
]
