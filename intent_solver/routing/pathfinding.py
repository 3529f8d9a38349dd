"""Venue graph and pathfinding for multi-hop routing.

Tokens are nodes and venues are edges. Unlike a plain token graph, several
venues can connect the same pair, and a path is a sequence of venues, so two
paths through the same tokens but different venues are distinct candidates.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence

from intent_solver.constants import DEFAULT_MAX_HOPS, DEFAULT_MAX_PATHS
from intent_solver.models.intent import Intent
from intent_solver.models.types import normalize_token
from intent_solver.models.venue import Venue


class VenueGraph:
    """Adjacency list from token to the venues that trade it.

    Venue order within each adjacency list follows insertion order, which
    keeps BFS output deterministic for a given venue list. Unusable venues
    (a non-positive reserve) are left out.
    """

    def __init__(self) -> None:
        self._adjacency: dict[str, list[Venue]] = {}
        self._venue_count = 0

    @classmethod
    def from_venues(cls, venues: Iterable[Venue]) -> VenueGraph:
        graph = cls()
        for venue in venues:
            graph.add_venue(venue)
        return graph

    def add_venue(self, venue: Venue) -> None:
        """Add a venue as an edge between its two tokens."""
        if not venue.is_usable:
            return
        for token in venue.tokens:
            self._adjacency.setdefault(token, []).append(venue)
        self._venue_count += 1

    def venues_for(self, token: str) -> list[Venue]:
        """Get all venues that trade the given (normalized) token."""
        return self._adjacency.get(token, [])

    def has_token(self, token: str) -> bool:
        return normalize_token(token) in self._adjacency

    @property
    def token_count(self) -> int:
        return len(self._adjacency)

    @property
    def venue_count(self) -> int:
        return self._venue_count


class PathFinder:
    """Breadth-first path enumeration over a venue graph, with caching.

    Usage:
        finder = PathFinder(venues)
        paths = finder.find_all_paths(token_in, token_out, max_hops=3)
    """

    def __init__(self, venues: Iterable[Venue]) -> None:
        self._graph = VenueGraph.from_venues(venues)
        self._path_cache: dict[tuple[str, str, int, int], list[tuple[Venue, ...]]] = {}

    @property
    def graph(self) -> VenueGraph:
        return self._graph

    def find_all_paths(
        self,
        token_in: str,
        token_out: str,
        max_hops: int = DEFAULT_MAX_HOPS,
        max_paths: int = DEFAULT_MAX_PATHS,
    ) -> list[tuple[Venue, ...]]:
        """Find venue paths from token_in to token_out.

        A path is accepted when it reaches token_out in 1..max_hops venues and
        uses no venue twice. Paths stop at token_out; they are not extended
        through it. BFS yields shorter paths first, so when max_paths cuts the
        enumeration short, the cheapest-to-evaluate paths are kept.

        Args:
            token_in: Starting token
            token_out: Target token
            max_hops: Maximum number of venues in a path
            max_paths: Maximum number of paths to return

        Returns:
            List of paths, each an ordered tuple of venues. Empty if none.
        """
        token_in_norm = normalize_token(token_in)
        token_out_norm = normalize_token(token_out)

        if token_in_norm == token_out_norm or max_hops < 1:
            return []

        cache_key = (token_in_norm, token_out_norm, max_hops, max_paths)
        if cache_key in self._path_cache:
            return self._path_cache[cache_key]

        paths: list[tuple[Venue, ...]] = []
        # (current token, venues so far, venue ids used)
        queue: deque[tuple[str, tuple[Venue, ...], frozenset[str]]] = deque(
            [(token_in_norm, (), frozenset())]
        )

        while queue and len(paths) < max_paths:
            token, path, used = queue.popleft()

            if path and token == token_out_norm:
                paths.append(path)
                continue

            if len(path) >= max_hops:
                continue

            for venue in self._graph.venues_for(token):
                if venue.id in used:
                    continue
                queue.append(
                    (venue.other_token(token), path + (venue,), used | frozenset([venue.id]))
                )

        self._path_cache[cache_key] = paths
        return paths


def find_paths(
    intent: Intent,
    venues: Sequence[Venue],
    max_hops: int = DEFAULT_MAX_HOPS,
    max_paths: int = DEFAULT_MAX_PATHS,
) -> list[tuple[Venue, ...]]:
    """Find candidate venue paths for an intent's sell -> buy token pair."""
    return PathFinder(venues).find_all_paths(
        intent.sell_token, intent.buy_token, max_hops=max_hops, max_paths=max_paths
    )


__all__ = ["PathFinder", "VenueGraph", "find_paths"]
