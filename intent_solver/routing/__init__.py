"""Multi-hop routing over venue snapshots.

Module structure:
- types.py: HopResult and Route dataclasses
- pathfinding.py: VenueGraph and PathFinder for path discovery
- evaluate.py: hop-by-hop route simulation
"""

from intent_solver.routing.evaluate import evaluate_route, find_routes
from intent_solver.routing.pathfinding import PathFinder, VenueGraph, find_paths
from intent_solver.routing.types import HopResult, Route

__all__ = [
    "HopResult",
    "PathFinder",
    "Route",
    "VenueGraph",
    "evaluate_route",
    "find_paths",
    "find_routes",
]
