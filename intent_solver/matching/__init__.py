"""Direct intent-to-intent matching."""

from intent_solver.matching.cow import CowMatcher, Match, is_compatible

__all__ = ["CowMatcher", "Match", "is_compatible"]
