"""Coincidence of Wants (CoW) matching.

Detects pairs of intents that can settle directly against each other without
any venue, saving both users the swap fee and price impact.

Matching is two-phase:
1. Candidate phase: scan every pair (i, j) with i < j in input order and keep
   the compatible ones. This is O(n^2), fine for batches of tens to a few
   hundred intents.
2. Selection phase: walk the candidates in scan order and accept a pair when
   neither side is already in the matched set.

The selection is greedy first-found: it returns *a* valid set of matches, not
the partition that maximizes matched volume. Which pairs are chosen depends
on input order, which is why callers must pass intents in a stable order.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from intent_solver.models.intent import Intent

logger = structlog.get_logger()


@dataclass(frozen=True)
class Match:
    """A matched pair of intents that settle directly.

    Both intents are fully consumed: A receives B's whole sell amount and vice
    versa. Any surplus over the counterparty's minimum is not redistributed.

    Attributes:
        intent_a: First intent (sells token X, buys token Y)
        intent_b: Second intent (sells token Y, buys token X)
    """

    intent_a: Intent
    intent_b: Intent

    @property
    def intent_ids(self) -> tuple[str, str]:
        return self.intent_a.id, self.intent_b.id


def is_compatible(intent_a: Intent, intent_b: Intent) -> bool:
    """Check whether two intents can clear against each other.

    A must sell what B buys, B must sell what A buys, and each side's sell
    amount must cover the other's minimum buy amount.
    """
    if intent_a.id == intent_b.id:
        return False
    if intent_a.sell_token != intent_b.buy_token or intent_a.buy_token != intent_b.sell_token:
        return False
    if intent_a.sell_amount < intent_b.min_buy_amount:
        return False
    if intent_b.sell_amount < intent_a.min_buy_amount:
        return False
    return True


class CowMatcher:
    """Finds direct matches in a batch of intents."""

    def find_candidates(self, intents: Sequence[Intent]) -> list[tuple[int, int]]:
        """Collect all compatible index pairs in scan order.

        Args:
            intents: Intents in batch order

        Returns:
            List of (i, j) index pairs with i < j
        """
        candidates: list[tuple[int, int]] = []
        for i in range(len(intents)):
            for j in range(i + 1, len(intents)):
                if is_compatible(intents[i], intents[j]):
                    candidates.append((i, j))
        return candidates

    def select(self, candidates: Sequence[tuple[int, int]]) -> list[tuple[int, int]]:
        """Pick a conflict-free subset of candidate pairs, first-found wins."""
        matched: set[int] = set()
        selected: list[tuple[int, int]] = []
        for i, j in candidates:
            if i in matched or j in matched:
                continue
            matched.add(i)
            matched.add(j)
            selected.append((i, j))
        return selected

    def find_matches(self, intents: Sequence[Intent]) -> list[Match]:
        """Find direct matches; every intent appears in at most one match.

        Args:
            intents: Intents in batch order

        Returns:
            Matches in selection order
        """
        candidates = self.find_candidates(intents)
        selected = self.select(candidates)

        matches = []
        for i, j in selected:
            match = Match(intent_a=intents[i], intent_b=intents[j])
            logger.info(
                "cow_match_found",
                intent_a=match.intent_a.short_id,
                intent_b=match.intent_b.short_id,
                sell_a=str(match.intent_a.sell_amount),
                sell_b=str(match.intent_b.sell_amount),
            )
            matches.append(match)

        logger.debug(
            "cow_matching_complete",
            intent_count=len(intents),
            candidate_pairs=len(candidates),
            matches=len(matches),
        )
        return matches


__all__ = ["CowMatcher", "Match", "is_compatible"]
