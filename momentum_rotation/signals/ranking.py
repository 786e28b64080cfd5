"""
Ranker

Orders ready instruments by trailing return and applies the trend filter.
"""

from dataclasses import dataclass
from decimal import Decimal
from functools import cmp_to_key
from typing import Callable, List, Sequence

from momentum_rotation.signals.momentum import PriceState

ZERO = Decimal(0)


@dataclass
class RankEntry:
    """One instrument's standing in the current cycle."""

    instrument: str
    state: PriceState
    target_weight: Decimal = ZERO


Comparator = Callable[[RankEntry, RankEntry], int]


def by_trailing_return(a: RankEntry, b: RankEntry) -> int:
    """Descending trailing return; equal returns compare equal."""
    ra, rb = a.state.trailing_return, b.state.trailing_return
    if ra > rb:
        return -1
    if ra < rb:
        return 1
    return 0


def passes_trend_filter(state: PriceState) -> bool:
    """Short-horizon average strictly above the long-horizon average."""
    return state.trend > 0


class Ranker:
    """
    Stable ranking plus top-K selection.

    Policies:
    - "hold_cash": only the top-K by return are candidates; a candidate that
      fails the trend filter leaves its slot empty.
    - "backfill": walk the ranking and take the first K that pass.
    """

    def __init__(self, top_k: int, policy: str = "hold_cash", comparator: Comparator = by_trailing_return):
        if policy not in ("hold_cash", "backfill"):
            raise ValueError(f"Unsupported selection policy: {policy}")
        self.top_k = top_k
        self.policy = policy
        self.comparator = comparator

    def rank(self, entries: Sequence[RankEntry]) -> List[RankEntry]:
        """Ready entries in rank order; ties keep their input order."""
        ready = [e for e in entries if e.state.is_ready]
        return sorted(ready, key=cmp_to_key(self.comparator))

    def select(self, ranked: Sequence[RankEntry]) -> List[RankEntry]:
        if self.policy == "hold_cash":
            return [e for e in ranked[: self.top_k] if passes_trend_filter(e.state)]

        selected: List[RankEntry] = []
        for entry in ranked:
            if len(selected) >= self.top_k:
                break
            if passes_trend_filter(entry.state):
                selected.append(entry)
        return selected
