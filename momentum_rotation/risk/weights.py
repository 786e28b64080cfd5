"""
Weight Assigner

Equal-weight allocation of the leverage budget across TOP_K slots.
"""

from decimal import Decimal
from typing import Dict, Sequence

from momentum_rotation.signals.ranking import RankEntry

ZERO = Decimal(0)


class WeightAssigner:
    """
    Each selected instrument gets LEVERAGE / TOP_K; everything else gets 0.

    Slots left empty by the trend filter stay in cash, so the sum of weights
    is at most LEVERAGE.
    """

    def __init__(self, top_k: int, leverage: Decimal):
        if top_k <= 0:
            raise ValueError(f"top_k must be positive, got {top_k}")
        if leverage < 0:
            raise ValueError(f"leverage must be >= 0, got {leverage}")
        self.top_k = top_k
        self.leverage = leverage

    @property
    def slot_weight(self) -> Decimal:
        return self.leverage / self.top_k

    def assign(self, entries: Sequence[RankEntry], selected: Sequence[RankEntry]) -> Dict[str, Decimal]:
        """
        Set ``target_weight`` on every entry and return instrument -> weight
        in the order of ``entries``.
        """
        chosen = {e.instrument for e in selected}
        weights: Dict[str, Decimal] = {}
        for entry in entries:
            entry.target_weight = self.slot_weight if entry.instrument in chosen else ZERO
            weights[entry.instrument] = entry.target_weight
        return weights
