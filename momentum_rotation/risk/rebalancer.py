"""
Rebalancer

Turns target weights into order deltas and applies the rebalance band:
orders go out only when aggregate turnover exceeds MIN_PCT_DIFF, and then
all of them go out together.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Mapping, Optional

from momentum_rotation.execution.orders import OrderIntent
from momentum_rotation.utils.precision import quantize_down

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Holdings, prices and liquidity as reported by the account."""

    holdings: Mapping[str, Decimal]
    prices: Mapping[str, Decimal]
    liquidity: Decimal

    def quantity(self, instrument: str) -> Decimal:
        return self.holdings.get(instrument, ZERO)

    def price(self, instrument: str) -> Decimal:
        return self.prices.get(instrument, ZERO)


@dataclass
class RebalancePlan:
    """Sizing result for one cycle."""

    targets: Dict[str, Decimal] = field(default_factory=dict)
    deltas: Dict[str, Decimal] = field(default_factory=dict)
    turnover: Decimal = ZERO
    intents: List[OrderIntent] = field(default_factory=list)
    gated: bool = False  # True when the band suppressed trading


class Rebalancer:
    """
    Weight-to-quantity conversion with an all-or-nothing turnover gate.

    Args:
        min_pct_diff: Turnover (fraction of liquidity) that must be exceeded
        quantity_decimals: Round targets toward zero to this many decimals
    """

    def __init__(self, min_pct_diff: Decimal, quantity_decimals: Optional[int] = None):
        self.min_pct_diff = min_pct_diff
        self.quantity_decimals = quantity_decimals

    def target_quantity(self, weight: Decimal, price: Decimal, current: Decimal, liquidity: Decimal) -> Decimal:
        # Never size against an invalid price: hold what we have.
        if price <= 0:
            return current
        return quantize_down(liquidity * weight / price, self.quantity_decimals)

    def plan(self, weights: Mapping[str, Decimal], snapshot: PortfolioSnapshot) -> RebalancePlan:
        """
        Compute targets, deltas and turnover for ``weights``.

        Instruments keep the iteration order of ``weights``.
        """
        liquidity = snapshot.liquidity
        if liquidity <= 0:
            logger.warning(f"[Rebalancer] Non-positive liquidity {liquidity}; no orders")
            return RebalancePlan()

        plan = RebalancePlan()
        notional = ZERO
        for instrument, weight in weights.items():
            price = snapshot.price(instrument)
            current = snapshot.quantity(instrument)
            if price <= 0:
                logger.warning(f"[Rebalancer] Invalid price {price} for {instrument}; holding {current}")
            target = self.target_quantity(weight, price, current, liquidity)
            delta = target - current
            plan.targets[instrument] = target
            plan.deltas[instrument] = delta
            if price > 0:
                notional += abs(delta * price)

        plan.turnover = notional / liquidity

        if plan.turnover > self.min_pct_diff:
            plan.intents = [
                OrderIntent(instrument, delta)
                for instrument, delta in plan.deltas.items()
                if delta != 0
            ]
        else:
            plan.gated = True

        logger.info(
            f"[Rebalancer] Turnover {plan.turnover:.4f} vs band {self.min_pct_diff} → "
            f"{len(plan.intents)} intents"
        )
        return plan
