"""
Collaborator interfaces consumed by the cycle orchestrator.

Market data/account reads and order actions live behind these two classes so
the ranking and sizing logic never talks to an exchange SDK directly.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import List

from momentum_rotation.data.window import PriceSample


class MarketData:
    def fetch_history(self, instrument: str, span: timedelta, resolution: str) -> List[PriceSample]:
        """Bars covering ``span`` up to now, oldest first."""
        raise NotImplementedError

    def current_price(self, instrument: str) -> Decimal:
        raise NotImplementedError

    def current_holdings(self, instrument: str) -> Decimal:
        raise NotImplementedError

    def total_liquidity(self) -> Decimal:
        """Cash plus mark-to-market value of holdings."""
        raise NotImplementedError

    def is_market_open(self, instrument: str, now: datetime) -> bool:
        raise NotImplementedError


class OrderExecutor:
    def cancel_open_orders(self, instrument: str) -> None:
        raise NotImplementedError

    def submit_order(self, instrument: str, delta_quantity: Decimal):
        raise NotImplementedError
