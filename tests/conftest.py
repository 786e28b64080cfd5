# tests/conftest.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from momentum_rotation.core.config import Config
from momentum_rotation.core.interfaces import MarketData, OrderExecutor
from momentum_rotation.data.window import PriceSample

NOW = datetime(2024, 3, 1, 14, 40, tzinfo=timezone.utc)  # Friday


def make_samples(closes, end=NOW, highs=None):
    """Daily bars, oldest first, the newest one day before ``end``."""
    n = len(closes)
    highs = highs or closes
    return [
        PriceSample(
            timestamp=end - timedelta(days=n - i),
            close=Decimal(str(c)),
            high=Decimal(str(h)),
        )
        for i, (c, h) in enumerate(zip(closes, highs))
    ]


class FakeMarketData(MarketData):
    def __init__(self, histories=None, prices=None, holdings=None, liquidity="10000", closed=()):
        self.histories = histories or {}
        self.prices = {k: Decimal(str(v)) for k, v in (prices or {}).items()}
        self.holdings = {k: Decimal(str(v)) for k, v in (holdings or {}).items()}
        self.liquidity = Decimal(str(liquidity))
        self.closed = set(closed)
        self.calls = []

    def fetch_history(self, instrument, span, resolution):
        self.calls.append(("fetch_history", instrument))
        return make_samples(self.histories.get(instrument, []))

    def current_price(self, instrument):
        return self.prices.get(instrument, Decimal(0))

    def current_holdings(self, instrument):
        return self.holdings.get(instrument, Decimal(0))

    def total_liquidity(self):
        return self.liquidity

    def is_market_open(self, instrument, now):
        return instrument not in self.closed


class FakeExecutor(OrderExecutor):
    def __init__(self, log=None):
        self.log = log if log is not None else []
        self.orders = []

    def cancel_open_orders(self, instrument):
        self.log.append(("cancel_open_orders", instrument))

    def submit_order(self, instrument, delta_quantity):
        self.orders.append((instrument, delta_quantity))


@pytest.fixture
def config() -> Config:
    return Config.from_dict(
        {
            "universe": {"symbols": ["AAA", "BBB", "CCC", "DDD"]},
            "signal": {
                "history_span_days": 60,
                "return_lookback": 5,
                "short_window": 3,
            },
            "allocation": {"top_k": 2, "leverage": 1.0},
            "rebalance": {"min_pct_diff": 0.1},
        }
    )


@pytest.fixture
def market_data() -> FakeMarketData:
    return FakeMarketData(
        histories={
            "AAA": [100 + 2 * i for i in range(10)],  # return +10, uptrend
            "BBB": [50 + i for i in range(10)],  # return +5, uptrend
            "CCC": [40 - i for i in range(10)],  # return -5, downtrend
            "DDD": [],  # no history yet
        },
        prices={"AAA": 100, "BBB": 50, "CCC": 20, "DDD": 10},
        liquidity=10000,
    )


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()
