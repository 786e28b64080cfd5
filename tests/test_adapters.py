"""
Tests for the Hyperliquid adapters (loader and router) with mocked SDK clients.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from momentum_rotation.core.config import Config
from momentum_rotation.data.loader import MarketDataLoader
from momentum_rotation.execution.router import ExecutionRouter
from momentum_rotation.utils.precision import format_size, quantize_down, to_decimal


@pytest.fixture
def hl_config():
    config = Config()
    config.hyperliquid.address = "0xabc"
    config.execution.retry_delay_sec = 0
    return config


@pytest.fixture
def info():
    info = MagicMock()
    info.all_mids.return_value = {"BTC": "64123.5", "ETH": "3100"}
    info.user_state.return_value = {
        "assetPositions": [{"position": {"coin": "ETH", "szi": "-1.25"}}],
        "marginSummary": {"accountValue": "25000.75"},
    }
    info.meta.return_value = {
        "universe": [{"name": "BTC", "szDecimals": 5}, {"name": "ETH", "szDecimals": 4}]
    }
    return info


def test_precision_helpers():
    assert to_decimal(0.1) == Decimal("0.1")
    assert quantize_down(Decimal("1.239"), 2) == Decimal("1.23")
    assert quantize_down(Decimal("-1.239"), 2) == Decimal("-1.23")
    assert quantize_down(Decimal("1.239"), None) == Decimal("1.239")
    assert format_size(Decimal("0.123456"), 4) == "0.1234"
    assert format_size(Decimal("3.9"), 0) == "3"
    with pytest.raises(ValueError):
        to_decimal(float("nan"))


def test_loader_account_reads(hl_config, info):
    loader = MarketDataLoader(hl_config, info)

    assert loader.current_price("BTC") == Decimal("64123.5")
    assert loader.current_price("DOGE") == 0
    assert loader.current_holdings("ETH") == Decimal("-1.25")
    assert loader.current_holdings("BTC") == 0
    assert loader.total_liquidity() == Decimal("25000.75")
    info.user_state.assert_called_once_with("0xabc")  # cached within a cycle

    loader.refresh()
    loader.total_liquidity()
    assert info.user_state.call_count == 2


def test_loader_fetch_history_paginates(hl_config, info):
    day_ms = 86_400_000
    t0 = 1_700_000_000_000 - (1_700_000_000_000 % day_ms)
    info.candles_snapshot.side_effect = [
        [
            {"t": t0, "o": "1", "h": "11", "l": "1", "c": "10", "v": "5"},
            {"t": t0 + day_ms, "o": "1", "h": "12.5", "l": "1", "c": "12", "v": "5"},
        ],
        [],
    ]
    loader = MarketDataLoader(hl_config, info)

    samples = loader.fetch_history("BTC", timedelta(days=280), "1d")

    assert [s.close for s in samples] == [Decimal("10"), Decimal("12")]
    assert samples[1].high == Decimal("12.5")
    assert samples[0].timestamp == datetime.fromtimestamp(t0 / 1000, tz=timezone.utc)
    assert info.candles_snapshot.call_count == 2


def test_loader_market_hours_follow_trading_days(hl_config, info):
    hl_config.schedule.trading_days = [0, 1, 2, 3, 4]
    loader = MarketDataLoader(hl_config, info)

    assert loader.is_market_open("BTC", datetime(2024, 3, 1, tzinfo=timezone.utc))  # Friday
    assert not loader.is_market_open("BTC", datetime(2024, 3, 2, tzinfo=timezone.utc))


def test_router_cancels_only_requested_coin(hl_config, info):
    info.open_orders.return_value = [
        {"coin": "BTC", "oid": 1},
        {"coin": "ETH", "oid": 2},
        {"coin": "BTC", "oid": 3},
    ]
    exchange = MagicMock()
    router = ExecutionRouter(hl_config, exchange, info)

    router.cancel_open_orders("BTC")

    exchange.bulk_cancel.assert_called_once_with(
        [{"coin": "BTC", "oid": 1}, {"coin": "BTC", "oid": 3}]
    )


def test_router_submits_market_orders(hl_config, info):
    exchange = MagicMock()
    exchange.market_open.return_value = {"status": "ok"}
    router = ExecutionRouter(hl_config, exchange, info)
    router.start_cycle("cycle-1")

    buy = router.submit_order("BTC", Decimal("0.0123456"))
    sell = router.submit_order("ETH", Decimal("-1.25"))

    first, second = exchange.market_open.call_args_list
    assert first.args[:5] == ("BTC", True, 0.01234, None, 0.03)
    assert second.args[:5] == ("ETH", False, 1.25, None, 0.03)
    assert buy.status == sell.status == "pending"
    assert buy.cloid.startswith("0x") and len(buy.cloid) == 34


def test_router_cloid_is_deterministic_per_cycle(hl_config, info):
    router = ExecutionRouter(hl_config, None, info, dry_run=True)
    router.start_cycle("cycle-1")
    a = router.submit_order("BTC", Decimal("0.5"))
    b = router.submit_order("BTC", Decimal("0.5"))
    router.start_cycle("cycle-2")
    c = router.submit_order("BTC", Decimal("0.5"))

    assert a.cloid == b.cloid
    assert a.cloid != c.cloid


def test_router_dry_run_sends_nothing(hl_config, info):
    exchange = MagicMock()
    info.open_orders.return_value = [{"coin": "BTC", "oid": 1}]
    router = ExecutionRouter(hl_config, exchange, info, dry_run=True)
    router.start_cycle("cycle-1")

    router.cancel_open_orders("BTC")
    report = router.submit_order("BTC", Decimal("1"))

    exchange.bulk_cancel.assert_not_called()
    exchange.market_open.assert_not_called()
    assert report.status == "skipped"


def test_router_skips_sizes_below_lot(hl_config, info):
    exchange = MagicMock()
    router = ExecutionRouter(hl_config, exchange, info)
    router.start_cycle("cycle-1")

    report = router.submit_order("ETH", Decimal("0.00001"))

    assert report.error_code == "zero_size"
    exchange.market_open.assert_not_called()


def test_router_retries_then_reports_rejection(hl_config, info):
    exchange = MagicMock()
    exchange.market_open.side_effect = [RuntimeError("timeout"), {"status": "ok"}]
    router = ExecutionRouter(hl_config, exchange, info)
    router.start_cycle("cycle-1")

    ok = router.submit_order("BTC", Decimal("1"))
    assert ok.status == "pending"
    assert exchange.market_open.call_count == 2

    exchange.market_open.side_effect = RuntimeError("down")
    failed = router.submit_order("BTC", Decimal("1"))
    assert failed.status == "rejected"
    assert router.api_error_count == 1 + hl_config.execution.max_attempts
