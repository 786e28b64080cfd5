"""
Market Data Loader

Pulls candles, mids and account state from the Hyperliquid Info endpoint
and exposes them through the MarketData interface.
"""

import logging
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from hyperliquid.info import Info

from momentum_rotation.core.config import Config
from momentum_rotation.core.interfaces import MarketData
from momentum_rotation.data.window import PriceSample
from momentum_rotation.utils.precision import to_decimal

logger = logging.getLogger(__name__)


class MarketDataLoader(MarketData):
    """
    Hyperliquid-backed market data and account reads.

    Handles:
    - Candle snapshots (≤5000 bars per request, paginated)
    - Mid prices (allMids, cached per cycle)
    - Positions and account value (clearinghouseState, cached per cycle)
    """

    def __init__(self, config: Config, info: Optional[Info] = None):
        """
        Initialize data loader.

        Args:
            config: System configuration
            info: Hyperliquid Info client (created from config when omitted)
        """
        self.config = config
        self.info = info or Info(config.hyperliquid.api_url, skip_ws=True)
        self._mids: Optional[Dict[str, str]] = None
        self._account: Optional[Dict] = None

    # ------------------------
    # Internal helpers
    # ------------------------

    @staticmethod
    def _interval_to_ms(interval: str) -> int:
        """
        Convert interval string to milliseconds.
        """
        mapping = {
            "1m": 60_000,
            "5m": 5 * 60_000,
            "15m": 15 * 60_000,
            "30m": 30 * 60_000,
            "1h": 60 * 60_000,
            "4h": 4 * 60 * 60_000,
            "1d": 24 * 60 * 60_000,
        }
        if interval not in mapping:
            raise ValueError(f"Unsupported interval: {interval}")
        return mapping[interval]

    def refresh(self):
        """Drop cached mids/account state so the next read hits the API."""
        self._mids = None
        self._account = None

    def _account_state(self) -> Dict:
        if self._account is None:
            self._account = self.info.user_state(self.config.hyperliquid.address)
        return self._account

    def _all_mids(self) -> Dict[str, str]:
        if self._mids is None:
            self._mids = self.info.all_mids()
        return self._mids

    # ------------------------
    # Raw SDK reads
    # ------------------------

    def get_candles(
        self,
        coin: str,
        interval: str,
        start_ms: int,
        end_ms: int
    ) -> List[Dict]:
        """
        Fetch candle data for a coin using SDK.

        Args:
            coin: Asset name
            interval: Bar interval ("1d", "4h", "1h", etc.)
            start_ms: Start timestamp (epoch milliseconds)
            end_ms: End timestamp (epoch milliseconds)

        Returns:
            List of candles with keys: t, o, h, l, c, v
        """
        interval_ms = self._interval_to_ms(interval)
        all_candles: List[Dict] = []
        next_start = int(start_ms)
        end = int(end_ms)

        while next_start < end:
            resp = self.info.candles_snapshot(coin, interval, next_start, end)
            # SDK returns list of candles or wrapped dict
            candles = resp if isinstance(resp, list) else resp.get("candles", [])
            if not candles:
                break

            normalized: List[Dict] = []
            for c in candles:
                if isinstance(c, dict):
                    normalized.append({
                        "t": int(c.get("t")),
                        "o": c.get("o"),
                        "h": c.get("h"),
                        "l": c.get("l"),
                        "c": c.get("c"),
                        "v": c.get("v", "0"),
                    })
                elif isinstance(c, list) and len(c) >= 6:
                    # Assume [t, o, h, l, c, v, ...]
                    normalized.append({
                        "t": int(c[0]),
                        "o": c[1],
                        "h": c[2],
                        "l": c[3],
                        "c": c[4],
                        "v": c[5],
                    })
            if not normalized:
                break

            all_candles.extend(normalized)
            last_t = normalized[-1]["t"]
            # Advance just beyond the last returned bar time
            next_start = int(last_t + interval_ms)

        return all_candles

    # ------------------------
    # MarketData interface
    # ------------------------

    def fetch_history(self, instrument: str, span: timedelta, resolution: str) -> List[PriceSample]:
        """
        Closed bars covering ``span`` up to now, oldest first.

        The bar still forming is excluded.
        """
        interval_ms = self._interval_to_ms(resolution)
        now_ms = int(time.time() * 1000)
        end_ms = (now_ms // interval_ms) * interval_ms - 1  # Last fully closed bar
        start_ms = end_ms - int(span.total_seconds() * 1000)

        samples: List[PriceSample] = []
        for c in self.get_candles(instrument, resolution, start_ms, end_ms):
            if c.get("c") is None:
                continue
            samples.append(
                PriceSample(
                    timestamp=datetime.fromtimestamp(c["t"] / 1000, tz=timezone.utc),
                    close=Decimal(str(c["c"])),
                    high=Decimal(str(c["h"] if c.get("h") is not None else c["c"])),
                )
            )
        logger.debug(f"[MarketDataLoader] {instrument}: {len(samples)} bars")
        return samples

    def current_price(self, instrument: str) -> Decimal:
        mid = self._all_mids().get(instrument)
        if mid is None:
            logger.warning(f"[MarketDataLoader] No mid price for {instrument}")
            return Decimal(0)
        return Decimal(str(mid))

    def current_holdings(self, instrument: str) -> Decimal:
        for ap in self._account_state().get("assetPositions", []):
            pos = ap.get("position", {})
            if pos.get("coin") == instrument:
                return Decimal(str(pos.get("szi", "0")))
        return Decimal(0)

    def total_liquidity(self) -> Decimal:
        summary = self._account_state().get("marginSummary", {})
        return to_decimal(summary.get("accountValue", "0"))

    def is_market_open(self, instrument: str, now: datetime) -> bool:
        return now.weekday() in self.config.schedule.trading_days
