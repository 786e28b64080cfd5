"""
Streaming averages.

Incremental alternative to recomputing the long/short averages from a fresh
window each cycle. Accumulators are owned by the orchestrator and change only
through ``observe``.
"""

from collections import deque
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Deque, Dict, Optional, Tuple

from momentum_rotation.core.config import SignalConfig
from momentum_rotation.data.window import PriceWindow

ZERO = Decimal(0)


class RollingMean:
    """
    Running mean over a bounded set of observations.

    Bounded by count (``max_count``), by age relative to the newest
    observation (``max_age``), or both.

    A non-positive price resets the accumulator: the stream is broken and
    the mean restarts from the next valid observation.
    """

    def __init__(self, max_count: Optional[int] = None, max_age: Optional[timedelta] = None):
        self.max_count = max_count
        self.max_age = max_age
        self._items: Deque[Tuple[datetime, Decimal]] = deque()
        self._total = ZERO

    def observe(self, timestamp: datetime, price: Decimal):
        if price <= 0:
            self.reset()
            return
        self._items.append((timestamp, price))
        self._total += price
        self._evict(timestamp)

    def _evict(self, newest: datetime):
        if self.max_count is not None:
            while len(self._items) > self.max_count:
                self._pop()
        if self.max_age is not None:
            while self._items and self._items[0][0] <= newest - self.max_age:
                self._pop()

    def _pop(self):
        _, price = self._items.popleft()
        self._total -= price

    def reset(self):
        self._items.clear()
        self._total = ZERO

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def value(self) -> Decimal:
        if not self._items:
            return ZERO
        return self._total / len(self._items)


class StreamingAverages:
    """Long/short rolling means per instrument."""

    def __init__(self, config: SignalConfig):
        self.config = config
        self._long: Dict[str, RollingMean] = {}
        self._short: Dict[str, RollingMean] = {}
        self._seen: Dict[str, Optional[datetime]] = {}

    def _ensure(self, instrument: str):
        if instrument not in self._long:
            self._long[instrument] = RollingMean(
                max_age=timedelta(days=self.config.history_span_days)
            )
            self._short[instrument] = RollingMean(max_count=self.config.short_window)
            self._seen[instrument] = None

    def update(self, window: PriceWindow) -> Tuple[Decimal, Decimal]:
        """Feed samples newer than the last one seen; return (long, short)."""
        instrument = window.instrument
        self._ensure(instrument)
        field = self.config.price_field
        for sample in window.since(self._seen[instrument]):
            price = sample.close if field == "close" else sample.high
            self._long[instrument].observe(sample.timestamp, price)
            self._short[instrument].observe(sample.timestamp, price)
            self._seen[instrument] = sample.timestamp
        return self._long[instrument].value, self._short[instrument].value

    def reset(self, instrument: str):
        """Drop accumulated state; the next update refills from the window."""
        self._long.pop(instrument, None)
        self._short.pop(instrument, None)
        self._seen.pop(instrument, None)

    def count(self, instrument: str) -> int:
        acc = self._long.get(instrument)
        return acc.count if acc else 0
