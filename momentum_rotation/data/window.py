"""
Price Window

Bounded, time-ordered close/high history for one instrument, oldest first.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from momentum_rotation.utils.precision import to_decimal


@dataclass(frozen=True)
class PriceSample:
    """One trading-session bar."""

    timestamp: datetime
    close: Decimal
    high: Decimal


class PriceWindow:
    """
    Ordered samples for a single instrument.

    An empty window is a normal state (new listing, early history); the
    momentum calculator reports it as not ready.
    """

    def __init__(self, instrument: str, samples: Sequence[PriceSample] = ()):
        self.instrument = instrument
        self.samples: List[PriceSample] = list(samples)

    @classmethod
    def from_samples(
        cls,
        instrument: str,
        samples: Iterable[PriceSample],
        span: Optional[timedelta] = None,
        end: Optional[datetime] = None,
        trading_days: Optional[Iterable[int]] = None,
    ) -> "PriceWindow":
        """
        Normalize raw samples into a window.

        Sorts by timestamp, collapses duplicate timestamps (last one wins),
        drops non-finite or missing closes, keeps only bars on trading
        weekdays and, when ``span`` is given, bars within ``span`` of ``end``
        (default: the newest bar).
        """
        rows = [
            {"t": s.timestamp, "c": s.close, "h": s.high if s.high is not None else s.close}
            for s in samples
        ]
        if not rows:
            return cls(instrument)

        df = pd.DataFrame(rows)
        df["t"] = pd.to_datetime(df["t"], utc=True)

        def as_float(v):
            return np.nan if v is None else float(v)

        closes = pd.to_numeric(df["c"].map(as_float), errors="coerce").to_numpy(dtype=float)
        highs = pd.to_numeric(df["h"].map(as_float), errors="coerce").to_numpy(dtype=float)
        df = df[np.isfinite(closes) & np.isfinite(highs)]

        df = df.sort_values("t", kind="stable").drop_duplicates("t", keep="last")

        if trading_days is not None:
            df = df[df["t"].dt.weekday.isin(list(trading_days))]

        if span is not None and not df.empty:
            anchor = pd.Timestamp(end) if end is not None else df["t"].iloc[-1]
            if anchor.tzinfo is None:
                anchor = anchor.tz_localize(timezone.utc)
            df = df[(df["t"] > anchor - span) & (df["t"] <= anchor)]

        out = [
            PriceSample(
                timestamp=t.to_pydatetime(),
                close=to_decimal(c),
                high=to_decimal(h),
            )
            for t, c, h in zip(df["t"], df["c"], df["h"])
        ]
        return cls(instrument, out)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def is_empty(self) -> bool:
        return not self.samples

    def closes(self) -> List[Decimal]:
        return [s.close for s in self.samples]

    def prices(self, field: str = "close") -> List[Decimal]:
        """Price series for ``field`` ("close" or "high")."""
        if field == "close":
            return self.closes()
        if field == "high":
            return [s.high for s in self.samples]
        raise ValueError(f"Unsupported price field: {field}")

    def since(self, timestamp: Optional[datetime]) -> List[PriceSample]:
        """Samples strictly newer than ``timestamp`` (all when None)."""
        if timestamp is None:
            return list(self.samples)
        return [s for s in self.samples if s.timestamp > timestamp]
