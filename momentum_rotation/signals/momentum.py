"""
Momentum Calculator

Long/short price averages and trailing return from a PriceWindow.
All arithmetic is Decimal; functions are pure.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from momentum_rotation.core.config import SignalConfig
from momentum_rotation.data.window import PriceWindow
from momentum_rotation.utils.precision import to_decimal

ZERO = Decimal(0)


@dataclass
class PriceState:
    """Per-instrument signal state for one cycle."""

    long_average: Decimal = ZERO
    short_average: Decimal = ZERO
    trailing_return: Decimal = ZERO
    is_ready: bool = False
    sample_count: int = 0

    @property
    def trend(self) -> Decimal:
        """Short average minus long average (> 0 is an uptrend)."""
        return self.short_average - self.long_average


def long_average(prices: Sequence[Decimal]) -> Decimal:
    """Arithmetic mean of every price in the window (0 when empty)."""
    if not prices:
        return ZERO
    return sum(prices, ZERO) / len(prices)


def short_average(prices: Sequence[Decimal], window_len: int) -> Decimal:
    """Mean of the last ``window_len`` prices, or of all when fewer exist."""
    if not prices:
        return ZERO
    return long_average(prices[-window_len:])


def trailing_return(
    prices: Sequence[Decimal],
    lookback: int,
    mode: str = "absolute",
    epsilon: Decimal = Decimal("1e-9"),
) -> Decimal:
    """
    Price change over ``lookback`` samples ending at the last price.

    If the window is shorter than the lookback, the earliest sample is used
    as the anchor instead. In "percentage" mode the change is divided by the
    anchor price; an anchor at or below ``epsilon`` is clamped to ``epsilon``
    so the return stays finite.
    """
    if not prices:
        return ZERO

    last = len(prices) - 1
    anchor_idx = max(last - lookback, 0)
    anchor = prices[anchor_idx]
    change = prices[last] - anchor

    if mode == "absolute":
        return change
    if mode == "percentage":
        divisor = anchor if anchor > epsilon else epsilon
        return change / divisor
    raise ValueError(f"Unsupported return mode: {mode}")


class MomentumCalculator:
    """
    Derives a PriceState from a window.

    Averages read ``price_field`` (close or high); the trailing return is
    always measured on closes.
    """

    def __init__(self, config: SignalConfig):
        self.config = config
        self.epsilon = to_decimal(config.epsilon)

    def compute(self, window: PriceWindow) -> PriceState:
        cfg = self.config
        n = len(window)
        if n < cfg.min_samples:
            return PriceState(sample_count=n)

        prices = window.prices(cfg.price_field)
        return PriceState(
            long_average=long_average(prices),
            short_average=short_average(prices, cfg.short_window),
            trailing_return=self.trailing_return(window),
            is_ready=True,
            sample_count=n,
        )

    def trailing_return(self, window: PriceWindow) -> Decimal:
        cfg = self.config
        return trailing_return(
            window.closes(), cfg.return_lookback, cfg.return_mode, self.epsilon
        )
