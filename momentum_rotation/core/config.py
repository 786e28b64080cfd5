"""
Configuration management for the rotation engine.

Strategy parameters (TOP_K, history span, lookback windows, leverage,
rebalance band) plus scheduling, execution and Hyperliquid settings.
Supports loading from YAML/dict and environment variable overrides.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional


class ConfigurationError(ValueError):
    """Raised when the configuration cannot be used to run a cycle."""


@dataclass
class UniverseConfig:
    """Static instrument universe, in registration order."""

    symbols: list[str] = field(
        default_factory=lambda: ["BTC", "ETH", "SOL", "BNB", "AVAX", "LINK", "DOGE"]
    )


@dataclass
class ScheduleConfig:
    """Rebalance timing."""

    rebalance_at: str = "09:40"  # Wall-clock time, HH:MM
    timezone: str = "America/New_York"
    resolution: Literal["1d", "4h", "1h"] = "1d"  # History bar resolution
    trading_days: list[int] = field(default_factory=lambda: [0, 1, 2, 3, 4, 5, 6])  # Mon=0


@dataclass
class SignalConfig:
    """Momentum and trend-filter parameters."""

    history_span_days: int = 280  # HS: calendar days of history requested
    return_lookback: int = 61  # WD1: samples between anchor and last close
    short_window: int = 25  # WD2: samples in the short average
    return_mode: Literal["absolute", "percentage"] = "absolute"
    price_field: Literal["close", "high"] = "close"  # Field feeding the averages
    min_samples: int = 1  # Samples needed before an instrument is ready
    epsilon: float = 1e-9  # Divisor floor for percentage returns
    averaging: Literal["window", "streaming"] = "window"


@dataclass
class AllocationConfig:
    """Selection and weighting."""

    top_k: int = 3  # TOP_K > 0
    leverage: float = 1.0  # Gross exposure multiplier
    selection_policy: Literal["hold_cash", "backfill"] = "hold_cash"


@dataclass
class RebalanceConfig:
    """Order sizing and the rebalance band."""

    min_pct_diff: float = 0.1  # Turnover (fraction of liquidity) needed to trade
    quantity_decimals: Optional[int] = None  # Round targets toward zero; None = exact


@dataclass
class ExecutionConfig:
    """Order submission parameters."""

    slippage: float = 0.03  # Max slippage for market orders
    max_attempts: int = 3
    retry_delay_sec: float = 0.5


@dataclass
class MonitoringConfig:
    """Logging and metrics."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_dir: str = ""  # Empty = console only
    metrics_enabled: bool = True


@dataclass
class HyperliquidConfig:
    """Hyperliquid-specific settings."""

    network: Literal["testnet", "mainnet"] = "testnet"
    address: str = ""  # Main wallet address (from env)
    secret_key: str = ""  # API wallet private key (from env)

    # API endpoint (auto-set by network)
    api_url: str = ""

    def __post_init__(self):
        """Set API URL based on network."""
        from hyperliquid.utils import constants

        if self.network == "testnet":
            self.api_url = constants.TESTNET_API_URL
        else:
            self.api_url = constants.MAINNET_API_URL


@dataclass
class Config:
    """
    Complete system configuration.

    Load from YAML/environment variables.

    Environment variables (override config file):
    - HL_NETWORK: "testnet" or "mainnet"
    - HL_ADDRESS: Main wallet address
    - HL_SECRET_KEY: API wallet private key
    """

    universe: UniverseConfig = field(default_factory=UniverseConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    signal: SignalConfig = field(default_factory=SignalConfig)
    allocation: AllocationConfig = field(default_factory=AllocationConfig)
    rebalance: RebalanceConfig = field(default_factory=RebalanceConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
    hyperliquid: HyperliquidConfig = field(default_factory=HyperliquidConfig)

    def __post_init__(self):
        """Load environment variable overrides."""
        if os.getenv("HL_NETWORK"):
            self.hyperliquid.network = os.getenv("HL_NETWORK", "testnet")

        if os.getenv("HL_ADDRESS"):
            self.hyperliquid.address = os.getenv("HL_ADDRESS", "")

        if os.getenv("HL_SECRET_KEY"):
            self.hyperliquid.secret_key = os.getenv("HL_SECRET_KEY", "")

        # Re-initialize to set API URL
        self.hyperliquid.__post_init__()

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """Load config from YAML file."""
        import yaml

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Load config from dictionary."""
        from dataclasses import is_dataclass, fields

        def build(dc_type, data):
            if not is_dataclass(dc_type):
                return data
            kwargs = {}
            for f in fields(dc_type):
                if f.name in data:
                    val = data[f.name]
                    if hasattr(f.type, "__dataclass_fields__"):
                        kwargs[f.name] = build(f.type, val or {})
                    else:
                        kwargs[f.name] = val
            return dc_type(**kwargs)

        return build(cls, data)

    def validate(self) -> list[str]:
        """
        Validate strategy parameters.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        symbols = self.universe.symbols
        if not symbols:
            errors.append("universe.symbols must not be empty")
        elif len(set(symbols)) != len(symbols):
            errors.append("universe.symbols must not contain duplicates")

        if not isinstance(self.allocation.top_k, int) or self.allocation.top_k <= 0:
            errors.append("allocation.top_k must be a positive integer")

        leverage = self.allocation.leverage
        if not isinstance(leverage, (int, float)) or leverage < 0:
            errors.append("allocation.leverage must be >= 0")

        if self.allocation.selection_policy not in ("hold_cash", "backfill"):
            errors.append("allocation.selection_policy must be 'hold_cash' or 'backfill'")

        sig = self.signal
        for name in ("history_span_days", "return_lookback", "short_window"):
            value = getattr(sig, name)
            if not isinstance(value, int) or value <= 0:
                errors.append(f"signal.{name} must be a positive integer")

        if (
            isinstance(sig.short_window, int)
            and isinstance(sig.history_span_days, int)
            and sig.short_window > sig.history_span_days
        ):
            errors.append("signal.short_window must not exceed signal.history_span_days")

        if not isinstance(sig.min_samples, int) or sig.min_samples < 1:
            errors.append("signal.min_samples must be >= 1")

        if not isinstance(sig.epsilon, (int, float)) or sig.epsilon <= 0:
            errors.append("signal.epsilon must be > 0")

        if sig.return_mode not in ("absolute", "percentage"):
            errors.append("signal.return_mode must be 'absolute' or 'percentage'")

        if sig.price_field not in ("close", "high"):
            errors.append("signal.price_field must be 'close' or 'high'")

        if sig.averaging not in ("window", "streaming"):
            errors.append("signal.averaging must be 'window' or 'streaming'")

        band = self.rebalance.min_pct_diff
        if not isinstance(band, (int, float)) or band < 0:
            errors.append("rebalance.min_pct_diff must be >= 0")

        qd = self.rebalance.quantity_decimals
        if qd is not None and (not isinstance(qd, int) or qd < 0):
            errors.append("rebalance.quantity_decimals must be a non-negative integer or null")

        try:
            datetime.strptime(self.schedule.rebalance_at, "%H:%M")
        except (TypeError, ValueError):
            errors.append("schedule.rebalance_at must be HH:MM")

        if any(d not in range(7) for d in self.schedule.trading_days):
            errors.append("schedule.trading_days must be weekday numbers 0-6")

        return errors

    def validate_credentials(self) -> list[str]:
        """Credentials required for live (non dry-run) trading."""
        errors = []

        if not self.hyperliquid.address:
            errors.append("HL_ADDRESS environment variable required")

        if not self.hyperliquid.secret_key:
            errors.append("HL_SECRET_KEY environment variable required")

        return errors

    def check(self):
        """Raise ConfigurationError if any strategy parameter is invalid."""
        errors = self.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))
