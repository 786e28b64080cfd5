"""
Metrics Collector

Tracks per-cycle turnover, ready-instrument counts, emitted intents and how
often the rebalance band suppressed trading.
"""

from decimal import Decimal

from momentum_rotation.core.config import Config


class MetricsCollector:
    """Collects cycle metrics in memory."""

    def __init__(self, config: Config):
        self.config = config
        self.metrics = {}

    def _append(self, key: str, value):
        arr = self.metrics.get(key, [])
        arr.append(value)
        self.metrics[key] = arr

    def record_cycle(self, n_ready: int, turnover: Decimal, n_intents: int, gated: bool):
        if not self.config.monitoring.metrics_enabled:
            return
        self.metrics["cycles"] = self.metrics.get("cycles", 0) + 1
        self._append("ready", n_ready)
        self._append("turnover", float(turnover))
        self._append("intents", n_intents)
        if gated:
            self.metrics["gated_cycles"] = self.metrics.get("gated_cycles", 0) + 1

    def record_empty_cycle(self):
        if not self.config.monitoring.metrics_enabled:
            return
        self.metrics["cycles"] = self.metrics.get("cycles", 0) + 1
        self.metrics["empty_cycles"] = self.metrics.get("empty_cycles", 0) + 1

    def snapshot(self) -> dict:
        return dict(self.metrics)
