"""Monitoring: cycle metrics."""

from momentum_rotation.monitoring.metrics import MetricsCollector

__all__ = ["MetricsCollector"]
