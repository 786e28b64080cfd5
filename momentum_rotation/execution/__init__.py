"""Execution: order records and the Hyperliquid order router."""

from momentum_rotation.execution.orders import OrderIntent, ExecutionReport

__all__ = ["OrderIntent", "ExecutionReport"]
