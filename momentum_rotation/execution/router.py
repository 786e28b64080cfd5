"""
Execution Router

Cancels stale open orders per coin and submits market orders for signed
quantity deltas. Sizes are rounded to the asset's szDecimals; client order
ids are deterministic within a cycle.
"""

import hashlib
import logging
import time
from decimal import Decimal
from typing import Dict, List, Optional

from hyperliquid.exchange import Exchange
from hyperliquid.info import Info
from hyperliquid.utils.types import Cloid

from momentum_rotation.core.config import Config
from momentum_rotation.core.interfaces import OrderExecutor
from momentum_rotation.execution.orders import ExecutionReport, OrderIntent
from momentum_rotation.utils.precision import format_size

logger = logging.getLogger(__name__)


class ExecutionRouter(OrderExecutor):
    """
    Order routing for Hyperliquid.

    In dry-run mode nothing is sent; intents are logged and reported as
    "skipped".
    """

    def __init__(self, config: Config, exchange: Optional[Exchange], info: Info, dry_run: bool = False):
        """
        Initialize execution router.

        Args:
            config: System configuration
            exchange: Hyperliquid Exchange instance (may be None in dry-run)
            info: Hyperliquid Info instance
        """
        self.config = config
        self.exchange = exchange
        self.info = info
        self.dry_run: bool = dry_run
        self.asset_map: Dict[str, Dict] = {}  # coin -> {asset, szDecimals}
        self.cycle_id: Optional[str] = None
        self.api_error_count: int = 0
        self.reports: List[ExecutionReport] = []

    def start_cycle(self, cycle_id: str):
        """Reset per-cycle state and refresh asset metadata."""
        self.cycle_id = cycle_id
        self.reports = []
        self.set_asset_map(self.info.meta())

    def set_asset_map(self, meta: Dict):
        """
        Set asset metadata for size formatting.

        Args:
            meta: Universe metadata from meta()
        """
        self.asset_map = {
            u["name"]: {
                "asset": i,
                "szDecimals": u["szDecimals"],
            }
            for i, u in enumerate(meta.get("universe", []))
        }

    def cancel_open_orders(self, instrument: str) -> None:
        """Cancel every resting order for one coin."""
        addr = self.config.hyperliquid.address
        open_orders = self._with_retries(self.info.open_orders, addr)
        cancel_reqs = [
            {"coin": oo["coin"], "oid": int(oo["oid"])}
            for oo in open_orders or []
            if oo.get("coin") == instrument and oo.get("oid") is not None
        ]
        if not cancel_reqs:
            return
        if not self.dry_run:
            self._with_retries(self.exchange.bulk_cancel, cancel_reqs)
        logger.info(f"[ExecutionRouter] Cancelled {len(cancel_reqs)} open orders for {instrument}")

    def submit_order(self, instrument: str, delta_quantity: Decimal) -> ExecutionReport:
        """Send a market order for ``delta_quantity`` (positive buys)."""
        intent = OrderIntent(instrument, delta_quantity)
        sz_dec = self.asset_map.get(instrument, {}).get("szDecimals", 0)
        size_str = format_size(abs(delta_quantity), sz_dec)
        sz = float(size_str)
        if sz <= 0:
            report = ExecutionReport(instrument, status="skipped", size=size_str, error_code="zero_size")
            self.reports.append(report)
            return report

        cloid = self._make_cloid(intent, size_str)
        if self.dry_run:
            logger.info(f"[ExecutionRouter] DRY RUN {intent.side} {size_str} {instrument}")
            report = ExecutionReport(instrument, status="skipped", size=size_str, cloid=cloid)
            self.reports.append(report)
            return report

        try:
            resp = self._with_retries(
                self.exchange.market_open,
                instrument,
                intent.is_buy,
                sz,
                None,
                self.config.execution.slippage,
                Cloid.from_str(cloid),
            )
        except Exception as e:
            logger.error(f"[ExecutionRouter] {instrument} order failed: {e}")
            report = ExecutionReport(
                instrument, status="rejected", size=size_str, cloid=cloid,
                error_code="order_error", error_msg=str(e),
            )
            self.reports.append(report)
            return report

        status = "pending"
        if isinstance(resp, dict) and resp.get("status") != "ok":
            status = "rejected"
        logger.info(f"[ExecutionRouter] {intent.side} {size_str} {instrument} → {status}")
        report = ExecutionReport(instrument, status=status, size=size_str, cloid=cloid)
        self.reports.append(report)
        return report

    # ------------------------
    # Helpers
    # ------------------------

    def _make_cloid(self, intent: OrderIntent, size_str: str) -> str:
        """Create deterministic client order id for idempotency per cycle."""
        base = f"{self.cycle_id or ''}|{intent.instrument}|{int(intent.is_buy)}|{size_str}"
        return "0x" + hashlib.sha256(base.encode()).hexdigest()[:32]

    def _with_retries(self, func, *args, **kwargs):
        """Call exchange function with retries/backoff and error tracking."""
        max_attempts = self.config.execution.max_attempts
        delay = self.config.execution.retry_delay_sec
        for attempt in range(1, max_attempts + 1):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                self.api_error_count += 1
                if attempt == max_attempts:
                    raise
                logger.warning(f"[ExecutionRouter] Attempt {attempt} failed: {e}; retrying in {delay}s")
                time.sleep(delay)
                delay *= 2
