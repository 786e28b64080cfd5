"""
Cycle Orchestrator

Runs one rebalance cycle:
1. Per instrument (registration order): skip if the market is closed,
   cancel stale open orders, fetch history, compute the PriceState
2. Rank ready instruments and select winners
3. Assign target weights
4. Size orders against the portfolio snapshot and apply the rebalance band
5. Submit every intent, or none
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from momentum_rotation.core.config import Config
from momentum_rotation.core.interfaces import MarketData, OrderExecutor
from momentum_rotation.data.window import PriceWindow
from momentum_rotation.monitoring.metrics import MetricsCollector
from momentum_rotation.risk.rebalancer import PortfolioSnapshot, RebalancePlan, Rebalancer
from momentum_rotation.risk.weights import WeightAssigner
from momentum_rotation.signals.momentum import MomentumCalculator, PriceState
from momentum_rotation.signals.ranking import RankEntry, Ranker
from momentum_rotation.signals.streaming import StreamingAverages
from momentum_rotation.utils.precision import to_decimal

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """What one cycle saw and decided."""

    started_at: datetime
    entries: List[RankEntry] = field(default_factory=list)  # Instruments processed, registration order
    ranked: List[RankEntry] = field(default_factory=list)
    selected: List[RankEntry] = field(default_factory=list)
    weights: Dict[str, Decimal] = field(default_factory=dict)
    plan: Optional[RebalancePlan] = None
    skipped: List[str] = field(default_factory=list)  # Market closed

    @property
    def intents(self):
        return self.plan.intents if self.plan else []


class CycleOrchestrator:
    """
    Wires PriceWindow → MomentumCalculator → Ranker → WeightAssigner →
    Rebalancer for one scheduled tick.

    Cycles must not overlap; the scheduler guarantees that.
    """

    def __init__(
        self,
        config: Config,
        market_data: MarketData,
        executor: OrderExecutor,
        metrics: Optional[MetricsCollector] = None,
    ):
        config.check()
        self.config = config
        self.market_data = market_data
        self.executor = executor
        self.metrics = metrics or MetricsCollector(config)

        self.universe: List[str] = list(config.universe.symbols)
        self.calculator = MomentumCalculator(config.signal)
        self.ranker = Ranker(config.allocation.top_k, config.allocation.selection_policy)
        self.weight_assigner = WeightAssigner(
            config.allocation.top_k, to_decimal(config.allocation.leverage)
        )
        self.rebalancer = Rebalancer(
            to_decimal(config.rebalance.min_pct_diff), config.rebalance.quantity_decimals
        )
        self.streaming: Optional[StreamingAverages] = None
        if config.signal.averaging == "streaming":
            self.streaming = StreamingAverages(config.signal)

    def _load_window(self, instrument: str, now: datetime) -> PriceWindow:
        span = timedelta(days=self.config.signal.history_span_days)
        samples = self.market_data.fetch_history(instrument, span, self.config.schedule.resolution)
        return PriceWindow.from_samples(
            instrument,
            samples,
            span=span,
            end=now,
            trading_days=self.config.schedule.trading_days,
        )

    def _compute_state(self, window: PriceWindow) -> PriceState:
        state = self.calculator.compute(window)
        if self.streaming is None:
            return state

        instrument = window.instrument
        if self.market_data.current_holdings(instrument) == 0:
            self.streaming.reset(instrument)
        long_avg, short_avg = self.streaming.update(window)
        n = self.streaming.count(instrument)
        ready = state.is_ready and n >= self.config.signal.min_samples
        return PriceState(
            long_average=long_avg,
            short_average=short_avg,
            trailing_return=state.trailing_return,
            is_ready=ready,
            sample_count=state.sample_count,
        )

    def run_cycle(self, now: Optional[datetime] = None) -> CycleResult:
        now = now or datetime.now(timezone.utc)
        result = CycleResult(started_at=now)
        logger.info(f"[Orchestrator] Cycle start {now.isoformat()} ({len(self.universe)} instruments)")

        for instrument in self.universe:
            if not self.market_data.is_market_open(instrument, now):
                logger.info(f"[Orchestrator] {instrument}: market closed, skipping")
                result.skipped.append(instrument)
                continue

            self.executor.cancel_open_orders(instrument)

            window = self._load_window(instrument, now)
            state = self._compute_state(window)
            if not state.is_ready:
                logger.debug(
                    f"[Orchestrator] {instrument}: insufficient history ({state.sample_count} samples)"
                )
            result.entries.append(RankEntry(instrument, state))

        result.ranked = self.ranker.rank(result.entries)
        if not result.ranked:
            logger.info("[Orchestrator] No ready instruments; no orders this cycle")
            self.metrics.record_empty_cycle()
            return result

        result.selected = self.ranker.select(result.ranked)
        result.weights = self.weight_assigner.assign(result.entries, result.selected)
        logger.info(
            "[Orchestrator] Ranking: "
            + ", ".join(f"{e.instrument}={e.state.trailing_return:.4f}" for e in result.ranked)
        )
        logger.info(f"[Orchestrator] Selected: {[e.instrument for e in result.selected]}")

        snapshot = self.capture_snapshot(result.weights)
        result.plan = self.rebalancer.plan(result.weights, snapshot)

        for intent in result.plan.intents:
            self.executor.submit_order(intent.instrument, intent.delta_quantity)

        self.metrics.record_cycle(
            n_ready=len(result.ranked),
            turnover=result.plan.turnover,
            n_intents=len(result.plan.intents),
            gated=result.plan.gated,
        )
        logger.info(f"[Orchestrator] Cycle complete: {len(result.plan.intents)} orders submitted")
        return result

    def capture_snapshot(self, instruments) -> PortfolioSnapshot:
        holdings = {i: to_decimal(self.market_data.current_holdings(i)) for i in instruments}
        prices = {i: to_decimal(self.market_data.current_price(i)) for i in instruments}
        liquidity = to_decimal(self.market_data.total_liquidity())
        return PortfolioSnapshot(holdings=holdings, prices=prices, liquidity=liquidity)
