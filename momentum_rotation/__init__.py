"""
Relative-strength rotation engine with a trend filter.

Each scheduled cycle ranks a static basket by trailing return, keeps the
top-K whose short average sits above their long average, equal-weights them
under a leverage cap, and trades only when turnover clears a rebalance band.

Components:
- Scheduler: Triggers one cycle per trading day
- Price Window: Normalized close/high history per instrument
- Momentum Calculator: Long/short averages and trailing return
- Ranker: Stable ranking, trend filter, top-K selection
- Weight Assigner: LEVERAGE / TOP_K per selected instrument
- Rebalancer: Order deltas and the turnover gate
- Cycle Orchestrator: Runs the above and submits intents
- Market Data Loader / Execution Router: Hyperliquid adapters
"""

__version__ = "0.1.0"

from momentum_rotation.core.config import Config, ConfigurationError
from momentum_rotation.core.scheduler import Scheduler
from momentum_rotation.core.orchestrator import CycleOrchestrator, CycleResult

__all__ = [
    "Config",
    "ConfigurationError",
    "Scheduler",
    "CycleOrchestrator",
    "CycleResult",
]
