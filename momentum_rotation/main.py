"""
Main entry point for the rotation engine.

Wires Hyperliquid clients into the cycle orchestrator and runs it on the
daily schedule (or once with --once).
"""

import argparse
import hashlib
import logging
import sys
import time
from pathlib import Path

from dotenv import load_dotenv
from eth_account import Account
from hyperliquid.exchange import Exchange
from hyperliquid.info import Info

from momentum_rotation.core.config import Config, ConfigurationError
from momentum_rotation.core.orchestrator import CycleOrchestrator
from momentum_rotation.core.scheduler import Scheduler
from momentum_rotation.data.loader import MarketDataLoader
from momentum_rotation.execution.router import ExecutionRouter
from momentum_rotation.monitoring.metrics import MetricsCollector

logger = logging.getLogger("momentum_rotation")


def setup_logging(config: Config):
    """Console logging at the configured level, plus a file when log_dir is set."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if config.monitoring.log_dir:
        log_dir = Path(config.monitoring.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / "rotation.log"))
    logging.basicConfig(
        level=getattr(logging, config.monitoring.log_level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
        force=True,
    )


class RotationTradingSystem:
    """
    Live wiring of the rotation engine.

    Coordinates clients, orchestrator and scheduler.
    """

    def __init__(self, config: Config, dry_run: bool = False):
        """
        Initialize trading system.

        Args:
            config: System configuration
            dry_run: Log orders instead of sending them
        """
        self.config = config

        errors = config.validate()
        if not dry_run:
            errors += config.validate_credentials()
        if errors:
            raise ConfigurationError("; ".join(errors))

        logger.info(f"[Init] Starting {config.hyperliquid.network} rotation engine")

        self.info = Info(config.hyperliquid.api_url, skip_ws=True)
        exchange = None
        if not dry_run:
            wallet = Account.from_key(config.hyperliquid.secret_key)
            exchange = Exchange(
                wallet, config.hyperliquid.api_url, account_address=config.hyperliquid.address
            )

        self.data_loader = MarketDataLoader(config, self.info)
        self.execution_router = ExecutionRouter(config, exchange, self.info, dry_run=dry_run)
        self.metrics = MetricsCollector(config)
        self.orchestrator = CycleOrchestrator(
            config, self.data_loader, self.execution_router, self.metrics
        )
        self.scheduler = Scheduler(config, self.rebalance)

        logger.info("[Init] All components initialized")

    def rebalance(self):
        """Execute one rebalance cycle with fresh account state."""
        logger.info("=" * 60)
        self.data_loader.refresh()
        cycle_id = hashlib.sha256(str(time.time()).encode()).hexdigest()[:16]
        self.execution_router.start_cycle(cycle_id)
        result = self.orchestrator.run_cycle()
        rejected = [r for r in self.execution_router.reports if r.status == "rejected"]
        if rejected:
            logger.error(f"[Rebalance] {len(rejected)} orders rejected: {[r.instrument for r in rejected]}")
        return result

    def run(self):
        """Run the trading system (blocks indefinitely)."""
        logger.info("[Main] Starting scheduler...")
        try:
            self.scheduler.run_forever()
        except KeyboardInterrupt:
            self.scheduler.stop()
            logger.info("[Main] Goodbye!")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Relative-strength rotation engine")
    parser.add_argument("--config", type=str, default="", help="Path to YAML config file")
    parser.add_argument("--dry-run", action="store_true", help="Run without placing/cancelling any orders")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    args = parser.parse_args()

    # Load .env before Config so HL_* variables are visible
    load_dotenv(dotenv_path=Path.cwd() / ".env")

    config = Config.from_yaml(args.config) if args.config else Config()
    setup_logging(config)

    try:
        system = RotationTradingSystem(config, dry_run=args.dry_run)
    except ConfigurationError as e:
        logger.error(f"[ERROR] Configuration validation failed: {e}")
        sys.exit(1)

    if args.once:
        system.rebalance()
    else:
        system.run()


if __name__ == "__main__":
    main()
