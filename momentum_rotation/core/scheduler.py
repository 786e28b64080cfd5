"""
Scheduler: Triggers rebalances once per trading day.

Fires at a fixed wall-clock time in the configured timezone (09:40
America/New_York by default) and never starts a cycle while the previous one
is still running.
"""

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from momentum_rotation.core.config import Config

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Daily rebalance scheduler.

    Days not listed in ``schedule.trading_days`` are skipped.
    """

    def __init__(self, config: Config, rebalance_callback: Callable[[], None]):
        """
        Initialize scheduler.

        Args:
            config: System configuration
            rebalance_callback: Function to call on each rebalance trigger
        """
        self.config = config
        self.rebalance_callback = rebalance_callback
        self.running = False
        self.in_flight = False
        self.last_rebalance_ts: float = 0.0
        self.tz = ZoneInfo(config.schedule.timezone)
        hour, minute = config.schedule.rebalance_at.split(":")
        self.hour = int(hour)
        self.minute = int(minute)

    def next_rebalance_time(self, now: Optional[datetime] = None) -> datetime:
        """
        Calculate next rebalance timestamp.

        Returns:
            Next rebalance datetime (in the schedule timezone)
        """
        now = (now or datetime.now(timezone.utc)).astimezone(self.tz)
        target = now.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if now >= target:
            target += timedelta(days=1)

        trading_days = set(self.config.schedule.trading_days)
        for _ in range(7):
            if target.weekday() in trading_days:
                break
            target += timedelta(days=1)
        return target

    def seconds_until_next_rebalance(self, now: Optional[datetime] = None) -> float:
        """Calculate seconds until next rebalance."""
        now = now or datetime.now(timezone.utc)
        delta = (self.next_rebalance_time(now) - now).total_seconds()
        return max(0.0, delta)

    def trigger(self) -> bool:
        """
        Run the callback once unless a cycle is already in flight.

        Returns:
            True if the callback ran
        """
        if self.in_flight:
            logger.warning("[Scheduler] Previous cycle still running; skipping trigger")
            return False

        self.in_flight = True
        try:
            self.rebalance_callback()
            self.last_rebalance_ts = time.time()
        finally:
            self.in_flight = False
        return True

    def run_forever(self):
        """
        Run scheduler loop indefinitely.

        Blocks until stopped. Calls rebalance_callback at each trigger.
        """
        self.running = True
        logger.info(
            f"[Scheduler] Started. Daily at {self.config.schedule.rebalance_at} {self.config.schedule.timezone}"
        )
        next_time = self.next_rebalance_time()

        while self.running:
            try:
                sleep_sec = max(0.0, (next_time - datetime.now(timezone.utc)).total_seconds())

                if sleep_sec > 0:
                    logger.debug(f"[Scheduler] Next rebalance in {sleep_sec:.0f}s at {next_time.isoformat()}")
                    time.sleep(min(sleep_sec, 60))  # Wake up every minute to check
                    continue

                logger.info(f"[Scheduler] Triggering rebalance at {datetime.now(self.tz).isoformat()}")
                try:
                    self.trigger()
                except Exception as e:
                    logger.exception(f"[Scheduler] ERROR during rebalance: {e}")

                next_time = self.next_rebalance_time()

            except KeyboardInterrupt:
                logger.info("[Scheduler] Interrupted by user")
                self.running = False
                break

    def stop(self):
        """Stop the scheduler loop."""
        logger.info("[Scheduler] Stopping...")
        self.running = False
