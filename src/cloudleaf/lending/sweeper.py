"""Periodic expiry sweep.

Expired loans are returned by a sweep that runs every ``interval`` seconds.
Everything runs on the caller's thread: the interactive shell calls
:meth:`ExpirySweeper.maybe_run` between commands, and ``cloudleaf sweep
--watch`` drives :meth:`ExpirySweeper.run_forever`. A sweep never overlaps
a user action.
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..db.models import ensure_utc, utcnow
from .manager import LendingManager
from .models import Transaction

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Runs :meth:`LendingManager.sweep_expired` at a fixed interval."""

    def __init__(
        self,
        manager: LendingManager,
        interval: Optional[float] = None,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the sweeper.

        Args:
            manager: Lending manager to sweep
            interval: Seconds between sweeps (default: configured interval)
            clock: Returns the current time
            sleep: Blocks for the given number of seconds
        """
        self.manager = manager
        self.interval = interval if interval is not None else manager.config.sweep_interval
        self.clock = clock
        self.sleep = sleep
        self.last_run: datetime = ensure_utc(clock())
        self.runs = 0

    @property
    def next_run(self) -> datetime:
        return self.last_run + timedelta(seconds=self.interval)

    def is_due(self, now: Optional[datetime] = None) -> bool:
        """Check if a full interval has passed since the last sweep."""
        return ensure_utc(now or self.clock()) >= self.next_run

    def tick(self, now: Optional[datetime] = None) -> list[Transaction]:
        """Sweep unconditionally and restart the interval."""
        now = ensure_utc(now or self.clock())
        transactions = self.manager.sweep_expired(now)
        self.last_run = now
        self.runs += 1
        if transactions:
            logger.info("Expiry sweep returned %d book(s)", len(transactions))
        return transactions

    def maybe_run(self, now: Optional[datetime] = None) -> list[Transaction]:
        """Sweep only if the interval has elapsed."""
        now = ensure_utc(now or self.clock())
        if not self.is_due(now):
            return []
        return self.tick(now)

    def run_forever(
        self,
        max_ticks: Optional[int] = None,
        on_tick: Optional[Callable[[list[Transaction]], None]] = None,
    ) -> int:
        """Sleep one interval, sweep, repeat.

        Args:
            max_ticks: Stop after this many sweeps (None: run until interrupted)
            on_tick: Called with each sweep's transactions

        Returns:
            Number of sweeps performed
        """
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            self.sleep(self.interval)
            transactions = self.tick()
            ticks += 1
            if on_tick:
                on_tick(transactions)
        return ticks
