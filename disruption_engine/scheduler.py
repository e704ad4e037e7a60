# disruption_engine/scheduler.py
"""
Periodic simulation driver.

A daemon thread that advances flight lifecycles every tick and, every
chaos interval, delays one random open flight. Both go through the
service, so they queue behind any trigger already in progress.
"""

import threading
import time
from typing import Any, Dict, Optional

from .logging import get_logger
from .service import DisruptionService

logger = get_logger(__name__)


class SimulationScheduler:
    """
    Lifecycle ticks plus autonomous random chaos.

    Args:
        service: Engine boundary to call
        lifecycle_interval: Seconds between lifecycle ticks
        chaos_interval: Seconds between random triggers; 0 disables chaos
    """

    def __init__(
        self,
        service: DisruptionService,
        lifecycle_interval: float = 10.0,
        chaos_interval: float = 60.0,
    ):
        self.service = service
        self.lifecycle_interval = lifecycle_interval
        self.chaos_interval = chaos_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_chaos = time.monotonic()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._last_chaos = time.monotonic()
        self._thread = threading.Thread(
            target=self._loop,
            name="simulation-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "scheduler_started",
            lifecycle_interval=self.lifecycle_interval,
            chaos_interval=self.chaos_interval,
        )

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("scheduler_stopped")

    def run_once(self, chaos: bool = False) -> Dict[str, Any]:
        """One tick: lifecycle first, then a random trigger if asked."""
        summary: Dict[str, Any] = {}
        lifecycle = self.service.advance_lifecycle()
        summary["transitions"] = len(lifecycle.extra.get("transitions", []))
        if chaos:
            outcome = self.service.trigger_random()
            summary["chaos_events"] = len(outcome.events)
        return summary

    def _chaos_due(self) -> bool:
        if self.chaos_interval <= 0:
            return False
        return time.monotonic() - self._last_chaos >= self.chaos_interval

    def _loop(self) -> None:
        while not self._stop.wait(self.lifecycle_interval):
            chaos = self._chaos_due()
            if chaos:
                self._last_chaos = time.monotonic()
            try:
                summary = self.run_once(chaos=chaos)
                logger.debug("scheduler_tick", **summary)
            except Exception:
                # The next tick retries; the failed one was rolled back
                logger.exception("scheduler_tick_failed")
