"""
The poll loop: every interval, run each collector over the configured
namespaces, one after another. A slow namespace delays everything
behind it in the same cycle; cycles never overlap.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional, Sequence

from vmmig_bench.collector.base import MetricsCollector
from vmmig_bench.config import DEFAULT_POLL_INTERVAL

log = logging.getLogger(__name__)


class PollLoop:

    def __init__(
        self,
        collectors: Sequence[MetricsCollector],
        namespaces: Sequence[str],
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self._collectors = list(collectors)
        self._namespaces = tuple(namespaces)
        self._interval = interval
        self.cycles = 0

    def run_once(self):
        """One full pass over every collector."""
        started = time.monotonic()
        for collector in self._collectors:
            log.debug("Collecting from %s", collector.name())
            collector.collect(self._namespaces)
        self.cycles += 1
        log.debug("Poll cycle %d finished in %.2fs", self.cycles, time.monotonic() - started)

    def run_forever(self, stop_event: Optional[threading.Event] = None):
        log.info(
            "Starting poll loop: namespaces=%s, interval=%.0fs",
            ",".join(self._namespaces), self._interval,
        )
        stop_event = stop_event or threading.Event()

        while not stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                # next cycle is the retry
                log.exception("Poll cycle failed")
            stop_event.wait(self._interval)

    def start(self, stop_event: Optional[threading.Event] = None) -> threading.Thread:
        """Run the loop in a daemon thread and return it."""
        thread = threading.Thread(
            target=self.run_forever,
            args=(stop_event,),
            name="vmmig-poll-loop",
            daemon=True,
        )
        thread.start()
        return thread
