"""
Run coordinator: launches every virtual user at once and waits for all of
them, or for the global deadline.
"""

import asyncio
import logging
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List

from bid_load.config import LoadConfig
from bid_load.diagnostics import log_event
from bid_load.driver import TERMINAL_STATES, VirtualUserDriver
from bid_load.metrics import BidMetrics, MetricsSnapshot
from bid_load.transport import HttpTransport

logger = logging.getLogger(__name__)

INTERRUPTED = "interrupted"


@dataclass
class RunResult:
    snapshot: MetricsSnapshot
    driver_states: Dict[str, int]
    timed_out: bool
    duration_s: float
    request_stats: Dict[str, dict] = field(default_factory=dict)


class RunCoordinator:
    """
    Runs config.user_count drivers concurrently, each for config.iterations bids.

    Blocking HTTP calls go through a thread pool with one worker per user, so a
    slow request only holds up the user that made it.
    """

    def __init__(self, config: LoadConfig, transport=None, sink=log_event, rng=None):
        self.config = config
        self.transport = transport
        self.sink = sink
        self.rng = rng
        self.metrics = BidMetrics()
        self.drivers: List[VirtualUserDriver] = []

    async def run(self) -> RunResult:
        self.config.validate()

        owns_transport = self.transport is None
        if owns_transport:
            self.transport = HttpTransport(self.config.base_url, pool_size=self.config.user_count)

        executor = ThreadPoolExecutor(max_workers=self.config.user_count, thread_name_prefix="vu")
        # HTTP timeouts are clipped to this, so worker threads end with the run
        deadline = time.monotonic() + self.config.max_duration
        self.drivers = [
            VirtualUserDriver(
                ordinal,
                self.config,
                self.transport,
                self.metrics,
                sink=self.sink,
                executor=executor,
                rng=self.rng,
                deadline=deadline,
            )
            for ordinal in range(1, self.config.user_count + 1)
        ]

        logger.info(
            "Starting %d virtual users x %d bids on auction %s (%s)",
            self.config.user_count,
            self.config.iterations,
            self.config.auction_id,
            self.config.base_url,
        )
        start_time = time.time()
        timed_out = False
        try:
            await asyncio.wait_for(
                asyncio.gather(*(driver.run() for driver in self.drivers)),
                timeout=self.config.max_duration,
            )
        except asyncio.TimeoutError:
            timed_out = True
            logger.warning("Max duration of %.0fs reached, unfinished users were interrupted", self.config.max_duration)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
            if owns_transport:
                self.transport.close()
        duration = time.time() - start_time

        states = Counter(
            driver.state.value if driver.state in TERMINAL_STATES else INTERRUPTED for driver in self.drivers
        )
        stats = getattr(self.transport, "stats", None)
        return RunResult(
            snapshot=self.metrics.snapshot(),
            driver_states=dict(states),
            timed_out=timed_out,
            duration_s=duration,
            request_stats=stats.summary() if stats is not None else {},
        )


def run_load_test(config: LoadConfig, transport=None, sink=log_event, rng=None) -> RunResult:
    """Blocking entry point. Raises ConfigError before any user starts."""
    config.validate()
    return asyncio.run(RunCoordinator(config, transport=transport, sink=sink, rng=rng).run())
