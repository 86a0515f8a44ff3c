"""
One simulated bidder.

A VirtualUserDriver resolves its identity, logs in once, then submits the
configured number of paced bids. Its session and timestamps belong to it
alone; the only state it shares with other drivers is the BidMetrics.

    UNIDENTIFIED -> AUTHENTICATING -> READY -> (PACING -> BIDDING)* -> DONE
                                  \\-> ABORTED (login failed, no bids)

Any unexpected error also ends the driver as ABORTED, so one broken user
never takes the rest of the run down with it.
"""

import asyncio
import enum
import functools
import logging
import time

from bid_load.bids import BidRequest, random_bid_amount
from bid_load.config import LoadConfig
from bid_load.diagnostics import LOGIN_FAILED, DiagnosticEvent, log_event
from bid_load.errors import AuthError
from bid_load.identity import identity_for_ordinal
from bid_load.metrics import BidMetrics
from bid_load.pacer import login_jitter, now_ms, wait_if_needed
from bid_load.session import Session
from bid_load.submitter import BidResult, BidSubmitter

logger = logging.getLogger(__name__)

# requests rejects a zero timeout
MIN_CALL_TIMEOUT = 0.01


class DriverState(enum.Enum):
    UNIDENTIFIED = "unidentified"
    AUTHENTICATING = "authenticating"
    READY = "ready"
    PACING = "pacing"
    BIDDING = "bidding"
    DONE = "done"
    ABORTED = "aborted"


TERMINAL_STATES = frozenset({DriverState.DONE, DriverState.ABORTED})


class VirtualUserDriver:
    def __init__(
        self,
        ordinal: int,
        config: LoadConfig,
        transport,
        metrics: BidMetrics,
        sink=log_event,
        executor=None,
        rng=None,
        deadline: float = None,
    ):
        self.ordinal = ordinal
        self.config = config
        self.transport = transport
        self.metrics = metrics
        self.sink = sink
        self.executor = executor
        self.rng = rng
        self.deadline = deadline  # time.monotonic() at which the run stops
        self.submitter = BidSubmitter(transport, config.bid_path, config.request_timeout, sink)

        self.state = DriverState.UNIDENTIFIED
        self.identity = None
        self.session = None
        self.last_bid_ms = None
        self.bids_recorded = 0

    def call_timeout(self, timeout: float) -> float:
        """Shrink a request timeout so no HTTP call outlives the run deadline."""
        if self.deadline is None:
            return timeout
        return max(min(timeout, self.deadline - time.monotonic()), MIN_CALL_TIMEOUT)

    async def _call(self, fn, *args):
        """Run a blocking transport call without stalling other drivers."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, functools.partial(fn, *args))

    async def run(self) -> DriverState:
        try:
            return await self._lifecycle()
        except Exception:
            logger.exception("VU %d crashed in state %s, aborting it", self.ordinal, self.state.value)
            self.state = DriverState.ABORTED
            return self.state

    async def _lifecycle(self) -> DriverState:
        self.identity = identity_for_ordinal(self.ordinal, self.config)
        self.session = Session(self.identity)

        self.state = DriverState.AUTHENTICATING
        try:
            await self._call(
                self.session.ensure_token,
                self.transport,
                self.config.login_path,
                self.call_timeout(self.config.login_timeout),
            )
        except AuthError as e:
            self.metrics.record_login(False)
            self.sink(DiagnosticEvent(LOGIN_FAILED, e.login, e.status, e.body, e.error))
            self.state = DriverState.ABORTED
            return self.state

        self.metrics.record_login(True)
        self.state = DriverState.READY
        await login_jitter(self.rng)

        for _ in range(self.config.iterations):
            await self.bid_once()

        self.state = DriverState.DONE
        logger.debug("VU %d (%s) done after %d bids", self.ordinal, self.identity.login, self.bids_recorded)
        return self.state

    async def bid_once(self) -> BidResult:
        self.state = DriverState.PACING
        await wait_if_needed(self.last_bid_ms, self.config.pace_ms)

        self.state = DriverState.BIDDING
        amount = random_bid_amount(self.config.min_bid, self.config.max_bid, self.config.bid_step, self.rng)
        bid = BidRequest(self.config.auction_id, amount)
        result = await self._call(
            self.submitter.submit,
            self.session.token,
            bid,
            self.identity.login,
            self.call_timeout(self.config.request_timeout),
        )

        self.metrics.record_bid(result.outcome)
        self.bids_recorded += 1
        self.last_bid_ms = now_ms()
        if self.config.think_time > 0:
            await asyncio.sleep(self.config.think_time)
        return result
