"""
Locust load test for the auction bidding API

Same workflow as `python -m bid_load`, driven by Locust's scheduler and
statistics instead: every simulated user logs in once, then places
ITERATIONS paced bids on auction LELANG_ID and stops. When every user has
stopped, the run quits on its own.

Configuration is read from the same environment variables (see
bid_load.config.ENV_FIELDS).

Usage:
    LELANG_ID=42 USER_COUNT=100 locust -f load-tests/locustfile.py --headless -u 100 -r 10 --host http://localhost:3333
"""

import itertools
import logging
import random
import time

import gevent
from locust import constant, events, task
from locust.contrib.fasthttp import FastHttpUser
from locust.exception import StopUser

from bid_load.bids import BidRequest, random_bid_amount
from bid_load.config import LoadConfig
from bid_load.diagnostics import BID_FAILED, LOGIN_FAILED, DiagnosticEvent, log_event
from bid_load.errors import ConfigError, truncate_body
from bid_load.identity import identity_for_ordinal
from bid_load.metrics import BidMetrics
from bid_load.pacer import LOGIN_JITTER_SECONDS, now_ms, remaining_ms
from bid_load.session import extract_token
from bid_load.submitter import ACCEPTED_STATUSES, Outcome
from bid_load.transport import JSON_HEADERS

logger = logging.getLogger(__name__)

CONFIG = LoadConfig.from_env()
metrics = BidMetrics()
_ordinals = itertools.count(1)
_finished_users = itertools.count(1)


class AuctionBidder(FastHttpUser):
    """
    One bidder: login once, ITERATIONS bids at least USER_PACE_MS apart.
    A failed login stops the user without bidding.
    """

    wait_time = constant(CONFIG.think_time)
    host = CONFIG.base_url
    # FastHttpSession has no per-request timeout, so login and bids share one.
    network_timeout = max(CONFIG.login_timeout, CONFIG.request_timeout)

    def on_start(self):
        self.identity = identity_for_ordinal(next(_ordinals), CONFIG)
        self.token = None
        self.bids_placed = 0
        self.last_bid_ms = None

        with self.client.post(
            CONFIG.login_path,
            json={"email": self.identity.login, "password": self.identity.password},
            headers=JSON_HEADERS,
            catch_response=True,
            name="login",
        ) as response:
            try:
                token = extract_token(response.json())
            except (TypeError, ValueError):
                token = None
            if response.status_code == 200 and token:
                response.success()
            else:
                token = None
                response.failure(f"login ok & token: status {response.status_code}")

        if token is None:
            metrics.record_login(False)
            log_event(
                DiagnosticEvent(LOGIN_FAILED, self.identity.login, response.status_code, truncate_body(response.text))
            )
            return

        metrics.record_login(True)
        self.token = token
        time.sleep(random.random() * LOGIN_JITTER_SECONDS)

    @task
    def place_bid(self):
        if self.token is None:
            self.finish()

        wait = remaining_ms(self.last_bid_ms, CONFIG.pace_ms, now_ms())
        if wait > 0:
            time.sleep(wait / 1000)

        bid = BidRequest(CONFIG.auction_id, random_bid_amount(CONFIG.min_bid, CONFIG.max_bid, CONFIG.bid_step))
        with self.client.post(
            CONFIG.bid_path,
            json=bid.payload(),
            headers={**JSON_HEADERS, "Authorization": f"Bearer {self.token}"},
            catch_response=True,
            name="bid",
        ) as response:
            if response.status_code in ACCEPTED_STATUSES:
                metrics.record_bid(Outcome.SUCCESS)
                response.success()
            else:
                metrics.record_bid(Outcome.FAILURE)
                response.failure(f"Bid failed: {response.status_code}")
                log_event(
                    DiagnosticEvent(BID_FAILED, self.identity.login, response.status_code, truncate_body(response.text))
                )

        self.bids_placed += 1
        self.last_bid_ms = now_ms()
        if self.bids_placed >= CONFIG.iterations:
            self.finish()

    def finish(self):
        """Stop this user; the last one to stop ends the whole run."""
        runner = self.environment.runner
        target = getattr(runner, "target_user_count", None) or CONFIG.user_count
        if next(_finished_users) >= target:
            # quit() kills user greenlets, this one included
            gevent.spawn(runner.quit)
        raise StopUser()


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("Starting auction bid load test")
    print("=" * 60 + "\n")
    try:
        CONFIG.validate()
    except ConfigError as e:
        logger.error("%s", e)
        environment.runner.quit()


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    snapshot = metrics.snapshot()

    print("\n" + "=" * 60)
    print("Load test completed")
    print("=" * 60 + "\n")

    print(f"Logins ok/failed: {snapshot.logins_ok}/{snapshot.logins_failed}")
    print(f"bids_success: {snapshot.bids_success}")
    print(f"bids_failed:  {snapshot.bids_failed}")
    print(f"bid_ok rate:  {snapshot.success_rate:.2%}")

    stats = environment.stats
    print(f"Total requests: {stats.total.num_requests}")
    print(f"Total failures: {stats.total.num_failures}")
    print(f"Median response time: {stats.total.median_response_time}ms")
    print(f"95th percentile: {stats.total.get_response_time_percentile(0.95)}ms")
    print(f"99th percentile: {stats.total.get_response_time_percentile(0.99)}ms")
    print(f"Requests per second: {stats.total.total_rps:.2f}")
