"""
The Locust scenario, run headless in its own process against a local stub.

Locust monkey-patches the interpreter with gevent on import, so it is never
imported into the test process itself.
"""

import importlib.util
import os
import subprocess
import sys
import time

import pytest

from tests.stub_server import AuctionStub

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LOCUSTFILE = os.path.join(ROOT, "load-tests", "locustfile.py")

pytestmark = pytest.mark.skipif(importlib.util.find_spec("locust") is None, reason="locust not installed")


def run_locust(stub, users=2, iterations=2):
    env = {
        **os.environ,
        "PYTHONPATH": ROOT,
        "PYTHONUNBUFFERED": "1",
        "BASE_URL": stub.url,
        "LELANG_ID": "42",
        "USER_COUNT": str(users),
        "ITERATIONS": str(iterations),
        "THINK_TIME": "0",
    }
    cmd = [
        sys.executable, "-m", "locust",
        "-f", LOCUSTFILE,
        "--headless",
        "-u", str(users),
        "-r", str(users),
        "-t", "30s",
        "--host", stub.url,
    ]
    start = time.monotonic()
    proc = subprocess.run(cmd, cwd=ROOT, env=env, capture_output=True, text=True, timeout=90)
    return proc, time.monotonic() - start


@pytest.fixture
def stub():
    server = AuctionStub(rejected_logins={"k6buyer001@example.com"}).start()
    yield server
    server.stop()


def test_failed_login_stops_user_and_others_bid_exactly_iterations(stub):
    proc, elapsed = run_locust(stub, users=2, iterations=2)
    output = proc.stdout + proc.stderr

    assert "Logins ok/failed: 1/1" in output, output
    assert "bids_success: 2" in output, output
    assert "bids_failed:  0" in output, output
    assert "Login failed email=k6buyer001@example.com status=401" in output, output

    # one login per user, no bids from the rejected one
    assert sorted(stub.logins) == ["k6buyer001@example.com", "k6buyer002@example.com"]
    assert len(stub.bids) == 2
    assert {b["authorization"] for b in stub.bids} == {"Bearer tok-k6buyer002@example.com"}
    assert {b["payload"]["lelang_id"] for b in stub.bids} == {42}

    # the run quits once every user stopped, well before -t 30s
    assert elapsed < 25


def test_every_user_logs_in_once(stub):
    stub.rejected_logins.clear()

    proc, elapsed = run_locust(stub, users=3, iterations=3)
    output = proc.stdout + proc.stderr

    assert "Logins ok/failed: 3/0" in output, output
    assert "bids_success: 9" in output, output
    assert len(stub.logins) == len(set(stub.logins)) == 3
    assert len(stub.bids) == 9
    assert elapsed < 25
