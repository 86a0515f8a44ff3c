"""Shared fixtures: a fast config and a scripted in-memory transport."""

import pytest

from bid_load.config import LoadConfig
from tests.fakes import FakeTransport


@pytest.fixture
def config():
    return LoadConfig(
        base_url="http://auction.test",
        auction_id=42,
        user_count=3,
        iterations=2,
        think_time=0,
        min_bid=250,
        max_bid=10_000,
        bid_step=250,
        max_duration=30,
    )


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def events():
    """Collects diagnostic events; pass events.append as the sink."""
    return []
