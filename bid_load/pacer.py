"""Per-user pacing between bids, and the post-login jitter."""

import asyncio
import random
import time
from typing import Optional

LOGIN_JITTER_SECONDS = 0.05


def now_ms() -> float:
    return time.monotonic() * 1000


def remaining_ms(last_event_ms: Optional[float], pace_ms: float, current_ms: float) -> float:
    """How long to wait so that pace_ms have passed since last_event_ms."""
    if last_event_ms is None or pace_ms <= 0:
        return 0.0
    return max(0.0, pace_ms - (current_ms - last_event_ms))


async def wait_if_needed(last_event_ms: Optional[float], pace_ms: float, clock=now_ms) -> float:
    """Suspend the calling user until the pace interval has elapsed. Returns the wait in ms."""
    wait = remaining_ms(last_event_ms, pace_ms, clock())
    if wait > 0:
        await asyncio.sleep(wait / 1000)
    return wait


async def login_jitter(rng=None, max_seconds: float = LOGIN_JITTER_SECONDS) -> float:
    """Short random sleep so users that logged in together do not bid in lock-step."""
    delay = (rng or random).random() * max_seconds
    await asyncio.sleep(delay)
    return delay
