"""
Failure events raised while the load test runs.

Drivers never print directly; they hand a DiagnosticEvent to a sink. The
default sink logs it. Tests pass a list's append method instead.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

LOGIN_FAILED = "login_failed"
BID_FAILED = "bid_failed"


@dataclass(frozen=True)
class DiagnosticEvent:
    kind: str
    login: str
    status: int
    body: str = ""
    error: Optional[str] = None


DiagnosticSink = Callable[[DiagnosticEvent], None]


def log_event(event: DiagnosticEvent):
    if event.kind == LOGIN_FAILED:
        logger.warning("Login failed email=%s status=%s error=%s body=%s", event.login, event.status, event.error, event.body)
    else:
        logger.warning("Bid failed email=%s status=%s error=%s body=%s", event.login, event.status, event.error, event.body)
