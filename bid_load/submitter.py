"""Send one bid with the cached token and classify the result."""

import enum
from dataclasses import dataclass
from typing import Optional

from bid_load.bids import BidRequest
from bid_load.diagnostics import BID_FAILED, DiagnosticEvent, DiagnosticSink, log_event
from bid_load.errors import BidError

ACCEPTED_STATUSES = frozenset({200, 201, 202})


class Outcome(enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class BidResult:
    outcome: Outcome
    status: int
    amount: int
    error: Optional[BidError] = None


def classify(response) -> Outcome:
    if response.error is None and response.status in ACCEPTED_STATUSES:
        return Outcome.SUCCESS
    return Outcome.FAILURE


class BidSubmitter:
    """
    Posts bids for one auction. Failures are reported to the diagnostic sink
    and returned as results; nothing is retried.
    """

    def __init__(self, transport, path: str, timeout: float, sink: DiagnosticSink = log_event):
        self.transport = transport
        self.path = path
        self.timeout = timeout
        self.sink = sink

    def submit(self, token: str, bid: BidRequest, login: str = "", timeout: Optional[float] = None) -> BidResult:
        response = self.transport.post(
            self.path,
            bid.payload(),
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout if timeout is None else timeout,
            name="bid",
        )
        outcome = classify(response)
        if outcome is Outcome.SUCCESS:
            return BidResult(outcome, response.status, bid.amount)

        error = BidError(response.status, response.body, response.error)
        self.sink(DiagnosticEvent(BID_FAILED, login, error.status, error.body, error.error))
        return BidResult(outcome, response.status, bid.amount, error)
