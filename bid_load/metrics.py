"""Process-wide bid counters shared by all virtual users."""

import threading
from dataclasses import asdict, dataclass

from bid_load.submitter import Outcome


@dataclass(frozen=True)
class MetricsSnapshot:
    bids_success: int = 0
    bids_failed: int = 0
    logins_ok: int = 0
    logins_failed: int = 0

    @property
    def bids_total(self) -> int:
        return self.bids_success + self.bids_failed

    @property
    def success_rate(self) -> float:
        if not self.bids_total:
            return 0.0
        return self.bids_success / self.bids_total

    def to_dict(self) -> dict:
        data = asdict(self)
        data["bids_total"] = self.bids_total
        data["success_rate"] = self.success_rate
        return data


class BidMetrics:
    """Counters guarded by a lock. Increments commute, so order across users does not matter."""

    def __init__(self):
        self._lock = threading.Lock()
        self._bids_success = 0
        self._bids_failed = 0
        self._logins_ok = 0
        self._logins_failed = 0

    def record_bid(self, outcome: Outcome):
        with self._lock:
            if outcome is Outcome.SUCCESS:
                self._bids_success += 1
            else:
                self._bids_failed += 1

    def record_login(self, ok: bool):
        with self._lock:
            if ok:
                self._logins_ok += 1
            else:
                self._logins_failed += 1

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                bids_success=self._bids_success,
                bids_failed=self._bids_failed,
                logins_ok=self._logins_ok,
                logins_failed=self._logins_failed,
            )
