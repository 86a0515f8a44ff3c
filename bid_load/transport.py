"""
HTTP transport for the load generator.

Wraps a pooled requests.Session. Every call returns a Response, including
connection errors and timeouts (status 0), so callers only ever classify
results and never handle transport exceptions. Per-endpoint latencies are
collected in RequestStats for the final report.
"""

import json
import logging
import statistics
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


@dataclass
class Response:
    status: int
    body: str = ""
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    def json(self):
        """Decoded body, or None if the body is not JSON"""
        try:
            return json.loads(self.body)
        except (TypeError, ValueError):
            return None


class RequestStats:
    """Thread-safe latency and failure counters, grouped by request name."""

    def __init__(self):
        self._lock = threading.Lock()
        self._latencies: Dict[str, List[float]] = {}
        self._failures: Dict[str, int] = {}
        self._start_time = time.time()
        self._end_time: Optional[float] = None

    def record(self, name: str, elapsed_ms: float, failed: bool):
        with self._lock:
            self._latencies.setdefault(name, []).append(elapsed_ms)
            self._failures[name] = self._failures.get(name, 0) + (1 if failed else 0)

    def stop(self):
        self._end_time = time.time()

    def summary(self) -> Dict[str, dict]:
        with self._lock:
            latencies = {name: sorted(values) for name, values in self._latencies.items()}
            failures = dict(self._failures)
        elapsed = max((self._end_time or time.time()) - self._start_time, 1e-9)

        result = {}
        for name, values in latencies.items():
            count = len(values)
            result[name] = {
                "num_requests": count,
                "num_failures": failures.get(name, 0),
                "avg_ms": statistics.mean(values),
                "median_ms": statistics.median(values),
                "p95_ms": values[min(int(count * 0.95), count - 1)],
                "p99_ms": values[min(int(count * 0.99), count - 1)],
                "max_ms": values[-1],
                "rps": count / elapsed,
            }
        return result


class HttpTransport:
    """POSTs JSON to the API under test. Safe to share between threads."""

    def __init__(self, base_url: str, pool_size: int = 10, stats: Optional[RequestStats] = None):
        self.base_url = base_url.rstrip("/")
        self.stats = stats if stats is not None else RequestStats()
        self.session = requests.Session()
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=max(pool_size, 1))
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def post(self, path: str, payload: dict, headers: Optional[dict] = None, timeout: float = 300.0, name: str = None):
        url = f"{self.base_url}{path}"
        all_headers = dict(JSON_HEADERS)
        all_headers.update(headers or {})

        start_time = time.perf_counter()
        try:
            resp = self.session.post(url, json=payload, headers=all_headers, timeout=timeout)
            response = Response(status=resp.status_code, body=resp.text)
        except requests.RequestException as e:
            logger.debug("POST %s failed: %s", url, e)
            response = Response(status=0, error=f"{type(e).__name__}: {e}")
        response.elapsed_ms = (time.perf_counter() - start_time) * 1000

        failed = response.error is not None or response.status >= 400
        self.stats.record(name or path, response.elapsed_ms, failed)
        return response

    def close(self):
        self.stats.stop()
        self.session.close()
