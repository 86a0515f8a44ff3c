"""Exception types raised by the load generator."""

from typing import Optional

BODY_PREVIEW_CHARS = 200


def truncate_body(body, limit: int = BODY_PREVIEW_CHARS) -> str:
    """Shorten a response body for log lines."""
    return str(body)[:limit]


class LoadTestError(Exception):
    """Base class for load generator errors"""


class ConfigError(LoadTestError):
    """Invalid or missing configuration. Fatal for the whole run."""


class AuthError(LoadTestError):
    """Login did not return 200 with a token. Fatal for one virtual user only."""

    def __init__(self, login: str, status: int, body: str = "", error: Optional[str] = None):
        self.login = login
        self.status = status
        self.body = truncate_body(body)
        self.error = error
        super().__init__(f"login failed for {login}: status={status} error={error} body={self.body}")


class BidError(LoadTestError):
    """A bid was not accepted, or the request errored or timed out."""

    def __init__(self, status: int, body: str = "", error: Optional[str] = None):
        self.status = status
        self.body = truncate_body(body)
        self.error = error
        super().__init__(f"bid rejected: status={status} error={error} body={self.body}")
