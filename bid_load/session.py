"""
Login and per-user token caching.

Each virtual user owns one Session. The token is fetched on first use and
reused for every bid of that user; it is never refreshed.
"""

from typing import Optional

from bid_load.errors import AuthError
from bid_load.identity import Identity

# Checked in order, first non-empty string wins.
TOKEN_FIELDS = (
    ("data", "access_token"),
    ("data", "accessToken"),
    ("data", "token"),
    ("access_token",),
    ("token",),
    ("authorization", "token"),
)


def extract_token(body) -> Optional[str]:
    """Find the access token in a login response body."""
    for path in TOKEN_FIELDS:
        value = body
        for key in path:
            if not isinstance(value, dict):
                value = None
                break
            value = value.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def login(transport, identity: Identity, path: str, timeout: float) -> str:
    """Exchange credentials for a token. Raises AuthError unless status is 200 and a token is present."""
    response = transport.post(
        path,
        {"email": identity.login, "password": identity.password},
        timeout=timeout,
        name="login",
    )
    token = extract_token(response.json())
    if response.status != 200 or not token:
        raise AuthError(identity.login, response.status, response.body, response.error)
    return token


class Session:
    def __init__(self, identity: Identity):
        self.identity = identity
        self.token: Optional[str] = None
        self.login_attempts = 0

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def ensure_token(self, transport, path: str, timeout: float) -> str:
        """Log in once; later calls return the cached token."""
        if self.token is None:
            self.login_attempts += 1
            self.token = login(transport, self.identity, path, timeout)
        return self.token
