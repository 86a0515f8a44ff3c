"""
Deterministic synthetic identities for virtual users.

Virtual user N always logs in as the same pre-seeded account. When there are
more virtual users than accounts in [index_min, index_max], accounts are
reused cyclically.
"""

from dataclasses import dataclass

from bid_load.config import LoadConfig


@dataclass(frozen=True)
class Identity:
    index: int
    login: str
    password: str


def identity_index(ordinal: int, index_min: int, index_max: int) -> int:
    """Map a 1-based virtual user ordinal onto the identity pool."""
    span = index_max - index_min + 1
    if span < 1:
        # Inverted range: everyone shares index_min
        span = 1
    return index_min + ((ordinal - 1) % span)


def login_for_index(index: int, prefix: str, domain: str, suffix: str = "") -> str:
    """k6buyer007-run2@example.com style login for an index."""
    suffix = f"-{suffix}" if suffix else ""
    return f"{prefix}{index:03d}{suffix}@{domain}"


def identity_for_ordinal(ordinal: int, config: LoadConfig) -> Identity:
    index = identity_index(ordinal, config.index_min, config.effective_index_max)
    return Identity(
        index=index,
        login=login_for_index(index, config.user_prefix, config.user_domain, config.user_suffix),
        password=config.password,
    )
