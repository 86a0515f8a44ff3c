"""
Run configuration for the bidding load test.

Values come from environment variables (LELANG_ID, USER_COUNT, BID_STEP, ...)
and may be overridden by command line flags. Once built, a LoadConfig
is immutable and shared read-only by every virtual user.
"""

import argparse
import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from bid_load.errors import ConfigError


def parse_duration_seconds(duration) -> float:
    """Parse simple duration strings like '500ms', '300s', '60m' or '1h' into seconds."""
    if isinstance(duration, (int, float)):
        return float(duration)
    duration = str(duration).strip().lower()
    try:
        if duration.endswith("ms"):
            return float(duration[:-2]) / 1000
        if duration.endswith("s"):
            return float(duration[:-1])
        if duration.endswith("m"):
            return float(duration[:-1]) * 60
        if duration.endswith("h"):
            return float(duration[:-1]) * 3600
        return float(duration)
    except ValueError:
        raise ConfigError(f"Invalid duration: {duration!r}") from None


@dataclass(frozen=True)
class LoadConfig:
    base_url: str = "http://localhost:3333"
    login_path: str = "/auth/login"
    bid_path: str = "/pembeli/pengajuan-lelang"
    auction_id: Optional[int] = None

    # Identity template: <prefix><NNN>[-<suffix>]@<domain>
    user_prefix: str = "k6buyer"
    user_domain: str = "example.com"
    user_suffix: str = ""
    password: str = "Password123!"
    index_min: int = 1
    index_max: Optional[int] = None  # defaults to user_count

    user_count: int = 100
    iterations: int = 2
    pace_ms: int = 0
    think_time: float = 0.1
    login_timeout: float = 300.0
    request_timeout: float = 300.0
    max_duration: float = 3600.0

    min_bid: int = 250
    max_bid: int = 10_000_000
    bid_step: int = 250

    report_dir: str = "reports"
    chart: bool = True

    @property
    def effective_index_max(self) -> int:
        return self.user_count if self.index_max is None else self.index_max

    def validate(self) -> "LoadConfig":
        """Raise ConfigError if the run cannot start. Returns self for chaining."""
        if not self.auction_id or self.auction_id <= 0:
            raise ConfigError("Auction id is required and must be positive (set LELANG_ID or --auction-id)")
        for name in ("user_count", "iterations", "min_bid", "max_bid", "bid_step"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {getattr(self, name)}")
        if self.min_bid > self.max_bid:
            raise ConfigError(f"min_bid ({self.min_bid}) is greater than max_bid ({self.max_bid})")
        if self.pace_ms < 0:
            raise ConfigError(f"pace_ms must not be negative, got {self.pace_ms}")
        if self.think_time < 0:
            raise ConfigError(f"think_time must not be negative, got {self.think_time}")
        for name in ("login_timeout", "request_timeout", "max_duration"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")
        return self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "LoadConfig":
        """Build a config from environment variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        values = {}
        for env_name, field_name, convert in ENV_FIELDS:
            raw = environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                values[field_name] = convert(raw)
            except ValueError:
                raise ConfigError(f"{env_name} has an invalid value: {raw!r}") from None
        return cls(**values)


ENV_FIELDS = [
    ("BASE_URL", "base_url", str),
    ("USER_LOGIN_PATH", "login_path", str),
    ("BID_PATH", "bid_path", str),
    ("LELANG_ID", "auction_id", int),
    ("USER_PREFIX", "user_prefix", str),
    ("USER_DOMAIN", "user_domain", str),
    ("USER_EMAIL_SUFFIX", "user_suffix", str),
    ("USER_PASSWORD", "password", str),
    ("USER_COUNT", "user_count", int),
    ("USER_INDEX_MIN", "index_min", int),
    ("USER_INDEX_MAX", "index_max", int),
    ("USER_PACE_MS", "pace_ms", int),
    ("ITERATIONS", "iterations", int),
    ("THINK_TIME", "think_time", parse_duration_seconds),
    ("LOGIN_TIMEOUT", "login_timeout", parse_duration_seconds),
    ("REQ_TIMEOUT", "request_timeout", parse_duration_seconds),
    ("MAX_DURATION", "max_duration", parse_duration_seconds),
    ("MIN_BID", "min_bid", int),
    ("MAX_BID", "max_bid", int),
    ("BID_STEP", "bid_step", int),
    ("REPORT_DIR", "report_dir", str),
]


def build_parser(defaults: LoadConfig = None) -> argparse.ArgumentParser:
    """Command line flags. Defaults come from the environment."""
    defaults = defaults or LoadConfig.from_env()
    parser = argparse.ArgumentParser(
        description="Simulate concurrent bidders: login once per user, then submit paced randomized bids."
    )
    parser.add_argument("--base-url", type=str, default=defaults.base_url, help="API base URL (env: BASE_URL)")
    parser.add_argument("--login-path", type=str, default=defaults.login_path, help="Login endpoint path")
    parser.add_argument("--bid-path", type=str, default=defaults.bid_path, help="Bid endpoint path")
    parser.add_argument(
        "--auction-id", type=int, default=defaults.auction_id, help="Auction (lelang) id to bid on (env: LELANG_ID, required)"
    )
    parser.add_argument("--user-prefix", type=str, default=defaults.user_prefix, help="Login prefix, e.g. k6buyer")
    parser.add_argument("--user-domain", type=str, default=defaults.user_domain, help="Login email domain")
    parser.add_argument("--user-suffix", type=str, default=defaults.user_suffix, help="Optional login suffix")
    parser.add_argument("--password", type=str, default=defaults.password, help="Password shared by all test users")
    parser.add_argument("--index-min", type=int, default=defaults.index_min, help="First identity index (default: 1)")
    parser.add_argument(
        "--index-max", type=int, default=defaults.index_max, help="Last identity index (default: user count)"
    )
    parser.add_argument("--users", type=int, default=defaults.user_count, help="Number of concurrent virtual users")
    parser.add_argument("--iterations", type=int, default=defaults.iterations, help="Bids per virtual user")
    parser.add_argument("--pace-ms", type=int, default=defaults.pace_ms, help="Minimum gap between bids of one user")
    parser.add_argument(
        "--think-time", type=parse_duration_seconds, default=defaults.think_time, help="Sleep after every bid, e.g. 100ms"
    )
    parser.add_argument(
        "--login-timeout", type=parse_duration_seconds, default=defaults.login_timeout, help="Login timeout, e.g. 300s"
    )
    parser.add_argument(
        "--request-timeout", type=parse_duration_seconds, default=defaults.request_timeout, help="Bid timeout, e.g. 300s"
    )
    parser.add_argument(
        "--max-duration", type=parse_duration_seconds, default=defaults.max_duration, help="Global deadline, e.g. 60m"
    )
    parser.add_argument("--min-bid", type=int, default=defaults.min_bid, help="Lowest bid amount")
    parser.add_argument("--max-bid", type=int, default=defaults.max_bid, help="Highest bid amount")
    parser.add_argument("--bid-step", type=int, default=defaults.bid_step, help="Bid amounts are multiples of this step")
    parser.add_argument("--report-dir", type=str, default=defaults.report_dir, help="Where summary files are written")
    parser.add_argument("--no-chart", action="store_true", help="Skip the PNG summary chart")
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> LoadConfig:
    config = LoadConfig(
        base_url=args.base_url,
        login_path=args.login_path,
        bid_path=args.bid_path,
        auction_id=args.auction_id,
        user_prefix=args.user_prefix,
        user_domain=args.user_domain,
        user_suffix=args.user_suffix,
        password=args.password,
        index_min=args.index_min,
        index_max=args.index_max,
        user_count=args.users,
        iterations=args.iterations,
        pace_ms=args.pace_ms,
        think_time=args.think_time,
        login_timeout=args.login_timeout,
        request_timeout=args.request_timeout,
        max_duration=args.max_duration,
        min_bid=args.min_bid,
        max_bid=args.max_bid,
        bid_step=args.bid_step,
        report_dir=args.report_dir,
        chart=not args.no_chart,
    )
    return config


def describe(config: LoadConfig) -> dict:
    """Config as a plain dict for reports, without the password."""
    data = {f.name: getattr(config, f.name) for f in fields(config)}
    data["password"] = "***"
    data["index_max"] = config.effective_index_max
    return data
