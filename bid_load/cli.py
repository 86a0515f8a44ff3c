"""
Command line entry point.

Usage:
    LELANG_ID=42 python -m bid_load --users 100 --iterations 2 --pace-ms 500
    bid-load --base-url http://localhost:3333 --auction-id 42 --users 150 --index-max 100
"""

import logging
import os
import sys

from bid_load.config import build_parser, config_from_args
from bid_load.errors import ConfigError
from bid_load.report import text_summary, write_chart, write_json
from bid_load.runner import run_load_test

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        config = config_from_args(args).validate()
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("\n" + "=" * 60)
    print("Starting auction bid load test")
    print("=" * 60)
    print(f"  host       = {config.base_url}")
    print(f"  auction_id = {config.auction_id}")
    print(f"  users      = {config.user_count} (identities {config.index_min}..{config.effective_index_max})")
    print(f"  iterations = {config.iterations}")
    print(f"  pace       = {config.pace_ms}ms")
    print(f"  bids       = {config.min_bid}..{config.max_bid} step {config.bid_step}\n")

    result = run_load_test(config)
    print("\n" + text_summary(result) + "\n")

    json_path = write_json(result, os.path.join(config.report_dir, "summary.json"), config)
    print(f"Results saved to: {json_path}")
    if config.chart:
        chart_path = write_chart(result, os.path.join(config.report_dir, "summary.png"))
        print(f"Chart saved to: {chart_path}")

    if result.timed_out or result.snapshot.bids_success == 0:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
