"""
Summary output for a finished run: console text, JSON export and a PNG chart.
"""

import json
import os
from datetime import datetime

import matplotlib

matplotlib.use("Agg")  # Use non-interactive backend
import matplotlib.pyplot as plt

from bid_load.config import LoadConfig, describe
from bid_load.runner import RunResult

SUCCESS_COLOR = "#2E86AB"  # Blue
FAILURE_COLOR = "#E94F37"  # Red


def text_summary(result: RunResult) -> str:
    snapshot = result.snapshot
    lines = [
        "=" * 60,
        "AUCTION BID LOAD TEST COMPLETED" + (" (TIMED OUT)" if result.timed_out else ""),
        "=" * 60,
        f"Duration: {result.duration_s:.1f}s",
        "",
        "Virtual users:",
    ]
    for state, count in sorted(result.driver_states.items()):
        lines.append(f"  {state:<12} {count}")
    lines += [
        "",
        "Logins:",
        f"  ok:     {snapshot.logins_ok}",
        f"  failed: {snapshot.logins_failed}",
        "",
        "Bids:",
        f"  bids_success: {snapshot.bids_success}",
        f"  bids_failed:  {snapshot.bids_failed}",
        f"  bid_ok rate:  {snapshot.success_rate:.2%}",
    ]
    if result.request_stats:
        lines += ["", "Requests:"]
        lines.append(f"  {'Name':<8} {'Reqs':>8} {'Fails':>8} {'Med(ms)':>10} {'P95(ms)':>10} {'P99(ms)':>10} {'RPS':>8}")
        for name, stats in sorted(result.request_stats.items()):
            lines.append(
                f"  {name:<8} {stats['num_requests']:>8} {stats['num_failures']:>8} "
                f"{stats['median_ms']:>10.1f} {stats['p95_ms']:>10.1f} {stats['p99_ms']:>10.1f} {stats['rps']:>8.2f}"
            )
    lines.append("=" * 60)
    return "\n".join(lines)


def summary_dict(result: RunResult, config: LoadConfig = None) -> dict:
    data = {
        "timestamp": datetime.now().isoformat(),
        "timed_out": result.timed_out,
        "duration_s": result.duration_s,
        "metrics": result.snapshot.to_dict(),
        "virtual_users": result.driver_states,
        "requests": result.request_stats,
    }
    if config is not None:
        data["config"] = describe(config)
    return data


def write_json(result: RunResult, path: str, config: LoadConfig = None) -> str:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        json.dump(summary_dict(result, config), f, indent=2)
    return path


def write_chart(result: RunResult, path: str) -> str:
    """Bid outcome bars next to per-endpoint latency percentiles."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    snapshot = result.snapshot

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))

    bars = ax1.bar(
        ["Success", "Failed"],
        [snapshot.bids_success, snapshot.bids_failed],
        color=[SUCCESS_COLOR, FAILURE_COLOR],
        alpha=0.8,
    )
    ax1.set_ylabel("Bids", fontsize=12)
    ax1.set_title(f"Bid Outcomes (success rate {snapshot.success_rate:.1%})", fontsize=14, fontweight="bold")
    for bar in bars:
        height = bar.get_height()
        ax1.annotate(
            f"{height:.0f}",
            xy=(bar.get_x() + bar.get_width() / 2, height),
            xytext=(0, 3),
            textcoords="offset points",
            ha="center",
            va="bottom",
            fontsize=10,
        )

    names = sorted(result.request_stats)
    if names:
        width = 0.25
        positions = range(len(names))
        for offset, key, label in ((-width, "median_ms", "P50"), (0, "p95_ms", "P95"), (width, "p99_ms", "P99")):
            ax2.bar(
                [p + offset for p in positions],
                [result.request_stats[name][key] for name in names],
                width,
                label=label,
                alpha=0.8,
            )
        ax2.set_xticks(list(positions))
        ax2.set_xticklabels(names)
        ax2.legend(loc="upper right")
    ax2.set_ylabel("Latency (ms)", fontsize=12)
    ax2.set_title("Latency Percentiles by Request", fontsize=14, fontweight="bold")

    plt.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path
