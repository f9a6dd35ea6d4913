"""Summarize ESPN and Odds API traffic from the JSONL collection log.

Usage:
    python -m scripts.ops.collection_health_report [--log-path logs/collection.jsonl] [--hours 24]
"""
from __future__ import annotations

import argparse
import json
import sys

from app.clients.logging import generate_health_report
from app.core.config import settings

LOW_QUOTA_WARNING = 50


def main() -> None:
    parser = argparse.ArgumentParser(description="Upstream API health report")
    parser.add_argument("--log-path", default=settings.collection_log_path or "logs/collection.jsonl")
    parser.add_argument("--hours", type=int, default=24)
    parser.add_argument("--max-error-rate", type=float, default=0.3)
    args = parser.parse_args()

    report = generate_health_report(args.log_path, hours=args.hours)
    print(json.dumps(report, indent=2))

    if "error" in report:
        sys.exit(1)

    for source, stats in report.get("sources", {}).items():
        if stats.get("error_rate", 0) > args.max_error_rate:
            print(f"WARNING: {source} error rate {stats['error_rate']:.1%}", file=sys.stderr)
        if stats.get("circuit_opens", 0) > 0:
            print(f"WARNING: {source} tripped its circuit breaker {stats['circuit_opens']} times", file=sys.stderr)
        remaining = stats.get("quota_remaining")
        if remaining is not None and remaining < LOW_QUOTA_WARNING:
            print(f"WARNING: {source} has {remaining} requests left this month", file=sys.stderr)

    last_run = report.get("last_run")
    if last_run and last_run.get("errors"):
        print(f"WARNING: last slate run at {last_run['ts']} reported {len(last_run['errors'])} errors", file=sys.stderr)


if __name__ == "__main__":
    main()
