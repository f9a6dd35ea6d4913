"""Score a slate from the command line.

Usage:
    python -m scripts.ops.run_slate [--date 2025-11-04] [--no-log] [--force]
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.clients.shared import configure_collection_log  # noqa: E402
from app.db.coerce import parse_date  # noqa: E402
from app.services.slate import SlateUnavailableError, build_slate  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch, score and optionally log one NBA slate.")
    parser.add_argument("--date", default=None, help="Slate date YYYY-MM-DD (defaults to today, Pacific time).")
    parser.add_argument("--force", action="store_true", help="Bypass response caches.")
    parser.add_argument("--no-log", action="store_true", help="Do not write predictions to the history table.")
    parser.add_argument("--json", action="store_true", help="Print the full slate as JSON.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    configure_collection_log()

    day = parse_date(args.date) if args.date else None
    if args.date and day is None:
        parser.error(f"invalid --date {args.date!r}")
    try:
        result = build_slate(day, force=args.force, log_predictions=not args.no_log)
    except SlateUnavailableError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return
    print(f"{result.game_date}: {len(result.games)} games ({result.logged} logged)")
    for item in result.games:
        analysis = item.analysis
        rec = analysis.recommendation
        print(
            f"  {item.game.matchup:<12} "
            f"{analysis.away_analysis.total_score:>4} - {analysis.home_analysis.total_score:<4} "
            f"diff {analysis.score_differential:+d}  -> {rec.team} ({rec.confidence})"
        )
        for label, side in (("away", analysis.away_analysis), ("home", analysis.home_analysis)):
            fired = ", ".join(f"{b.variable_id}({b.points:+d})" for b in side.triggered)
            print(f"      {label}: {fired or '-'}")
    for error in result.errors:
        print(f"WARNING: {error}", file=sys.stderr)


if __name__ == "__main__":
    main()
