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
from app.db.engine import get_engine  # noqa: E402
from app.modeling.time_utils import previous_day, slate_today  # noqa: E402
from app.services.results import resolve_completed_games  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Record final scores for logged research-score predictions from the ESPN scoreboard."
    )
    parser.add_argument("--database-url", default=None)
    parser.add_argument(
        "--date",
        default=None,
        help="Game date YYYY-MM-DD (defaults to yesterday, Pacific time).",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=1,
        help="Resolve this many consecutive days ending at --date.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    configure_collection_log()

    end = parse_date(args.date) if args.date else previous_day(slate_today())
    if end is None:
        parser.error(f"invalid --date {args.date!r}")
    engine = get_engine(args.database_url)

    day = end
    results = {}
    for _ in range(max(1, int(args.days))):
        results[day.isoformat()] = resolve_completed_games(engine, day)
        day = previous_day(day)
    print(json.dumps(results, indent=2))


if __name__ == "__main__":
    main()
