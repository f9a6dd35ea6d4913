from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.db.engine import get_engine  # noqa: E402
from app.db.history import compute_accuracy, create_tables  # noqa: E402
from app.services.results import seed_sample_history  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Score the built-in sample slate and store it as completed prediction history."
    )
    parser.add_argument("--database-url", default=None)
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create the history table first (local sqlite databases without alembic).",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    engine = get_engine(args.database_url)
    if args.create_tables:
        create_tables(engine)

    written = seed_sample_history(engine)
    stats = compute_accuracy(engine)
    print(f"Seeded {written} games")
    print(
        f"Accuracy {stats.accuracy_rate:.1f}% "
        f"({stats.correct_predictions}/{stats.graded_predictions} graded, "
        f"{stats.completed_games} completed)"
    )


if __name__ == "__main__":
    main()
