"""Grade logged predictions once games finish, and seed the sample history."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.clients import espn as espn_client
from app.collectors.espn import parse_scoreboard
from app.collectors.sample import SAMPLE_GAMES, sample_snapshot
from app.db.history import (
    grade_prediction,
    open_game_ids,
    prediction_row,
    record_final_score,
    upsert_record,
)
from app.modeling.research_score import analyze_game

logger = logging.getLogger(__name__)


def resolve_completed_games(engine: Engine, game_date: date) -> dict[str, int]:
    """Record final scores for every finished game on ``game_date`` that is still open."""
    payload = espn_client.fetch_scoreboard(game_date, use_cache=False)
    finished = [
        g
        for g in parse_scoreboard(payload)
        if g.completed and g.home.score is not None and g.away.score is not None
    ]
    counts = {
        "scheduled": len(payload.get("events") or []),
        "completed": len(finished),
        "open": 0,
        "updated": 0,
        "failed": 0,
    }
    if not finished:
        return counts

    try:
        pending = open_game_ids(engine, [g.game_id for g in finished])
    except SQLAlchemyError:
        logger.exception("Failed to look up open predictions for %s", game_date)
        counts["failed"] = len(finished)
        return counts
    counts["open"] = len(pending)

    for game in finished:
        if game.game_id not in pending:
            continue
        if record_final_score(engine, game.game_id, game.home.score, game.away.score):
            counts["updated"] += 1
        else:
            counts["failed"] += 1
    logger.info("Resolved %s: %s", game_date, counts)
    return counts


def seed_sample_history(engine: Engine) -> int:
    """Score the fixed sample slate and store it as completed history. Returns rows written."""
    written = 0
    for sample in SAMPLE_GAMES:
        home = sample_snapshot(sample.home)
        away = sample_snapshot(sample.away)
        analysis = analyze_game(
            sample.game_id, home, away, sample.home.back_to_back, sample.away.back_to_back
        )
        row: dict[str, Any] = prediction_row(
            sample.game_id,
            analysis,
            home.display_name,
            away.display_name,
            home_team_id=home.id.lower(),
            away_team_id=away.id.lower(),
            game_date=sample.game_date,
        )
        row.update(
            home_final_score=sample.home.final_score,
            away_final_score=sample.away.final_score,
            game_completed=True,
            prediction_correct=grade_prediction(
                analysis.recommendation.team, sample.home.final_score, sample.away.final_score
            ),
        )
        columns = [name for name in row if name not in {"game_id", "created_at"}]
        try:
            upsert_record(engine, row, columns, only_open=False)
        except SQLAlchemyError:
            logger.exception("Failed to seed sample game %s", sample.game_id)
            continue
        written += 1
    logger.info("Seeded %d sample predictions", written)
    return written
