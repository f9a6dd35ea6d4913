"""Prediction history: log analyses, grade them once games finish, aggregate accuracy.

Logging, grading and the read helpers log storage failures and return a
falsy/empty result; ``upsert_record`` and ``open_game_ids`` raise.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable

import pandas as pd
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.db import schema
from app.db.coerce import json_safe, parse_bool, parse_date, parse_int
from app.modeling.types import GameAnalysis, ScoreBreakdown, Side

logger = logging.getLogger(__name__)

BREAKDOWN_VERSION = 1
CONFIDENCE_LEVELS = ("high", "medium", "low")

# Columns refreshed when the same game is analyzed again before it finishes.
_PREDICTION_COLUMNS = (
    "game_date",
    "home_team_id",
    "home_team_name",
    "away_team_id",
    "away_team_name",
    "home_research_score",
    "away_research_score",
    "score_differential",
    "prediction",
    "prediction_confidence",
    "home_analysis_breakdown",
    "away_analysis_breakdown",
    "updated_at",
)

_table = schema.research_score_history


@dataclass
class PredictionRecord:
    game_date: date | None
    game_id: str
    home_team_id: str
    home_team_name: str
    away_team_id: str
    away_team_name: str
    home_research_score: int
    away_research_score: int
    score_differential: int
    prediction: str
    prediction_confidence: str
    home_final_score: int | None = None
    away_final_score: int | None = None
    game_completed: bool = False
    prediction_correct: bool | None = None
    home_analysis_breakdown: tuple[ScoreBreakdown, ...] = ()
    away_analysis_breakdown: tuple[ScoreBreakdown, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "PredictionRecord":
        return cls(
            game_date=parse_date(row.get("game_date")),
            game_id=str(row.get("game_id")),
            home_team_id=str(row.get("home_team_id") or ""),
            home_team_name=str(row.get("home_team_name") or ""),
            away_team_id=str(row.get("away_team_id") or ""),
            away_team_name=str(row.get("away_team_name") or ""),
            home_research_score=parse_int(row.get("home_research_score")) or 0,
            away_research_score=parse_int(row.get("away_research_score")) or 0,
            score_differential=parse_int(row.get("score_differential")) or 0,
            prediction=str(row.get("prediction") or "neutral"),
            prediction_confidence=str(row.get("prediction_confidence") or "low"),
            home_final_score=parse_int(row.get("home_final_score")),
            away_final_score=parse_int(row.get("away_final_score")),
            game_completed=bool(parse_bool(row.get("game_completed"))),
            prediction_correct=parse_bool(row.get("prediction_correct")),
            home_analysis_breakdown=deserialize_breakdown(row.get("home_analysis_breakdown")),
            away_analysis_breakdown=deserialize_breakdown(row.get("away_analysis_breakdown")),
            created_at=_timestamp(row.get("created_at")),
            updated_at=_timestamp(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["home_analysis_breakdown"] = [b.to_dict() for b in self.home_analysis_breakdown]
        data["away_analysis_breakdown"] = [b.to_dict() for b in self.away_analysis_breakdown]
        return json_safe(data)


@dataclass
class AccuracyStats:
    total_predictions: int = 0
    completed_games: int = 0
    graded_predictions: int = 0
    correct_predictions: int = 0
    accuracy_rate: float = 0.0
    high_confidence_accuracy: float = 0.0
    medium_confidence_accuracy: float = 0.0
    low_confidence_accuracy: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _timestamp(value: Any) -> datetime | None:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, datetime):
        return value
    try:
        parsed = pd.to_datetime(value, utc=True)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(parsed) else parsed.to_pydatetime()


def serialize_breakdown(breakdown: Iterable[ScoreBreakdown]) -> dict[str, Any]:
    return {
        "version": BREAKDOWN_VERSION,
        "items": [
            {
                "variable": item.variable_id,
                "name": item.variable_name,
                "points": item.points,
                "triggered": item.triggered,
                "reason": item.reason,
            }
            for item in breakdown
        ],
    }


def deserialize_breakdown(payload: Any) -> tuple[ScoreBreakdown, ...]:
    """Read a stored breakdown; accepts the versioned envelope or a bare list."""
    if payload is None:
        return ()
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            logger.warning("Unreadable breakdown payload; ignoring")
            return ()
    if isinstance(payload, dict):
        version = payload.get("version")
        if version != BREAKDOWN_VERSION:
            logger.warning("Unknown breakdown version %r; reading items anyway", version)
        payload = payload.get("items")
    if not isinstance(payload, list):
        return ()

    items: list[ScoreBreakdown] = []
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        variable_id = raw.get("variable") or raw.get("variable_id") or raw.get("variableId")
        if not variable_id:
            continue
        items.append(
            ScoreBreakdown(
                variable_id=str(variable_id),
                variable_name=str(raw.get("name") or raw.get("variable_name") or raw.get("variableName") or variable_id),
                points=parse_int(raw.get("points")) or 0,
                triggered=bool(parse_bool(raw.get("triggered"))),
                reason=raw.get("reason"),
            )
        )
    return tuple(items)


def grade_prediction(prediction: str, home_final: int, away_final: int) -> bool | None:
    """``None`` for neutral calls; they are neither right nor wrong."""
    if prediction == "neutral":
        return None
    actual: Side = "home" if home_final > away_final else "away"
    return prediction == actual


def _insert_for(engine: Engine):
    if engine.dialect.name == "postgresql":
        return pg_insert
    if engine.dialect.name == "sqlite":
        return sqlite_insert
    raise ValueError(f"Unsupported database dialect: {engine.dialect.name}")


def create_tables(engine: Engine) -> None:
    """Create the history table directly; production databases use alembic."""
    schema.metadata.create_all(engine)


def prediction_row(
    game_id: str,
    analysis: GameAnalysis,
    home_team_name: str,
    away_team_name: str,
    *,
    home_team_id: str,
    away_team_id: str,
    game_date: date,
) -> dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "game_date": game_date,
        "game_id": game_id,
        "home_team_id": home_team_id,
        "home_team_name": home_team_name,
        "away_team_id": away_team_id,
        "away_team_name": away_team_name,
        "home_research_score": analysis.home_analysis.total_score,
        "away_research_score": analysis.away_analysis.total_score,
        "score_differential": analysis.score_differential,
        "prediction": analysis.recommendation.team,
        "prediction_confidence": analysis.recommendation.confidence,
        "home_final_score": None,
        "away_final_score": None,
        "game_completed": False,
        "prediction_correct": None,
        "home_analysis_breakdown": serialize_breakdown(analysis.home_analysis.breakdown),
        "away_analysis_breakdown": serialize_breakdown(analysis.away_analysis.breakdown),
        "created_at": now,
        "updated_at": now,
    }


def upsert_record(engine: Engine, row: dict[str, Any], columns: Iterable[str], *, only_open: bool) -> None:
    insert = _insert_for(engine)
    stmt = insert(_table).values(**row)
    stmt = stmt.on_conflict_do_update(
        index_elements=["game_id"],
        set_={name: stmt.excluded[name] for name in columns},
        where=(_table.c.game_completed.is_(False)) if only_open else None,
    )
    with engine.begin() as conn:
        conn.execute(stmt)


def log_prediction(
    engine: Engine,
    game_id: str,
    analysis: GameAnalysis,
    home_team_name: str,
    away_team_name: str,
    *,
    home_team_id: str,
    away_team_id: str,
    game_date: date,
) -> bool:
    """Upsert the prediction for ``game_id``. Completed games are left untouched."""
    row = prediction_row(
        game_id,
        analysis,
        home_team_name,
        away_team_name,
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        game_date=game_date,
    )
    try:
        upsert_record(engine, row, _PREDICTION_COLUMNS, only_open=True)
    except (SQLAlchemyError, ValueError):
        logger.exception("Failed to log prediction for %s", game_id)
        return False
    logger.info("Logged prediction for %s @ %s", away_team_name, home_team_name)
    return True


def record_final_score(engine: Engine, game_id: str, home_final: int, away_final: int) -> bool:
    try:
        with engine.begin() as conn:
            prediction = conn.execute(
                select(_table.c.prediction).where(_table.c.game_id == game_id)
            ).scalar_one_or_none()
            if prediction is None:
                logger.warning("No logged prediction for game %s", game_id)
                return False
            conn.execute(
                update(_table)
                .where(_table.c.game_id == game_id)
                .values(
                    home_final_score=int(home_final),
                    away_final_score=int(away_final),
                    game_completed=True,
                    prediction_correct=grade_prediction(prediction, home_final, away_final),
                    updated_at=datetime.now(timezone.utc),
                )
            )
    except SQLAlchemyError:
        logger.exception("Failed to record final score for %s", game_id)
        return False
    logger.info("Recorded result for %s: %s-%s", game_id, home_final, away_final)
    return True


def _records_from_frame(frame: pd.DataFrame) -> list[PredictionRecord]:
    if frame.empty:
        return []
    frame = frame.astype(object).where(frame.notna(), None)
    return [PredictionRecord.from_row(row) for row in frame.to_dict(orient="records")]


def fetch_history(engine: Engine, limit: int = 100) -> list[PredictionRecord]:
    query = (
        select(_table)
        .order_by(_table.c.game_date.desc(), _table.c.created_at.desc())
        .limit(max(1, int(limit)))
    )
    try:
        frame = pd.read_sql(query, engine)
    except SQLAlchemyError:
        logger.exception("Failed to fetch prediction history")
        return []
    return _records_from_frame(frame)


def fetch_history_by_date_range(engine: Engine, start: date, end: date) -> list[PredictionRecord]:
    query = (
        select(_table)
        .where(_table.c.game_date >= start, _table.c.game_date <= end)
        .order_by(_table.c.game_date.desc(), _table.c.created_at.desc())
    )
    try:
        frame = pd.read_sql(query, engine)
    except SQLAlchemyError:
        logger.exception("Failed to fetch prediction history for %s..%s", start, end)
        return []
    return _records_from_frame(frame)


def _rate(graded: pd.DataFrame) -> float:
    if graded.empty:
        return 0.0
    return float(graded["prediction_correct"].sum()) / len(graded) * 100


def accuracy_from_frame(frame: pd.DataFrame, total_predictions: int) -> AccuracyStats:
    """Accuracy over completed games; neutral (null) grades count in neither numerator nor denominator."""
    if frame.empty:
        return AccuracyStats(total_predictions=total_predictions)
    # numpy masks: an empty object Series would be read as a column selector
    completed_mask = frame["game_completed"].map(lambda v: bool(parse_bool(v))).to_numpy(dtype=bool)
    completed = frame[completed_mask]
    grades = completed["prediction_correct"].map(parse_bool)
    graded_mask = grades.map(lambda v: v is not None).to_numpy(dtype=bool)
    if not graded_mask.any():
        return AccuracyStats(total_predictions=total_predictions, completed_games=int(len(completed)))
    graded = completed[graded_mask].assign(prediction_correct=grades[graded_mask].astype(bool))

    by_confidence = {
        level: _rate(graded[graded["prediction_confidence"] == level]) for level in CONFIDENCE_LEVELS
    }
    return AccuracyStats(
        total_predictions=total_predictions,
        completed_games=int(len(completed)),
        graded_predictions=int(len(graded)),
        correct_predictions=int(graded["prediction_correct"].sum()),
        accuracy_rate=_rate(graded),
        high_confidence_accuracy=by_confidence["high"],
        medium_confidence_accuracy=by_confidence["medium"],
        low_confidence_accuracy=by_confidence["low"],
    )


def compute_accuracy(engine: Engine) -> AccuracyStats:
    query = select(
        _table.c.game_completed,
        _table.c.prediction_correct,
        _table.c.prediction_confidence,
    )
    try:
        frame = pd.read_sql(query, engine)
    except SQLAlchemyError:
        logger.exception("Failed to compute prediction accuracy")
        return AccuracyStats()
    return accuracy_from_frame(frame, total_predictions=int(len(frame)))


def open_game_ids(engine: Engine, game_ids: Iterable[str]) -> set[str]:
    ids = [g for g in game_ids if g]
    if not ids:
        return set()
    query = select(_table.c.game_id).where(
        _table.c.game_id.in_(ids), _table.c.game_completed.is_(False)
    )
    with engine.connect() as conn:
        return {str(row[0]) for row in conn.execute(query)}
