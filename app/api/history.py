from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.engine import Engine

from app.api.games import parse_date_param
from app.db.engine import get_engine
from app.db.history import compute_accuracy, fetch_history, fetch_history_by_date_range, record_final_score
from app.modeling.time_utils import previous_day, slate_today
from app.services.results import resolve_completed_games, seed_sample_history

router = APIRouter(prefix="/history", tags=["history"])


class GameResultIn(BaseModel):
    home_score: int = Field(ge=0)
    away_score: int = Field(ge=0)


def _engine() -> Engine:
    try:
        return get_engine()
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("")
async def get_history(
    limit: int = Query(100, ge=1, le=1000),
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
) -> dict:
    engine = _engine()
    start = parse_date_param(start_date, "start_date")
    end = parse_date_param(end_date, "end_date")
    if start or end:
        start = start or end
        end = end or start
        if start > end:
            raise HTTPException(status_code=400, detail="start_date must not be after end_date")
        records = await asyncio.to_thread(fetch_history_by_date_range, engine, start, end)
    else:
        records = await asyncio.to_thread(fetch_history, engine, limit)
    return {"count": len(records), "records": [r.to_dict() for r in records]}


@router.get("/accuracy")
async def get_accuracy() -> dict:
    engine = _engine()
    stats = await asyncio.to_thread(compute_accuracy, engine)
    return stats.to_dict()


@router.post("/resolve")
async def resolve(game_date: str | None = Query(None, description="Defaults to yesterday")) -> dict:
    engine = _engine()
    day = parse_date_param(game_date) or previous_day(slate_today())
    try:
        counts = await asyncio.to_thread(resolve_completed_games, engine, day)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=503, detail=f"Could not resolve {day}: {exc}") from exc
    return {"game_date": day.isoformat(), **counts}


@router.post("/seed")
async def seed() -> dict:
    engine = _engine()
    written = await asyncio.to_thread(seed_sample_history, engine)
    return {"seeded": written}


@router.post("/{game_id}/result")
async def post_result(game_id: str, body: GameResultIn) -> dict:
    engine = _engine()
    ok = await asyncio.to_thread(record_final_score, engine, game_id, body.home_score, body.away_score)
    if not ok:
        raise HTTPException(status_code=404, detail=f"No logged prediction for game {game_id}")
    return {"game_id": game_id, "updated": True}
