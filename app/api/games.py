from __future__ import annotations

import asyncio
import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Query

from app.clients import espn as espn_client
from app.clients import odds_api
from app.clients.shared import get_shared_cache
from app.db.coerce import parse_date
from app.modeling.variables import SCORING_VARIABLES
from app.services.diagnostics import run_diagnostics
from app.services.slate import SlateUnavailableError, build_slate, invalidate_slate_cache

router = APIRouter(tags=["games"])
logger = logging.getLogger(__name__)

CACHE_SOURCES = (espn_client.SOURCE_NAME, odds_api.SOURCE_NAME)


def parse_date_param(value: str | None, name: str = "game_date") -> date | None:
    if value is None or not value.strip():
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: expected YYYY-MM-DD")
    return parsed


@router.get("/games")
async def get_games(
    game_date: str | None = Query(None, description="Slate date YYYY-MM-DD (America/Los_Angeles)"),
    force: bool = Query(False, description="Bypass caches and refetch upstream data"),
    log: bool = Query(True, description="Log predictions to history when a database is configured"),
) -> dict:
    day = parse_date_param(game_date)
    try:
        result = await asyncio.to_thread(build_slate, day, force=force, log_predictions=log)
    except SlateUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return result.to_dict()


@router.get("/variables")
def get_variables() -> dict:
    return {
        "count": len(SCORING_VARIABLES),
        "variables": [v.to_dict() for v in SCORING_VARIABLES],
    }


@router.get("/diagnostics")
async def diagnostics() -> dict:
    results = await asyncio.to_thread(run_diagnostics)
    return {
        "all_ok": all(r.success for r in results),
        "results": [r.to_dict() for r in results],
    }


@router.post("/cache/clear")
def clear_cache(source: str | None = Query(None, description="Only clear one source, e.g. espn or odds_api")) -> dict:
    if source is not None and source not in CACHE_SOURCES:
        raise HTTPException(status_code=400, detail=f"Unknown cache source: {source}")
    removed = get_shared_cache().clear(source)
    invalidate_slate_cache()
    logger.info("Cleared %d cached responses", removed)
    return {"removed": removed}
