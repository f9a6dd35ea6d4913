from __future__ import annotations

from fastapi import APIRouter, Query

from app.clients.logging import generate_health_report
from app.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/collection")
def collection_health(hours: int = Query(24, ge=1, le=24 * 14)) -> dict:
    if not settings.collection_log_path:
        return {"enabled": False}
    report = generate_health_report(settings.collection_log_path, hours=hours)
    return {"enabled": True, **report}
