from __future__ import annotations

from datetime import date
from typing import Any

from app.clients.base import ApiClient
from app.clients.shared import get_shared_cache
from app.core.config import settings

SOURCE_NAME = "espn"

DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
}

_client: ApiClient | None = None


def _get_client() -> ApiClient:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = ApiClient(
            source_name=SOURCE_NAME,
            max_retries=settings.espn_max_retries,
            backoff_seconds=settings.espn_backoff_seconds,
            timeout=float(settings.espn_timeout_seconds),
            impersonate=settings.espn_impersonate,
            default_headers=DEFAULT_HEADERS,
            should_retry=lambda status: status in {429, 500, 502, 503, 504},
            cache=get_shared_cache(),
        )
    return _client


def format_espn_date(value: date | str) -> str:
    """ESPN wants ``YYYYMMDD``; accepts a date or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    return str(value).strip().replace("-", "")


def season_for(day: date) -> int:
    """ESPN labels a season by the year it ends in; it tips off in October."""
    if day.month >= 7:
        return day.year + 1
    return day.year


def build_scoreboard_url(base_url: str | None = None) -> str:
    return f"{(base_url or settings.espn_api_url).rstrip('/')}/scoreboard"


def build_team_schedule_url(team_id: str, base_url: str | None = None) -> str:
    return f"{(base_url or settings.espn_api_url).rstrip('/')}/teams/{team_id}/schedule"


def fetch_scoreboard(day: date | str, *, use_cache: bool = True) -> dict[str, Any]:
    result = _get_client().get(
        build_scoreboard_url(),
        params={"dates": format_espn_date(day)},
        use_cache=use_cache,
    )
    payload = result.json_data
    if not isinstance(payload, dict):
        raise ValueError(f"ESPN scoreboard returned a non-JSON body (status {result.status_code})")
    return payload


def fetch_team_schedule(team_id: str, *, season: int, use_cache: bool = True) -> dict[str, Any]:
    result = _get_client().get(
        build_team_schedule_url(team_id),
        params={"season": season},
        use_cache=use_cache,
    )
    payload = result.json_data
    if not isinstance(payload, dict):
        raise ValueError(f"ESPN schedule for team {team_id} returned a non-JSON body")
    return payload
