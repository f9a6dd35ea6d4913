from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.clients.base import ApiClient
from app.clients.logging import log_quota
from app.clients.shared import get_shared_cache
from app.core.config import settings
from app.db.coerce import parse_int

SOURCE_NAME = "odds_api"
SPORT_KEY = "basketball_nba"

logger = logging.getLogger(__name__)

_client: ApiClient | None = None


@dataclass
class OddsFetchResult:
    games: list[dict[str, Any]]
    remaining_quota: int | None = None
    used_quota: int | None = None
    cached: bool = False


class OddsApiKeyMissing(RuntimeError):
    """Raised when ODDS_API_KEY is not configured."""


def _get_client() -> ApiClient:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = ApiClient(
            source_name=SOURCE_NAME,
            max_retries=settings.odds_max_retries,
            backoff_seconds=settings.odds_backoff_seconds,
            timeout=float(settings.odds_timeout_seconds),
            default_headers={"Accept": "application/json"},
            # 401/422 mean a bad key or request; retrying burns quota.
            should_retry=lambda status: status in {429, 500, 502, 503},
            cache=get_shared_cache(),
        )
    return _client


def build_odds_url(base_url: str | None = None) -> str:
    return f"{(base_url or settings.odds_api_url).rstrip('/')}/sports/{SPORT_KEY}/odds"


def build_odds_params(api_key: str) -> dict[str, Any]:
    return {
        "apiKey": api_key,
        "regions": settings.odds_regions,
        "markets": settings.odds_markets,
        "oddsFormat": "american",
    }


def fetch_odds(*, api_key: str | None = None, use_cache: bool = True) -> OddsFetchResult:
    key = api_key or settings.odds_api_key
    if not key:
        raise OddsApiKeyMissing("ODDS_API_KEY is not set")

    params = build_odds_params(key)
    public_params = {k: v for k, v in params.items() if k != "apiKey"}
    result = _get_client().get(
        build_odds_url(),
        params=params,
        use_cache=use_cache,
        cache_params=public_params,
    )

    remaining = parse_int(result.header("x-requests-remaining"))
    used = parse_int(result.header("x-requests-used"))
    if not result.cached:
        log_quota(SOURCE_NAME, remaining=remaining, used=used)
        logger.info("Odds API quota: remaining=%s used=%s", remaining, used)

    payload = result.json_data
    if not isinstance(payload, list):
        raise ValueError(f"Odds API returned an unexpected payload (status {result.status_code})")
    return OddsFetchResult(games=payload, remaining_quota=remaining, used_quota=used, cached=result.cached)
