"""Connectivity checks for the upstream APIs."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from app.clients import espn as espn_client
from app.clients import odds_api
from app.collectors.espn import parse_scoreboard
from app.modeling.time_utils import slate_today

logger = logging.getLogger(__name__)


@dataclass
class APITestResult:
    service: str
    success: bool
    message: str
    games_count: int | None = None
    odds_count: int | None = None
    remaining_quota: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def test_espn() -> APITestResult:
    try:
        payload = espn_client.fetch_scoreboard(slate_today(), use_cache=False)
    except Exception as exc:  # noqa: BLE001
        logger.warning("ESPN connectivity check failed: %s", exc)
        return APITestResult(service="ESPN", success=False, message="ESPN API unreachable", error=str(exc))
    games = parse_scoreboard(payload)
    return APITestResult(
        service="ESPN",
        success=True,
        message=f"Fetched {len(games)} games from the ESPN scoreboard",
        games_count=len(games),
    )


def test_odds() -> APITestResult:
    try:
        result = odds_api.fetch_odds(use_cache=False)
    except odds_api.OddsApiKeyMissing as exc:
        return APITestResult(service="The Odds API", success=False, message="API key not configured", error=str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.warning("Odds API connectivity check failed: %s", exc)
        return APITestResult(service="The Odds API", success=False, message="Odds API unreachable", error=str(exc))
    return APITestResult(
        service="The Odds API",
        success=True,
        message=f"Fetched odds for {len(result.games)} games",
        odds_count=len(result.games),
        remaining_quota=result.remaining_quota,
    )


def run_diagnostics() -> list[APITestResult]:
    return [test_espn(), test_odds()]
