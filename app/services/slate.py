"""Build the scored slate for one date.

Fetches the scoreboard, yesterday's scoreboard (back-to-back detection), each
team's schedule and the odds board in parallel, scores every game and, when a
database is configured, logs each prediction.
"""
from __future__ import annotations

import logging
import threading
import time as _time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy.engine import Engine

from app.clients import espn as espn_client
from app.clients import odds_api
from app.clients.logging import log_run_summary
from app.collectors.espn import (
    RecentGame,
    ScheduledGame,
    build_team_snapshot,
    parse_recent_games,
    parse_scoreboard,
    teams_on_scoreboard,
)
from app.collectors.odds import GameOdds, odds_for_game
from app.core.config import settings
from app.db.engine import get_engine
from app.db.history import log_prediction
from app.modeling.research_score import analyze_game
from app.modeling.time_utils import previous_day, slate_today
from app.modeling.types import GameAnalysis, TeamSnapshot

logger = logging.getLogger(__name__)

_slate_cache: dict[str, tuple[float, "SlateResult"]] = {}
_slate_cache_lock = threading.Lock()


class SlateUnavailableError(RuntimeError):
    """The scoreboard for the requested date could not be fetched."""


def invalidate_slate_cache() -> None:
    with _slate_cache_lock:
        _slate_cache.clear()


@dataclass
class SlateGame:
    game: ScheduledGame
    home_team: TeamSnapshot
    away_team: TeamSnapshot
    analysis: GameAnalysis
    odds: GameOdds | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_id": self.game.game_id,
            "start_time": self.game.start_time,
            "status": self.game.status,
            "completed": self.game.completed,
            "matchup": self.game.matchup,
            "home_team": self.home_team.to_dict(),
            "away_team": self.away_team.to_dict(),
            "analysis": self.analysis.to_dict(),
            "odds": self.odds.to_dict() if self.odds else None,
        }


@dataclass
class SlateResult:
    game_date: date
    generated_at: str
    games: list[SlateGame] = field(default_factory=list)
    odds_available: bool = False
    remaining_quota: int | None = None
    logged: int = 0
    errors: list[str] = field(default_factory=list)
    cached: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_date": self.game_date.isoformat(),
            "generated_at": self.generated_at,
            "total_games": len(self.games),
            "odds_available": self.odds_available,
            "remaining_quota": self.remaining_quota,
            "logged": self.logged,
            "cached": self.cached,
            "errors": list(self.errors),
            "games": [g.to_dict() for g in self.games],
        }


def _recent_games(team_id: str, season: int, use_cache: bool) -> list[RecentGame]:
    payload = espn_client.fetch_team_schedule(team_id, season=season, use_cache=use_cache)
    return parse_recent_games(payload, team_id, limit=settings.recent_games_limit)


def _yesterday_teams(day: date, use_cache: bool) -> set[str]:
    payload = espn_client.fetch_scoreboard(previous_day(day), use_cache=use_cache)
    return teams_on_scoreboard(parse_scoreboard(payload))


def _result_or_default(future: Future, default: Any, label: str, errors: list[str]) -> Any:
    try:
        return future.result()
    except odds_api.OddsApiKeyMissing:
        logger.info("ODDS_API_KEY not set; slate will not include odds")
        return default
    except Exception as exc:  # noqa: BLE001
        logger.warning("%s failed: %s", label, exc)
        errors.append(f"{label}: {exc}")
        return default


def _log_slate(games: list[SlateGame], day: date, engine: Engine | None) -> int:
    if engine is None:
        try:
            engine = get_engine()
        except ValueError:
            logger.info("DATABASE_URL not set; skipping prediction logging")
            return 0
    logged = 0
    for item in games:
        ok = log_prediction(
            engine,
            item.game.game_id,
            item.analysis,
            item.game.home.display_name,
            item.game.away.display_name,
            home_team_id=item.game.home.abbreviation.lower(),
            away_team_id=item.game.away.abbreviation.lower(),
            game_date=day,
        )
        logged += int(ok)
    return logged


def build_slate(
    game_date: date | None = None,
    *,
    force: bool = False,
    log_predictions: bool = True,
    engine: Engine | None = None,
) -> SlateResult:
    day = game_date or slate_today()
    key = day.isoformat()
    if not force:
        with _slate_cache_lock:
            cached = _slate_cache.get(key)
        if cached is not None and (_time.monotonic() - cached[0]) < settings.slate_cache_ttl_seconds:
            return replace(cached[1], cached=True)

    started = _time.monotonic()
    use_cache = not force
    try:
        scheduled = parse_scoreboard(espn_client.fetch_scoreboard(day, use_cache=use_cache))
    except Exception as exc:  # noqa: BLE001
        logger.error("Scoreboard fetch failed for %s: %s", day, exc)
        raise SlateUnavailableError(f"Could not load the NBA scoreboard for {day}") from exc

    errors: list[str] = []
    season = espn_client.season_for(day)
    team_ids = sorted(teams_on_scoreboard(scheduled))

    with ThreadPoolExecutor(max_workers=max(1, settings.fetch_workers)) as executor:
        yesterday_future = executor.submit(_yesterday_teams, day, use_cache)
        odds_future = executor.submit(odds_api.fetch_odds, use_cache=use_cache)
        schedule_futures = {
            team_id: executor.submit(_recent_games, team_id, season, use_cache)
            for team_id in team_ids
        }
        yesterday = _result_or_default(yesterday_future, set(), "yesterday scoreboard", errors)
        odds_result = _result_or_default(odds_future, None, "odds", errors)
        recent = {
            team_id: _result_or_default(future, [], f"schedule {team_id}", errors)
            for team_id, future in schedule_futures.items()
        }

    odds_games = odds_result.games if odds_result else None
    games: list[SlateGame] = []
    for game in scheduled:
        home = build_team_snapshot(
            game.home, recent.get(game.home.team_id, []), back_to_back=game.home.team_id in yesterday
        )
        away = build_team_snapshot(
            game.away, recent.get(game.away.team_id, []), back_to_back=game.away.team_id in yesterday
        )
        analysis = analyze_game(game.game_id, home, away, home.back_to_back, away.back_to_back)
        games.append(
            SlateGame(
                game=game,
                home_team=home,
                away_team=away,
                analysis=analysis,
                odds=odds_for_game(game, odds_games),
            )
        )
    games.sort(key=lambda g: abs(g.analysis.score_differential), reverse=True)

    logged = _log_slate(games, day, engine) if log_predictions and games else 0

    result = SlateResult(
        game_date=day,
        generated_at=datetime.now(timezone.utc).isoformat(),
        games=games,
        odds_available=bool(odds_games),
        remaining_quota=odds_result.remaining_quota if odds_result else None,
        logged=logged,
        errors=errors,
    )
    duration = _time.monotonic() - started
    log_run_summary(
        "slate",
        duration_seconds=duration,
        counts={"games": len(games), "teams": len(team_ids), "logged": logged},
        errors=errors,
    )
    logger.info("Built slate for %s: %d games in %.1fs (%d logged)", day, len(games), duration, logged)

    with _slate_cache_lock:
        _slate_cache[key] = (_time.monotonic(), result)
    return result
