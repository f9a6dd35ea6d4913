"""Turn ESPN scoreboard and team-schedule payloads into scorer inputs."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from app.db.coerce import normalize_id, parse_bool, parse_date, parse_int, parse_record
from app.modeling.types import (
    LastGame,
    Streak,
    TeamSnapshot,
    WinLossRecord,
    win_percentage_for,
)

DEFAULT_SEASON_AVERAGE = 110.0


@dataclass(frozen=True)
class Competitor:
    team_id: str
    abbreviation: str
    display_name: str
    home_away: str
    wins: int = 0
    losses: int = 0
    score: int | None = None
    location: str = ""
    nickname: str = ""


@dataclass(frozen=True)
class ScheduledGame:
    game_id: str
    start_time: str | None
    game_date: date | None
    status: str
    completed: bool
    home: Competitor
    away: Competitor

    @property
    def matchup(self) -> str:
        return f"{self.away.abbreviation} @ {self.home.abbreviation}"


@dataclass(frozen=True)
class RecentGame:
    game_date: date | None
    opponent: str
    opponent_abbreviation: str
    team_score: int
    opponent_score: int
    is_home: bool

    @property
    def won(self) -> bool:
        return self.team_score > self.opponent_score


def _first(value: Any) -> dict[str, Any]:
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return {}


def parse_score(value: Any) -> int | None:
    """ESPN sends scores as ``"112"`` on the scoreboard and ``{"value": 112.0}`` on schedules."""
    if isinstance(value, dict):
        value = value.get("value", value.get("displayValue"))
    return parse_int(value)


def parse_competitor(raw: dict[str, Any]) -> Competitor | None:
    team = raw.get("team") or {}
    team_id = normalize_id(team.get("id") or raw.get("id"))
    if not team_id:
        return None
    wins, losses = parse_record(_first(raw.get("records") or raw.get("record")).get("summary"))
    abbreviation = str(team.get("abbreviation") or team_id).upper()
    return Competitor(
        team_id=team_id,
        abbreviation=abbreviation,
        display_name=str(team.get("displayName") or abbreviation),
        home_away=str(raw.get("homeAway") or ""),
        wins=wins,
        losses=losses,
        score=parse_score(raw.get("score")),
        location=str(team.get("location") or ""),
        nickname=str(team.get("name") or ""),
    )


def parse_event(event: dict[str, Any]) -> ScheduledGame | None:
    competition = _first(event.get("competitions"))
    competitors = [
        c for c in (parse_competitor(raw) for raw in competition.get("competitors") or []) if c
    ]
    home = next((c for c in competitors if c.home_away == "home"), None)
    away = next((c for c in competitors if c.home_away == "away"), None)
    game_id = normalize_id(event.get("id"))
    if home is None or away is None or not game_id:
        return None
    status_type = (competition.get("status") or event.get("status") or {}).get("type") or {}
    return ScheduledGame(
        game_id=game_id,
        start_time=event.get("date"),
        game_date=parse_date(event.get("date")),
        status=str(status_type.get("description") or ""),
        completed=bool(parse_bool(status_type.get("completed"))),
        home=home,
        away=away,
    )


def parse_scoreboard(payload: dict[str, Any]) -> list[ScheduledGame]:
    games: list[ScheduledGame] = []
    for event in payload.get("events") or []:
        if not isinstance(event, dict):
            continue
        game = parse_event(event)
        if game is not None:
            games.append(game)
    return games


def teams_on_scoreboard(games: Iterable[ScheduledGame]) -> set[str]:
    team_ids: set[str] = set()
    for game in games:
        team_ids.add(game.home.team_id)
        team_ids.add(game.away.team_id)
    return team_ids


def parse_recent_games(payload: dict[str, Any], team_id: str, limit: int = 10) -> list[RecentGame]:
    """Completed games from a team schedule, oldest first, capped at the last ``limit``."""
    recent: list[RecentGame] = []
    for event in payload.get("events") or []:
        if not isinstance(event, dict):
            continue
        game = parse_event(event)
        if game is None or not game.completed:
            continue
        if game.home.team_id == team_id:
            own, other = game.home, game.away
        elif game.away.team_id == team_id:
            own, other = game.away, game.home
        else:
            continue
        if own.score is None or other.score is None:
            continue
        recent.append(
            RecentGame(
                game_date=game.game_date,
                opponent=other.display_name,
                opponent_abbreviation=other.abbreviation,
                team_score=own.score,
                opponent_score=other.score,
                is_home=game.home.team_id == team_id,
            )
        )
    recent.sort(key=lambda g: g.game_date or date.min)
    return recent[-limit:] if limit > 0 else recent


def calculate_streak(recent: list[RecentGame]) -> Streak:
    if not recent:
        return Streak("W", 0)
    last_won = recent[-1].won
    count = 0
    for game in reversed(recent):
        if game.won != last_won:
            break
        count += 1
    return Streak("W" if last_won else "L", count)


def calculate_season_average(recent: list[RecentGame]) -> float:
    if not recent:
        return DEFAULT_SEASON_AVERAGE
    return round(sum(g.team_score for g in recent) / len(recent), 1)


def venue_records(recent: list[RecentGame]) -> tuple[WinLossRecord, WinLossRecord]:
    home_w = sum(1 for g in recent if g.is_home and g.won)
    home_l = sum(1 for g in recent if g.is_home and not g.won)
    away_w = sum(1 for g in recent if not g.is_home and g.won)
    away_l = sum(1 for g in recent if not g.is_home and not g.won)
    return WinLossRecord(home_w, home_l), WinLossRecord(away_w, away_l)


def split_display_name(display_name: str) -> tuple[str, str]:
    """``"Golden State Warriors"`` → ``("Golden State", "Warriors")``."""
    parts = display_name.split()
    if len(parts) < 2:
        return "", display_name
    return " ".join(parts[:-1]), parts[-1]


def last_game_from(recent: list[RecentGame]) -> LastGame | None:
    if not recent:
        return None
    game = recent[-1]
    # No closing lines for past games; the home side stands in as the favorite.
    return LastGame(
        own_score=game.team_score,
        opponent_score=game.opponent_score,
        was_favorite=game.is_home,
        opponent=game.opponent_abbreviation,
    )


def build_team_snapshot(
    competitor: Competitor,
    recent: list[RecentGame],
    *,
    back_to_back: bool,
) -> TeamSnapshot:
    if competitor.location and competitor.nickname:
        city, name = competitor.location, competitor.nickname
    else:
        city, name = split_display_name(competitor.display_name)
    home_record, away_record = venue_records(recent)
    return TeamSnapshot(
        id=competitor.team_id,
        abbreviation=competitor.abbreviation,
        city=city,
        name=name,
        wins=competitor.wins,
        losses=competitor.losses,
        win_percentage=win_percentage_for(competitor.wins, competitor.losses),
        streak=calculate_streak(recent),
        season_average=calculate_season_average(recent),
        last_game=last_game_from(recent),
        home_record=home_record,
        away_record=away_record,
        back_to_back=back_to_back,
    )
