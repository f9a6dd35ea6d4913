"""Match The Odds API games to ESPN games and pull spread / moneyline."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from app.collectors.espn import ScheduledGame


@dataclass(frozen=True)
class GameOdds:
    spread_favorite: str
    spread_line: float
    home_moneyline: int | None
    away_moneyline: int | None
    bookmaker: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def normalize_team_name(name: str) -> str:
    return "".join(str(name or "").lower().split())


def _names_match(a: str, b: str) -> bool:
    a, b = normalize_team_name(a), normalize_team_name(b)
    if not a or not b:
        return False
    return a in b or b in a


def find_matching_odds(game: ScheduledGame, odds_games: Iterable[dict[str, Any]]) -> dict[str, Any] | None:
    for odds in odds_games:
        if not isinstance(odds, dict):
            continue
        if _names_match(odds.get("home_team", ""), game.home.display_name) and _names_match(
            odds.get("away_team", ""), game.away.display_name
        ):
            return odds
    return None


def _market(bookmaker: dict[str, Any], key: str) -> list[dict[str, Any]]:
    for market in bookmaker.get("markets") or []:
        if market.get("key") == key:
            return [o for o in market.get("outcomes") or [] if isinstance(o, dict)]
    return []


def _outcome(outcomes: list[dict[str, Any]], name: str) -> dict[str, Any] | None:
    return next((o for o in outcomes if o.get("name") == name), None)


def extract_game_odds(odds: dict[str, Any]) -> GameOdds | None:
    """Spread and moneylines from the first bookmaker that lists a spread."""
    home_name = odds.get("home_team")
    away_name = odds.get("away_team")
    for bookmaker in odds.get("bookmakers") or []:
        spreads = _market(bookmaker, "spreads")
        home_spread = _outcome(spreads, home_name)
        if home_spread is None or home_spread.get("point") is None:
            continue
        h2h = _market(bookmaker, "h2h")
        home_h2h = _outcome(h2h, home_name)
        away_h2h = _outcome(h2h, away_name)
        point = float(home_spread["point"])
        return GameOdds(
            spread_favorite="home" if point < 0 else "away",
            spread_line=abs(point),
            home_moneyline=int(home_h2h["price"]) if home_h2h and home_h2h.get("price") is not None else None,
            away_moneyline=int(away_h2h["price"]) if away_h2h and away_h2h.get("price") is not None else None,
            bookmaker=bookmaker.get("key"),
        )
    return None


def odds_for_game(game: ScheduledGame, odds_games: list[dict[str, Any]] | None) -> GameOdds | None:
    if not odds_games:
        return None
    matched = find_matching_odds(game, odds_games)
    if matched is None:
        return None
    return extract_game_odds(matched)
