from __future__ import annotations

import pytest

from app.clients import odds_api
from app.collectors.espn import parse_scoreboard
from app.collectors.odds import extract_game_odds, find_matching_odds, normalize_team_name, odds_for_game


def _odds_game(home: str, away: str, *, home_point: float | None = -4.5, bookmakers: list | None = None) -> dict:
    if bookmakers is None:
        bookmakers = [
            {
                "key": "draftkings",
                "markets": [
                    {
                        "key": "h2h",
                        "outcomes": [{"name": home, "price": -180}, {"name": away, "price": 150}],
                    },
                    {
                        "key": "spreads",
                        "outcomes": [
                            {"name": home, "price": -110, "point": home_point},
                            {"name": away, "price": -110, "point": None if home_point is None else -home_point},
                        ],
                    },
                ],
            }
        ]
    return {"id": "abc", "home_team": home, "away_team": away, "bookmakers": bookmakers}


@pytest.fixture
def game(espn_event):
    (scheduled,) = parse_scoreboard({"events": [espn_event("1", "2", "14")]})
    return scheduled


def test_normalize_team_name():
    assert normalize_team_name(" Golden State  Warriors ") == "goldenstatewarriors"
    assert normalize_team_name(None) == ""


def test_match_by_normalized_name(game):
    odds_games = [_odds_game("Phoenix Suns", "Golden State Warriors"), _odds_game("Boston Celtics", "Miami Heat")]
    assert find_matching_odds(game, odds_games)["home_team"] == "Boston Celtics"


def test_match_is_substring_both_ways(game):
    assert find_matching_odds(game, [_odds_game("Celtics", "Miami Heat")]) is not None
    assert find_matching_odds(game, [_odds_game("Boston Celtics (Home)", "Heat")]) is not None


def test_no_match_for_swapped_venue(game):
    assert find_matching_odds(game, [_odds_game("Miami Heat", "Boston Celtics")]) is None


def test_extract_home_favorite():
    odds = extract_game_odds(_odds_game("Boston Celtics", "Miami Heat", home_point=-4.5))
    assert odds.spread_favorite == "home"
    assert odds.spread_line == 4.5
    assert (odds.home_moneyline, odds.away_moneyline) == (-180, 150)
    assert odds.bookmaker == "draftkings"


def test_extract_away_favorite():
    odds = extract_game_odds(_odds_game("Boston Celtics", "Miami Heat", home_point=3.0))
    assert odds.spread_favorite == "away"
    assert odds.spread_line == 3.0


def test_skips_bookmakers_without_spread():
    no_spread = {"key": "fanduel", "markets": [{"key": "h2h", "outcomes": []}]}
    full = _odds_game("Boston Celtics", "Miami Heat")["bookmakers"][0]
    odds = extract_game_odds(_odds_game("Boston Celtics", "Miami Heat", bookmakers=[no_spread, full]))
    assert odds.bookmaker == "draftkings"
    assert extract_game_odds(_odds_game("Boston Celtics", "Miami Heat", bookmakers=[no_spread])) is None


def test_odds_for_game(game):
    assert odds_for_game(game, None) is None
    assert odds_for_game(game, []) is None
    assert odds_for_game(game, [_odds_game("Boston Celtics", "Miami Heat")]).to_dict()["spread_line"] == 4.5


def test_odds_params_and_missing_key(monkeypatch):
    params = odds_api.build_odds_params("k")
    assert params["apiKey"] == "k"
    assert params["oddsFormat"] == "american"
    assert odds_api.build_odds_url("https://odds.test/v4/").endswith("/v4/sports/basketball_nba/odds")

    monkeypatch.setattr(odds_api.settings, "odds_api_key", None)
    with pytest.raises(odds_api.OddsApiKeyMissing):
        odds_api.fetch_odds()
