from __future__ import annotations

from datetime import date

import pytest

from app.clients.espn import build_scoreboard_url, build_team_schedule_url, format_espn_date, season_for
from app.collectors.espn import (
    DEFAULT_SEASON_AVERAGE,
    RecentGame,
    build_team_snapshot,
    calculate_season_average,
    calculate_streak,
    last_game_from,
    parse_recent_games,
    parse_score,
    parse_scoreboard,
    split_display_name,
    teams_on_scoreboard,
    venue_records,
)


def _recent(scores: list[tuple[int, int, bool]]) -> list[RecentGame]:
    return [
        RecentGame(
            game_date=date(2025, 11, i + 1),
            opponent="Opp",
            opponent_abbreviation="OPP",
            team_score=own,
            opponent_score=opp,
            is_home=home,
        )
        for i, (own, opp, home) in enumerate(scores)
    ]


class TestClientHelpers:
    def test_format_espn_date(self):
        assert format_espn_date(date(2025, 11, 4)) == "20251104"
        assert format_espn_date("2025-11-04") == "20251104"

    @pytest.mark.parametrize(
        ("day", "season"),
        [(date(2025, 11, 4), 2026), (date(2026, 3, 1), 2026), (date(2025, 7, 1), 2026), (date(2025, 6, 30), 2025)],
    )
    def test_season_for(self, day, season):
        assert season_for(day) == season

    def test_urls(self):
        base = "https://site.api.espn.com/apis/site/v2/sports/basketball/nba/"
        assert build_scoreboard_url(base).endswith("/nba/scoreboard")
        assert build_team_schedule_url("2", base).endswith("/nba/teams/2/schedule")


class TestScoreboard:
    def test_parses_games(self, espn_event):
        payload = {"events": [espn_event("401", "2", "14"), espn_event("402", "9", "21", home_record=None)]}
        games = parse_scoreboard(payload)
        assert [g.game_id for g in games] == ["401", "402"]
        first = games[0]
        assert first.home.abbreviation == "BOS"
        assert (first.home.wins, first.home.losses) == (10, 5)
        assert first.away.display_name == "Miami Heat"
        assert first.matchup == "MIA @ BOS"
        assert first.game_date == date(2025, 11, 4)
        assert not first.completed
        assert (games[1].home.wins, games[1].home.losses) == (0, 0)

    def test_skips_malformed_events(self, espn_event):
        broken = espn_event("403", "2", "14")
        broken["competitions"][0]["competitors"].pop()
        payload = {"events": [broken, "junk", espn_event("404", "9", "21")]}
        assert [g.game_id for g in parse_scoreboard(payload)] == ["404"]

    def test_malformed_record_is_zero(self, espn_event):
        (game,) = parse_scoreboard({"events": [espn_event("1", "2", "14", home_record="n/a")]})
        assert (game.home.wins, game.home.losses) == (0, 0)

    def test_teams_on_scoreboard(self, espn_event):
        games = parse_scoreboard({"events": [espn_event("1", "2", "14"), espn_event("2", "9", "21")]})
        assert teams_on_scoreboard(games) == {"2", "14", "9", "21"}

    @pytest.mark.parametrize(("raw", "expected"), [("112", 112), (98.0, 98), ({"value": 101.0}, 101), (None, None)])
    def test_parse_score(self, raw, expected):
        assert parse_score(raw) == expected


class TestSchedule:
    def test_recent_games_completed_only_and_chronological(self, espn_event):
        payload = {
            "events": [
                espn_event("3", "14", "2", date="2025-11-03T00:00Z", completed=True,
                           home_score={"value": 100.0}, away_score={"value": 104.0}),
                espn_event("1", "2", "9", date="2025-11-01T00:00Z", completed=True,
                           home_score={"value": 120.0}, away_score={"value": 99.0}),
                espn_event("5", "2", "21", date="2025-11-06T00:00Z"),
            ]
        }
        recent = parse_recent_games(payload, "2")
        assert [g.game_date for g in recent] == [date(2025, 11, 1), date(2025, 11, 3)]
        assert recent[0].is_home and recent[0].won
        assert not recent[1].is_home
        assert (recent[1].team_score, recent[1].opponent_score) == (104, 100)
        assert recent[1].opponent_abbreviation == "MIA"

    def test_limit_keeps_latest(self, espn_event):
        events = [
            espn_event(str(i), "2", "14", date=f"2025-11-{i:02d}T00:00Z", completed=True, home_score="100", away_score="90")
            for i in range(1, 13)
        ]
        recent = parse_recent_games({"events": events}, "2", limit=10)
        assert len(recent) == 10
        assert recent[-1].game_date == date(2025, 11, 12)


class TestDerivedStats:
    def test_streak_counts_back_from_last_game(self):
        recent = _recent([(100, 90, True), (90, 100, True), (95, 99, False), (80, 100, True)])
        assert str(calculate_streak(recent)) == "L3"

    def test_streak_empty(self):
        assert str(calculate_streak([])) == "W0"

    def test_season_average(self):
        assert calculate_season_average(_recent([(100, 1, True), (105, 1, True), (110, 1, True)])) == 105.0
        assert calculate_season_average(_recent([(101, 1, True), (102, 1, True), (102, 1, True)])) == 101.7
        assert calculate_season_average([]) == DEFAULT_SEASON_AVERAGE == 110.0

    def test_venue_records(self):
        home, away = venue_records(_recent([(100, 90, True), (90, 100, True), (99, 95, False)]))
        assert (home.wins, home.losses) == (1, 1)
        assert (away.wins, away.losses) == (1, 0)

    def test_last_game_uses_home_as_favorite(self):
        last = last_game_from(_recent([(80, 100, False), (98, 104, True)]))
        assert last.result == "L"
        assert last.was_favorite is True
        assert last_game_from([]) is None

    def test_split_display_name(self):
        assert split_display_name("Golden State Warriors") == ("Golden State", "Warriors")
        assert split_display_name("Heat") == ("", "Heat")

    def test_build_team_snapshot(self, espn_event):
        (game,) = parse_scoreboard({"events": [espn_event("1", "2", "14", home_record="3-1")]})
        snapshot = build_team_snapshot(game.home, _recent([(110, 100, True), (103, 101, False)]), back_to_back=True)
        assert snapshot.id == "2"
        assert snapshot.city == "Boston" and snapshot.name == "Celtics"
        assert snapshot.win_percentage == 0.75
        assert snapshot.season_average == 106.5
        assert str(snapshot.streak) == "W2"
        assert snapshot.back_to_back is True
        assert snapshot.last_game.own_score == 103

    def test_snapshot_without_games_has_no_last_game(self, espn_event):
        (game,) = parse_scoreboard({"events": [espn_event("1", "2", "14", home_record="0-0")]})
        snapshot = build_team_snapshot(game.home, [], back_to_back=False)
        assert snapshot.last_game is None
        assert snapshot.win_percentage == 0.5


def test_snapshot_prefers_espn_location_and_name(espn_event):
    event = espn_event("1", "2", "14")
    event["competitions"][0]["competitors"][0]["team"].update(
        {"displayName": "Portland Trail Blazers", "location": "Portland", "name": "Trail Blazers"}
    )
    (game,) = parse_scoreboard({"events": [event]})
    snapshot = build_team_snapshot(game.home, [], back_to_back=False)
    assert (snapshot.city, snapshot.name) == ("Portland", "Trail Blazers")
