from __future__ import annotations

from app.clients import espn as espn_client
from app.clients import odds_api
from app.services import diagnostics
from tests.payloads import make_event


def test_all_services_ok(monkeypatch):
    monkeypatch.setattr(
        espn_client,
        "fetch_scoreboard",
        lambda day, *, use_cache=True: {"events": [make_event("1", "2", "14"), make_event("2", "9", "21")]},
    )
    monkeypatch.setattr(
        odds_api,
        "fetch_odds",
        lambda *, api_key=None, use_cache=True: odds_api.OddsFetchResult(games=[{}], remaining_quota=321),
    )
    espn, odds = diagnostics.run_diagnostics()
    assert espn.success and espn.games_count == 2
    assert odds.success and odds.odds_count == 1
    assert odds.remaining_quota == 321


def test_failures_are_reported(monkeypatch):
    def down(day, *, use_cache=True):
        raise RuntimeError("connection refused")

    def no_key(*, api_key=None, use_cache=True):
        raise odds_api.OddsApiKeyMissing("ODDS_API_KEY is not set")

    monkeypatch.setattr(espn_client, "fetch_scoreboard", down)
    monkeypatch.setattr(odds_api, "fetch_odds", no_key)
    espn, odds = diagnostics.run_diagnostics()
    assert espn.success is False
    assert "connection refused" in espn.error
    assert odds.success is False
    assert odds.message == "API key not configured"
    assert odds.to_dict()["service"] == "The Odds API"
