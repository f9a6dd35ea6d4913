"""ESPN-shaped payload builders shared by the collector and service tests."""
from __future__ import annotations

from typing import Any

TEAMS = {
    "2": ("2", "BOS", "Boston Celtics"),
    "14": ("14", "MIA", "Miami Heat"),
    "9": ("9", "GS", "Golden State Warriors"),
    "21": ("21", "PHX", "Phoenix Suns"),
}


def make_competitor(team_id: str, home_away: str, *, score: Any = None, record: str | None = None) -> dict:
    tid, abbreviation, display_name = TEAMS[team_id]
    raw: dict[str, Any] = {
        "homeAway": home_away,
        "team": {"id": tid, "abbreviation": abbreviation, "displayName": display_name},
    }
    if score is not None:
        raw["score"] = score
    if record is not None:
        raw["records"] = [{"type": "total", "summary": record}]
    return raw


def make_event(
    game_id: str,
    home_id: str,
    away_id: str,
    *,
    date: str = "2025-11-04T00:30Z",
    completed: bool = False,
    home_score: Any = None,
    away_score: Any = None,
    home_record: str | None = "10-5",
    away_record: str | None = "8-7",
) -> dict:
    return {
        "id": game_id,
        "date": date,
        "competitions": [
            {
                "competitors": [
                    make_competitor(home_id, "home", score=home_score, record=home_record),
                    make_competitor(away_id, "away", score=away_score, record=away_record),
                ],
                "status": {
                    "type": {"completed": completed, "description": "Final" if completed else "Scheduled"}
                },
            }
        ],
    }
