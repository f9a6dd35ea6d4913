"""Catalog of the thirteen research-score variables.

Order matters: the team score calculator emits its breakdown in this order.
"""
from __future__ import annotations

from app.modeling.types import ScoringVariable

SCORING_VARIABLES: tuple[ScoringVariable, ...] = (
    ScoringVariable(
        id="closeGame",
        name="Close Game Yesterday",
        description="Yesterday's game was within 5 points",
        points=3,
        category="performance",
    ),
    ScoringVariable(
        id="favoriteLost",
        name="Favorite Lost",
        description="Favorite lost last game",
        points=5,
        category="performance",
    ),
    ScoringVariable(
        id="favoriteWon",
        name="Favorite Won",
        description="Favorite won last game",
        points=2,
        category="performance",
    ),
    ScoringVariable(
        id="homeGame",
        name="Home Game",
        description="Playing at home",
        points=3,
        category="situation",
    ),
    ScoringVariable(
        id="awayGame",
        name="Away Game",
        description="Playing away",
        points=-2,
        category="situation",
    ),
    ScoringVariable(
        id="scoredOver",
        name="Scored Over Average",
        description="Scored over season average last game",
        points=2,
        category="performance",
    ),
    ScoringVariable(
        id="scoredUnder",
        name="Scored Under Average",
        description="Scored under season average last game",
        points=-2,
        category="performance",
    ),
    ScoringVariable(
        id="lost2",
        name="2-Game Losing Streak",
        description="Lost 2 games in a row",
        points=4,
        category="streak",
    ),
    ScoringVariable(
        id="lost3Plus",
        name="3+ Game Losing Streak",
        description="Lost 3 or more games in a row",
        points=6,
        category="streak",
    ),
    ScoringVariable(
        id="opponentUnder",
        name="Weak Opponent",
        description="Opponent is under .500",
        points=3,
        category="opponent",
    ),
    ScoringVariable(
        id="opponentOver",
        name="Strong Opponent",
        description="Opponent is over .500",
        points=-1,
        category="opponent",
    ),
    ScoringVariable(
        id="backToBack",
        name="Back-to-Back Game",
        description="Team is on a back-to-back",
        points=-4,
        category="situation",
    ),
    ScoringVariable(
        id="opponentBackToBack",
        name="Opponent Back-to-Back",
        description="Opponent is on a back-to-back",
        points=4,
        category="situation",
    ),
)

VARIABLES_BY_ID: dict[str, ScoringVariable] = {v.id: v for v in SCORING_VARIABLES}


def get_variable(variable_id: str) -> ScoringVariable:
    try:
        return VARIABLES_BY_ID[variable_id]
    except KeyError as exc:
        raise KeyError(f"Unknown scoring variable: {variable_id}") from exc
