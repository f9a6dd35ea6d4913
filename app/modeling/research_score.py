"""Research score engine.

Pure functions over :class:`TeamSnapshot` values. Nothing here performs I/O,
so analyses for different games can run in any order or in parallel.
"""
from __future__ import annotations

import logging

from app.modeling.confidence import classify_confidence, classify_differential
from app.modeling.types import (
    GameAnalysis,
    Recommendation,
    ScoreBreakdown,
    Side,
    TeamAnalysis,
    TeamSnapshot,
)
from app.modeling.variables import get_variable

logger = logging.getLogger(__name__)

HOME_BASE_SCORE = 3
AWAY_BASE_SCORE = -2
CLOSE_GAME_MARGIN = 5
EVEN_WIN_PERCENTAGE = 0.5


def _entry(variable_id: str, triggered: bool, reason: str | None = None) -> ScoreBreakdown:
    variable = get_variable(variable_id)
    return ScoreBreakdown(
        variable_id=variable.id,
        variable_name=variable.name,
        points=variable.points,
        triggered=triggered,
        reason=reason if triggered else None,
    )


def calculate_team_score(
    team: TeamSnapshot,
    is_home: bool,
    opponent: TeamSnapshot,
    team_back_to_back: bool,
    opponent_back_to_back: bool,
) -> TeamAnalysis:
    last_game = team.last_game
    if last_game is None:
        logger.warning("%s: no last game on record, using base score only", team.abbreviation)
        return TeamAnalysis(
            team_id=team.id,
            total_score=HOME_BASE_SCORE if is_home else AWAY_BASE_SCORE,
            breakdown=(),
            confidence="low",
        )

    own, opp = last_game.own_score, last_game.opponent_score
    average = team.season_average
    has_average = average > 0
    streak = team.streak
    home_record = team.home_record
    away_record = team.away_record

    breakdown = (
        _entry(
            "closeGame",
            abs(last_game.margin) <= CLOSE_GAME_MARGIN,
            f"Last game: {own}-{opp}",
        ),
        _entry(
            "favoriteLost",
            last_game.was_favorite and last_game.result == "L",
            f"Lost as favorite: {own}-{opp}",
        ),
        _entry(
            "favoriteWon",
            last_game.was_favorite and last_game.result == "W",
            f"Won as favorite: {own}-{opp}",
        ),
        _entry(
            "homeGame",
            is_home and home_record is not None,
            f"Home record: {home_record}",
        ),
        _entry(
            "awayGame",
            not is_home and away_record is not None,
            f"Away record: {away_record}",
        ),
        _entry(
            "scoredOver",
            has_average and own > average,
            f"Scored {own} vs {average:.1f} avg",
        ),
        _entry(
            "scoredUnder",
            has_average and own < average,
            f"Scored {own} vs {average:.1f} avg",
        ),
        _entry(
            "lost2",
            streak.type == "L" and streak.count == 2,
            "Lost last 2 games",
        ),
        _entry(
            "lost3Plus",
            streak.type == "L" and streak.count >= 3,
            f"Lost last {streak.count} games",
        ),
        _entry(
            "opponentUnder",
            opponent.win_percentage < EVEN_WIN_PERCENTAGE,
            f"Opponent {opponent.city} is {opponent.wins}-{opponent.losses}",
        ),
        _entry(
            "opponentOver",
            opponent.win_percentage > EVEN_WIN_PERCENTAGE,
            f"Opponent {opponent.city} is {opponent.wins}-{opponent.losses}",
        ),
        _entry(
            "backToBack",
            team_back_to_back,
            "Playing on consecutive days (fatigue factor)",
        ),
        _entry(
            "opponentBackToBack",
            opponent_back_to_back,
            "Opponent playing on consecutive days",
        ),
    )

    total_score = sum(item.points for item in breakdown if item.triggered)
    return TeamAnalysis(
        team_id=team.id,
        total_score=total_score,
        breakdown=breakdown,
        confidence=classify_confidence(total_score),
    )


def recommend(
    score_differential: int,
    home_team: TeamSnapshot,
    away_team: TeamSnapshot,
) -> Recommendation:
    confidence = classify_differential(score_differential)
    gap = abs(score_differential)
    if confidence == "low":
        return Recommendation(
            team="neutral",
            confidence="low",
            reasoning=(
                f"Research Scores are close ({gap}-point difference). "
                "This game doesn't present a clear betting edge."
            ),
        )

    side: Side = "home" if score_differential > 0 else "away"
    pick = home_team if side == "home" else away_team
    if confidence == "high":
        reasoning = (
            f"Strong {gap}-point advantage in Research Score suggests "
            f"{pick.display_name} has significantly better betting value."
        )
    else:
        reasoning = f"Moderate {gap}-point advantage suggests leaning toward {pick.display_name}."
    return Recommendation(team=side, confidence=confidence, reasoning=reasoning)


def analyze_game(
    game_id: str,
    home_team: TeamSnapshot,
    away_team: TeamSnapshot,
    home_back_to_back: bool,
    away_back_to_back: bool,
) -> GameAnalysis:
    home_analysis = calculate_team_score(
        home_team, True, away_team, home_back_to_back, away_back_to_back
    )
    away_analysis = calculate_team_score(
        away_team, False, home_team, away_back_to_back, home_back_to_back
    )
    score_differential = home_analysis.total_score - away_analysis.total_score
    logger.debug(
        "%s @ %s: %d vs %d (diff %+d)",
        away_team.abbreviation,
        home_team.abbreviation,
        away_analysis.total_score,
        home_analysis.total_score,
        score_differential,
    )
    return GameAnalysis(
        game_id=game_id,
        home_analysis=home_analysis,
        away_analysis=away_analysis,
        score_differential=score_differential,
        recommendation=recommend(score_differential, home_team, away_team),
    )
