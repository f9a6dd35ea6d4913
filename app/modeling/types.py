from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Confidence = Literal["high", "medium", "low"]
Side = Literal["home", "away", "neutral"]
GameResult = Literal["W", "L"]
VariableCategory = Literal["performance", "situation", "streak", "opponent"]

DEFAULT_WIN_PERCENTAGE = 0.5


def win_percentage_for(wins: int, losses: int) -> float:
    played = wins + losses
    if played <= 0:
        return DEFAULT_WIN_PERCENTAGE
    return wins / played


@dataclass(frozen=True)
class ScoringVariable:
    id: str
    name: str
    description: str
    points: int
    category: VariableCategory

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "points": self.points,
            "category": self.category,
        }


@dataclass(frozen=True)
class Streak:
    type: GameResult = "W"
    count: int = 0

    def __str__(self) -> str:
        return f"{self.type}{self.count}"


@dataclass(frozen=True)
class WinLossRecord:
    wins: int = 0
    losses: int = 0

    def __str__(self) -> str:
        return f"{self.wins}-{self.losses}"


@dataclass(frozen=True)
class LastGame:
    own_score: int
    opponent_score: int
    was_favorite: bool = False
    result: GameResult | None = None
    opponent: str | None = None

    def __post_init__(self) -> None:
        if self.result is None:
            object.__setattr__(
                self, "result", "W" if self.own_score > self.opponent_score else "L"
            )

    @property
    def margin(self) -> int:
        return self.own_score - self.opponent_score


@dataclass(frozen=True)
class TeamSnapshot:
    """Everything the scorer needs to know about one side of a matchup.

    ``win_percentage`` is taken as given; adapters compute it with
    :func:`win_percentage_for` so the 0.5 default for winless-and-lossless
    teams is applied consistently.
    """

    id: str
    abbreviation: str
    city: str
    name: str
    wins: int = 0
    losses: int = 0
    win_percentage: float = DEFAULT_WIN_PERCENTAGE
    streak: Streak = field(default_factory=Streak)
    season_average: float = 0.0
    last_game: LastGame | None = None
    home_record: WinLossRecord | None = None
    away_record: WinLossRecord | None = None
    back_to_back: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.city} {self.name}".strip()

    @property
    def record(self) -> str:
        return f"{self.wins}-{self.losses}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "abbreviation": self.abbreviation,
            "city": self.city,
            "name": self.name,
            "display_name": self.display_name,
            "record": self.record,
            "win_percentage": round(self.win_percentage, 3),
            "streak": str(self.streak),
            "season_average": self.season_average,
            "last_game": (
                {
                    "own_score": self.last_game.own_score,
                    "opponent_score": self.last_game.opponent_score,
                    "result": self.last_game.result,
                    "was_favorite": self.last_game.was_favorite,
                    "opponent": self.last_game.opponent,
                }
                if self.last_game
                else None
            ),
            "home_record": str(self.home_record) if self.home_record else None,
            "away_record": str(self.away_record) if self.away_record else None,
            "back_to_back": self.back_to_back,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    variable_id: str
    variable_name: str
    points: int
    triggered: bool = False
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "variable_id": self.variable_id,
            "variable_name": self.variable_name,
            "points": self.points,
            "triggered": self.triggered,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class TeamAnalysis:
    team_id: str
    total_score: int
    breakdown: tuple[ScoreBreakdown, ...]
    confidence: Confidence

    @property
    def triggered(self) -> tuple[ScoreBreakdown, ...]:
        return tuple(item for item in self.breakdown if item.triggered)

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "total_score": self.total_score,
            "confidence": self.confidence,
            "breakdown": [item.to_dict() for item in self.breakdown],
        }


@dataclass(frozen=True)
class Recommendation:
    team: Side
    confidence: Confidence
    reasoning: str

    def to_dict(self) -> dict[str, Any]:
        return {"team": self.team, "confidence": self.confidence, "reasoning": self.reasoning}


@dataclass(frozen=True)
class GameAnalysis:
    game_id: str
    home_analysis: TeamAnalysis
    away_analysis: TeamAnalysis
    score_differential: int
    recommendation: Recommendation

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_id": self.game_id,
            "home_analysis": self.home_analysis.to_dict(),
            "away_analysis": self.away_analysis.to_dict(),
            "score_differential": self.score_differential,
            "recommendation": self.recommendation.to_dict(),
        }
