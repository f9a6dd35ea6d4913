"""Fixed sample slate used to seed prediction history for demos and tests."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

from app.modeling.types import (
    LastGame,
    Streak,
    TeamSnapshot,
    WinLossRecord,
    win_percentage_for,
)


@dataclass(frozen=True)
class SampleSide:
    city: str
    name: str
    wins: int
    losses: int
    average: float
    last_score: int
    last_opponent_score: int
    streak: int  # positive = winning streak, negative = losing streak
    last_opponent_win_pct: float
    final_score: int
    back_to_back: bool = False


@dataclass(frozen=True)
class SampleGame:
    game_date: date
    home: SampleSide
    away: SampleSide

    @property
    def game_id(self) -> str:
        raw = (
            f"test-{self.game_date.isoformat()}-{self.home.city}-{self.home.name}"
            f"-vs-{self.away.city}-{self.away.name}"
        )
        return "-".join(raw.split())


def _side(city, name, wins, losses, avg, last, last_opp, streak, opp_pct, final, b2b=False) -> SampleSide:
    return SampleSide(city, name, wins, losses, avg, last, last_opp, streak, opp_pct, final, b2b)


_NOV_4 = date(2025, 11, 4)
_NOV_5 = date(2025, 11, 5)

SAMPLE_GAMES: tuple[SampleGame, ...] = (
    SampleGame(_NOV_4, _side("Boston", "Celtics", 52, 8, 118, 122, 108, 5, 0.58, 118),
               _side("Miami", "Heat", 38, 22, 108, 102, 110, -2, 0.52, 105)),
    SampleGame(_NOV_4, _side("Golden State", "Warriors", 42, 18, 116, 105, 112, -1, 0.55, 110),
               _side("Phoenix", "Suns", 45, 15, 115, 120, 108, 3, 0.57, 115)),
    SampleGame(_NOV_4, _side("Los Angeles", "Lakers", 35, 25, 112, 98, 104, -3, 0.50, 102),
               _side("Denver", "Nuggets", 48, 12, 118, 125, 110, 4, 0.60, 112)),
    SampleGame(_NOV_4, _side("Milwaukee", "Bucks", 50, 10, 120, 128, 115, 6, 0.58, 125),
               _side("Atlanta", "Hawks", 32, 28, 110, 105, 115, -2, 0.48, 108)),
    SampleGame(_NOV_4, _side("Dallas", "Mavericks", 44, 16, 115, 118, 112, 2, 0.54, 116),
               _side("Memphis", "Grizzlies", 40, 20, 113, 108, 110, -1, 0.52, 114)),
    SampleGame(_NOV_4, _side("Philadelphia", "76ers", 38, 22, 111, 102, 108, -1, 0.51, 98),
               _side("New York", "Knicks", 46, 14, 116, 122, 105, 4, 0.57, 109)),
    SampleGame(_NOV_4, _side("Brooklyn", "Nets", 36, 24, 110, 112, 108, 2, 0.50, 107),
               _side("Toronto", "Raptors", 30, 30, 106, 98, 105, -2, 0.47, 103)),
    SampleGame(_NOV_4, _side("Cleveland", "Cavaliers", 48, 12, 118, 125, 110, 5, 0.59, 122),
               _side("Indiana", "Pacers", 34, 26, 112, 108, 115, -1, 0.49, 98, b2b=True)),
    SampleGame(_NOV_5, _side("Chicago", "Bulls", 28, 32, 108, 95, 105, -3, 0.46, 95),
               _side("Charlotte", "Hornets", 38, 22, 114, 118, 110, 3, 0.53, 108)),
    SampleGame(_NOV_5, _side("Minnesota", "Timberwolves", 46, 14, 116, 122, 108, 4, 0.57, 119),
               _side("Portland", "Trail Blazers", 25, 35, 105, 98, 112, -4, 0.44, 92)),
    SampleGame(_NOV_5, _side("Sacramento", "Kings", 40, 20, 115, 118, 115, 2, 0.53, 112),
               _side("Utah", "Jazz", 32, 28, 110, 105, 108, -1, 0.48, 108)),
    SampleGame(_NOV_5, _side("Houston", "Rockets", 42, 18, 114, 118, 108, 3, 0.55, 121),
               _side("San Antonio", "Spurs", 30, 30, 108, 102, 110, -2, 0.47, 105)),
    SampleGame(_NOV_5, _side("Oklahoma City", "Thunder", 50, 10, 120, 128, 112, 6, 0.60, 128),
               _side("New Orleans", "Pelicans", 28, 32, 106, 98, 115, -3, 0.45, 95)),
)


def sample_team_id(side: SampleSide) -> str:
    return "".join(side.city.split())[:3].upper()


def sample_snapshot(side: SampleSide) -> TeamSnapshot:
    streak = Streak("W" if side.streak > 0 else "L", abs(side.streak))
    team_id = sample_team_id(side)
    return TeamSnapshot(
        id=team_id,
        abbreviation=team_id,
        city=side.city,
        name=side.name,
        wins=side.wins,
        losses=side.losses,
        win_percentage=win_percentage_for(side.wins, side.losses),
        streak=streak,
        season_average=float(side.average),
        last_game=LastGame(
            own_score=side.last_score,
            opponent_score=side.last_opponent_score,
            was_favorite=side.last_opponent_win_pct < 0.5,
        ),
        home_record=WinLossRecord(side.wins // 2, side.losses // 2),
        away_record=WinLossRecord(math.ceil(side.wins / 2), math.ceil(side.losses / 2)),
        back_to_back=side.back_to_back,
    )
