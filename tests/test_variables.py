from __future__ import annotations

import pytest

from app.modeling.variables import SCORING_VARIABLES, get_variable

EXPECTED_POINTS = {
    "closeGame": 3,
    "favoriteLost": 5,
    "favoriteWon": 2,
    "homeGame": 3,
    "awayGame": -2,
    "scoredOver": 2,
    "scoredUnder": -2,
    "lost2": 4,
    "lost3Plus": 6,
    "opponentUnder": 3,
    "opponentOver": -1,
    "backToBack": -4,
    "opponentBackToBack": 4,
}


def test_catalog_order_and_points() -> None:
    assert [v.id for v in SCORING_VARIABLES] == list(EXPECTED_POINTS)
    assert {v.id: v.points for v in SCORING_VARIABLES} == EXPECTED_POINTS


def test_ids_unique_and_described() -> None:
    ids = [v.id for v in SCORING_VARIABLES]
    assert len(ids) == len(set(ids)) == 13
    for variable in SCORING_VARIABLES:
        assert variable.name
        assert variable.description


def test_get_variable_unknown_raises() -> None:
    assert get_variable("lost2").points == 4
    with pytest.raises(KeyError):
        get_variable("nope")
