from __future__ import annotations

import pytest

from app.clients.logging import set_log_path
from app.db.engine import get_engine
from app.db.history import create_tables
from tests.payloads import make_event


@pytest.fixture(autouse=True)
def _no_collection_log():
    # app.main points the collection log at logs/ on import
    set_log_path(None)
    yield
    set_log_path(None)


@pytest.fixture
def espn_event():
    return make_event


@pytest.fixture
def engine(tmp_path):
    eng = get_engine(f"sqlite:///{tmp_path / 'history.db'}")
    create_tables(eng)
    return eng
