from datetime import date

import pytest
from unittest.mock import MagicMock
from sqlalchemy.pool import StaticPool

from vocab_scheduler.catalog import SqlVocabularyCatalog
from vocab_scheduler.config import Settings
from vocab_scheduler.crud import create_item
from vocab_scheduler.database import init_db, make_engine, make_session_factory
from vocab_scheduler.schemas import VocabularyItemCreate
from vocab_scheduler.service import SchedulingService
from vocab_scheduler.store import SqlScheduleStore

TODAY = date(2024, 3, 10)

WORDS = [
    ("house", "Haus", "A1"),
    ("to negotiate", "verhandeln", "B2"),
    ("reliable", "zuverlässig", "B1"),
    ("thorough", "gründlich", "C1"),
]


@pytest.fixture(autouse=True)
def silence_logger(monkeypatch):
    # Keep structured log lines out of captured CLI output
    import vocab_scheduler.logger as logger_mod
    monkeypatch.setattr(logger_mod, "get_logger", lambda *a, **k: MagicMock())
    yield


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def item_ids(session_factory):
    db = session_factory()
    try:
        return [
            create_item(db, VocabularyItemCreate(english=en, german=de, level=lvl)).id
            for en, de, lvl in WORDS
        ]
    finally:
        db.close()


@pytest.fixture
def store(session_factory):
    return SqlScheduleStore(session_factory)


@pytest.fixture
def catalog(session_factory):
    return SqlVocabularyCatalog(session_factory)


@pytest.fixture
def make_service(store, catalog):
    def _make(config=None, store_override=None):
        return SchedulingService(
            store_override or store,
            catalog,
            config=config or Settings(),
            today=lambda: TODAY,
        )
    return _make


@pytest.fixture
def service(make_service):
    return make_service()
