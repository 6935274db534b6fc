"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Every test runs against its own SQLite database file; the environment is
pointed at SQLite before any application module reads its settings.
"""
import os
import random
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_DEV_ROUTES"] = "true"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from sqlalchemy.orm import sessionmaker  # noqa: E402

from vocab_srs.core.clock import FixedClock  # noqa: E402
from vocab_srs.db.database import build_engine  # noqa: E402
from vocab_srs.db.models import Base, Item, ItemTranslation, Lesson  # noqa: E402

# Tuesday morning; the day boundary is local midnight
NOW = datetime(2026, 3, 10, 9, 30)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (database + API)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite database with all tables."""
    test_engine = build_engine(f"sqlite:///{tmp_path / 'vocab_srs_test.db'}")
    Base.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def make_items(session_factory):
    """
    Factory creating committed items in one lesson.

    ``difficulties`` gives one item per entry; each item gets a French
    translation "fr-<n>".
    """

    def _make(difficulties: list[int], lesson_title: str = "Greetings") -> list[int]:
        session = session_factory()
        try:
            lesson = Lesson(title=lesson_title, order_index=0)
            session.add(lesson)
            session.flush()
            ids = []
            for n, difficulty in enumerate(difficulties):
                item = Item(
                    lesson_id=lesson.id,
                    item_type="word",
                    term=f"term-{lesson.id}-{n}",
                    difficulty=difficulty,
                    order_index=n,
                )
                item.translations.append(ItemTranslation(locale="fr", translation=f"fr-{n}"))
                session.add(item)
                session.flush()
                ids.append(item.id)
            session.commit()
            return ids
        finally:
            session.close()

    return _make
