"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import select, update

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from iplusone.config import Settings  # noqa: E402
from iplusone.content.frequency import FrequencyIndex  # noqa: E402
from iplusone.db.database import (  # noqa: E402
    create_db_engine,
    create_session_factory,
    init_db,
    session_scope,
)
from iplusone.db.models import Word  # noqa: E402
from iplusone.db.utils import to_storage  # noqa: E402
from iplusone.exceptions import TokenizeError  # noqa: E402
from iplusone.study.study_service import StudyService  # noqa: E402

JST = timezone(timedelta(hours=9))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (require database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class WhitespaceAnalyzer:
    """
    Test analyzer: words are separated by spaces, terminators are dropped.

    ``lemmas`` maps surface forms to dictionary forms; any sentence containing
    a string from ``fail_on`` raises TokenizeError.
    """

    def __init__(self, lemmas=None, fail_on=()):
        self.lemmas = dict(lemmas or {})
        self.fail_on = set(fail_on)
        self.calls = []

    def tokenize(self, sentence):
        self.calls.append(sentence)
        if any(marker in sentence for marker in self.fail_on):
            raise TokenizeError(f"cannot analyze {sentence!r}")
        words = sentence.strip("。！？").split()
        return [self.lemmas.get(word, word) for word in words]


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """A fixed mid-day instant in a non-UTC timezone."""
    return datetime(2024, 5, 1, 12, 0, tzinfo=JST)


@pytest.fixture
def analyzer():
    return WhitespaceAnalyzer()


@pytest.fixture
def frequency_index():
    return FrequencyIndex(["が", "好き", "猫", "犬"])


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file, ignoring any .env."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        log_level="DEBUG",
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def service(session_factory, analyzer, frequency_index):
    return StudyService(session_factory, analyzer, frequency_index)


@pytest.fixture
def get_word(session_factory):
    """Load a word row by text."""

    def _get(text):
        with session_scope(session_factory) as session:
            return session.execute(select(Word).where(Word.text == text)).scalar_one()

    return _get


@pytest.fixture
def set_word_state(session_factory):
    """
    Overwrite review state on the named words.

    ``next_review_at`` may be given as an aware datetime; it is converted to
    the storage representation.
    """

    def _set(*texts, **values):
        if values.get("next_review_at") is not None:
            values["next_review_at"] = to_storage(values["next_review_at"])
        values.setdefault("reviewed", True)
        with session_scope(session_factory) as session:
            session.execute(update(Word).where(Word.text.in_(texts)).values(**values))

    return _set


@pytest.fixture
def make_due(set_word_state, now):
    """Mark words as reviewed and overdue by a minute."""

    def _due(*texts):
        set_word_state(
            *texts,
            repetition=1,
            review_interval=600,
            next_review_at=now - timedelta(minutes=1),
        )

    return _due


@pytest.fixture
def make_known(set_word_state, now):
    """Mark words as reviewed and not due for several days."""

    def _known(*texts):
        set_word_state(
            *texts,
            repetition=3,
            review_interval=int(timedelta(days=6).total_seconds()),
            next_review_at=now + timedelta(days=6),
        )

    return _known
