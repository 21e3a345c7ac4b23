"""
Study Service - entry point for everything the shell needs.

Combines the pieces into the operations callers use:
- add_text / retokenize: build the word/sentence graph
- get_next_sentence_for_review: i+1 sentence selection
- review_sentence / review_word: SM-2 updates
- get_review_count: words still due in the current day window

Each operation samples "now" once (unless given) and passes that single value
through all of its queries.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from iplusone.config import Settings, get_settings
from iplusone.content.analyzers import Analyzer, create_analyzer
from iplusone.content.frequency import FrequencyIndex
from iplusone.content.ingestion import Ingestor
from iplusone.db.database import create_db_engine, create_session_factory, init_db, session_scope
from iplusone.db.models import Word
from iplusone.db.utils import from_storage, to_storage
from iplusone.study.scheduler import SM2Scheduler, SM2State
from iplusone.study.sentence_selector import (
    DAY_END_HOUR,
    SelectionResult,
    SentenceSelector,
    new_clause,
)


def local_now() -> datetime:
    """Current time as an aware local datetime."""
    return datetime.now().astimezone()


def resolve_now(now: datetime | None) -> datetime:
    """Aware ``now`` for an operation: None samples the clock, naive is local time."""
    if now is None:
        return local_now()
    if now.tzinfo is None:
        return now.astimezone()
    return now


class StudyService:
    """
    Sentence-based spaced repetition over a vocabulary graph.

    Holds no per-request state: only the session factory, the immutable
    frequency index and the analyzer are shared between calls.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        analyzer: Analyzer,
        frequency_index: FrequencyIndex,
        scheduler: SM2Scheduler | None = None,
        day_end_hour: int = DAY_END_HOUR,
    ):
        self._session_factory = session_factory
        self.analyzer = analyzer
        self.frequency_index = frequency_index
        self.scheduler = scheduler or SM2Scheduler()
        self.selector = SentenceSelector(day_end_hour=day_end_hour)
        self.ingestor = Ingestor(session_factory, analyzer, frequency_index, clock=local_now)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        engine: Engine | None = None,
        analyzer: Analyzer | None = None,
    ) -> StudyService:
        """Wire up engine, schema, frequency list and analyzer from configuration."""
        settings = settings or get_settings()
        engine = engine or create_db_engine(settings)
        init_db(engine)

        if settings.frequency_list_path:
            frequency_index = FrequencyIndex.from_path(Path(settings.frequency_list_path))
        else:
            frequency_index = FrequencyIndex.from_package()

        return cls(
            session_factory=create_session_factory(engine),
            analyzer=analyzer or create_analyzer(settings),
            frequency_index=frequency_index,
            day_end_hour=settings.day_end_hour,
        )

    # ========================================
    # Ingestion
    # ========================================

    def add_text(self, text: str, source: str) -> int:
        """Ingest raw text. Returns the number of sentences found."""
        return self.ingestor.add_text(text, source)

    def retokenize(self) -> None:
        """Rebuild every word/sentence link with the current analyzer."""
        self.ingestor.retokenize()

    # ========================================
    # Selection
    # ========================================

    def get_next_sentence_for_review(self, now: datetime | None = None) -> SelectionResult:
        now = resolve_now(now)
        with session_scope(self._session_factory) as session:
            return self.selector.select(session, now)

    def get_review_count(self, now: datetime | None = None) -> int:
        """Words currently due, including those batched into today's window."""
        now = resolve_now(now)
        with session_scope(self._session_factory) as session:
            return self.selector.count_due(session, now)

    def get_words_in_sentence(self, sentence_id: int) -> list[tuple[int, str]]:
        with session_scope(self._session_factory) as session:
            return self.selector.words_in_sentence(session, sentence_id)

    # ========================================
    # Reviews
    # ========================================

    def review_sentence(self, sentence_id: int, quality: float, now: datetime | None = None) -> None:
        """Review every word in the sentence with the same quality."""
        now = resolve_now(now)
        for word_id, _ in self.get_words_in_sentence(sentence_id):
            self.review_word(word_id, quality, now)

    def review_word(self, word_id: int, quality: float, now: datetime | None = None) -> None:
        """
        Apply one SM-2 step to a word.

        Only words that are due or new are reviewed; anything else (including
        unknown ids) is a no-op. Runs in its own transaction.
        """
        now = resolve_now(now)
        with session_scope(self._session_factory) as session:
            stmt = select(Word).where(
                Word.id == word_id,
                or_(self.selector.due_clause(now), new_clause()),
            )
            word = session.execute(stmt).scalar_one_or_none()
            if word is None:
                logger.info("Word id {} doesn't need reviewing.", word_id)
                return

            if word.reviewed:
                state = SM2State(
                    repetition=word.repetition,
                    interval=timedelta(seconds=word.review_interval),
                    e_factor=word.e_factor,
                )
            else:
                state = self.scheduler.initial_state()

            state = self.scheduler.step(state, quality)

            next_review_at = now + state.interval
            previous = from_storage(word.next_review_at)
            if word.reviewed and previous is not None and previous > next_review_at:
                next_review_at = previous

            logger.info("Reviewing word id {}, updated review data: {}", word_id, state)

            word.repetition = state.repetition
            word.e_factor = state.e_factor
            word.review_interval = int(state.interval.total_seconds())
            word.next_review_at = to_storage(next_review_at)
            word.reviewed = True
            if word.date_first_reviewed is None:
                word.date_first_reviewed = to_storage(now)
