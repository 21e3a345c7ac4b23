"""
i+1 Sentence Selection.

Picks the next sentence to study from the word/sentence graph:

Phase 1 (review): among sentences with no new words, the one covering the
most due words. Skipped when no such sentence has a due word.

Phase 2 (acquisition): among sentences with new words, the one with the
fewest; ties go to the sentence whose new words already occur most often
elsewhere in the corpus, since those will be reinforced again soon.

Remaining ties are broken randomly by the database.

Day window: words with an interval of a day or more become due as soon as
their review time falls before the next day rollover (04:00 local by
default), so tomorrow-morning reviews can be done tonight. Shorter learning
steps wait for their exact time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from loguru import logger
from sqlalchemy import and_, case, func, null, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from iplusone.db.models import Sentence, Word, WordSentence
from iplusone.db.utils import to_storage

DAY_END_HOUR = 4
ONE_DAY_SECONDS = int(timedelta(days=1).total_seconds())

NOTHING_TO_REVIEW = "No sentence with any new words and no words are scheduled for reviewing."


def end_of_day(now: datetime, day_end_hour: int = DAY_END_HOUR) -> datetime:
    """
    Next day rollover after ``now``, in ``now``'s timezone.

    Before the rollover hour that is today at ``day_end_hour``:00, otherwise
    tomorrow. Naive values are taken as local time.

    Zone-aware values (``zoneinfo``) follow their zone's DST rules. A fixed
    offset matching the system's local offset, as produced by
    ``astimezone()``, is re-resolved as local time after the date shift so
    the boundary stays at local ``day_end_hour``:00 across a DST change.
    Any other fixed offset is kept as is.
    """
    local = now if now.tzinfo is not None else now.astimezone()
    boundary = local.replace(hour=day_end_hour, minute=0, second=0, microsecond=0)
    if local.hour >= day_end_hour:
        boundary += timedelta(days=1)
    if isinstance(local.tzinfo, timezone) and local.utcoffset() == local.astimezone().utcoffset():
        boundary = boundary.replace(tzinfo=None).astimezone()
    return boundary


def due_clause(now: datetime, boundary: datetime) -> ColumnElement[bool]:
    """
    SQL predicate for a due word.

    ``now`` and ``boundary`` are storage (naive UTC) values.
    """
    return or_(
        and_(
            Word.reviewed.is_(True),
            Word.next_review_at < boundary,
            Word.review_interval >= ONE_DAY_SECONDS,
        ),
        Word.next_review_at < now,
    )


def new_clause() -> ColumnElement[bool]:
    """SQL predicate for a word that has never been reviewed."""
    return Word.reviewed.is_(False)


@dataclass
class SelectionResult:
    """The sentence to show next and the words it exercises."""

    sentence_id: int
    sentence_text: str
    sentence_source: str
    due_words: list[tuple[int, str]] = field(default_factory=list)
    new_words: list[tuple[int, str]] = field(default_factory=list)

    @classmethod
    def nothing_to_review(cls) -> SelectionResult:
        return cls(sentence_id=0, sentence_text=NOTHING_TO_REVIEW, sentence_source="")

    @property
    def is_empty(self) -> bool:
        """True when there is nothing left to study."""
        return self.sentence_id == 0


class SentenceSelector:
    """
    Queries the vocabulary graph for the next i+1 sentence.

    Stateless apart from the rollover hour; every method takes the session
    and the ``now`` of the calling operation.
    """

    def __init__(self, day_end_hour: int = DAY_END_HOUR):
        self.day_end_hour = day_end_hour

    def window(self, now: datetime) -> tuple[datetime, datetime]:
        """(now, day boundary) as storage values."""
        return to_storage(now), to_storage(end_of_day(now, self.day_end_hour))

    def due_clause(self, now: datetime) -> ColumnElement[bool]:
        return due_clause(*self.window(now))

    # ========================================
    # Selection
    # ========================================

    def select(self, session: Session, now: datetime) -> SelectionResult:
        """Pick the next sentence, or the nothing-to-review sentinel."""
        logger.info("Attempting to find a sentence to review...")
        due = self.due_clause(now)

        row = self._select_review_sentence(session, due)
        if row is None:
            logger.info("Couldn't find a sentence that contains no new words")
        elif row.due_count > 0:
            logger.info(
                "Found a sentence with {} words that need reviewing: {}",
                row.due_count,
                row.text,
            )
            return self._build_result(session, row, due)

        row = self._select_acquisition_sentence(session)
        if row is None:
            logger.info("No sentence with new words and nothing due")
            return SelectionResult.nothing_to_review()

        logger.info(
            "Found a sentence with {} new words with an average {} occurrence count",
            row.new_count,
            row.average_new_count,
        )
        return self._build_result(session, row, due)

    def _select_review_sentence(self, session: Session, due: ColumnElement[bool]):
        due_count = func.sum(case((due, 1), else_=0))
        new_count = func.sum(case((new_clause(), 1), else_=0))

        stmt = (
            select(
                Sentence.id,
                Sentence.text,
                Sentence.source,
                due_count.label("due_count"),
                new_count.label("new_count"),
            )
            .join(WordSentence, WordSentence.sentence_id == Sentence.id)
            .join(Word, Word.id == WordSentence.word_id)
            .group_by(Sentence.id, Sentence.text, Sentence.source)
            .having(new_count == 0)
            .order_by(due_count.desc(), new_count.asc(), func.random())
            .limit(1)
        )
        return session.execute(stmt).first()

    def _select_acquisition_sentence(self, session: Session):
        new_count = func.sum(case((new_clause(), 1), else_=0))
        average_new_count = func.avg(case((new_clause(), Word.occurrence_count), else_=null()))

        stmt = (
            select(
                Sentence.id,
                Sentence.text,
                Sentence.source,
                new_count.label("new_count"),
                average_new_count.label("average_new_count"),
            )
            .join(WordSentence, WordSentence.sentence_id == Sentence.id)
            .join(Word, Word.id == WordSentence.word_id)
            .group_by(Sentence.id, Sentence.text, Sentence.source)
            .having(new_count > 0)
            .order_by(new_count.asc(), average_new_count.desc(), func.random())
            .limit(1)
        )
        return session.execute(stmt).first()

    def _build_result(self, session: Session, row, due: ColumnElement[bool]) -> SelectionResult:
        return SelectionResult(
            sentence_id=row.id,
            sentence_text=row.text,
            sentence_source=row.source,
            due_words=self._words_in_sentence(session, row.id, due),
            new_words=self._words_in_sentence(session, row.id, new_clause()),
        )

    # ========================================
    # Word lookups
    # ========================================

    def _words_in_sentence(
        self,
        session: Session,
        sentence_id: int,
        condition: ColumnElement[bool] | None = None,
    ) -> list[tuple[int, str]]:
        stmt = (
            select(Word.id, Word.text)
            .join(WordSentence, WordSentence.word_id == Word.id)
            .where(WordSentence.sentence_id == sentence_id)
            .order_by(Word.id)
        )
        if condition is not None:
            stmt = stmt.where(condition)
        return [(word_id, text) for word_id, text in session.execute(stmt)]

    def words_in_sentence(self, session: Session, sentence_id: int) -> list[tuple[int, str]]:
        """All (word id, text) pairs linked to the sentence."""
        return self._words_in_sentence(session, sentence_id)

    def due_words_in_sentence(
        self, session: Session, sentence_id: int, now: datetime
    ) -> list[tuple[int, str]]:
        return self._words_in_sentence(session, sentence_id, self.due_clause(now))

    def new_words_in_sentence(self, session: Session, sentence_id: int) -> list[tuple[int, str]]:
        return self._words_in_sentence(session, sentence_id, new_clause())

    # ========================================
    # Aggregates
    # ========================================

    def count_due(self, session: Session, now: datetime) -> int:
        """Number of due words across the whole vocabulary."""
        stmt = select(func.count()).select_from(Word).where(self.due_clause(now))
        return session.execute(stmt).scalar_one()
