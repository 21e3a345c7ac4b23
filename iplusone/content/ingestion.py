"""
Ingestion and retokenization of the word/sentence graph.

Each sentence is added in its own transaction:
1. Tokenize (before touching the store)
2. Insert the sentence if its text is new
3. Upsert each word (create, or bump its occurrence count)
4. Link word -> sentence

A sentence whose text is already stored is skipped entirely, so ingesting
the same text twice leaves the graph unchanged.

Word and sentence writes are single INSERT ... ON CONFLICT statements, which
keeps concurrent ingestion of the same text from creating duplicate rows.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, sessionmaker

from iplusone.content.analyzers import Analyzer
from iplusone.content.frequency import FrequencyIndex
from iplusone.content.splitter import split_sentences
from iplusone.db.database import session_scope
from iplusone.db.models import Sentence, Word, WordSentence
from iplusone.db.utils import to_storage, upsert_insert


class Ingestor:
    """Builds and rebuilds the vocabulary graph from text."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        analyzer: Analyzer,
        frequency_index: FrequencyIndex,
        clock: Callable[[], datetime],
    ):
        self._session_factory = session_factory
        self._analyzer = analyzer
        self._frequency = frequency_index
        self._clock = clock

    def add_text(self, text: str, source: str) -> int:
        """
        Split ``text`` into sentences and add each one.

        Args:
            text: Raw text, possibly many sentences
            source: Provenance tag stored with each new sentence

        Returns:
            Number of sentences found in the text

        Raises:
            TokenizeError: The analyzer failed; sentences before the failing
                one stay committed, later ones are not processed
            StoreError: Storage failure for the current sentence
        """
        sentences = split_sentences(text)
        for sentence in sentences:
            self.add_sentence(sentence, source)
        return len(sentences)

    def add_sentence(self, sentence: str, source: str) -> bool:
        """Add one sentence. Returns False if its text was already stored."""
        logger.info("Adding sentence {} from source {}", sentence, source)
        now = to_storage(self._clock())

        words = self._analyzer.tokenize(sentence)
        logger.debug("Contains words: {}", words)

        with session_scope(self._session_factory) as session:
            stmt = (
                upsert_insert(session, Sentence)
                .values(text=sentence, source=source, date_added=now)
                .on_conflict_do_nothing(index_elements=[Sentence.text])
                .returning(Sentence.id)
            )
            sentence_id = session.execute(stmt).scalar_one_or_none()

            # Already stored: its words were linked the first time round
            if sentence_id is None:
                logger.debug("Sentence already present, skipping")
                return False

            self._link_words(session, sentence_id, words, now)
        return True

    def retokenize(self) -> None:
        """
        Re-run the analyzer over every stored sentence in one transaction.

        Clears all links and occurrence counts, then rebuilds them. Review
        state is untouched. Must not run alongside other traffic.
        """
        logger.info("Retokenizing sentences...")
        now = to_storage(self._clock())

        with session_scope(self._session_factory) as session:
            logger.info("Clearing out word_sentence relationships...")
            session.execute(delete(WordSentence))

            logger.info("Setting all words count to 0...")
            session.execute(update(Word).values(occurrence_count=0))

            sentences = session.execute(select(Sentence.id, Sentence.text).order_by(Sentence.id)).all()
            logger.info("Retokenizing {} sentences...", len(sentences))

            for sentence_id, text in sentences:
                words = self._analyzer.tokenize(text)
                self._link_words(session, sentence_id, words, now)

        logger.info("Finished re-tokenizing")

    def _link_words(self, session: Session, sentence_id: int, words: list[str], now: datetime) -> None:
        for word in words:
            insert_word = upsert_insert(session, Word).values(
                text=word,
                frequency_rank=self._frequency.rank(word),
                occurrence_count=1,
                date_added=now,
            )
            stmt = insert_word.on_conflict_do_update(
                index_elements=[Word.text],
                set_={"occurrence_count": Word.occurrence_count + 1},
            ).returning(Word.id)
            word_id = session.execute(stmt).scalar_one()

            link = (
                upsert_insert(session, WordSentence)
                .values(word_id=word_id, sentence_id=sentence_id)
                .on_conflict_do_nothing()
            )
            session.execute(link)
