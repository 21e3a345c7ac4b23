"""
Vocabulary graph models.

Words and sentences joined by a many-to-many occurrence table. Review state
for the SM-2 scheduler lives directly on the word row.

All DateTime columns hold naive UTC values.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

# Easiness factor floor from SM-2
MIN_E_FACTOR = 1.3
DEFAULT_E_FACTOR = 2.5


class Word(Base):
    """A dictionary-form word and its review state."""

    __tablename__ = "words"
    __table_args__ = (CheckConstraint(f"e_factor >= {MIN_E_FACTOR}", name="ck_words_e_factor"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    frequency_rank: Mapped[int] = mapped_column(Integer, nullable=False)
    occurrence_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # SM-2 state
    reviewed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    repetition: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    e_factor: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_E_FACTOR)
    review_interval: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # seconds
    next_review_at: Mapped[datetime | None] = mapped_column(DateTime)

    date_first_reviewed: Mapped[datetime | None] = mapped_column(DateTime)
    date_added: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    sentences: Mapped[list[Sentence]] = relationship(
        secondary="word_sentence", back_populates="words", viewonly=True
    )

    def __repr__(self) -> str:
        return f"<Word id={self.id} text={self.text!r} rep={self.repetition}>"


class Sentence(Base):
    """An ingested sentence. Never mutated after insert."""

    __tablename__ = "sentences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    source: Mapped[str] = mapped_column(Text, nullable=False, default="")
    date_added: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    words: Mapped[list[Word]] = relationship(
        secondary="word_sentence", back_populates="sentences", viewonly=True
    )

    def __repr__(self) -> str:
        return f"<Sentence id={self.id} text={self.text!r}>"


class WordSentence(Base):
    """Occurrence link: word appears in sentence."""

    __tablename__ = "word_sentence"
    __table_args__ = (
        Index("sentence_index", "sentence_id"),
        Index("word_index", "word_id"),
    )

    word_id: Mapped[int] = mapped_column(
        ForeignKey("words.id", ondelete="CASCADE"), primary_key=True
    )
    sentence_id: Mapped[int] = mapped_column(
        ForeignKey("sentences.id", ondelete="CASCADE"), primary_key=True
    )
