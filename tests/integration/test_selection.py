"""
Integration tests for i+1 sentence selection and the due-word count.

Run: pytest tests/integration/test_selection.py -v
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from iplusone.db.database import session_scope
from iplusone.db.models import Sentence
from iplusone.study.sentence_selector import NOTHING_TO_REVIEW

JST = timezone(timedelta(hours=9))


def sentence_id(session_factory, text):
    with session_scope(session_factory) as session:
        return session.execute(select(Sentence.id).where(Sentence.text == text)).scalar_one()


def texts(words):
    return [text for _, text in words]


class TestEmptyCorpus:
    def test_sentinel(self, service, now):
        result = service.get_next_sentence_for_review(now)
        assert result.sentence_id == 0
        assert result.sentence_text == NOTHING_TO_REVIEW
        assert result.due_words == []
        assert result.new_words == []

    def test_zero_count(self, service, now):
        assert service.get_review_count(now) == 0


class TestAcquisitionPhase:
    """Sentences with new words: fewest first, familiar new words preferred."""

    def test_fewest_new_words(self, service, now):
        service.add_text("a b c。\na d。\ne。\n", "test")
        result = service.get_next_sentence_for_review(now)
        assert result.sentence_text == "e。"
        assert texts(result.new_words) == ["e"]
        assert result.due_words == []

    def test_tie_broken_by_average_occurrence(self, service, make_known, now):
        service.add_text("common 甲。\ncommon 乙。\nrare 丙。\n", "test")
        make_known("甲", "乙", "丙")

        for _ in range(5):
            result = service.get_next_sentence_for_review(now)
            assert result.sentence_text in ("common 甲。", "common 乙。")
            assert texts(result.new_words) == ["common"]

    def test_includes_due_words_of_chosen_sentence(self, service, make_due, make_known, now):
        service.add_text("a b。\nc。\nb e f。\n", "test")
        make_due("a")
        make_known("f")

        result = service.get_next_sentence_for_review(now)
        assert result.sentence_text == "a b。"
        assert texts(result.due_words) == ["a"]
        assert texts(result.new_words) == ["b"]

    def test_reviewed_sentence_without_due_words_falls_through(self, service, make_known, now):
        service.add_text("a b。\nc。\n", "test")
        make_known("a", "b")

        result = service.get_next_sentence_for_review(now)
        assert result.sentence_text == "c。"
        assert texts(result.new_words) == ["c"]

    def test_source_returned(self, service, now):
        service.add_text("a。", "novel")
        assert service.get_next_sentence_for_review(now).sentence_source == "novel"


class TestReviewPhase:
    """Sentences without new words: most due words first."""

    def test_most_due_words(self, service, make_due, make_known, session_factory, now):
        service.add_text("a b。\na c d。\ne。\n", "test")
        make_known("a", "b", "c", "d")
        make_due("a", "c", "d")

        result = service.get_next_sentence_for_review(now)
        assert result.sentence_id == sentence_id(session_factory, "a c d。")
        assert texts(result.due_words) == ["a", "c", "d"]
        assert result.new_words == []

    def test_review_beats_acquisition(self, service, make_due, now):
        service.add_text("a b。\nc。\n", "test")
        make_due("a", "b")

        result = service.get_next_sentence_for_review(now)
        assert result.sentence_text == "a b。"
        assert texts(result.due_words) == ["a", "b"]

    def test_everything_known_and_nothing_due(self, service, make_known, now):
        service.add_text("a b。\nc。\n", "test")
        make_known("a", "b", "c")

        result = service.get_next_sentence_for_review(now)
        assert result.is_empty
        assert service.get_review_count(now) == 0


class TestDueWindow:
    """Day-or-longer intervals are due before the 04:00 rollover."""

    def test_long_interval_due_before_rollover(self, service, set_word_state):
        service.add_text("長い。", "test")
        set_word_state(
            "長い",
            repetition=3,
            review_interval=int(timedelta(days=2).total_seconds()),
            next_review_at=datetime(2024, 5, 2, 3, 30, tzinfo=JST),
        )
        evening = datetime(2024, 5, 1, 23, 0, tzinfo=JST)
        assert service.get_review_count(evening) == 1

    def test_short_interval_waits_for_exact_time(self, service, set_word_state):
        service.add_text("短い。", "test")
        set_word_state(
            "短い",
            repetition=1,
            review_interval=300,
            next_review_at=datetime(2024, 5, 2, 3, 30, tzinfo=JST),
        )
        assert service.get_review_count(datetime(2024, 5, 1, 23, 0, tzinfo=JST)) == 0
        assert service.get_review_count(datetime(2024, 5, 2, 3, 31, tzinfo=JST)) == 1

    def test_long_interval_after_rollover_not_due(self, service, set_word_state):
        service.add_text("明日。", "test")
        set_word_state(
            "明日",
            repetition=3,
            review_interval=int(timedelta(days=2).total_seconds()),
            next_review_at=datetime(2024, 5, 2, 4, 30, tzinfo=JST),
        )
        assert service.get_review_count(datetime(2024, 5, 1, 23, 0, tzinfo=JST)) == 0
        assert service.get_review_count(datetime(2024, 5, 2, 4, 0, tzinfo=JST)) == 1

    def test_count_excludes_new_words(self, service, make_due, now):
        service.add_text("a b c。", "test")
        make_due("a")
        assert service.get_review_count(now) == 1

    def test_due_word_in_phase_one_with_window(self, service, set_word_state):
        service.add_text("a b。", "test")
        set_word_state(
            "a", "b",
            repetition=3,
            review_interval=int(timedelta(days=3).total_seconds()),
            next_review_at=datetime(2024, 5, 2, 1, 0, tzinfo=JST),
        )
        result = service.get_next_sentence_for_review(datetime(2024, 5, 1, 21, 0, tzinfo=JST))
        assert result.sentence_text == "a b。"
        assert texts(result.due_words) == ["a", "b"]
