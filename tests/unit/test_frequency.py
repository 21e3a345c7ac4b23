"""
Unit tests for the frequency index.

Run: pytest tests/unit/test_frequency.py -v
"""

import pytest
from loguru import logger

from iplusone.content.frequency import FrequencyIndex


class TestFrequencyIndex:
    """Test FrequencyIndex rank lookups."""

    def test_rank_is_list_position(self):
        index = FrequencyIndex(["の", "に", "は"])
        assert index.rank("の") == 0
        assert index.rank("は") == 2

    def test_unknown_word_ranks_last(self):
        index = FrequencyIndex(["の", "に", "は"])
        assert index.rank("猫") == 3
        assert "猫" not in index

    def test_duplicates_keep_first_rank(self):
        index = FrequencyIndex(["の", "に", "の"])
        assert index.rank("の") == 0
        assert len(index) == 3

    def test_blank_lines_hold_position(self):
        index = FrequencyIndex(["の", "", "は"])
        assert index.rank("は") == 2
        assert "" not in index
        assert index.rank("") == 3

    def test_surrounding_whitespace_ignored(self):
        index = FrequencyIndex([" の ", "に\r"])
        assert index.rank("の") == 0
        assert index.rank("に") == 1

    def test_empty_list(self):
        index = FrequencyIndex([])
        assert len(index) == 0
        assert index.rank("の") == 0

    def test_immutable(self):
        index = FrequencyIndex(["の"])
        with pytest.raises(TypeError):
            index._ranks["に"] = 1
        with pytest.raises(AttributeError):
            index.extra = 1

    def test_from_path(self, tmp_path):
        path = tmp_path / "freq.txt"
        path.write_text("する\nいる\n\nある\n", encoding="utf-8")
        index = FrequencyIndex.from_path(path)
        assert index.rank("いる") == 1
        assert index.rank("ある") == 3
        assert len(index) == 4

    def test_from_package(self):
        index = FrequencyIndex.from_package()
        assert len(index) > 100
        assert index.rank("の") == 0
        assert "する" in index

    def test_from_package_warns_about_starter_list(self):
        messages = []
        sink_id = logger.add(messages.append, level="WARNING", format="{message}")
        try:
            FrequencyIndex.from_package()
        finally:
            logger.remove(sink_id)
        assert any("FREQUENCY_LIST_PATH" in message for message in messages)
