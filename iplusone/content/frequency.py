"""
Word frequency ranks.

Rank is the 0-based position in a frequency list (most frequent first). Words
missing from the list get the list length, i.e. rank below every listed word.
"""

from __future__ import annotations

from collections.abc import Iterable
from importlib import resources
from pathlib import Path
from types import MappingProxyType

from loguru import logger

BUNDLED_LIST = "word_frequency.txt"


class FrequencyIndex:
    """Immutable word -> rank lookup."""

    __slots__ = ("_ranks", "_size")

    def __init__(self, words: Iterable[str]):
        ranks: dict[str, int] = {}
        size = 0
        for index, line in enumerate(words):
            size = index + 1
            word = line.strip()
            # Blank lines hold their position but are never a word
            if word and word not in ranks:
                ranks[word] = index
        self._ranks = MappingProxyType(ranks)
        self._size = size

    @classmethod
    def from_path(cls, path: str | Path) -> FrequencyIndex:
        """Load a newline-delimited list from disk."""
        path = Path(path)
        lines = path.read_text(encoding="utf-8").splitlines()
        logger.info("Loaded {} frequency ranks from {}", len(lines), path)
        return cls(lines)

    @classmethod
    def from_package(cls) -> FrequencyIndex:
        """Load the list shipped with the package."""
        text = resources.files("iplusone.data").joinpath(BUNDLED_LIST).read_text(encoding="utf-8")
        lines = text.splitlines()
        logger.warning(
            "Using the bundled starter list ({} words); set FREQUENCY_LIST_PATH to a full list",
            len(lines),
        )
        return cls(lines)

    def rank(self, word: str) -> int:
        return self._ranks.get(word, self._size)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, word: object) -> bool:
        return word in self._ranks

    def __repr__(self) -> str:
        return f"FrequencyIndex(size={self._size})"
