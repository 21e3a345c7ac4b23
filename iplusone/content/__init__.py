"""Text ingestion: frequency ranks, sentence splitting, tokenization."""

from .analyzers import Analyzer, FugashiAnalyzer, JumanppAnalyzer, create_analyzer
from .frequency import FrequencyIndex
from .splitter import split_sentences

__all__ = [
    "Analyzer",
    "FrequencyIndex",
    "FugashiAnalyzer",
    "JumanppAnalyzer",
    "create_analyzer",
    "split_sentences",
]
