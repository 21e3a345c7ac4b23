# SQLAlchemy models
from .base import Base
from .vocabulary import DEFAULT_E_FACTOR, MIN_E_FACTOR, Sentence, Word, WordSentence

__all__ = [
    "Base",
    "Sentence",
    "Word",
    "WordSentence",
    "DEFAULT_E_FACTOR",
    "MIN_E_FACTOR",
]
