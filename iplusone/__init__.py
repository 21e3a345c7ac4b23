"""
iplusone - sentence-based spaced repetition.

Schedules vocabulary reviews with SM-2 and picks the next sentence to study so
that it reviews overdue words while introducing as little new vocabulary as
possible.
"""

from iplusone.exceptions import KnowledgeError, StoreError, TokenizeError
from iplusone.study.study_service import StudyService

__version__ = "0.1.0"

__all__ = [
    "KnowledgeError",
    "StoreError",
    "StudyService",
    "TokenizeError",
    "__version__",
]
