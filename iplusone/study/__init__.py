"""Scheduling and sentence selection."""

from .scheduler import SM2Config, SM2Scheduler, SM2State, step
from .sentence_selector import SelectionResult, SentenceSelector, end_of_day

__all__ = [
    "SM2Config",
    "SM2Scheduler",
    "SM2State",
    "SelectionResult",
    "SentenceSelector",
    "end_of_day",
    "step",
]
