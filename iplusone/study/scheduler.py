"""
SM-2 Spaced Repetition Scheduler.

Variant of SuperMemo 2 with sub-day learning steps:
- First success (or any failure) schedules a 10 minute relearning step
- Second success graduates the word to a 1 day interval
- Later successes multiply the previous interval by the updated easiness

A failure drops the word back onto the learning track but keeps its
easiness factor, so a lapse never makes a word look easier.

Grade Scale:
0 - Complete blackout
1 - Incorrect, but upon seeing answer remembered
2 - Incorrect, but answer seemed easy to recall
3 - Correct, but with significant difficulty
4 - Correct, with some hesitation
5 - Correct, with perfect recall

https://supermemo.guru/wiki/SuperMemo_1.0_for_DOS_(1987)#Algorithm_SM-2
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta

MIN_QUALITY = 0.0
MAX_QUALITY = 5.0


@dataclass(frozen=True)
class SM2Config:
    """Configuration for SM-2 algorithm."""

    initial_easiness: float = 2.5
    minimum_easiness: float = 1.3
    passing_quality: float = 3.0
    learning_interval: timedelta = timedelta(minutes=10)
    graduating_interval: timedelta = timedelta(days=1)


@dataclass(frozen=True)
class SM2State:
    """SM-2 state for a single word."""

    repetition: int = 0
    interval: timedelta = timedelta(0)
    e_factor: float = 2.5


class SM2Scheduler:
    """Pure SM-2 state transitions. No clock, no I/O."""

    def __init__(self, config: SM2Config | None = None):
        self.config = config or SM2Config()

    def initial_state(self) -> SM2State:
        """State of a word that has never been reviewed."""
        return SM2State(repetition=0, interval=timedelta(0), e_factor=self.config.initial_easiness)

    def step(self, state: SM2State, quality: float) -> SM2State:
        """
        Calculate the next state after a response.

        Args:
            state: Current state of the word
            quality: Response quality, 0.0-5.0

        Returns:
            New state; ``interval`` is the delay until the next review
        """
        if math.isnan(quality) or not MIN_QUALITY <= quality <= MAX_QUALITY:
            raise ValueError(f"quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}")

        repetition = 0 if quality < self.config.passing_quality else state.repetition

        if repetition == 0:
            return SM2State(
                repetition=1,
                interval=self.config.learning_interval,
                e_factor=state.e_factor,
            )

        if repetition == 1:
            return SM2State(
                repetition=2,
                interval=self.config.graduating_interval,
                e_factor=state.e_factor,
            )

        # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        miss = MAX_QUALITY - quality
        e_factor = max(
            self.config.minimum_easiness,
            state.e_factor + (0.1 - miss * (0.08 + miss * 0.02)),
        )
        # Previous interval scaled by the new factor, whole seconds
        interval = timedelta(seconds=int(state.interval.total_seconds() * e_factor))

        return SM2State(repetition=repetition + 1, interval=interval, e_factor=e_factor)


_default_scheduler = SM2Scheduler()


def step(state: SM2State, quality: float) -> SM2State:
    """Apply one review to ``state`` with the default configuration."""
    return _default_scheduler.step(state, quality)
