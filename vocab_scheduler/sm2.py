import math
from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum
from typing import Union

from vocab_scheduler.errors import ValidationError

MIN_EASE = 1.3


class Track(str, Enum):
    GRADED = "graded"
    BINARY = "binary"


class BinaryOutcome(int, Enum):
    FORGOT = 0
    REMEMBERED = 1


@dataclass(frozen=True)
class ScheduleState:
    """The part of a schedule record the evaluators read and write"""
    ease_factor: float = 2.5
    interval_days: int = 0
    repetitions: int = 0
    times_forgotten: int = 0


def round_half_up(value: float) -> int:
    # round() would send 7.5 to 8 but 6.5 to 6
    return int(math.floor(value + 0.5))


def clamp_ease(ease_factor: float) -> float:
    return max(MIN_EASE, ease_factor)


class ReviewStrategy:
    """
    Base class for review outcome evaluators.

    Subclasses turn a recall signal plus the current state into the next
    state. They never touch dates or storage; the caller derives the next
    review date from the returned interval.
    """

    track: Track
    failure_outcome = None

    def normalize(self, signal):
        """Validate a raw recall signal and return the canonical outcome"""
        raise NotImplementedError

    def is_success(self, outcome) -> bool:
        raise NotImplementedError

    def evaluate(self, outcome, state: ScheduleState) -> ScheduleState:
        raise NotImplementedError


class GradedSM2Strategy(ReviewStrategy):
    """
    SM-2 spaced repetition with a 0-5 quality grade.
    Based on SuperMemo 2 algorithm by Piotr Wozniak.

    Quality scale:
        0 - Complete blackout
        1 - Incorrect response, but upon seeing correct answer, remembered
        2 - Incorrect response, but correct answer seemed easy to recall
        3 - Correct response with serious difficulty
        4 - Correct response after hesitation
        5 - Perfect response
    """

    track = Track.GRADED
    failure_outcome = 0

    def normalize(self, signal) -> int:
        if isinstance(signal, bool) or not isinstance(signal, int):
            raise ValidationError(f"Quality must be an integer between 0 and 5, got {signal!r}")
        if signal < 0 or signal > 5:
            raise ValidationError(f"Quality must be between 0 and 5, got {signal}")
        return signal

    def is_success(self, outcome: int) -> bool:
        return outcome >= 3

    def evaluate(self, outcome: int, state: ScheduleState) -> ScheduleState:
        quality = self.normalize(outcome)

        # Ease is adjusted on every review, failures included
        new_ease = clamp_ease(
            state.ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
        )

        if not self.is_success(quality):
            return replace(state, ease_factor=new_ease, interval_days=0, repetitions=0)

        new_repetitions = state.repetitions + 1
        if new_repetitions == 1:
            new_interval = 1
        elif new_repetitions == 2:
            new_interval = 6
        else:
            new_interval = round_half_up(state.interval_days * new_ease)

        return replace(
            state,
            ease_factor=new_ease,
            interval_days=new_interval,
            repetitions=new_repetitions,
        )


class BinarySM2Strategy(ReviewStrategy):
    """
    Simplified SM-2 for the rapid-recall game: forgot / remembered only.

    Forgetting resets progress but leaves ease alone and always brings the
    word back the next day. Remembering grows the interval 1, 3, then by the
    pre-review ease, and raises ease by a flat 0.1.
    """

    track = Track.BINARY
    failure_outcome = BinaryOutcome.FORGOT

    _aliases = {
        "forgot": BinaryOutcome.FORGOT,
        "remembered": BinaryOutcome.REMEMBERED,
    }

    def normalize(self, signal) -> BinaryOutcome:
        if isinstance(signal, BinaryOutcome):
            return signal
        if isinstance(signal, bool):
            return BinaryOutcome.REMEMBERED if signal else BinaryOutcome.FORGOT
        if isinstance(signal, str) and signal.lower() in self._aliases:
            return self._aliases[signal.lower()]
        if isinstance(signal, int) and signal in (0, 1):
            return BinaryOutcome(signal)
        raise ValidationError(f"Outcome must be 'forgot' or 'remembered', got {signal!r}")

    def is_success(self, outcome: BinaryOutcome) -> bool:
        return outcome == BinaryOutcome.REMEMBERED

    def evaluate(self, outcome, state: ScheduleState) -> ScheduleState:
        outcome = self.normalize(outcome)

        if not self.is_success(outcome):
            return replace(
                state,
                interval_days=1,
                repetitions=0,
                times_forgotten=state.times_forgotten + 1,
            )

        new_repetitions = state.repetitions + 1
        if new_repetitions == 1:
            new_interval = 1
        elif new_repetitions == 2:
            new_interval = 3
        else:
            new_interval = round_half_up(state.interval_days * state.ease_factor)

        return replace(
            state,
            ease_factor=clamp_ease(state.ease_factor + 0.1),
            interval_days=new_interval,
            repetitions=new_repetitions,
        )


STRATEGIES = {
    Track.GRADED: GradedSM2Strategy(),
    Track.BINARY: BinarySM2Strategy(),
}


def parse_track(track: Union[str, Track]) -> Track:
    try:
        return Track(track)
    except ValueError:
        raise ValidationError(f"Unknown track {track!r}; use 'graded' or 'binary'") from None


def get_strategy(track: Union[str, Track]) -> ReviewStrategy:
    """Return the evaluator for a scheduling track"""
    return STRATEGIES[parse_track(track)]


def next_review_date(interval_days: int, reference_date: date = None, minimum_days: int = 0) -> date:
    """
    Calculate the next review date for an interval.

    Args:
        interval_days: Interval produced by an evaluator
        reference_date: Optional reference date (defaults to today)
        minimum_days: Floor applied to the interval for date purposes only
    """
    base_date = reference_date if reference_date else date.today()
    return base_date + timedelta(days=max(interval_days, minimum_days))


def is_due_for_review(next_review: date, reference_date: date = None) -> bool:
    """Check if an item is due for review"""
    return (reference_date or date.today()) >= next_review


def get_days_overdue(next_review: date, reference_date: date = None) -> int:
    """Calculate how many days overdue a review is"""
    today = reference_date or date.today()
    if today < next_review:
        return 0
    return (today - next_review).days
