from datetime import date, timedelta

import pytest

from vocab_scheduler.errors import ValidationError
from vocab_scheduler.sm2 import (
    BinaryOutcome,
    BinarySM2Strategy,
    GradedSM2Strategy,
    ScheduleState,
    Track,
    get_days_overdue,
    get_strategy,
    is_due_for_review,
    next_review_date,
    round_half_up,
)

graded = GradedSM2Strategy()
binary = BinarySM2Strategy()

STATES = [
    ScheduleState(),
    ScheduleState(ease_factor=1.3, interval_days=0, repetitions=0),
    ScheduleState(ease_factor=1.31, interval_days=1, repetitions=1),
    ScheduleState(ease_factor=2.5, interval_days=6, repetitions=2),
    ScheduleState(ease_factor=2.8, interval_days=40, repetitions=7, times_forgotten=3),
]

ALL_OUTCOMES = [(graded, q) for q in range(6)] + [
    (binary, BinaryOutcome.FORGOT),
    (binary, BinaryOutcome.REMEMBERED),
]


# Properties shared by both strategies

@pytest.mark.parametrize("state", STATES)
@pytest.mark.parametrize("strategy,outcome", ALL_OUTCOMES)
def test_ease_never_below_floor(strategy, outcome, state):
    assert strategy.evaluate(outcome, state).ease_factor >= 1.3


@pytest.mark.parametrize("state", STATES)
@pytest.mark.parametrize("strategy,outcome", ALL_OUTCOMES)
def test_repetitions_reset_or_increment(strategy, outcome, state):
    result = strategy.evaluate(outcome, state)
    if strategy.is_success(outcome):
        assert result.repetitions == state.repetitions + 1
    else:
        assert result.repetitions == 0


@pytest.mark.parametrize("strategy,outcome", ALL_OUTCOMES)
def test_evaluate_does_not_mutate_input(strategy, outcome):
    state = ScheduleState(ease_factor=2.5, interval_days=6, repetitions=2)
    strategy.evaluate(outcome, state)
    assert state == ScheduleState(ease_factor=2.5, interval_days=6, repetitions=2)


# Graded SM-2

def test_graded_first_and_second_success_intervals():
    first = graded.evaluate(4, ScheduleState())
    assert (first.repetitions, first.interval_days) == (1, 1)

    second = graded.evaluate(4, first)
    assert (second.repetitions, second.interval_days) == (2, 6)


def test_graded_third_success_multiplies_by_new_ease():
    result = graded.evaluate(4, ScheduleState(ease_factor=2.5, interval_days=6, repetitions=2))

    assert result.repetitions == 3
    assert result.ease_factor == pytest.approx(2.5)
    assert result.interval_days == 15


def test_graded_perfect_quality_raises_ease():
    result = graded.evaluate(5, ScheduleState(ease_factor=2.5, interval_days=6, repetitions=2))

    assert result.ease_factor == pytest.approx(2.6)
    assert result.interval_days == 16  # 6 * 2.6 = 15.6


@pytest.mark.parametrize("quality,delta", [(3, -0.14), (2, -0.32), (1, -0.54), (0, -0.8)])
def test_graded_ease_penalty_scales_with_miss(quality, delta):
    result = graded.evaluate(quality, ScheduleState(ease_factor=2.5, interval_days=6, repetitions=2))
    assert result.ease_factor == pytest.approx(2.5 + delta)


@pytest.mark.parametrize("quality", [0, 1, 2])
def test_graded_failure_resets_to_zero_interval(quality):
    state = ScheduleState(ease_factor=2.3, interval_days=30, repetitions=5)
    result = graded.evaluate(quality, state)

    assert result.repetitions == 0
    assert result.interval_days == 0
    assert result.ease_factor < state.ease_factor


def test_graded_quality_zero_clamps_at_floor():
    result = graded.evaluate(0, ScheduleState(ease_factor=1.4))
    assert result.ease_factor == 1.3


def test_graded_does_not_touch_times_forgotten():
    result = graded.evaluate(0, ScheduleState(times_forgotten=2))
    assert result.times_forgotten == 2


@pytest.mark.parametrize("bad", [-1, 6, 2.5, "4", None, True])
def test_graded_rejects_invalid_quality(bad):
    with pytest.raises(ValidationError):
        graded.evaluate(bad, ScheduleState())


# Binary SM-2

def test_binary_forgot_resets_and_keeps_ease():
    state = ScheduleState(ease_factor=2.7, interval_days=8, repetitions=3, times_forgotten=1)
    result = binary.evaluate(BinaryOutcome.FORGOT, state)

    assert result.interval_days == 1
    assert result.repetitions == 0
    assert result.ease_factor == 2.7
    assert result.times_forgotten == 2


def test_binary_remembered_interval_sequence():
    first = binary.evaluate("remembered", ScheduleState(interval_days=1))
    assert (first.repetitions, first.interval_days) == (1, 1)
    assert first.ease_factor == pytest.approx(2.6)

    second = binary.evaluate("remembered", first)
    assert (second.repetitions, second.interval_days) == (2, 3)
    assert second.ease_factor == pytest.approx(2.7)

    # third uses the ease from before this review: 3 * 2.7 = 8.1
    third = binary.evaluate("remembered", second)
    assert (third.repetitions, third.interval_days) == (3, 8)
    assert third.ease_factor == pytest.approx(2.8)


def test_binary_ease_increment_is_flat():
    result = binary.evaluate(BinaryOutcome.REMEMBERED, ScheduleState(ease_factor=1.3, interval_days=1))
    assert result.ease_factor == pytest.approx(1.4)


def test_binary_rounds_half_up():
    # 5 * 2.5 = 12.5; round() would give 12
    result = binary.evaluate(True, ScheduleState(ease_factor=2.5, interval_days=5, repetitions=2))
    assert result.interval_days == 13


@pytest.mark.parametrize("signal,expected", [
    ("forgot", BinaryOutcome.FORGOT),
    ("Remembered", BinaryOutcome.REMEMBERED),
    (False, BinaryOutcome.FORGOT),
    (1, BinaryOutcome.REMEMBERED),
    (BinaryOutcome.FORGOT, BinaryOutcome.FORGOT),
])
def test_binary_normalizes_signals(signal, expected):
    assert binary.normalize(signal) == expected


@pytest.mark.parametrize("bad", [2, "maybe", None, 0.5])
def test_binary_rejects_invalid_outcome(bad):
    with pytest.raises(ValidationError):
        binary.normalize(bad)


# Helpers

def test_get_strategy_by_track_name():
    assert get_strategy("graded").track == Track.GRADED
    assert get_strategy(Track.BINARY).track == Track.BINARY
    with pytest.raises(ValidationError):
        get_strategy("weekly")


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4999) == 2
    assert round_half_up(0.0) == 0


def test_next_review_date_applies_minimum():
    ref = date(2024, 3, 10)
    assert next_review_date(0, ref) == ref
    assert next_review_date(0, ref, minimum_days=1) == ref + timedelta(days=1)
    assert next_review_date(6, ref, minimum_days=1) == ref + timedelta(days=6)


def test_due_and_overdue_helpers():
    ref = date(2024, 3, 10)
    assert is_due_for_review(ref, ref)
    assert is_due_for_review(ref - timedelta(days=2), ref)
    assert not is_due_for_review(ref + timedelta(days=1), ref)
    assert get_days_overdue(ref - timedelta(days=3), ref) == 3
    assert get_days_overdue(ref + timedelta(days=3), ref) == 0
