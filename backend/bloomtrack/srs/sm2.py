"""SM-2 state update and review scheduling.

The next review date is derived from the SM-2 interval: ``now + I' days``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from bloomtrack.constants import ONE_DAY_MS
from bloomtrack.models import SM2State, SM2TargetData

INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 3.0

FIRST_INTERVAL = 1  # n = 0 -> 1
SECOND_INTERVAL = 6  # n = 1 -> 2

# Values after a failed recall (quality < 3)
RESET_INTERVAL = 1
RESET_REPETITIONS = 0

PASSING_QUALITY = 3

EF_ADJUSTMENT_A = 0.1
EF_ADJUSTMENT_B = 0.08
EF_ADJUSTMENT_C = 0.02

DEFAULT_SM2_STATE = SM2State(interval=0, easeFactor=INITIAL_EASE_FACTOR, repetitions=0)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def _clamp_ease_factor(ef: float) -> float:
    return min(MAX_EASE_FACTOR, max(MIN_EASE_FACTOR, ef))


def update_sm2_state(state: SM2State, quality: int) -> SM2State:
    """Apply one SM-2 step to the given state.

    quality: 0-5

    Rules:
    - if q >= 3:
        intervalDays = 1 if repetitions == 0, 6 if repetitions == 1,
        else round(previousInterval * EF)
        repetitions += 1
        EF' = EF + (0.1 - (5-q)*(0.08 + (5-q)*0.02)), clamped to [1.3, 3.0]
    - if q < 3: repetitions = 0, intervalDays = 1, EF unchanged
    """
    if quality < 0 or quality > 5:
        raise ValueError(f"quality must be between 0 and 5, got {quality}")

    ef = state.easeFactor
    reps = state.repetitions
    interval = state.interval

    if quality < PASSING_QUALITY:
        return SM2State(interval=RESET_INTERVAL, easeFactor=ef, repetitions=RESET_REPETITIONS)

    if reps == 0:
        interval_prime = FIRST_INTERVAL
    elif reps == 1:
        interval_prime = SECOND_INTERVAL
    else:
        interval_prime = round_half_up(interval * ef)

    q_diff = 5 - quality
    ef_prime = _clamp_ease_factor(
        ef + (EF_ADJUSTMENT_A - q_diff * (EF_ADJUSTMENT_B + q_diff * EF_ADJUSTMENT_C))
    )

    return SM2State(interval=interval_prime, easeFactor=ef_prime, repetitions=reps + 1)


def calculate_sm2_state(qualities: Iterable[int]) -> SM2State:
    """Fold a sequence of qualities into a state, starting from the default state."""
    state = DEFAULT_SM2_STATE
    for quality in qualities:
        state = update_sm2_state(state, quality)
    return state


def calculate_next_review_date(state: SM2State, last_active_at: int) -> int:
    """Return the next review timestamp (ms) for a state activated at ``last_active_at``."""
    return last_active_at + state.interval * ONE_DAY_MS


def update_sm2_target_data(current: SM2TargetData | None, quality: int, now: int) -> SM2TargetData:
    """Advance the schedule of one item.

    ``current`` is None on first activation, in which case the default state
    (interval 0, EF 2.5, repetitions 0) is used.
    """
    prior_state = current.state if current is not None else DEFAULT_SM2_STATE
    new_state = update_sm2_state(prior_state, quality)

    return SM2TargetData(
        state=new_state,
        lastActiveAt=now,
        nextReviewDate=calculate_next_review_date(new_state, now),
    )


def seed_sm2_target_data(now: int) -> SM2TargetData:
    """Default schedule for an item that enters SM-2 without an evaluation: due at ``now``."""
    return SM2TargetData(state=DEFAULT_SM2_STATE, lastActiveAt=now, nextReviewDate=now)
