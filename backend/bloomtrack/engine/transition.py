"""Per-stage signal computation for one evaluation batch.

Runs the stage-specific bookkeeping (sprouting counter, streak and achieved
units, SM-2 scheduling), asks the promotion rules for the next stage, and
collects everything the state builder needs into a TransitionResult.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from bloomtrack.constants import (
    HALL_OF_FAME_DAYS,
    MIN_HIGH_QUALITY_SCORE,
    SPROUTING_COMMITMENT_COOL_DOWN_MS,
    TARGET_ROOT_ID,
)
from bloomtrack.engine.promotion import PromotionSignals, check_promotion_conditions
from bloomtrack.engine.streak import initial_consecutive_days, update_consecutive_days
from bloomtrack.models import (
    BUDDING_STATES,
    HALL_OF_FAME_STATES,
    SPLIT_STATES,
    SPROUTING_STATES,
    ConsecutiveDaysData,
    Evaluation,
    LearningTarget,
    MainState,
    SM2TargetData,
    Stage,
    Unit,
    UnitWithSM2,
)
from bloomtrack.srs.quality import calculate_qualities
from bloomtrack.srs.sm2 import seed_sm2_target_data, update_sm2_target_data
from bloomtrack.srs.time import add_days_ms


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of one evaluation batch before the main state is rebuilt.

    Only the fields relevant to ``next_stage`` are set:
    - SPROUTING: sprouting_count, sprouting_counter_moved
    - BUDDING: consecutive_days_data, achieved_unit_ids
    - BLOOMING / MASTERED: target_sm2 (TARGET) or split_units (SPLIT)
    - HALL_OF_FAME: hall_of_fame_expires_at and fresh SM-2 data on entry only
    """

    current_stage: Stage
    next_stage: Stage
    now: int
    qualities: dict[str, int]
    sprouting_count: int | None = None
    sprouting_counter_moved: bool = False
    consecutive_days_data: ConsecutiveDaysData | None = None
    achieved_unit_ids: tuple[str, ...] | None = None
    target_sm2: SM2TargetData | None = None
    split_units: dict[str, UnitWithSM2] | None = None
    hall_of_fame_expires_at: int | None = None

    @property
    def is_promotion(self) -> bool:
        return self.next_stage != self.current_stage


def tracked_unit_ids(state: MainState) -> list[str]:
    """Ids of the units promotion is decided on: the root id, or every SPLIT unit."""
    if isinstance(state, SPLIT_STATES):
        return list(state.units)
    return [TARGET_ROOT_ID]


def _advance_sprouting_counter(count: int, last_incremented_at: int | None, now: int) -> tuple[int, bool]:
    # At most one increment per rolling 24h window measured from the last increment
    if last_incremented_at is None or now - last_incremented_at >= SPROUTING_COMMITMENT_COOL_DOWN_MS:
        return count + 1, True
    return count, False


def _merge_achieved_unit_ids(
    achieved: tuple[str, ...], unit_ids: list[str], qualities: Mapping[str, int]
) -> tuple[str, ...]:
    merged = list(achieved)
    for unit_id in unit_ids:
        if qualities.get(unit_id, 0) >= MIN_HIGH_QUALITY_SCORE and unit_id not in merged:
            merged.append(unit_id)
    return tuple(merged)


def _schedule_split_units(
    units: Mapping[str, Unit], qualities: Mapping[str, int], now: int, entering: bool
) -> dict[str, UnitWithSM2]:
    """Advance SM-2 for every evaluated unit.

    On entry to BLOOMING (``entering``) units carry no SM-2 data yet: evaluated
    units start from the default state, the others are seeded due at ``now``.
    Afterwards units without an evaluation in this batch are left as they are.
    """
    scheduled: dict[str, UnitWithSM2] = {}
    for unit_id, unit in units.items():
        current = None if entering else unit.sm2Data
        quality = qualities.get(unit_id)

        if quality is not None:
            sm2_data = update_sm2_target_data(current, quality, now)
        elif current is None:
            sm2_data = seed_sm2_target_data(now)
        else:
            scheduled[unit_id] = unit
            continue

        scheduled[unit_id] = UnitWithSM2(
            id=unit.id,
            unitPath=unit.unitPath,
            content=unit.content,
            sm2Data=sm2_data,
        )
    return scheduled


def calculate_transition(
    target: LearningTarget, evaluations: Mapping[str, Evaluation], now: int
) -> TransitionResult:
    """Compute the next stage and its data for an evaluation batch."""
    state = target.state
    qualities = calculate_qualities(evaluations, state.managementMode)
    unit_ids = tracked_unit_ids(state)
    is_target_mode = state.managementMode == "TARGET"

    # --- SPROUTING ---
    if isinstance(state, SPROUTING_STATES):
        count, moved = _advance_sprouting_counter(
            state.sproutingPromotionCount, state.lastCountIncrementedAt, now
        )
        next_stage = check_promotion_conditions(
            PromotionSignals(current_stage=state.stage, now=now, sprouting_count=count)
        )
        if next_stage == "BUDDING":
            return TransitionResult(
                current_stage=state.stage,
                next_stage=next_stage,
                now=now,
                qualities=qualities,
                consecutive_days_data=initial_consecutive_days(now),
                achieved_unit_ids=(),
            )
        return TransitionResult(
            current_stage=state.stage,
            next_stage=state.stage,
            now=now,
            qualities=qualities,
            sprouting_count=count,
            sprouting_counter_moved=moved,
        )

    # --- BUDDING ---
    if isinstance(state, BUDDING_STATES):
        if target.lastCommitmentAt is None:
            consecutive_days_data = initial_consecutive_days(now)
        else:
            consecutive_days_data = update_consecutive_days(
                state.consecutiveDaysData, target.lastCommitmentAt, now
            )
        achieved = _merge_achieved_unit_ids(state.achievedHighQualityUnitIds, unit_ids, qualities)

        next_stage = check_promotion_conditions(
            PromotionSignals(
                current_stage=state.stage,
                now=now,
                consecutive_days=consecutive_days_data.consecutiveDays,
                is_budding_success_path=all(unit_id in achieved for unit_id in unit_ids),
            )
        )
        if next_stage == "BLOOMING":
            # Fresh SM-2 data; the streak is left behind
            if is_target_mode:
                return TransitionResult(
                    current_stage=state.stage,
                    next_stage=next_stage,
                    now=now,
                    qualities=qualities,
                    target_sm2=update_sm2_target_data(None, qualities[TARGET_ROOT_ID], now),
                )
            return TransitionResult(
                current_stage=state.stage,
                next_stage=next_stage,
                now=now,
                qualities=qualities,
                split_units=_schedule_split_units(state.units, qualities, now, entering=True),
            )
        return TransitionResult(
            current_stage=state.stage,
            next_stage=state.stage,
            now=now,
            qualities=qualities,
            consecutive_days_data=consecutive_days_data,
            achieved_unit_ids=achieved,
        )

    # --- HALL_OF_FAME: schedule frozen for the protection period ---
    if isinstance(state, HALL_OF_FAME_STATES):
        return TransitionResult(
            current_stage=state.stage,
            next_stage=state.stage,
            now=now,
            qualities=qualities,
        )

    # --- BLOOMING / MASTERED ---
    target_sm2 = None
    split_units = None
    if is_target_mode:
        target_sm2 = update_sm2_target_data(state.sm2Data, qualities[TARGET_ROOT_ID], now)
        next_review_dates = (target_sm2.nextReviewDate,)
    else:
        split_units = _schedule_split_units(state.units, qualities, now, entering=False)
        next_review_dates = tuple(unit.sm2Data.nextReviewDate for unit in split_units.values())

    next_stage = check_promotion_conditions(
        PromotionSignals(current_stage=state.stage, now=now, sm2_next_review_dates=next_review_dates)
    )
    next_stage = next_stage or state.stage

    return TransitionResult(
        current_stage=state.stage,
        next_stage=next_stage,
        now=now,
        qualities=qualities,
        target_sm2=target_sm2,
        split_units=split_units,
        hall_of_fame_expires_at=(
            add_days_ms(now, HALL_OF_FAME_DAYS) if next_stage == "HALL_OF_FAME" else None
        ),
    )
