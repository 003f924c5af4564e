"""Reconstruction of the main state for the resolved stage.

Each variant is built from an explicit whitelist of inputs: fields computed
for this batch, or fields carried over from a current state that already
holds them. Nothing is copied across a stage boundary by spreading the old
state, so fields of the previous stage cannot survive a transition.
"""

from __future__ import annotations

from collections.abc import Mapping

from bloomtrack.engine.transition import TransitionResult
from bloomtrack.errors import InvariantViolationError, MissingStageDataError
from bloomtrack.models import (
    BUDDING_STATES,
    HALL_OF_FAME_STATES,
    SPLIT_SM2_STATES,
    SPLIT_STATES,
    SPROUTING_STATES,
    TARGET_SM2_STATES,
    ConsecutiveDaysData,
    MainState,
    SM2TargetData,
    SplitBlooming,
    SplitBudding,
    SplitHallOfFame,
    SplitMastered,
    SplitSprouting,
    TargetBlooming,
    TargetBudding,
    TargetHallOfFame,
    TargetMastered,
    TargetSprouting,
    Unit,
    UnitWithSM2,
)


def get_representative_unit_id(units: Mapping[str, UnitWithSM2]) -> str:
    """Return the id of the unit with the smallest nextReviewDate.

    Ties go to the unit encountered first.
    """
    if not units:
        raise MissingStageDataError("Cannot pick a representative unit without units")

    representative_id = None
    min_review_date = None
    for unit_id, unit in units.items():
        review_date = unit.sm2Data.nextReviewDate
        if min_review_date is None or review_date < min_review_date:
            representative_id = unit_id
            min_review_date = review_date
    return representative_id


def _plain_units(current: MainState) -> dict[str, Unit]:
    """Units of a SPLIT state without SM-2 data."""
    if not isinstance(current, SPLIT_STATES):
        raise MissingStageDataError(f"{current.stage} state in SPLIT mode has no units")
    return {
        unit_id: Unit(id=unit.id, unitPath=unit.unitPath, content=unit.content)
        for unit_id, unit in current.units.items()
    }


def _sm2_units(current: MainState, result: TransitionResult) -> dict[str, UnitWithSM2]:
    if result.split_units is not None:
        return result.split_units
    if isinstance(current, SPLIT_SM2_STATES):
        return current.units
    raise MissingStageDataError(f"Unit SM-2 data missing for SPLIT mode {result.next_stage}")


def _target_sm2(current: MainState, result: TransitionResult) -> SM2TargetData:
    if result.target_sm2 is not None:
        return result.target_sm2
    if isinstance(current, TARGET_SM2_STATES):
        return current.sm2Data
    raise MissingStageDataError(f"SM-2 data missing for TARGET mode {result.next_stage}")


def _build_sprouting(current: MainState, result: TransitionResult) -> MainState:
    if not isinstance(current, SPROUTING_STATES):
        raise InvariantViolationError(f"Cannot return to SPROUTING from {current.stage}")

    count = current.sproutingPromotionCount
    last_incremented_at = current.lastCountIncrementedAt
    if result.sprouting_count is not None:
        count = result.sprouting_count
    if result.sprouting_counter_moved:
        last_incremented_at = result.now

    if current.managementMode == "TARGET":
        return TargetSprouting(sproutingPromotionCount=count, lastCountIncrementedAt=last_incremented_at)
    return SplitSprouting(
        units=_plain_units(current),
        sproutingPromotionCount=count,
        lastCountIncrementedAt=last_incremented_at,
    )


def _build_budding(current: MainState, result: TransitionResult) -> MainState:
    consecutive_days_data: ConsecutiveDaysData | None = result.consecutive_days_data
    achieved = result.achieved_unit_ids

    if consecutive_days_data is None or achieved is None:
        if not isinstance(current, BUDDING_STATES):
            raise MissingStageDataError("Budding data missing during update")
        consecutive_days_data = consecutive_days_data or current.consecutiveDaysData
        achieved = achieved if achieved is not None else current.achievedHighQualityUnitIds

    if current.managementMode == "TARGET":
        return TargetBudding(
            consecutiveDaysData=consecutive_days_data,
            achievedHighQualityUnitIds=achieved,
        )
    return SplitBudding(
        units=_plain_units(current),
        consecutiveDaysData=consecutive_days_data,
        achievedHighQualityUnitIds=achieved,
    )


def _build_scheduled(current: MainState, result: TransitionResult) -> MainState:
    """BLOOMING or MASTERED."""
    if current.managementMode == "TARGET":
        sm2_data = _target_sm2(current, result)
        if result.next_stage == "BLOOMING":
            return TargetBlooming(sm2Data=sm2_data)
        return TargetMastered(sm2Data=sm2_data)

    units = _sm2_units(current, result)
    representative_id = get_representative_unit_id(units)
    if result.next_stage == "BLOOMING":
        return SplitBlooming(units=units, representativeUnitId=representative_id)
    return SplitMastered(units=units, representativeUnitId=representative_id)


def _build_hall_of_fame(current: MainState, result: TransitionResult) -> MainState:
    expires_at = result.hall_of_fame_expires_at
    if expires_at is None:
        if not isinstance(current, HALL_OF_FAME_STATES):
            raise MissingStageDataError("Expiration date missing for Hall of Fame")
        expires_at = current.masteredSlotExpiresAt

    if current.managementMode == "TARGET":
        return TargetHallOfFame(sm2Data=_target_sm2(current, result), masteredSlotExpiresAt=expires_at)

    units = _sm2_units(current, result)
    return SplitHallOfFame(
        units=units,
        representativeUnitId=get_representative_unit_id(units),
        masteredSlotExpiresAt=expires_at,
    )


def build_main_state(current: MainState, result: TransitionResult) -> MainState:
    """Build the main state for ``result.next_stage``.

    The management mode of ``current`` is kept.

    Raises:
        MissingStageDataError: If data required by the resolved variant is absent
        InvariantViolationError: If the resolved stage cannot follow the current one
    """
    stage = result.next_stage

    if stage == "SPROUTING":
        return _build_sprouting(current, result)
    if stage == "BUDDING":
        return _build_budding(current, result)
    if stage in ("BLOOMING", "MASTERED"):
        return _build_scheduled(current, result)
    if stage == "HALL_OF_FAME":
        return _build_hall_of_fame(current, result)

    raise InvariantViolationError(f"Unexpected stage transition: {stage}")
