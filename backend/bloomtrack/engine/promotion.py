"""Stage promotion rules and the stage transition table."""

from __future__ import annotations

from dataclasses import dataclass

from bloomtrack.constants import (
    BUDDING_TO_BLOOMING_CONSECUTIVE_DAYS,
    HALL_OF_FAME_DAYS_THRESHOLD,
    SPROUTING_TO_BUDDING_COUNT,
)
from bloomtrack.errors import InvalidStageTransitionError
from bloomtrack.models import (
    LEGAL_STAGE_TRANSITIONS,
    Stage,
    StageTransitionHistoryItem,
    StageTransitionReason,
)
from bloomtrack.srs.time import add_days_ms


@dataclass(frozen=True)
class PromotionSignals:
    """Stage-specific inputs to the promotion decision.

    Attributes:
        current_stage: Stage before this evaluation batch
        now: Timestamp of the batch (ms)
        sprouting_count: SPROUTING commitment counter after this batch
        consecutive_days: BUDDING streak after this batch
        is_budding_success_path: Every tracked unit reached quality >= 3 at least once
        sm2_next_review_dates: Projected next review dates of every tracked unit
    """

    current_stage: Stage
    now: int
    sprouting_count: int = 0
    consecutive_days: int = 0
    is_budding_success_path: bool = False
    sm2_next_review_dates: tuple[int, ...] = ()


def check_promotion_conditions(signals: PromotionSignals) -> Stage | None:
    """Return the stage to promote to, or None when the stage does not change.

    - SPROUTING → BUDDING: counter reached 3
    - BUDDING → BLOOMING: streak of 4 days, or all units achieved
    - BLOOMING → HALL_OF_FAME: every next review at least 100 days away
    - MASTERED, HALL_OF_FAME: never promoted by an evaluation
    """
    stage = signals.current_stage

    if stage == "SPROUTING":
        if signals.sprouting_count >= SPROUTING_TO_BUDDING_COUNT:
            return "BUDDING"
        return None

    if stage == "BUDDING":
        # Continuation path
        if signals.consecutive_days >= BUDDING_TO_BLOOMING_CONSECUTIVE_DAYS:
            return "BLOOMING"
        # Achievement path
        if signals.is_budding_success_path:
            return "BLOOMING"
        return None

    if stage == "BLOOMING":
        if not signals.sm2_next_review_dates:
            return None
        threshold = add_days_ms(signals.now, HALL_OF_FAME_DAYS_THRESHOLD)
        if all(date >= threshold for date in signals.sm2_next_review_dates):
            return "HALL_OF_FAME"
        return None

    return None


def create_stage_transition_history_item(
    from_stage: Stage | None,
    to_stage: Stage,
    reason: StageTransitionReason,
    now: int,
) -> StageTransitionHistoryItem:
    """Create a stage transition record.

    Raises:
        InvalidStageTransitionError: If the triple is not in the transition table
    """
    if (reason, from_stage, to_stage) not in LEGAL_STAGE_TRANSITIONS:
        raise InvalidStageTransitionError(
            f"Invalid stage transition: {from_stage} -> {to_stage} with reason {reason}"
        )

    return StageTransitionHistoryItem(
        reason=reason,
        fromStage=from_stage,
        toStage=to_stage,
        timestamp=now,
    )
