"""Activity and stage transition history recording."""

from __future__ import annotations

from collections.abc import Mapping

from bloomtrack.engine.promotion import create_stage_transition_history_item
from bloomtrack.engine.transition import TransitionResult
from bloomtrack.models import (
    SPLIT_STATES,
    Activity,
    ActivityHistoryItem,
    Evaluation,
    LearningTarget,
    PassFailActivity,
    PassFailEvaluation,
    ScoreActivity,
    ScoreEvaluation,
    SplitActivityHistoryItem,
    SplitUnitActivity,
    Stage,
    StageTransitionHistoryItem,
    StarActivity,
    StarEvaluation,
    TapActivity,
    TapEvaluation,
    TargetActivityHistoryItem,
    UnratedEvaluation,
)


def _unrated_activity(evaluation: UnratedEvaluation, now: int) -> Activity:
    # Lowest value of the submitted mode; unknown modes are stored as a 0% score
    mode = evaluation.submittedMode
    if mode == "TAP":
        return TapActivity(timestamp=now)
    if mode == "PASS_FAIL":
        return PassFailActivity(timestamp=now, isCorrect=False)
    if mode == "STAR":
        return StarActivity(timestamp=now, level=0)
    return ScoreActivity(timestamp=now, percentage=0)


def create_activity_from_evaluation(evaluation: Evaluation | UnratedEvaluation, now: int) -> Activity:
    """Convert an evaluation (input) into the activity stored in history."""
    if isinstance(evaluation, UnratedEvaluation):
        return _unrated_activity(evaluation, now)
    if isinstance(evaluation, TapEvaluation):
        return TapActivity(timestamp=now)
    if isinstance(evaluation, PassFailEvaluation):
        return PassFailActivity(timestamp=now, isCorrect=evaluation.value)
    if isinstance(evaluation, StarEvaluation):
        return StarActivity(timestamp=now, level=evaluation.value)
    if isinstance(evaluation, ScoreEvaluation):
        return ScoreActivity(timestamp=now, percentage=evaluation.value)
    raise ValueError(f"Unknown evaluation mode: {evaluation!r}")


def create_activity_history_item(
    target: LearningTarget,
    evaluations: Mapping[str, Evaluation],
    next_stage: Stage,
    now: int,
) -> ActivityHistoryItem:
    """Create the activity history item of this batch.

    Args:
        target: The learning target before the update
        evaluations: The evaluations of the batch
        next_stage: Stage after the update (used to detect a transition)
        now: Timestamp of the batch
    """
    state = target.state
    did_transition = state.stage != next_stage
    common = {
        "isInGreenhouse": target.isInGreenhouse,
        "stageAtActivity": state.stage,
        "didStateTransition": did_transition,
        "newStage": next_stage if did_transition else None,
    }

    if not isinstance(state, SPLIT_STATES):
        evaluation = next(iter(evaluations.values()))
        return TargetActivityHistoryItem(
            **common,
            activity=create_activity_from_evaluation(evaluation, now),
        )

    # The path is captured as it is now; later renames do not rewrite history
    active_units = tuple(
        SplitUnitActivity(
            id=unit_id,
            unitPath=state.units[unit_id].unitPath,
            activity=create_activity_from_evaluation(evaluation, now),
        )
        for unit_id, evaluation in evaluations.items()
    )
    return SplitActivityHistoryItem(**common, activeUnits=active_units)


def record_histories(
    target: LearningTarget,
    evaluations: Mapping[str, Evaluation],
    result: TransitionResult,
) -> tuple[tuple[ActivityHistoryItem, ...], tuple[StageTransitionHistoryItem, ...]]:
    """Return the target's histories extended with this batch.

    One activity item is always appended; a stage transition item only when
    the batch promoted the target. The target's own histories are untouched.
    """
    activity_history = target.activityHistory + (
        create_activity_history_item(target, evaluations, result.next_stage, result.now),
    )

    stage_history = target.stageTransitionHistory
    if result.is_promotion:
        stage_history = stage_history + (
            create_stage_transition_history_item(
                result.current_stage, result.next_stage, "PROMOTION_SUCCESS", result.now
            ),
        )

    return activity_history, stage_history
