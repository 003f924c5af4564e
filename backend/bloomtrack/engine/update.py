"""Apply evaluation batches to a learning target."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from bloomtrack.engine.history import create_activity_history_item, record_histories
from bloomtrack.engine.state_builder import build_main_state
from bloomtrack.engine.transition import TransitionResult, calculate_transition
from bloomtrack.errors import EmptyEvaluationBatchError, InvariantViolationError, UnknownUnitError
from bloomtrack.models import SPLIT_STATES, Evaluation, LearningTarget, UnratedEvaluation
from bloomtrack.srs.quality import coerce_evaluation

logger = logging.getLogger(__name__)


def _validate_batch(
    target: LearningTarget, evaluations: Mapping[str, Any]
) -> dict[str, Evaluation | UnratedEvaluation]:
    if not evaluations:
        raise EmptyEvaluationBatchError(f"No evaluation given for learning target {target.id}")

    state = target.state
    if isinstance(state, SPLIT_STATES):
        unknown = [unit_id for unit_id in evaluations if unit_id not in state.units]
        if unknown:
            raise UnknownUnitError(
                f"Learning target {target.id} has no unit(s): {', '.join(sorted(unknown))}"
            )
    elif len(evaluations) != 1:
        raise InvariantViolationError(
            f"TARGET mode takes exactly one evaluation, got {len(evaluations)} "
            f"for learning target {target.id}"
        )

    return {unit_id: coerce_evaluation(raw) for unit_id, raw in evaluations.items()}


def _log_outcome(target: LearningTarget, result: TransitionResult) -> None:
    qualities = ", ".join(f"{unit_id}={quality}" for unit_id, quality in result.qualities.items())
    if result.is_promotion:
        logger.info(
            f"Learning target promoted: target={target.id}, "
            f"{result.current_stage} -> {result.next_stage}, qualities=[{qualities}]"
        )
    else:
        logger.debug(
            f"Learning target updated: target={target.id}, stage={result.next_stage}, "
            f"qualities=[{qualities}]"
        )


def apply_evaluations(
    target: LearningTarget,
    evaluations: Mapping[str, Evaluation | Mapping[str, Any]],
    now: int,
) -> LearningTarget:
    """Apply one evaluation batch and return the updated learning target.

    Steps:
    - score every evaluation (invalid raw payloads count as quality 0)
    - in the greenhouse, only record the activity and stop there
    - run the bookkeeping of the current stage and decide on a promotion
    - rebuild the main state for the resolved stage
    - append one activity item, and a stage transition item on promotion
    - record the commitment (lastCommitmentAt, totalCommitmentCount)

    Args:
        target: Current learning target (not modified)
        evaluations: Evaluations keyed by unit id; a single entry in TARGET mode
        now: Timestamp of the batch (ms)

    Returns:
        A new LearningTarget

    Raises:
        EmptyEvaluationBatchError: If ``evaluations`` is empty
        UnknownUnitError: If a SPLIT-mode evaluation names an unknown unit
        InvariantViolationError: If the update would produce an inconsistent target
    """
    batch = _validate_batch(target, evaluations)

    if target.isInGreenhouse:
        # Only the activity history records greenhouse reviews
        item = create_activity_history_item(target, batch, target.stage, now)
        logger.debug(f"Greenhouse review recorded: target={target.id}, stage={target.stage}")
        return target.model_copy(update={"activityHistory": target.activityHistory + (item,)})

    result = calculate_transition(target, batch, now)
    new_state = build_main_state(target.state, result)
    activity_history, stage_history = record_histories(target, batch, result)

    _log_outcome(target, result)

    return target.model_copy(
        update={
            "state": new_state,
            "lastCommitmentAt": now,
            "totalCommitmentCount": target.totalCommitmentCount + 1,
            "activityHistory": activity_history,
            "stageTransitionHistory": stage_history,
        }
    )


def replay_evaluations(
    target: LearningTarget,
    batches: Iterable[tuple[int, Mapping[str, Evaluation | Mapping[str, Any]]]],
) -> LearningTarget:
    """Apply ``(now, evaluations)`` batches in order, e.g. for simulation or backfill.

    Raises:
        ValueError: If the batch timestamps go backwards
    """
    last_now: int | None = None
    for now, evaluations in batches:
        if last_now is not None and now < last_now:
            raise ValueError(f"Batch timestamps must not decrease: {now} < {last_now}")
        target = apply_evaluations(target, evaluations, now)
        last_now = now
    return target
