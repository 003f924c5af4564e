"""Mapping from user evaluations to SM-2 quality.

Raw payloads coming from the presentation layer are untrusted. A payload that
does not validate is never fatal: it is logged and replaced by an
UnratedEvaluation, which maps to quality 0 and keeps the submitted mode for
the activity history.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, get_args

from pydantic import ValidationError

from bloomtrack.constants import TARGET_ROOT_ID
from bloomtrack.models import (
    EVALUATION_TYPES,
    Evaluation,
    EvaluationMode,
    ManagementMode,
    PassFailEvaluation,
    ScoreEvaluation,
    StarEvaluation,
    TapEvaluation,
    UnratedEvaluation,
    parse_evaluation,
)
from bloomtrack.srs.sm2 import round_half_up

logger = logging.getLogger(__name__)


TAP_QUALITY = 4
PASS_FAIL_CORRECT_QUALITY = 4
PASS_FAIL_INCORRECT_QUALITY = 1
UNRATED_QUALITY = 0  # 0 points or an invalid value

# (quality, minimum percentage), checked from the highest quality down.
# Quality 5 requires exactly 100.
SCORE_QUALITY_THRESHOLDS: tuple[tuple[int, float], ...] = (
    (5, 100),
    (4, 90),
    (3, 80),
    (2, 30),
    (1, 1),
)

UNRATED_EVALUATION = UnratedEvaluation()

_EVALUATION_MODES = frozenset(get_args(EvaluationMode))


def _submitted_mode(raw: Any) -> EvaluationMode | None:
    if isinstance(raw, Mapping):
        mode = raw.get("mode")
        if isinstance(mode, str) and mode in _EVALUATION_MODES:
            return mode
    return None


def coerce_evaluation(raw: Any) -> Evaluation | UnratedEvaluation:
    """Return ``raw`` as a validated evaluation.

    Evaluation models pass through. Anything else is validated; when that fails
    a warning is logged and an UnratedEvaluation carrying the submitted mode is
    returned instead.
    """
    if isinstance(raw, EVALUATION_TYPES + (UnratedEvaluation,)):
        return raw
    try:
        return parse_evaluation(raw)
    except ValidationError as exc:
        logger.warning(
            f"Invalid evaluation {raw!r} treated as unrated: "
            f"{'; '.join(err['msg'] for err in exc.errors())}"
        )
        return UnratedEvaluation(submittedMode=_submitted_mode(raw))


def _score_quality(percentage: float) -> int:
    for quality, min_score in SCORE_QUALITY_THRESHOLDS:
        if quality == 5:
            if percentage == min_score:
                return quality
            continue
        if percentage >= min_score:
            return quality
    return UNRATED_QUALITY


def calculate_quality(evaluation: Evaluation | Mapping[str, Any]) -> int:
    """Compute the SM-2 quality (0-5) of one evaluation.

    Rules:
    - TAP → 4
    - PASS_FAIL → 4 when correct, 1 otherwise
    - STAR → the level rounded to the nearest integer
    - SCORE → 5 only for 100, then 4 (>= 90), 3 (>= 80), 2 (>= 30), 1 (>= 1), else 0
    - invalid payloads → 0
    """
    evaluation = coerce_evaluation(evaluation)

    if isinstance(evaluation, UnratedEvaluation):
        return UNRATED_QUALITY

    if isinstance(evaluation, TapEvaluation):
        return TAP_QUALITY

    if isinstance(evaluation, PassFailEvaluation):
        return PASS_FAIL_CORRECT_QUALITY if evaluation.value else PASS_FAIL_INCORRECT_QUALITY

    if isinstance(evaluation, StarEvaluation):
        return round_half_up(evaluation.value)

    if isinstance(evaluation, ScoreEvaluation):
        return _score_quality(evaluation.value)

    logger.warning(f"Unsupported evaluation mode: {evaluation!r}")
    return UNRATED_QUALITY


def calculate_qualities(
    evaluations: Mapping[str, Evaluation], management_mode: ManagementMode
) -> dict[str, int]:
    """Compute qualities keyed by unit id.

    In TARGET mode the single evaluation is keyed by TARGET_ROOT_ID whatever
    key the caller used.
    """
    if management_mode == "TARGET":
        if not evaluations:
            return {}
        single = next(iter(evaluations.values()))
        return {TARGET_ROOT_ID: calculate_quality(single)}

    return {unit_id: calculate_quality(evaluation) for unit_id, evaluation in evaluations.items()}
