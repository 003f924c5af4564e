"""User evaluations and the activity records persisted from them."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, TypeAdapter

from bloomtrack.models.literals import EvaluationMode


class _EvaluationBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TapEvaluation(_EvaluationBase):
    """One-tap record: the learner did the work (Q=4)."""

    mode: Literal["TAP"] = "TAP"


class PassFailEvaluation(_EvaluationBase):
    """Quick correct/incorrect check (Q=4 / Q=1)."""

    mode: Literal["PASS_FAIL"] = "PASS_FAIL"
    value: StrictBool = Field(..., description="True when the answer was correct")


class StarEvaluation(_EvaluationBase):
    """Self-assessed recall strength on a 0-5 star scale."""

    mode: Literal["STAR"] = "STAR"
    value: float = Field(..., ge=0, le=5, description="Star level 0-5")


class ScoreEvaluation(_EvaluationBase):
    """Percentage score of a test (0-100)."""

    mode: Literal["SCORE"] = "SCORE"
    value: float = Field(..., ge=0, le=100, allow_inf_nan=False, description="Score percentage")


class UnratedEvaluation(_EvaluationBase):
    """Stand-in for a payload that failed validation. Always scored as quality 0.

    Never accepted by parse_evaluation; only the quality mapper creates it.
    """

    mode: Literal["UNRATED"] = "UNRATED"
    submittedMode: EvaluationMode | None = Field(
        None, description="Mode named by the rejected payload, when it was a known one"
    )


Evaluation = Annotated[
    Union[TapEvaluation, PassFailEvaluation, StarEvaluation, ScoreEvaluation],
    Field(discriminator="mode"),
]

EVALUATION_TYPES = (TapEvaluation, PassFailEvaluation, StarEvaluation, ScoreEvaluation)

_evaluation_adapter: TypeAdapter[Evaluation] = TypeAdapter(Evaluation)


def parse_evaluation(raw: Any) -> Evaluation:
    """Validate a raw evaluation payload. Raises pydantic.ValidationError."""
    return _evaluation_adapter.validate_python(raw)


# --- Persisted activity records ---


class _ActivityBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: int


class TapActivity(_ActivityBase):
    evaluationMode: Literal["TAP"] = "TAP"


class PassFailActivity(_ActivityBase):
    evaluationMode: Literal["PASS_FAIL"] = "PASS_FAIL"
    isCorrect: bool


class StarActivity(_ActivityBase):
    evaluationMode: Literal["STAR"] = "STAR"
    level: float = Field(..., ge=0, le=5)


class ScoreActivity(_ActivityBase):
    evaluationMode: Literal["SCORE"] = "SCORE"
    percentage: float = Field(..., ge=0, le=100)


Activity = Annotated[
    Union[TapActivity, PassFailActivity, StarActivity, ScoreActivity],
    Field(discriminator="evaluationMode"),
]
