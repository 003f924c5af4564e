"""SM-2 scheduling records."""

from pydantic import BaseModel, ConfigDict, Field


class SM2State(BaseModel):
    """State of the SM-2 recurrence."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    interval: int = Field(..., ge=0, description="I: days until the next review")
    easeFactor: float = Field(..., ge=1.3, le=3.0, description="EF: ease factor")
    repetitions: int = Field(..., ge=0, description="n: consecutive successful reviews")


class SM2TargetData(BaseModel):
    """SM-2 state of one scheduled item plus its absolute review timestamps."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    state: SM2State
    lastActiveAt: int
    nextReviewDate: int
