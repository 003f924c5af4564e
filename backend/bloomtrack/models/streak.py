"""Consecutive-day streak data tracked during the BUDDING stage."""

from pydantic import BaseModel, ConfigDict, Field

from bloomtrack.constants import MAX_RESET_BLOCK_COUNT


class ConsecutiveDaysData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    consecutiveDays: int = Field(..., ge=1, description="Current streak length in days")
    # Kept as a count so more than one block can be allowed later
    resetBlockCount: int = Field(..., ge=0, le=MAX_RESET_BLOCK_COUNT)
    lastResetBlockUsedAt: int | None = None
    lastResetBlockChargedAt: int
