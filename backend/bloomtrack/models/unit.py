"""Units of a SPLIT-mode learning target."""

from pydantic import BaseModel, ConfigDict, Field

from bloomtrack.models.sm2 import SM2TargetData


class UnitContent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str | None = None
    detail: str | None = None
    questions: str | None = None
    answers: list[str] | None = None


class Unit(BaseModel):
    """A unit before it is scheduled by SM-2 (SPROUTING and BUDDING)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    unitPath: str = Field(..., description="User-facing path, used as a title when content is missing")
    content: UnitContent | None = None


class UnitWithSM2(Unit):
    """A unit scheduled by SM-2 (BLOOMING and later)."""

    sm2Data: SM2TargetData
