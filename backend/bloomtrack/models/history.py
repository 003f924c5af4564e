"""Append-only history records of a learning target."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bloomtrack.models.evaluation import Activity
from bloomtrack.models.literals import GreenhouseTransitionReason, Stage, StageTransitionReason


# Every legal (reason, fromStage, toStage) triple
LEGAL_STAGE_TRANSITIONS: frozenset[tuple[str, str | None, str]] = frozenset(
    {
        ("INITIAL_CREATION", None, "SPROUTING"),
        ("PROMOTION_SUCCESS", "SPROUTING", "BUDDING"),
        ("PROMOTION_SUCCESS", "BUDDING", "BLOOMING"),
        ("PROMOTION_SUCCESS", "BLOOMING", "HALL_OF_FAME"),
        ("DEMOTION_MASTERED_FAIL", "MASTERED", "BLOOMING"),
        ("RECOVERY_SUCCESS", "MASTERED", "HALL_OF_FAME"),
    }
)


class StageTransitionHistoryItem(BaseModel):
    """A stage change. Only triples listed in LEGAL_STAGE_TRANSITIONS validate."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    reason: StageTransitionReason
    fromStage: Stage | None
    toStage: Stage
    timestamp: int

    @model_validator(mode="after")
    def _legal_transition(self):
        if (self.reason, self.fromStage, self.toStage) not in LEGAL_STAGE_TRANSITIONS:
            raise ValueError(
                f"Invalid stage transition: {self.fromStage} -> {self.toStage} "
                f"with reason {self.reason}"
            )
        return self


class GreenhouseTransitionHistoryItem(BaseModel):
    """A stay in the greenhouse (outside the active slot)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    movedInAt: int
    movedOutAt: int | None = None  # None while the target is still in the greenhouse
    reason: GreenhouseTransitionReason


class SplitUnitActivity(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    unitPath: str = Field(..., description="Path at the time of the activity; not updated on rename")
    activity: Activity


class _ActivityHistoryItemBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    isInGreenhouse: bool
    stageAtActivity: Stage
    didStateTransition: bool
    newStage: Stage | None = None

    @model_validator(mode="after")
    def _transition_consistent(self):
        if self.didStateTransition != (self.newStage is not None):
            raise ValueError("newStage must be set exactly when didStateTransition is true")
        if self.newStage is not None and self.newStage == self.stageAtActivity:
            raise ValueError("newStage must differ from stageAtActivity")
        return self


class TargetActivityHistoryItem(_ActivityHistoryItemBase):
    managementMode: Literal["TARGET"] = "TARGET"
    activity: Activity


class SplitActivityHistoryItem(_ActivityHistoryItemBase):
    managementMode: Literal["SPLIT"] = "SPLIT"
    activeUnits: tuple[SplitUnitActivity, ...]


ActivityHistoryItem = Annotated[
    Union[TargetActivityHistoryItem, SplitActivityHistoryItem],
    Field(discriminator="managementMode"),
]
