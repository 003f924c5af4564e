"""Learning target root record."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from bloomtrack.models.history import (
    ActivityHistoryItem,
    GreenhouseTransitionHistoryItem,
    StageTransitionHistoryItem,
)
from bloomtrack.models.literals import ManagementMode, Stage
from bloomtrack.models.state import MainState


class LearningTarget(BaseModel):
    """Full learning target as handed to and returned by the engine.

    The engine never mutates a target; every update returns a new value.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Spanish irregular verbs",
                "description": "",
                "currentSlot": 0,
                "createdAt": 1735689600000,
                "state": {"managementMode": "TARGET", "stage": "SPROUTING", "sproutingPromotionCount": 0},
                "lastCommitmentAt": None,
                "totalCommitmentCount": 0,
                "isInGreenhouse": False,
                "stageTransitionHistory": [
                    {
                        "reason": "INITIAL_CREATION",
                        "fromStage": None,
                        "toStage": "SPROUTING",
                        "timestamp": 1735689600000,
                    }
                ],
                "greenhouseTransitionHistory": [],
                "activityHistory": [],
            }
        },
    )

    id: str = Field(..., min_length=1, description="Unique identifier")
    title: str = Field(..., max_length=200, description="Title of the learning target")
    description: str = Field("", max_length=1000, description="Optional description")
    currentSlot: int = Field(0, ge=0, description="Slot the target occupies")
    createdAt: int = Field(..., description="Creation timestamp (ms)")

    # Not updated by reviews in the greenhouse
    state: MainState
    lastCommitmentAt: int | None = Field(None, description="Last commitment in the slot (ms)")
    totalCommitmentCount: int = Field(0, ge=0, description="Commitments made in the slot")

    isInGreenhouse: bool = False

    stageTransitionHistory: tuple[StageTransitionHistoryItem, ...] = ()
    greenhouseTransitionHistory: tuple[GreenhouseTransitionHistoryItem, ...] = ()
    # All activities, greenhouse reviews included
    activityHistory: tuple[ActivityHistoryItem, ...] = ()

    @property
    def managementMode(self) -> ManagementMode:
        return self.state.managementMode

    @property
    def stage(self) -> Stage:
        return self.state.stage
