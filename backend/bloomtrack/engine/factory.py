"""Creation of new learning targets."""

from __future__ import annotations

from collections.abc import Iterable

from bloomtrack.engine.promotion import create_stage_transition_history_item
from bloomtrack.models import (
    LearningTarget,
    MainState,
    ManagementMode,
    SplitSprouting,
    TargetSprouting,
    Unit,
)
from bloomtrack.srs.time import utc_now_ms


def create_learning_target(
    id: str,
    title: str,
    now: int | None = None,
    description: str = "",
    management_mode: ManagementMode = "TARGET",
    units: Iterable[Unit] | None = None,
) -> LearningTarget:
    """Create a new learning target in SPROUTING with an INITIAL_CREATION history entry.

    Args:
        id: Identifier of the new target
        title: Title of the new target
        now: Creation timestamp (ms); the current time when omitted
        description: Optional description
        management_mode: TARGET (one schedule) or SPLIT (one schedule per unit)
        units: Units of a SPLIT-mode target; at least one is required

    Raises:
        ValueError: If units are missing in SPLIT mode or given in TARGET mode
    """
    if now is None:
        now = utc_now_ms()

    unit_list = list(units or [])
    state: MainState
    if management_mode == "TARGET":
        if unit_list:
            raise ValueError("TARGET mode learning targets have no units")
        state = TargetSprouting()
    else:
        if not unit_list:
            raise ValueError("SPLIT mode requires at least one unit")
        state = SplitSprouting(units={unit.id: unit for unit in unit_list})

    return LearningTarget(
        id=id,
        title=title,
        description=description,
        currentSlot=0,
        createdAt=now,
        state=state,
        lastCommitmentAt=None,
        totalCommitmentCount=0,
        isInGreenhouse=False,
        stageTransitionHistory=(
            create_stage_transition_history_item(None, "SPROUTING", "INITIAL_CREATION", now),
        ),
    )
