"""Literal types shared by the learning target models."""

from typing import Literal

ManagementMode = Literal["TARGET", "SPLIT"]

# Growth stage of a learning target (plant metaphor)
Stage = Literal[
    "SPROUTING",  # planted, building the habit
    "BUDDING",  # short-term continuity check
    "BLOOMING",  # SM-2 scheduled reviews
    "MASTERED",  # hall-of-fame condition met, protection period over
    "HALL_OF_FAME",  # 150-day protected period
]

EvaluationMode = Literal["TAP", "PASS_FAIL", "STAR", "SCORE"]

StageTransitionReason = Literal[
    "INITIAL_CREATION",
    "PROMOTION_SUCCESS",
    "DEMOTION_MASTERED_FAIL",
    "RECOVERY_SUCCESS",
]

GreenhouseTransitionReason = Literal["MANUAL_USER_REQUEST", "AUTO_MASTERED_EXPIRY"]
