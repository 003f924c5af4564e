"""Models module for the learning target data model."""

from .literals import (
    EvaluationMode,
    GreenhouseTransitionReason,
    ManagementMode,
    Stage,
    StageTransitionReason,
)
from .evaluation import (
    Activity,
    Evaluation,
    EVALUATION_TYPES,
    PassFailActivity,
    PassFailEvaluation,
    ScoreActivity,
    ScoreEvaluation,
    StarActivity,
    StarEvaluation,
    TapActivity,
    TapEvaluation,
    UnratedEvaluation,
    parse_evaluation,
)
from .sm2 import SM2State, SM2TargetData
from .streak import ConsecutiveDaysData
from .unit import Unit, UnitContent, UnitWithSM2
from .state import (
    BUDDING_STATES,
    HALL_OF_FAME_STATES,
    MainState,
    SPLIT_SM2_STATES,
    SPLIT_STATES,
    SPROUTING_STATES,
    SplitBlooming,
    SplitBudding,
    SplitHallOfFame,
    SplitMastered,
    SplitSprouting,
    TARGET_SM2_STATES,
    TargetBlooming,
    TargetBudding,
    TargetHallOfFame,
    TargetMastered,
    TargetSprouting,
)
from .history import (
    ActivityHistoryItem,
    GreenhouseTransitionHistoryItem,
    LEGAL_STAGE_TRANSITIONS,
    SplitActivityHistoryItem,
    SplitUnitActivity,
    StageTransitionHistoryItem,
    TargetActivityHistoryItem,
)
from .target import LearningTarget

__all__ = [
    "EvaluationMode",
    "GreenhouseTransitionReason",
    "ManagementMode",
    "Stage",
    "StageTransitionReason",
    "Activity",
    "Evaluation",
    "EVALUATION_TYPES",
    "PassFailActivity",
    "PassFailEvaluation",
    "ScoreActivity",
    "ScoreEvaluation",
    "StarActivity",
    "StarEvaluation",
    "TapActivity",
    "TapEvaluation",
    "UnratedEvaluation",
    "parse_evaluation",
    "SM2State",
    "SM2TargetData",
    "ConsecutiveDaysData",
    "Unit",
    "UnitContent",
    "UnitWithSM2",
    "BUDDING_STATES",
    "HALL_OF_FAME_STATES",
    "MainState",
    "SPLIT_SM2_STATES",
    "SPLIT_STATES",
    "SPROUTING_STATES",
    "SplitBlooming",
    "SplitBudding",
    "SplitHallOfFame",
    "SplitMastered",
    "SplitSprouting",
    "TARGET_SM2_STATES",
    "TargetBlooming",
    "TargetBudding",
    "TargetHallOfFame",
    "TargetMastered",
    "TargetSprouting",
    "ActivityHistoryItem",
    "GreenhouseTransitionHistoryItem",
    "LEGAL_STAGE_TRANSITIONS",
    "SplitActivityHistoryItem",
    "SplitUnitActivity",
    "StageTransitionHistoryItem",
    "TargetActivityHistoryItem",
    "LearningTarget",
]
