"""bloomtrack: stage-transition engine and SM-2 scheduler for learning targets."""

from .engine import apply_evaluations, create_learning_target, replay_evaluations
from .errors import (
    EmptyEvaluationBatchError,
    EngineError,
    InvalidStageTransitionError,
    InvariantViolationError,
    MissingStageDataError,
    UnknownUnitError,
)

__all__ = [
    "apply_evaluations",
    "create_learning_target",
    "replay_evaluations",
    "EmptyEvaluationBatchError",
    "EngineError",
    "InvalidStageTransitionError",
    "InvariantViolationError",
    "MissingStageDataError",
    "UnknownUnitError",
]
