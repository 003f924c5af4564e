"""Stage-transition engine."""

from .factory import create_learning_target
from .history import create_activity_from_evaluation, create_activity_history_item, record_histories
from .promotion import (
    PromotionSignals,
    check_promotion_conditions,
    create_stage_transition_history_item,
)
from .state_builder import build_main_state, get_representative_unit_id
from .streak import initial_consecutive_days, update_consecutive_days
from .transition import TransitionResult, calculate_transition, tracked_unit_ids
from .update import apply_evaluations, replay_evaluations

__all__ = [
    "create_learning_target",
    "create_activity_from_evaluation",
    "create_activity_history_item",
    "record_histories",
    "PromotionSignals",
    "check_promotion_conditions",
    "create_stage_transition_history_item",
    "build_main_state",
    "get_representative_unit_id",
    "initial_consecutive_days",
    "update_consecutive_days",
    "TransitionResult",
    "calculate_transition",
    "tracked_unit_ids",
    "apply_evaluations",
    "replay_evaluations",
]
