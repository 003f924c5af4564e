"""SRS helpers (quality mapping, SM-2 scheduling, time)."""

from .sm2 import (
    DEFAULT_SM2_STATE,
    calculate_next_review_date,
    calculate_sm2_state,
    round_half_up,
    seed_sm2_target_data,
    update_sm2_state,
    update_sm2_target_data,
)
from .quality import (
    UNRATED_EVALUATION,
    calculate_qualities,
    calculate_quality,
    coerce_evaluation,
)
from .time import (
    add_days_ms,
    calendar_days_between,
    datetime_to_ms,
    ms_to_datetime,
    resolve_timezone,
    utc_now_ms,
)

__all__ = [
    "DEFAULT_SM2_STATE",
    "calculate_next_review_date",
    "calculate_sm2_state",
    "round_half_up",
    "seed_sm2_target_data",
    "update_sm2_state",
    "update_sm2_target_data",
    "UNRATED_EVALUATION",
    "calculate_qualities",
    "calculate_quality",
    "coerce_evaluation",
    "add_days_ms",
    "calendar_days_between",
    "datetime_to_ms",
    "ms_to_datetime",
    "resolve_timezone",
    "utc_now_ms",
]
