"""Consecutive-day streak bookkeeping with reset-block forgiveness."""

from __future__ import annotations

import logging
from datetime import tzinfo

from bloomtrack.config import get_settings
from bloomtrack.constants import INITIAL_CONSECUTIVE_DAYS, MAX_RESET_BLOCK_COUNT
from bloomtrack.models import ConsecutiveDaysData
from bloomtrack.srs.time import calendar_days_between, resolve_timezone

logger = logging.getLogger(__name__)


def initial_consecutive_days(now: int) -> ConsecutiveDaysData:
    """Streak data on entry to BUDDING: day one, reset block fully charged."""
    return ConsecutiveDaysData(
        consecutiveDays=INITIAL_CONSECUTIVE_DAYS,
        resetBlockCount=MAX_RESET_BLOCK_COUNT,
        lastResetBlockUsedAt=None,
        lastResetBlockChargedAt=now,
    )


def update_consecutive_days(
    current: ConsecutiveDaysData,
    last_commitment_at: int,
    now: int,
    tz: tzinfo | None = None,
) -> ConsecutiveDaysData:
    """Update the streak for a commitment made at ``now``.

    Days are compared as calendar days in ``tz`` (the configured timezone by
    default).

    - Same day: unchanged.
    - Next day: streak + 1; an empty reset block is recharged.
    - Gap of ``missed`` days: if enough blocks remain they are consumed and the
      streak goes on (+1); otherwise the streak restarts at 1 and the block is
      restored so the new streak starts protected.
    - ``now`` before the last commitment: unchanged.
    """
    if tz is None:
        tz = resolve_timezone(get_settings().timezone)

    diff_days = calendar_days_between(last_commitment_at, now, tz)

    if diff_days == 0:
        return current

    if diff_days < 0:
        logger.debug(
            f"Commitment at {now} precedes last commitment at {last_commitment_at}; streak unchanged"
        )
        return current

    consecutive_days = current.consecutiveDays
    reset_block_count = current.resetBlockCount
    last_used_at = current.lastResetBlockUsedAt
    last_charged_at = current.lastResetBlockChargedAt

    if diff_days == 1:
        consecutive_days += 1
        # One on-time commitment earns the block back
        if reset_block_count < MAX_RESET_BLOCK_COUNT:
            reset_block_count = MAX_RESET_BLOCK_COUNT
            last_charged_at = now
    else:
        missed = diff_days - 1
        if reset_block_count >= missed:
            reset_block_count -= missed
            consecutive_days += 1
            last_used_at = now
        else:
            consecutive_days = INITIAL_CONSECUTIVE_DAYS
            reset_block_count = MAX_RESET_BLOCK_COUNT

    return ConsecutiveDaysData(
        consecutiveDays=consecutive_days,
        resetBlockCount=reset_block_count,
        lastResetBlockUsedAt=last_used_at,
        lastResetBlockChargedAt=last_charged_at,
    )
