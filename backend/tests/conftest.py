"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timezone

import pytest

from bloomtrack.config import get_settings
from bloomtrack.constants import ONE_DAY_MS
from bloomtrack.engine import create_learning_target
from bloomtrack.models import Unit, UnitContent
from bloomtrack.srs.time import datetime_to_ms

# Day boundaries are compared in UTC during tests by default
os.environ.setdefault("BLOOMTRACK_TIMEZONE", "UTC")

# 2025-01-01T09:00:00Z
NOW = datetime_to_ms(datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc))


def days_later(ms: int, days: int) -> int:
    return ms + days * ONE_DAY_MS


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; every test starts from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def units():
    return [
        Unit(id="u1", unitPath="verbs/ser", content=UnitContent(title="ser")),
        Unit(id="u2", unitPath="verbs/estar", content=UnitContent(title="estar")),
        Unit(id="u3", unitPath="verbs/ir"),
    ]


@pytest.fixture
def target_factory(now):
    """Factory for new TARGET-mode learning targets."""

    def _create(target_id: str = "target-1", created_at: int | None = None):
        return create_learning_target(target_id, "Spanish irregular verbs", now=created_at or now)

    return _create


@pytest.fixture
def split_target_factory(now, units):
    """Factory for new SPLIT-mode learning targets."""

    def _create(target_id: str = "split-1", created_at: int | None = None):
        return create_learning_target(
            target_id,
            "Spanish irregular verbs",
            now=created_at or now,
            management_mode="SPLIT",
            units=units,
        )

    return _create
