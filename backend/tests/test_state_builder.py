"""Unit tests for main state reconstruction."""

import pytest

from conftest import NOW, days_later

from bloomtrack.engine.state_builder import build_main_state, get_representative_unit_id
from bloomtrack.engine.streak import initial_consecutive_days
from bloomtrack.engine.transition import TransitionResult
from bloomtrack.errors import InvariantViolationError, MissingStageDataError
from bloomtrack.models import (
    SplitBlooming,
    SplitBudding,
    SplitHallOfFame,
    SplitSprouting,
    TargetBlooming,
    TargetBudding,
    TargetHallOfFame,
    TargetSprouting,
    Unit,
    UnitWithSM2,
)
from bloomtrack.srs.sm2 import seed_sm2_target_data, update_sm2_target_data


def _scheduled_unit(unit_id: str, next_review_days: int) -> UnitWithSM2:
    sm2_data = seed_sm2_target_data(NOW).model_copy(
        update={"nextReviewDate": days_later(NOW, next_review_days)}
    )
    return UnitWithSM2(id=unit_id, unitPath=f"path/{unit_id}", sm2Data=sm2_data)


def _result(current_stage, next_stage, **kwargs) -> TransitionResult:
    return TransitionResult(
        current_stage=current_stage, next_stage=next_stage, now=NOW, qualities={}, **kwargs
    )


class TestGetRepresentativeUnitId:
    """Tests for get_representative_unit_id function."""

    def test_earliest_review_wins(self):
        units = {
            "a": _scheduled_unit("a", 5),
            "b": _scheduled_unit("b", 2),
            "c": _scheduled_unit("c", 9),
        }
        assert get_representative_unit_id(units) == "b"

    def test_tie_goes_to_first_unit(self):
        units = {"a": _scheduled_unit("a", 3), "b": _scheduled_unit("b", 3)}
        assert get_representative_unit_id(units) == "a"

    def test_no_units_raises(self):
        with pytest.raises(MissingStageDataError):
            get_representative_unit_id({})


class TestBuildMainState:
    """Tests for build_main_state function."""

    def test_sprouting_counter_moves(self):
        state = build_main_state(
            TargetSprouting(sproutingPromotionCount=1, lastCountIncrementedAt=NOW - 1),
            _result("SPROUTING", "SPROUTING", sprouting_count=2, sprouting_counter_moved=True),
        )
        assert state == TargetSprouting(sproutingPromotionCount=2, lastCountIncrementedAt=NOW)

    def test_sprouting_counter_held(self):
        current = TargetSprouting(sproutingPromotionCount=1, lastCountIncrementedAt=NOW - 1)
        state = build_main_state(current, _result("SPROUTING", "SPROUTING", sprouting_count=1))
        assert state == current

    def test_sprouting_to_budding_drops_counter(self):
        current = SplitSprouting(
            units={"u1": Unit(id="u1", unitPath="p/u1")},
            sproutingPromotionCount=2,
            lastCountIncrementedAt=NOW,
        )
        state = build_main_state(
            current,
            _result(
                "SPROUTING",
                "BUDDING",
                consecutive_days_data=initial_consecutive_days(NOW),
                achieved_unit_ids=(),
            ),
        )
        assert isinstance(state, SplitBudding)
        assert state.achievedHighQualityUnitIds == ()
        assert "sproutingPromotionCount" not in state.model_dump()
        assert list(state.units) == ["u1"]

    def test_budding_without_data_raises(self):
        with pytest.raises(MissingStageDataError, match="Budding data missing during update"):
            build_main_state(TargetSprouting(), _result("SPROUTING", "BUDDING"))

    def test_budding_to_blooming_drops_streak(self):
        current = TargetBudding(consecutiveDaysData=initial_consecutive_days(NOW))
        sm2_data = update_sm2_target_data(None, 5, NOW)
        state = build_main_state(current, _result("BUDDING", "BLOOMING", target_sm2=sm2_data))
        assert state == TargetBlooming(sm2Data=sm2_data)
        assert "consecutiveDaysData" not in state.model_dump()

    def test_blooming_without_sm2_raises(self):
        current = TargetBudding(consecutiveDaysData=initial_consecutive_days(NOW))
        with pytest.raises(MissingStageDataError):
            build_main_state(current, _result("BUDDING", "BLOOMING"))

    def test_split_blooming_picks_representative(self):
        units = {"u1": _scheduled_unit("u1", 6), "u2": _scheduled_unit("u2", 1)}
        current = SplitBudding(
            units={"u1": Unit(id="u1", unitPath="path/u1"), "u2": Unit(id="u2", unitPath="path/u2")},
            consecutiveDaysData=initial_consecutive_days(NOW),
        )
        state = build_main_state(current, _result("BUDDING", "BLOOMING", split_units=units))
        assert isinstance(state, SplitBlooming)
        assert state.representativeUnitId == "u2"

    def test_hall_of_fame_entry(self):
        sm2_data = update_sm2_target_data(None, 5, NOW)
        expires_at = days_later(NOW, 150)
        state = build_main_state(
            TargetBlooming(sm2Data=sm2_data),
            _result("BLOOMING", "HALL_OF_FAME", target_sm2=sm2_data, hall_of_fame_expires_at=expires_at),
        )
        assert state == TargetHallOfFame(sm2Data=sm2_data, masteredSlotExpiresAt=expires_at)

    def test_hall_of_fame_keeps_data(self):
        units = {"u1": _scheduled_unit("u1", 120)}
        current = SplitHallOfFame(
            units=units, representativeUnitId="u1", masteredSlotExpiresAt=days_later(NOW, 150)
        )
        assert build_main_state(current, _result("HALL_OF_FAME", "HALL_OF_FAME")) == current

    def test_hall_of_fame_without_expiry_raises(self):
        sm2_data = update_sm2_target_data(None, 5, NOW)
        with pytest.raises(MissingStageDataError):
            build_main_state(
                TargetBlooming(sm2Data=sm2_data),
                _result("BLOOMING", "HALL_OF_FAME", target_sm2=sm2_data),
            )

    def test_no_return_to_sprouting(self):
        current = TargetBudding(consecutiveDaysData=initial_consecutive_days(NOW))
        with pytest.raises(InvariantViolationError):
            build_main_state(current, _result("BUDDING", "SPROUTING"))
