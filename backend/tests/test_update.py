"""End-to-end tests for applying evaluation batches to learning targets."""

import logging

import pytest

from conftest import NOW, days_later

from bloomtrack.constants import ONE_DAY_MS
from bloomtrack.engine import apply_evaluations, create_learning_target, replay_evaluations
from bloomtrack.errors import (
    EmptyEvaluationBatchError,
    InvariantViolationError,
    UnknownUnitError,
)
from bloomtrack.models import (
    PassFailActivity,
    ScoreActivity,
    SM2State,
    SM2TargetData,
    SplitBlooming,
    SplitBudding,
    StarEvaluation,
    TapEvaluation,
    TargetBlooming,
    TargetBudding,
    TargetHallOfFame,
    TargetMastered,
    TargetSprouting,
)

STAR_4 = {"TARGET_ROOT": StarEvaluation(value=4)}
STAR_5 = {"TARGET_ROOT": StarEvaluation(value=5)}


def _stage_history(target):
    return [(item.reason, item.fromStage, item.toStage) for item in target.stageTransitionHistory]


def _daily(target, evaluations, start, days):
    for day in range(days):
        target = apply_evaluations(target, evaluations, days_later(start, day))
    return target


def _blooming_target(target_factory, state: SM2State):
    """A TARGET-mode learning target already in BLOOMING."""
    target = target_factory()
    sm2_data = SM2TargetData(state=state, lastActiveAt=NOW - ONE_DAY_MS, nextReviewDate=NOW)
    return target.model_copy(
        update={"state": TargetBlooming(sm2Data=sm2_data), "lastCommitmentAt": NOW - ONE_DAY_MS}
    )


class TestCreateLearningTarget:
    """Tests for create_learning_target function."""

    def test_new_target_is_sprouting(self):
        target = create_learning_target("t1", "Verbs", now=NOW)
        assert target.state == TargetSprouting()
        assert target.createdAt == NOW
        assert target.lastCommitmentAt is None
        assert target.totalCommitmentCount == 0
        assert _stage_history(target) == [("INITIAL_CREATION", None, "SPROUTING")]

    def test_split_mode_requires_units(self):
        with pytest.raises(ValueError, match="at least one unit"):
            create_learning_target("t1", "Verbs", now=NOW, management_mode="SPLIT")

    def test_now_defaults_to_current_time(self):
        target = create_learning_target("t1", "Verbs")
        assert target.createdAt > NOW


class TestSprouting:
    """SPROUTING: rate-limited commitment counter."""

    def test_three_daily_commitments_promote_to_budding(self, target_factory):
        target = _daily(target_factory(), STAR_4, NOW, 3)

        assert isinstance(target.state, TargetBudding)
        assert target.totalCommitmentCount == 3
        assert target.lastCommitmentAt == days_later(NOW, 2)
        assert _stage_history(target) == [
            ("INITIAL_CREATION", None, "SPROUTING"),
            ("PROMOTION_SUCCESS", "SPROUTING", "BUDDING"),
        ]
        assert target.state.consecutiveDaysData.consecutiveDays == 1
        assert target.state.achievedHighQualityUnitIds == ()
        assert len(target.activityHistory) == 3
        assert target.activityHistory[-1].didStateTransition is True
        assert target.activityHistory[-1].newStage == "BUDDING"

    def test_counter_moves_once_per_24_hours(self, target_factory):
        target = target_factory()
        target = apply_evaluations(target, STAR_4, NOW)
        target = apply_evaluations(target, STAR_4, NOW + 60 * 60 * 1000)
        target = apply_evaluations(target, STAR_4, NOW + 23 * 60 * 60 * 1000)

        assert target.state.sproutingPromotionCount == 1
        assert target.state.lastCountIncrementedAt == NOW
        assert target.totalCommitmentCount == 3

        target = apply_evaluations(target, STAR_4, NOW + ONE_DAY_MS)
        assert target.state.sproutingPromotionCount == 2
        assert target.state.lastCountIncrementedAt == NOW + ONE_DAY_MS

    def test_quality_does_not_matter_in_sprouting(self, target_factory):
        poor = {"TARGET_ROOT": StarEvaluation(value=0)}
        target = _daily(target_factory(), poor, NOW, 3)
        assert target.stage == "BUDDING"


class TestBudding:
    """BUDDING: streak and achievement paths to BLOOMING."""

    def test_high_quality_promotes_to_blooming_with_fresh_sm2(self, target_factory):
        target = _daily(target_factory(), STAR_4, NOW, 3)
        promoted_at = days_later(NOW, 3)
        target = apply_evaluations(target, STAR_5, promoted_at)

        assert isinstance(target.state, TargetBlooming)
        sm2_data = target.state.sm2Data
        assert sm2_data.state.interval == 1
        assert sm2_data.state.repetitions == 1
        assert sm2_data.state.easeFactor == pytest.approx(2.6)
        assert sm2_data.lastActiveAt == promoted_at
        assert sm2_data.nextReviewDate == days_later(promoted_at, 1)
        assert "consecutiveDaysData" not in target.state.model_dump()
        assert _stage_history(target).count(("PROMOTION_SUCCESS", "BUDDING", "BLOOMING")) == 1

    def test_four_day_streak_promotes_without_high_quality(self, target_factory):
        poor = {"TARGET_ROOT": StarEvaluation(value=2)}
        target = _daily(target_factory(), poor, NOW, 3)

        target = _daily(target, poor, days_later(NOW, 3), 2)
        assert target.stage == "BUDDING"
        assert target.state.consecutiveDaysData.consecutiveDays == 3

        target = apply_evaluations(target, poor, days_later(NOW, 5))
        assert target.stage == "BLOOMING"
        assert target.state.sm2Data.state.repetitions == 0
        assert target.state.sm2Data.state.interval == 1

    def test_missed_day_uses_reset_block(self, target_factory):
        poor = {"TARGET_ROOT": StarEvaluation(value=1)}
        target = _daily(target_factory(), poor, NOW, 3)

        target = apply_evaluations(target, poor, days_later(NOW, 4))
        assert target.state.consecutiveDaysData.consecutiveDays == 2
        assert target.state.consecutiveDaysData.resetBlockCount == 0

    def test_long_gap_breaks_streak(self, target_factory):
        poor = {"TARGET_ROOT": StarEvaluation(value=1)}
        target = _daily(target_factory(), poor, NOW, 3)
        target = apply_evaluations(target, poor, days_later(NOW, 3))

        target = apply_evaluations(target, poor, days_later(NOW, 6))
        assert target.state.consecutiveDaysData.consecutiveDays == 1
        assert target.state.consecutiveDaysData.resetBlockCount == 1


class TestBloomingAndBeyond:
    """BLOOMING, HALL_OF_FAME and MASTERED."""

    def test_blooming_updates_sm2(self, target_factory):
        target = _blooming_target(target_factory, SM2State(interval=1, easeFactor=2.5, repetitions=1))
        target = apply_evaluations(target, STAR_5, NOW)

        assert target.stage == "BLOOMING"
        assert target.state.sm2Data.state.interval == 6
        assert target.state.sm2Data.nextReviewDate == days_later(NOW, 6)

    def test_promotes_to_hall_of_fame_when_review_is_far_away(self, target_factory, caplog):
        caplog.set_level(logging.INFO, logger="bloomtrack")
        target = _blooming_target(target_factory, SM2State(interval=40, easeFactor=2.8, repetitions=3))
        target = apply_evaluations(target, STAR_5, NOW)

        assert isinstance(target.state, TargetHallOfFame)
        assert target.state.sm2Data.state.interval == 112
        assert target.state.masteredSlotExpiresAt == days_later(NOW, 150)
        assert _stage_history(target)[-1] == ("PROMOTION_SUCCESS", "BLOOMING", "HALL_OF_FAME")
        assert "BLOOMING -> HALL_OF_FAME" in caplog.text

    def test_hall_of_fame_freezes_schedule(self, target_factory):
        target = _blooming_target(target_factory, SM2State(interval=40, easeFactor=2.8, repetitions=3))
        target = apply_evaluations(target, STAR_5, NOW)
        frozen_state = target.state

        target = apply_evaluations(target, {"TARGET_ROOT": StarEvaluation(value=0)}, days_later(NOW, 1))

        assert target.state == frozen_state
        assert len(target.stageTransitionHistory) == 2
        assert target.activityHistory[-1].stageAtActivity == "HALL_OF_FAME"
        assert target.totalCommitmentCount == 2

    def test_mastered_keeps_scheduling_without_promotion(self, target_factory):
        target = _blooming_target(target_factory, SM2State(interval=40, easeFactor=2.8, repetitions=3))
        target = target.model_copy(update={"state": TargetMastered(sm2Data=target.state.sm2Data)})

        target = apply_evaluations(target, STAR_5, NOW)
        assert isinstance(target.state, TargetMastered)
        assert target.state.sm2Data.state.interval == 112


class TestSplitMode:
    """SPLIT mode: one schedule per unit."""

    def test_all_units_must_achieve(self, split_target_factory):
        tap_all = {"u1": TapEvaluation(), "u2": TapEvaluation(), "u3": TapEvaluation()}
        target = _daily(split_target_factory(), tap_all, NOW, 3)
        assert isinstance(target.state, SplitBudding)

        target = apply_evaluations(
            target,
            {"u1": StarEvaluation(value=5), "u2": StarEvaluation(value=1)},
            days_later(NOW, 3),
        )
        assert target.stage == "BUDDING"
        assert target.state.achievedHighQualityUnitIds == ("u1",)

        target = apply_evaluations(
            target,
            {"u2": StarEvaluation(value=3), "u3": TapEvaluation()},
            days_later(NOW, 4),
        )
        assert isinstance(target.state, SplitBlooming)

    def test_units_not_evaluated_on_entry_are_due_now(self, split_target_factory):
        tap_all = {"u1": TapEvaluation(), "u2": TapEvaluation(), "u3": TapEvaluation()}
        target = _daily(split_target_factory(), tap_all, NOW, 3)
        # Four daily commitments on u3 alone reach BLOOMING through the streak
        target = _daily(target, {"u3": TapEvaluation()}, days_later(NOW, 3), 3)
        entered_at = days_later(NOW, 5)

        assert target.stage == "BLOOMING"
        units = target.state.units
        assert units["u1"].sm2Data.nextReviewDate == entered_at
        assert units["u2"].sm2Data.nextReviewDate == entered_at
        assert units["u3"].sm2Data.nextReviewDate == days_later(entered_at, 1)
        assert target.state.representativeUnitId == "u1"

        target = apply_evaluations(target, {"u1": TapEvaluation()}, days_later(NOW, 6))
        units = target.state.units
        assert units["u1"].sm2Data.lastActiveAt == days_later(NOW, 6)
        assert units["u2"].sm2Data.lastActiveAt == entered_at
        assert target.state.representativeUnitId == "u2"

    def test_unknown_unit_rejected(self, split_target_factory):
        target = split_target_factory()
        with pytest.raises(UnknownUnitError, match="u9"):
            apply_evaluations(target, {"u1": TapEvaluation(), "u9": TapEvaluation()}, NOW)

    def test_activity_records_unit_paths(self, split_target_factory):
        target = apply_evaluations(split_target_factory(), {"u3": TapEvaluation()}, NOW)
        item = target.activityHistory[-1]
        assert [(unit.id, unit.unitPath) for unit in item.activeUnits] == [("u3", "verbs/ir")]


class TestApplyEvaluations:
    """Tests for apply_evaluations input handling."""

    def test_empty_batch_rejected(self, target_factory):
        target = target_factory()
        with pytest.raises(EmptyEvaluationBatchError):
            apply_evaluations(target, {}, NOW)
        assert target.totalCommitmentCount == 0

    def test_empty_batch_is_a_value_error(self, target_factory):
        with pytest.raises(ValueError):
            apply_evaluations(target_factory(), {}, NOW)

    def test_target_mode_takes_one_evaluation(self, target_factory):
        with pytest.raises(InvariantViolationError):
            apply_evaluations(
                target_factory(), {"a": TapEvaluation(), "b": TapEvaluation()}, NOW
            )

    def test_any_single_key_is_accepted_in_target_mode(self, target_factory):
        target = apply_evaluations(target_factory(), {"card": TapEvaluation()}, NOW)
        assert target.totalCommitmentCount == 1

    def test_invalid_raw_evaluation_counts_as_unrated(self, target_factory):
        target = apply_evaluations(target_factory(), {"TARGET_ROOT": {"mode": "SCORE", "value": 400}}, NOW)
        assert target.activityHistory[-1].activity == ScoreActivity(timestamp=NOW, percentage=0)

    def test_invalid_raw_evaluation_keeps_submitted_mode(self, target_factory):
        target = apply_evaluations(
            target_factory(), {"TARGET_ROOT": {"mode": "PASS_FAIL", "value": "yes"}}, NOW
        )
        activity = target.activityHistory[-1].activity
        assert activity.evaluationMode == "PASS_FAIL"
        assert activity == PassFailActivity(timestamp=NOW, isCorrect=False)

    def test_input_target_is_not_modified(self, target_factory):
        target = target_factory()
        before = target.model_dump_json()
        apply_evaluations(target, STAR_4, NOW)
        assert target.model_dump_json() == before

    def test_deterministic(self, split_target_factory):
        target = split_target_factory()
        batch = {"u1": StarEvaluation(value=4), "u2": {"mode": "SCORE", "value": 95}}
        first = apply_evaluations(target, batch, NOW)
        second = apply_evaluations(target, batch, NOW)
        assert first.model_dump_json() == second.model_dump_json()


class TestReplayEvaluations:
    """Tests for replay_evaluations function."""

    def test_matches_sequential_application(self, target_factory):
        batches = [(days_later(NOW, day), STAR_4) for day in range(4)]
        replayed = replay_evaluations(target_factory(), batches)
        sequential = _daily(target_factory(), STAR_4, NOW, 4)
        assert replayed.model_dump_json() == sequential.model_dump_json()

    def test_decreasing_timestamps_rejected(self, target_factory):
        with pytest.raises(ValueError, match="must not decrease"):
            replay_evaluations(target_factory(), [(NOW, STAR_4), (NOW - 1, STAR_4)])


class TestGreenhouse:
    """Reviews of a learning target that is in the greenhouse."""

    def _budding_in_greenhouse(self, target_factory):
        target = _daily(target_factory(), STAR_4, NOW, 3)
        return target.model_copy(update={"isInGreenhouse": True})

    def test_review_only_appends_activity(self, target_factory):
        target = self._budding_in_greenhouse(target_factory)

        reviewed = apply_evaluations(target, STAR_5, days_later(NOW, 3))

        assert reviewed.state == target.state
        assert isinstance(reviewed.state, TargetBudding)
        assert reviewed.lastCommitmentAt == target.lastCommitmentAt
        assert reviewed.totalCommitmentCount == target.totalCommitmentCount
        assert reviewed.stageTransitionHistory == target.stageTransitionHistory
        assert len(reviewed.activityHistory) == len(target.activityHistory) + 1

        item = reviewed.activityHistory[-1]
        assert item.isInGreenhouse is True
        assert item.stageAtActivity == "BUDDING"
        assert item.didStateTransition is False
        assert item.newStage is None

    def test_blooming_schedule_untouched(self, target_factory):
        target = _blooming_target(target_factory, SM2State(interval=40, easeFactor=2.8, repetitions=3))
        target = target.model_copy(update={"isInGreenhouse": True})

        reviewed = apply_evaluations(target, STAR_5, NOW)

        assert reviewed.state == target.state
        assert reviewed.stage == "BLOOMING"

    def test_empty_batch_still_rejected(self, target_factory):
        target = self._budding_in_greenhouse(target_factory)
        with pytest.raises(EmptyEvaluationBatchError):
            apply_evaluations(target, {}, days_later(NOW, 3))

    def test_split_unit_paths_recorded(self, split_target_factory):
        target = split_target_factory().model_copy(update={"isInGreenhouse": True})

        reviewed = apply_evaluations(target, {"u2": TapEvaluation()}, NOW)

        assert reviewed.state == target.state
        assert reviewed.totalCommitmentCount == 0
        assert [(unit.id, unit.unitPath) for unit in reviewed.activityHistory[-1].activeUnits] == [
            ("u2", "verbs/estar")
        ]
