"""
Тесты для чистых правил: completion, level, streak, множитель наград.
"""

from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from src.core.domain.completion import CompletionStatus, check_completion, percentage
from src.core.domain.gamification import (
    BonusClaim,
    TaskCompletionClaim,
    apply_multiplier,
    calculate_level,
    calculate_streak,
    next_level_xp,
)

D = date(2025, 1, 15)


def sub(key: str, valid: bool = True):
    return SimpleNamespace(subtask_key=key, valid=valid)


class TestCompletion:
    def test_partial_is_incomplete(self):
        check = check_completion(["a", "b", "c"], [sub("a"), sub("b")])
        assert check.status is CompletionStatus.INCOMPLETE
        assert check.completion_rate == 67

    def test_all_valid_is_reward_eligible(self):
        check = check_completion(["a", "b"], [sub("a"), sub("b")])
        assert check.status is CompletionStatus.REWARD_ELIGIBLE
        assert check.task_completed and check.reward_eligible

    def test_late_submission_completes_without_reward(self):
        check = check_completion(["a", "b"], [sub("a"), sub("b", valid=False)])
        assert check.status is CompletionStatus.COMPLETED_NOT_REWARDED
        assert check.task_completed
        assert not check.reward_eligible
        assert check.invalid_keys == {"b"}

    def test_submissions_for_inactive_subtasks_ignored(self):
        check = check_completion(["a"], [sub("a"), sub("old", valid=False)])
        assert check.status is CompletionStatus.REWARD_ELIGIBLE

    def test_no_active_subtasks_never_complete(self):
        check = check_completion([], [sub("a")])
        assert check.status is CompletionStatus.INCOMPLETE
        assert check.completion_rate == 0


@pytest.mark.parametrize(
    "part,total,expected", [(1, 2, 50), (1, 3, 33), (2, 3, 67), (0, 5, 0), (3, 0, 0), (1, 8, 13)]
)
def test_percentage_rounds_half_up(part, total, expected):
    assert percentage(part, total) == expected


@pytest.mark.parametrize("xp,level", [(0, 1), (99, 1), (100, 2), (250, 3), (1000, 11)])
def test_calculate_level(xp, level):
    assert calculate_level(xp) == level


def test_next_level_xp():
    assert next_level_xp(1) == 100
    assert next_level_xp(3) == 300


def test_apply_multiplier():
    assert apply_multiplier(100, 1.0) == 100
    assert apply_multiplier(100, 1.5) == 150
    assert apply_multiplier(30, 0.5) == 15
    with pytest.raises(ValueError):
        apply_multiplier(100, 0.05)


def test_claim_sources():
    task_claim = TaskCompletionClaim(user_id=1, task_id=2, civil_day=D, reward_xp=1, reward_currency=1)
    bonus_claim = BonusClaim(
        user_id=1, task_id=2, civil_day=D, bonus_submission_id=7,
        bonus_type="extra_activity", reward_xp=0, reward_currency=20,
    )
    assert task_claim.source == "task"
    assert task_claim.reason is None
    assert bonus_claim.source == "bonus:7"
    assert bonus_claim.reason == "Bonus activity: extra_activity"


class TestStreak:
    def test_today_and_two_previous_days(self):
        days = [D, D - timedelta(days=1), D - timedelta(days=2)]
        assert calculate_streak(days, D) == 3

    def test_today_missing_counts_until_yesterday(self):
        days = [D - timedelta(days=1), D - timedelta(days=2)]
        assert calculate_streak(days, D) == 2

    def test_gap_breaks_streak(self):
        days = [D, D - timedelta(days=2)]
        assert calculate_streak(days, D) == 1

    def test_yesterday_missing_is_zero(self):
        assert calculate_streak([D - timedelta(days=2)], D) == 0

    def test_empty_history(self):
        assert calculate_streak([], D) == 0

    def test_duplicates_ignored(self):
        assert calculate_streak([D, D, D - timedelta(days=1)], D) == 2
