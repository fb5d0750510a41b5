"""
Pydantic schemas for the rewards API.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.core.domain.completion import CompletionStatus

# ============ Submission Schemas ============


class SubmissionRequest(BaseModel):
    """Subtask submission request."""

    task_id: int
    subtask_key: str = Field(min_length=1, max_length=64)
    proof_reference: str = Field(min_length=1, max_length=1024)
    submitted_at: datetime | None = None
    civil_day: date | None = None


class BonusSubmissionRequest(BaseModel):
    """Bonus activity submission request."""

    task_id: int
    subtask_key: str = Field(min_length=1, max_length=64)
    proof_reference: str = Field(min_length=1, max_length=1024)
    bonus_type: str = "additional_video"
    submitted_at: datetime | None = None
    reward_currency: int | None = Field(default=None, ge=0)


class SubmissionResponse(BaseModel):
    """Recorded submission."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    subtask_key: str
    civil_day: date
    submitted_at: datetime
    valid: bool
    validation_reason: str
    validation_message: str


class RewardResponse(BaseModel):
    """Issued reward."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    civil_day: date
    source: str
    reward_xp: int
    reward_currency: int
    bonus_multiplier: float
    total_xp: int
    total_currency: int
    bonus_reason: str | None = None
    awarded_at: datetime


class SubmissionResultResponse(BaseModel):
    """Result of validate-and-record."""

    submission: SubmissionResponse
    task_completed: bool
    reward_eligible: bool
    completion_status: CompletionStatus
    reward: RewardResponse | None = None


class BonusSubmissionResponse(BaseModel):
    """Recorded bonus activity with its reward."""

    id: int
    task_id: int
    subtask_key: str
    bonus_type: str
    civil_day: date
    reward: RewardResponse | None = None


# ============ Progress Schemas ============


class SubtaskProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    name: str
    deadline_kind: str
    completed: bool
    submission_id: int | None = None
    submitted_at: datetime | None = None
    valid: bool | None = None
    validation_reason: str | None = None
    validation_message: str | None = None


class TaskProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    task_id: int
    task_key: str
    task_name: str
    reward_xp: int
    reward_currency: int
    status: CompletionStatus
    completed_subtasks: int
    total_subtasks: int
    percentage: int
    is_completed: bool
    is_reward_eligible: bool
    reward_issued: bool
    subtasks: list[SubtaskProgressResponse]


class DaySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_tasks: int
    completed_tasks: int
    task_completion_rate: int
    total_subtasks: int
    completed_subtasks: int
    subtask_completion_rate: int


class DayProgressResponse(BaseModel):
    """Progress for one civil day."""

    model_config = ConfigDict(from_attributes=True)

    civil_day: date
    tasks: list[TaskProgressResponse]
    summary: DaySummaryResponse


class ProgressRangeResponse(BaseModel):
    start_date: date
    end_date: date
    days: list[DayProgressResponse]


class WeeklyProgressResponse(BaseModel):
    """Sunday to Saturday progress."""

    model_config = ConfigDict(from_attributes=True)

    week_start: date
    week_end: date
    days: list[DayProgressResponse]
    total_tasks: int
    completed_tasks: int
    completion_rate: int
    productive_days: int


# ============ Stats Schemas ============


class StreakResponse(BaseModel):
    user_id: int
    as_of: date
    streak: int


class UserStatsResponse(BaseModel):
    """User totals."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    name: str
    xp: int
    currency_earned: int
    level: int
    next_level_xp: int
    streak_count: int


class DayRewardsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    civil_day: date
    rewards: list[RewardResponse]
    total_xp: int
    total_currency: int
    count: int


# ============ Admin Schemas ============


class DailyResetResponse(BaseModel):
    """Daily reset run summary."""

    model_config = ConfigDict(from_attributes=True)

    civil_day: date
    skipped: bool
    users_processed: int
    accruals_settled: int
    rewards_issued: int
    totals_credited: dict[str, int]
    streaks_updated: int
    records_pruned: int
    failures: list[str]


class ResetDayStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    civil_day: date
    users: int
    xp_accrued: int
    currency_accrued: int
    tasks_rewarded: int
