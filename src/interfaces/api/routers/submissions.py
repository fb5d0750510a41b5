"""
Submissions API router.

Endpoints:
- POST /api/users/{user_id}/submissions - Validate and record a subtask submission
- POST /api/users/{user_id}/bonus-submissions - Record a bonus activity
"""

import logging

from fastapi import APIRouter, HTTPException, status

from src.core.errors import InfrastructureError
from src.core.use_cases.record_submission import RecordSubmissionUseCase
from src.core.use_cases.submit_bonus import SubmitBonusUseCase
from src.interfaces.api.errors import raise_for_error
from src.interfaces.api.schemas import (
    BonusSubmissionRequest,
    BonusSubmissionResponse,
    RewardResponse,
    SubmissionRequest,
    SubmissionResponse,
    SubmissionResultResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["submissions"])


@router.post(
    "/{user_id}/submissions",
    response_model=SubmissionResultResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_subtask(user_id: int, body: SubmissionRequest) -> SubmissionResultResponse:
    """
    Submit a subtask completion.

    Late submissions are recorded with valid=false and never earn the task reward.
    """
    try:
        result = await RecordSubmissionUseCase().execute(
            user_id=user_id,
            task_id=body.task_id,
            subtask_key=body.subtask_key,
            proof_reference=body.proof_reference,
            submitted_at=body.submitted_at,
            civil_day=body.civil_day,
        )
    except InfrastructureError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "retry_later", "message": str(e)},
        ) from e

    if not result.success:
        extra = {}
        if result.existing_submission_id is not None:
            extra["existing_submission_id"] = result.existing_submission_id
        raise_for_error(result.error, result.error_message, **extra)

    return SubmissionResultResponse(
        submission=SubmissionResponse.model_validate(result.submission),
        task_completed=result.task_completed,
        reward_eligible=result.reward_eligible,
        completion_status=result.completion_status,
        reward=RewardResponse.model_validate(result.reward) if result.reward else None,
    )


@router.post(
    "/{user_id}/bonus-submissions",
    response_model=BonusSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_bonus(
    user_id: int, body: BonusSubmissionRequest
) -> BonusSubmissionResponse:
    """Submit a bonus activity. The bonus reward is issued immediately."""
    result = await SubmitBonusUseCase().execute(
        user_id=user_id,
        task_id=body.task_id,
        subtask_key=body.subtask_key,
        proof_reference=body.proof_reference,
        bonus_type=body.bonus_type,
        submitted_at=body.submitted_at,
        reward_currency=body.reward_currency,
    )
    if not result.success:
        raise_for_error(result.error, result.error_message)

    bonus = result.bonus_submission
    return BonusSubmissionResponse(
        id=bonus.id,
        task_id=bonus.task_id,
        subtask_key=bonus.subtask_key,
        bonus_type=bonus.bonus_type,
        civil_day=bonus.civil_day,
        reward=RewardResponse.model_validate(result.reward) if result.reward else None,
    )
