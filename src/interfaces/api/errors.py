"""Mapping of use-case error codes to HTTP responses."""

from fastapi import HTTPException, status

from src.core.errors import SubmissionError

ERROR_STATUS = {
    SubmissionError.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    SubmissionError.TASK_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    SubmissionError.SUBTASK_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    SubmissionError.TASK_INACTIVE: status.HTTP_400_BAD_REQUEST,
    SubmissionError.INVALID_BONUS_TYPE: status.HTTP_400_BAD_REQUEST,
    SubmissionError.WRONG_DAY: status.HTTP_422_UNPROCESSABLE_CONTENT,
    SubmissionError.DUPLICATE_SUBMISSION: status.HTTP_409_CONFLICT,
}


def raise_for_error(
    error: SubmissionError | None, message: str, **extra: object
) -> None:
    """Raise HTTPException for a failed use-case result."""
    raise HTTPException(
        status_code=ERROR_STATUS.get(error, status.HTTP_400_BAD_REQUEST),
        detail={"error": error.value if error else "error", "message": message, **extra},
    )
