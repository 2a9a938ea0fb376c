import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

import repository
from auth import CurrentUser, get_current_user
from database import get_db
from errors import StorageError, ValidationError
from models import QuizAttempt
from schemas import (
    AttemptCreate,
    AttemptResponse,
    HistoryResponse,
    MessageResponse,
    ProgressEnvelope,
    ProgressListResponse,
    ProgressResponse,
    ProgressUpdateResponse,
)

logger = logging.getLogger("Progress")

router = APIRouter(prefix="/api", tags=["progress"])


async def record_attempt(
        db: AsyncSession,
        user_id: int,
        quiz_name: Optional[str],
        passed: Optional[bool],
        score: Optional[int] = None,
        total_questions: Optional[int] = None
) -> ProgressResponse:
    """Log one quiz attempt and bump the user's counters for that quiz.

    The audit row is written inside a savepoint: if it fails it is logged and
    dropped while the counter update still commits. If the counter update
    fails nothing is committed.
    """
    if not quiz_name or passed is None:
        raise ValidationError("quiz_name and passed are required")

    try:
        async with db.begin_nested():
            await repository.insert_attempt(db, user_id, quiz_name, score, total_questions, passed)
    except StorageError:
        logger.warning("Attempt for user %s on %r was not logged", user_id, quiz_name)

    attempts, passes = await repository.upsert_progress(db, user_id, quiz_name, passed)
    await repository.commit(db)
    return ProgressResponse(quiz_name=quiz_name, attempts=attempts, passes=passes)


async def get_progress(db: AsyncSession, user_id: int, quiz_name: str) -> ProgressResponse:
    row = await repository.get_progress(db, user_id, quiz_name)
    if row is None:
        return ProgressResponse(quiz_name=quiz_name, attempts=0, passes=0)
    return ProgressResponse.model_validate(row)


async def get_all_progress(db: AsyncSession, user_id: int) -> list[ProgressResponse]:
    rows = await repository.list_progress(db, user_id)
    return [ProgressResponse.model_validate(row) for row in rows]


async def reset_progress(db: AsyncSession, user_id: int, quiz_name: str):
    deleted = await repository.delete_progress(db, user_id, quiz_name)
    await repository.commit(db)
    logger.info("Reset %r for user %s (%d row(s))", quiz_name, user_id, deleted)


async def get_history(db: AsyncSession, user_id: int, quiz_name: str) -> list[QuizAttempt]:
    return await repository.list_recent_attempts(db, user_id, quiz_name)


#эндпоинты

@router.get("/progress", response_model=ProgressListResponse)
async def list_my_progress(
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    return ProgressListResponse(progress=await get_all_progress(db, current_user.id))


@router.get("/progress/{quiz_name}", response_model=ProgressEnvelope)
async def read_progress(
        quiz_name: str,
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    return ProgressEnvelope(progress=await get_progress(db, current_user.id, quiz_name))


@router.post("/progress", response_model=ProgressUpdateResponse)
async def update_progress(
        attempt: AttemptCreate,
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    progress = await record_attempt(
        db,
        current_user.id,
        attempt.quiz_name,
        attempt.passed,
        attempt.score,
        attempt.total_questions
    )
    message = "Progress created" if progress.attempts == 1 else "Progress updated"
    return ProgressUpdateResponse(message=message, progress=progress)


@router.delete("/progress/{quiz_name}", response_model=MessageResponse)
async def delete_progress(
        quiz_name: str,
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    await reset_progress(db, current_user.id, quiz_name)
    return MessageResponse(message="Progress reset successfully")


@router.get("/history/{quiz_name}", response_model=HistoryResponse)
async def read_history(
        quiz_name: str,
        db: AsyncSession = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    rows = await get_history(db, current_user.id, quiz_name)
    return HistoryResponse(history=[AttemptResponse.model_validate(row) for row in rows])
