"""Persistence operations over users, quiz_progress and quiz_attempts.

Every function takes the caller's AsyncSession and leaves committing to the
caller, so several calls can share one transaction; a failed flush is
discarded when the caller closes the session. Any SQLAlchemy or driver
failure is logged and re-raised as StorageError.
"""
import functools
import logging
from typing import Optional

from sqlalchemy import select, delete, func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from errors import ConflictError, StorageError
from models import User, QuizProgress, QuizAttempt, utcnow

logger = logging.getLogger("Repository")

HISTORY_LIMIT = 20

#aiosqlite пропускает OverflowError мимо SQLAlchemy (int больше INTEGER)
DRIVER_ERRORS = (SQLAlchemyError, OverflowError)


def storage_guard(fn):
    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except DRIVER_ERRORS:
            logger.exception("Storage failure in %s", fn.__name__)
            raise StorageError()
    return wrapper


@storage_guard
async def commit(session: AsyncSession):
    await session.commit()


#юзеры
async def insert_user(session: AsyncSession, username: str, password_hash: str, email: Optional[str] = None) -> User:
    user = User(username=username, password=password_hash, email=email)
    session.add(user)
    try:
        await session.flush()
    except IntegrityError:
        raise ConflictError("Username already exists")
    except DRIVER_ERRORS:
        logger.exception("Storage failure in insert_user")
        raise StorageError()
    return user


@storage_guard
async def find_user_by_username(session: AsyncSession, username: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


#прогресс
@storage_guard
async def list_progress(session: AsyncSession, user_id: int) -> list[QuizProgress]:
    result = await session.execute(select(QuizProgress).where(QuizProgress.user_id == user_id))
    return list(result.scalars().all())


@storage_guard
async def get_progress(session: AsyncSession, user_id: int, quiz_name: str) -> Optional[QuizProgress]:
    result = await session.execute(
        select(QuizProgress).where(QuizProgress.user_id == user_id, QuizProgress.quiz_name == quiz_name)
    )
    return result.scalar_one_or_none()


@storage_guard
async def upsert_progress(session: AsyncSession, user_id: int, quiz_name: str, passed: bool) -> tuple[int, int]:
    """Add one attempt (and one pass if passed) to the (user, quiz) counters in a single statement.

    Creates the row with attempts=1 when it does not exist yet. Returns the
    counters as stored after the write.
    """
    pass_increment = 1 if passed else 0
    now = utcnow()
    stmt = sqlite_insert(QuizProgress).values(
        user_id=user_id,
        quiz_name=quiz_name,
        attempts=1,
        passes=pass_increment,
        last_updated=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[QuizProgress.user_id, QuizProgress.quiz_name],
        set_={
            "attempts": QuizProgress.attempts + 1,
            "passes": QuizProgress.passes + pass_increment,
            "last_updated": stmt.excluded.last_updated,
        },
    ).returning(QuizProgress.attempts, QuizProgress.passes)
    result = await session.execute(stmt)
    attempts, passes = result.one()
    return attempts, passes


@storage_guard
async def delete_progress(session: AsyncSession, user_id: int, quiz_name: str) -> int:
    result = await session.execute(
        delete(QuizProgress).where(QuizProgress.user_id == user_id, QuizProgress.quiz_name == quiz_name)
    )
    return result.rowcount


@storage_guard
async def sum_counters(session: AsyncSession, user_id: int) -> tuple[int, int]:
    result = await session.execute(
        select(
            func.coalesce(func.sum(QuizProgress.attempts), 0),
            func.coalesce(func.sum(QuizProgress.passes), 0),
        ).where(QuizProgress.user_id == user_id)
    )
    total_attempts, total_passes = result.one()
    return int(total_attempts), int(total_passes)


#история попыток
@storage_guard
async def insert_attempt(
        session: AsyncSession,
        user_id: int,
        quiz_name: str,
        score: Optional[int],
        total_questions: Optional[int],
        passed: bool
) -> QuizAttempt:
    attempt = QuizAttempt(
        user_id=user_id,
        quiz_name=quiz_name,
        score=score,
        total_questions=total_questions,
        passed=passed
    )
    session.add(attempt)
    await session.flush()
    return attempt


@storage_guard
async def list_recent_attempts(session: AsyncSession, user_id: int, quiz_name: str) -> list[QuizAttempt]:
    result = await session.execute(
        select(QuizAttempt)
        .where(QuizAttempt.user_id == user_id, QuizAttempt.quiz_name == quiz_name)
        .order_by(QuizAttempt.attempt_date.desc(), QuizAttempt.id.desc())
        .limit(HISTORY_LIMIT)
    )
    return list(result.scalars().all())
