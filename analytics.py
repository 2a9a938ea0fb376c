from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

import repository
from auth import CurrentUser, get_current_user
from database import get_db
from schemas import StatsEnvelope, StatsResponse

router = APIRouter(prefix="/api", tags=["analytics"])


def pass_rate(total_passes: int, total_attempts: int) -> int:
    """Percentage of passed attempts, rounded half up; 0 when nothing was attempted."""
    if total_attempts > 0:
        return (total_passes * 200 + total_attempts) // (total_attempts * 2)
    return 0


async def get_stats(db: AsyncSession, user_id: int) -> StatsResponse:
    total_attempts, total_passes = await repository.sum_counters(db, user_id)
    return StatsResponse(
        total_attempts=total_attempts,
        total_passes=total_passes,
        pass_rate=pass_rate(total_passes, total_attempts)
    )


@router.get("/stats", response_model=StatsEnvelope)
async def get_my_stats(
        db: AsyncSession = Depends(get_db),
        user: CurrentUser = Depends(get_current_user)
):
    return StatsEnvelope(stats=await get_stats(db, user.id))
