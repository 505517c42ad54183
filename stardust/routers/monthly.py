from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from stardust.database import get_db
from stardust.core.auth import Principal, get_current_user
from stardust.core.errors import FutureMonthError
from stardust.schemas.monthly import MonthlyAggregate, MonthlySummary
from stardust.services.aggregation import aggregate_month, monthly_points_for_user

router = APIRouter(prefix="/stardust/months", tags=["stardust"])


@router.get("/{year}/{month}", response_model=MonthlyAggregate)
async def get_monthly_leaderboard(
    year: int,
    month: int = Path(..., ge=1, le=12),
    refresh: bool = Query(False, description="Discard a stored snapshot and rebuild it"),
    db: AsyncSession = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    if refresh and not current_user.is_admin:
        raise HTTPException(403, "Admin access required")
    try:
        return await aggregate_month(db, current_user.guild_id, month, year, refresh=refresh)
    except FutureMonthError as e:
        raise HTTPException(400, str(e))


@router.get("/{year}/{month}/moderators/{user_id}", response_model=MonthlySummary)
async def get_monthly_points(
    year: int,
    user_id: str,
    month: int = Path(..., ge=1, le=12),
    db: AsyncSession = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    if user_id != current_user.user_id and not current_user.is_admin:
        raise HTTPException(403, "You can only view your own monthly points")
    try:
        return await monthly_points_for_user(db, current_user.guild_id, user_id, month, year)
    except FutureMonthError as e:
        raise HTTPException(400, str(e))
