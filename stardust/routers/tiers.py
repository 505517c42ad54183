from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from stardust.database import get_db
from stardust.core.auth import Principal, get_current_user, get_current_admin
from stardust.core.errors import InvalidTier, PolicyDisabled
from stardust.models.tier import ModeratorTierStatus
from stardust.schemas.tier import TierAdjustResponse, TierChange, TierListResponse, TierSet, TierStatusResponse
from stardust.services.tier_policy import adjust_tiers
from stardust.services.tiers import list_tiers, payout_table, set_tier, tier_payout
from stardust.utils.weeks import is_valid_week

router = APIRouter(prefix="/stardust/tiers", tags=["stardust"])


def to_response(status: ModeratorTierStatus) -> TierStatusResponse:
    return TierStatusResponse(
        user_id=status.user_id,
        current_tier=status.current_tier,
        payout=tier_payout(status.current_tier),
        weeks_inactive=status.weeks_inactive or 0,
        last_evaluated_week=status.last_evaluated_week,
        last_evaluated_year=status.last_evaluated_year,
        updated_by_id=status.updated_by_id,
        updated_at=status.updated_at,
    )


@router.get("", response_model=TierListResponse)
async def get_tiers(
    db: AsyncSession = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    statuses = await list_tiers(db, current_user.guild_id)
    return TierListResponse(payouts=payout_table(), moderators=[to_response(s) for s in statuses])


@router.put("/{user_id}", response_model=TierStatusResponse)
async def put_tier(
    user_id: str,
    tier_in: TierSet,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    try:
        status = await set_tier(db, admin.guild_id, user_id, tier_in.tier, admin.user_id)
    except InvalidTier as e:
        raise HTTPException(400, str(e))
    return to_response(status)


@router.post("/adjust/{year}/{week}", response_model=TierAdjustResponse)
async def run_tier_adjustment(
    year: int,
    week: int,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    if not is_valid_week(week, year):
        raise HTTPException(400, f"{year} has no ISO week {week}")
    try:
        changes = await adjust_tiers(db, admin.guild_id, week, year)
    except PolicyDisabled as e:
        raise HTTPException(409, str(e))
    return TierAdjustResponse(
        week=week,
        year=year,
        changes=[
            TierChange(user_id=user_id, previous_tier=old, new_tier=new)
            for user_id, (old, new) in changes.items()
        ],
    )
