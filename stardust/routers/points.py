from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from stardust.database import get_db
from stardust.core.auth import Principal, get_current_user
from stardust.schemas.points import CalculatorRequest, CalculatorResponse
from stardust.services.points import compute_weighted_points
from stardust.services.tiers import clamp_tier, get_current_tier, tier_payout

router = APIRouter(prefix="/stardust", tags=["stardust"])


@router.post("/calculator", response_model=CalculatorResponse)
async def calculate_points(
    request: CalculatorRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Project points for hypothetical activity without storing anything.

    The payout uses the requested tier, or the caller's own tier when none is given.
    """
    computed = compute_weighted_points(request)
    if request.tier is not None:
        tier = clamp_tier(request.tier)
    else:
        tier = await get_current_tier(db, current_user.guild_id, current_user.user_id)
    return CalculatorResponse(**computed.model_dump(), tier=tier, tier_payout=tier_payout(tier))
