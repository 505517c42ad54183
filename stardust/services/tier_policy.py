"""
Optional automatic tier adjustment.

Tiers are normally set by hand. A deployment may opt in to this policy with
TIER_AUTO_ADJUST_ENABLED; it is then run explicitly for a week and is never
triggered by the weekly computation itself.

An active week (effective points at or above TIER_ACTIVE_THRESHOLD) moves a
moderator up one tier, capped at 3; a tier 4 moderator stays at 4. Two
consecutive inactive weeks move them down one tier, floored at 0.
"""
import logging
from typing import Dict, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from stardust.config import settings
from stardust.core.errors import PolicyDisabled
from stardust.services.enrollment import active_user_ids
from stardust.services.tiers import ensure_tier_status
from stardust.services.weekly import get_effective_finalized_points, get_weekly_record
from stardust.utils.weeks import previous_week

logger = logging.getLogger(__name__)

PROMOTION_CAP = 3


def next_tier(current: int, active_now: bool, active_before: bool) -> int:
    if active_now:
        return current + 1 if current < PROMOTION_CAP else current
    if not active_before and current > 0:
        return current - 1
    return current


async def _was_active(db: AsyncSession, guild_id: str, user_id: str, week: int, year: int) -> bool:
    record = await get_weekly_record(db, guild_id, user_id, week, year)
    if record is None:
        return False
    return get_effective_finalized_points(record) >= settings.TIER_ACTIVE_THRESHOLD


async def adjust_tiers(db: AsyncSession, guild_id: str, week: int, year: int) -> Dict[str, Tuple[int, int]]:
    """Apply the policy to every active moderator. Returns {user_id: (old, new)} for changed tiers."""
    if not settings.TIER_AUTO_ADJUST_ENABLED:
        raise PolicyDisabled("Automatic tier adjustment is disabled for this deployment.")

    prev_week, prev_year = previous_week(week, year)
    logger.info("Starting tier adjustments for week %s-%s in guild %s", year, week, guild_id)

    changes = {}
    for user_id in await active_user_ids(db, guild_id):
        active_now = await _was_active(db, guild_id, user_id, week, year)
        active_before = await _was_active(db, guild_id, user_id, prev_week, prev_year)

        status = await ensure_tier_status(db, guild_id, user_id)
        status.weeks_inactive = 0 if active_now else (status.weeks_inactive or 0) + 1

        new_tier = next_tier(status.current_tier, active_now, active_before)
        if new_tier != status.current_tier:
            changes[user_id] = (status.current_tier, new_tier)
            logger.info("Adjusted tier for %s: %s -> %s", user_id, status.current_tier, new_tier)
            status.current_tier = new_tier
            status.updated_by_id = "auto-adjust"

    await db.commit()
    logger.info("Completed tier adjustments for week %s-%s: %d changed", year, week, len(changes))
    return changes
