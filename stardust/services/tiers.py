import logging
from types import MappingProxyType
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from stardust.config import settings
from stardust.core.errors import InvalidTier
from stardust.database import dialect_insert
from stardust.models.tier import ModeratorTierStatus

logger = logging.getLogger(__name__)

# Flat monthly payout per tier
TIER_PAYOUT = MappingProxyType({
    0: 0,
    1: 600,
    2: 1200,
    3: 1800,
})
TIER_4_PAYOUT = 2800


def max_tier() -> int:
    return 4 if settings.TIER_4_ENABLED else 3


def payout_table() -> dict:
    table = dict(TIER_PAYOUT)
    if settings.TIER_4_ENABLED:
        table[4] = TIER_4_PAYOUT
    return table


def clamp_tier(tier: int) -> int:
    return max(0, min(int(tier), max_tier()))


def tier_payout(tier: int) -> int:
    return payout_table()[clamp_tier(tier)]


async def get_tier_status(db: AsyncSession, guild_id: str, user_id: str) -> Optional[ModeratorTierStatus]:
    result = await db.execute(
        select(ModeratorTierStatus)
        .where(ModeratorTierStatus.guild_id == guild_id)
        .where(ModeratorTierStatus.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_current_tier(db: AsyncSession, guild_id: str, user_id: str) -> int:
    """Administered tier, or the configured default when none was ever set."""
    status = await get_tier_status(db, guild_id, user_id)
    if status is None:
        return clamp_tier(settings.DEFAULT_TIER)
    return status.current_tier


async def ensure_tier_status(db: AsyncSession, guild_id: str, user_id: str) -> ModeratorTierStatus:
    stmt = (
        dialect_insert(db, ModeratorTierStatus)
        .values(
            guild_id=guild_id,
            user_id=user_id,
            current_tier=clamp_tier(settings.DEFAULT_TIER),
            weeks_inactive=0,
        )
        .on_conflict_do_nothing(index_elements=["guild_id", "user_id"])
    )
    await db.execute(stmt)
    return await get_tier_status(db, guild_id, user_id)


async def set_tier(db: AsyncSession, guild_id: str, user_id: str, tier: int, actor_id: str) -> ModeratorTierStatus:
    """The only way a tier changes outside the opt-in adjustment policy."""
    if tier < 0 or tier > max_tier():
        raise InvalidTier(f"Tier must be between 0 and {max_tier()}")

    status = await ensure_tier_status(db, guild_id, user_id)
    previous = status.current_tier
    status.current_tier = tier
    status.updated_by_id = actor_id
    await db.commit()
    await db.refresh(status)

    logger.info("Tier for %s in guild %s set %s -> %s by %s", user_id, guild_id, previous, tier, actor_id)
    return status


async def list_tiers(db: AsyncSession, guild_id: str) -> List[ModeratorTierStatus]:
    result = await db.execute(
        select(ModeratorTierStatus)
        .where(ModeratorTierStatus.guild_id == guild_id)
        .order_by(ModeratorTierStatus.current_tier.desc(), ModeratorTierStatus.user_id)
    )
    return list(result.scalars().all())
