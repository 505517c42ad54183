"""
Enrollment lifecycle for the Stardust program.

UNENROLLED -> ACTIVE -> INACTIVE (history kept) or DELETED (no history, row
removed, same as never enrolled). INACTIVE -> ACTIVE on reactivation. Only
ACTIVE moderators take part in weekly processing, reports and backfill.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from stardust.core.errors import EnrollmentStateError
from stardust.models.enrollment import EnrollmentStatus
from stardust.models.weekly_points import WeeklyPointsRecord

logger = logging.getLogger(__name__)

ACTIVE = "active"
INACTIVE = "inactive"
DELETED = "deleted"


async def get_enrollment(db: AsyncSession, guild_id: str, user_id: str) -> Optional[EnrollmentStatus]:
    result = await db.execute(
        select(EnrollmentStatus)
        .where(EnrollmentStatus.guild_id == guild_id)
        .where(EnrollmentStatus.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def count_weekly_records(db: AsyncSession, guild_id: str, user_id: str) -> int:
    result = await db.execute(
        select(func.count(WeeklyPointsRecord.id))
        .where(WeeklyPointsRecord.guild_id == guild_id)
        .where(WeeklyPointsRecord.user_id == user_id)
    )
    return result.scalar_one()


async def activate(db: AsyncSession, guild_id: str, user_id: str, actor_id: str) -> bool:
    """Enroll or re-enroll a moderator. Returns True for a brand new enrollment."""
    enrollment = await get_enrollment(db, guild_id, user_id)
    now = datetime.now(timezone.utc)

    if enrollment is None:
        db.add(EnrollmentStatus(
            guild_id=guild_id,
            user_id=user_id,
            active=True,
            enrolled_at=now,
            enrolled_by_id=actor_id,
        ))
        await db.commit()
        logger.info("Enrolled %s in guild %s (by %s)", user_id, guild_id, actor_id)
        return True

    if enrollment.active:
        raise EnrollmentStateError("Enrollment is already active.")

    enrollment.active = True
    enrollment.enrolled_at = now
    enrollment.enrolled_by_id = actor_id
    enrollment.deactivated_at = None
    enrollment.deactivated_by_id = None
    await db.commit()
    logger.info("Re-activated %s in guild %s (by %s)", user_id, guild_id, actor_id)
    return False


async def activate_batch(db: AsyncSession, guild_id: str, user_ids: Iterable[str], actor_id: str) -> Dict[str, str]:
    """Activate several moderators at once; one failure does not stop the rest."""
    outcome = {}
    for user_id in user_ids:
        try:
            created = await activate(db, guild_id, user_id, actor_id)
        except EnrollmentStateError as e:
            outcome[user_id] = f"skipped: {e}"
            continue
        outcome[user_id] = "enrolled" if created else "reactivated"
    return outcome


async def deactivate(db: AsyncSession, guild_id: str, user_id: str, actor_id: str) -> str:
    """Deactivate an enrollment.

    Moderators with weekly history are kept as inactive so their records stay
    attributable; moderators without any history are removed outright.
    """
    enrollment = await get_enrollment(db, guild_id, user_id)
    if enrollment is None:
        raise EnrollmentStateError("Moderator is not enrolled.")
    if not enrollment.active:
        raise EnrollmentStateError("Enrollment is already inactive.")

    if await count_weekly_records(db, guild_id, user_id) == 0:
        await db.delete(enrollment)
        await db.commit()
        logger.info("Removed enrollment for %s in guild %s (no history, by %s)", user_id, guild_id, actor_id)
        return DELETED

    enrollment.active = False
    enrollment.deactivated_at = datetime.now(timezone.utc)
    enrollment.deactivated_by_id = actor_id
    await db.commit()
    logger.info("Deactivated %s in guild %s (by %s)", user_id, guild_id, actor_id)
    return INACTIVE


async def list_active(db: AsyncSession, guild_id: str) -> List[EnrollmentStatus]:
    result = await db.execute(
        select(EnrollmentStatus)
        .where(EnrollmentStatus.guild_id == guild_id)
        .where(EnrollmentStatus.active.is_(True))
        .order_by(EnrollmentStatus.enrolled_at, EnrollmentStatus.user_id)
    )
    return list(result.scalars().all())


async def active_user_ids(db: AsyncSession, guild_id: str) -> List[str]:
    return [enrollment.user_id for enrollment in await list_active(db, guild_id)]
