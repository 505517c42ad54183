import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from stardust.core.errors import InvalidOverride, OverrideTargetMissing
from stardust.models.weekly_points import WeeklyPointsRecord
from stardust.schemas.points import RawMetrics
from stardust.services.points import compute_weighted_points
from stardust.services.weekly import dump_details, get_weekly_record

logger = logging.getLogger(__name__)

CLEAR_SENTINEL = Decimal("-1")


async def set_override(
    db: AsyncSession,
    guild_id: str,
    user_id: str,
    week: int,
    year: int,
    applied_by_id: str,
    finalized_points: Optional[Decimal] = None,
    reason: Optional[str] = None,
    raw_points: Optional[Decimal] = None,
    metrics: Optional[RawMetrics] = None,
) -> WeeklyPointsRecord:
    """Replace (or clear) the finalized points of an already computed week.

    Leaving ``finalized_points`` out, or passing -1, clears the override. A
    clear still records who did it, when and why. When corrected ``metrics``
    are given without a value, the recomputed finalized points are used.
    """
    record = await get_weekly_record(db, guild_id, user_id, week, year)
    if record is None:
        raise OverrideTargetMissing(f"No computed week {year}-W{week} for {user_id}; compute it before overriding.")

    if finalized_points is not None:
        finalized_points = Decimal(finalized_points)

    computed = compute_weighted_points(metrics) if metrics is not None else None
    if finalized_points is None and computed is not None:
        finalized_points = computed.total_finalized_points

    audit = {
        "override_reason": reason,
        "override_applied_by_id": applied_by_id,
        "override_applied_at": datetime.now(timezone.utc),
    }

    if finalized_points is None or finalized_points == CLEAR_SENTINEL:
        values = {
            "override_active": False,
            "override_finalized_points": None,
            "override_raw_points": None,
            "override_details": None,
            **audit,
        }
        action = "cleared"
    elif finalized_points < 0:
        raise InvalidOverride("Override points must be non-negative (use -1 to clear).")
    else:
        if raw_points is None and computed is not None:
            raw_points = computed.total_raw_points
        values = {
            "override_active": True,
            "override_finalized_points": finalized_points,
            "override_raw_points": raw_points,
            "override_details": dump_details(computed.details) if computed is not None else None,
            **audit,
        }
        action = "set"

    # Only override columns are written, so a concurrent recomputation can't be lost
    await db.execute(
        update(WeeklyPointsRecord)
        .where(WeeklyPointsRecord.id == record.id)
        .values(**values)
    )
    await db.commit()

    logger.info(
        "Override %s for %s week %s-%s in guild %s by %s (value=%s)",
        action, user_id, year, week, guild_id, applied_by_id, values["override_finalized_points"],
    )
    return await get_weekly_record(db, guild_id, user_id, week, year)
