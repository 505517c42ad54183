"""
Weekly Stardust records.

One row per (guild, moderator, ISO week, ISO year). Recomputing a week
rewrites only the computed columns; the override columns belong to the
override layer and survive every recomputation.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from stardust.config import settings
from stardust.database import dialect_insert
from stardust.models.monthly_points import MonthlyPointsRecord
from stardust.models.weekly_points import WeeklyPointsRecord
from stardust.schemas.points import CategoryPointsDetail, ComputedPoints
from stardust.schemas.weekly import WeeklyReport, WeeklyReportRow
from stardust.services.enrollment import active_user_ids
from stardust.services.metrics import MetricsSource
from stardust.services.points import MetricsLike, compute_weighted_points
from stardust.services.tiers import ensure_tier_status
from stardust.utils.weeks import WeekKey, iso_week, previous_week

logger = logging.getLogger(__name__)


def dump_details(details: Iterable[CategoryPointsDetail]) -> List[dict]:
    return [detail.model_dump(mode="json") for detail in details]


def load_details(raw: Optional[Iterable[Any]]) -> List[CategoryPointsDetail]:
    return [CategoryPointsDetail.model_validate(item) for item in (raw or [])]


def get_effective_finalized_points(record: WeeklyPointsRecord) -> Decimal:
    """Finalized points every read path must use: the override when one is active."""
    if record.override_active and record.override_finalized_points is not None:
        return Decimal(record.override_finalized_points)
    return Decimal(record.total_finalized_points)


async def get_weekly_record(
    db: AsyncSession, guild_id: str, user_id: str, week: int, year: int
) -> Optional[WeeklyPointsRecord]:
    """Stored record, or None when the week has not been computed yet."""
    result = await db.execute(
        select(WeeklyPointsRecord)
        .where(WeeklyPointsRecord.guild_id == guild_id)
        .where(WeeklyPointsRecord.user_id == user_id)
        .where(WeeklyPointsRecord.week == week)
        .where(WeeklyPointsRecord.year == year)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def upsert_weekly_record(
    db: AsyncSession, guild_id: str, user_id: str, week: int, year: int, computed: ComputedPoints
) -> WeeklyPointsRecord:
    # The tier is read and stamped here, never changed
    tier_status = await ensure_tier_status(db, guild_id, user_id)
    tier_status.last_evaluated_week = week
    tier_status.last_evaluated_year = year

    computed_values = {
        "max_possible_points": computed.dynamic_max_possible,
        "total_raw_points": computed.total_raw_points,
        "total_finalized_points": computed.total_finalized_points,
        "total_wasted_points": computed.total_wasted_points,
        "details": dump_details(computed.details),
        "tier_after_week": tier_status.current_tier,
    }
    stmt = dialect_insert(db, WeeklyPointsRecord).values(
        guild_id=guild_id,
        user_id=user_id,
        week=week,
        year=year,
        override_active=False,
        **computed_values,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["guild_id", "user_id", "week", "year"],
        set_={**computed_values, "updated_at": func.now()},
    )
    await db.execute(stmt)
    await db.commit()

    return await get_weekly_record(db, guild_id, user_id, week, year)


async def compute_and_store(
    db: AsyncSession, guild_id: str, user_id: str, week: int, year: int, metrics: MetricsLike
) -> WeeklyPointsRecord:
    computed = compute_weighted_points(metrics)
    record = await upsert_weekly_record(db, guild_id, user_id, week, year, computed)
    logger.debug(
        "Week %s-%s for %s: raw=%s finalized=%s wasted=%s",
        year, week, user_id,
        computed.total_raw_points, computed.total_finalized_points, computed.total_wasted_points,
    )
    return record


async def process_week(
    db: AsyncSession, guild_id: str, week: int, year: int, source: MetricsSource
) -> List[WeeklyPointsRecord]:
    """Compute and store the week for every active enrolled moderator."""
    user_ids = await active_user_ids(db, guild_id)
    logger.info("Processing week %s-%s for %d moderators in guild %s", year, week, len(user_ids), guild_id)

    records = []
    for user_id in user_ids:
        metrics = await source.fetch(guild_id, user_id, week, year)
        if metrics is None:
            logger.warning("No metrics for %s in week %s-%s; skipping", user_id, year, week)
            continue
        records.append(await compute_and_store(db, guild_id, user_id, week, year, metrics))

    logger.info("Completed week %s-%s: %d records stored", year, week, len(records))
    return records


async def week_has_records(db: AsyncSession, guild_id: str, week: int, year: int) -> bool:
    result = await db.execute(
        select(func.count(WeeklyPointsRecord.id))
        .where(WeeklyPointsRecord.guild_id == guild_id)
        .where(WeeklyPointsRecord.week == week)
        .where(WeeklyPointsRecord.year == year)
    )
    return result.scalar_one() > 0


async def backfill_weeks(
    db: AsyncSession,
    guild_id: str,
    source: MetricsSource,
    today: Optional[date] = None,
    max_weeks: Optional[int] = None,
) -> List[WeekKey]:
    """Fill in missing weeks, newest first, starting from last week.

    Stops at the first week that already has records for the guild. Only
    weeks that ended up with stored records are returned.
    """
    max_weeks = settings.BACKFILL_MAX_WEEKS if max_weeks is None else max_weeks
    week, year = previous_week(*iso_week(today or date.today()))

    filled = []
    for _ in range(max_weeks):
        if await week_has_records(db, guild_id, week, year):
            logger.info("Found existing records for week %s-%s; stopping backfill", year, week)
            break
        logger.info("Backfilling week %s-%s for guild %s", year, week, guild_id)
        if await process_week(db, guild_id, week, year, source):
            filled.append((week, year))
        week, year = previous_week(week, year)
    return filled


async def weekly_report(
    db: AsyncSession, guild_id: str, week: int, year: int, source: Optional[MetricsSource] = None
) -> WeeklyReport:
    """Leaderboard of active moderators for one week.

    Weeks missing for a moderator are computed on demand when a source is given.
    """
    rows = []
    for user_id in await active_user_ids(db, guild_id):
        record = await get_weekly_record(db, guild_id, user_id, week, year)
        if record is None and source is not None:
            metrics = await source.fetch(guild_id, user_id, week, year)
            if metrics is not None:
                record = await compute_and_store(db, guild_id, user_id, week, year, metrics)
        if record is None:
            continue
        rows.append(WeeklyReportRow(
            user_id=user_id,
            finalized_points=get_effective_finalized_points(record),
            raw_points=record.total_raw_points,
            wasted_points=record.total_wasted_points,
            tier=record.tier_after_week,
            overridden=bool(record.override_active),
        ))

    rows.sort(key=lambda row: (-row.finalized_points, row.user_id))
    total = sum((row.finalized_points for row in rows), Decimal("0"))
    average = (total / len(rows)).quantize(Decimal("0.1")) if rows else Decimal("0")

    return WeeklyReport(
        week=week,
        year=year,
        participants=len(rows),
        total_finalized=total,
        average_finalized=average,
        rows=rows,
    )


async def clear_weekly_records(db: AsyncSession, guild_id: str, user_id: Optional[str] = None) -> int:
    """Bulk administrative wipe of weekly records and the monthly snapshots built from them."""
    weekly_stmt = delete(WeeklyPointsRecord).where(WeeklyPointsRecord.guild_id == guild_id)
    monthly_stmt = delete(MonthlyPointsRecord).where(MonthlyPointsRecord.guild_id == guild_id)
    if user_id is not None:
        weekly_stmt = weekly_stmt.where(WeeklyPointsRecord.user_id == user_id)
        monthly_stmt = monthly_stmt.where(MonthlyPointsRecord.user_id == user_id)

    result = await db.execute(weekly_stmt)
    await db.execute(monthly_stmt)
    await db.commit()

    logger.warning("Cleared %d weekly records for guild %s (user=%s)", result.rowcount, guild_id, user_id or "all")
    return result.rowcount
