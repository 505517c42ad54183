"""
Monthly Stardust leaderboards built from weekly records.

A week counts towards the month its Monday falls in. Months that have fully
elapsed are snapshotted the first time they are aggregated; the running month
is always derived again from the current weekly records.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, delete, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from stardust.core.errors import FutureMonthError
from stardust.core.points_config import CATEGORIES
from stardust.database import dialect_insert
from stardust.models.monthly_points import MonthlyPointsRecord
from stardust.models.weekly_points import WeeklyPointsRecord
from stardust.schemas.monthly import MonthlyAggregate, MonthlySummary
from stardust.services.weekly import get_effective_finalized_points, load_details
from stardust.utils.weeks import month_state, weeks_in_month

logger = logging.getLogger(__name__)

SUMMED_FIELDS = CATEGORIES + ("raw_points", "finalized_points", "wasted_points", "weeks_counted")


def _sorted(summaries: Iterable[MonthlySummary]) -> Dict[str, MonthlySummary]:
    ordered = sorted(summaries, key=lambda s: (-s.finalized_points, s.user_id))
    return {summary.user_id: summary for summary in ordered}


def _totals(summaries: Iterable[MonthlySummary]) -> MonthlySummary:
    totals = MonthlySummary()
    for summary in summaries:
        for field in SUMMED_FIELDS:
            setattr(totals, field, getattr(totals, field) + getattr(summary, field))
    return totals


async def _weekly_records_for_month(db: AsyncSession, guild_id: str, month: int, year: int) -> List[WeeklyPointsRecord]:
    weeks = weeks_in_month(month, year)
    result = await db.execute(
        select(WeeklyPointsRecord)
        .where(WeeklyPointsRecord.guild_id == guild_id)
        .where(or_(*[
            and_(WeeklyPointsRecord.week == week, WeeklyPointsRecord.year == week_year)
            for week, week_year in weeks
        ]))
        .order_by(WeeklyPointsRecord.user_id, WeeklyPointsRecord.year, WeeklyPointsRecord.week)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def derive_month(db: AsyncSession, guild_id: str, month: int, year: int) -> Dict[str, MonthlySummary]:
    """Sum weekly records per moderator, honouring active overrides."""
    summaries: Dict[str, MonthlySummary] = {}
    for record in await _weekly_records_for_month(db, guild_id, month, year):
        summary = summaries.setdefault(record.user_id, MonthlySummary(user_id=record.user_id))
        for detail in load_details(record.details):
            if detail.category in CATEGORIES:
                setattr(summary, detail.category, getattr(summary, detail.category) + detail.raw_amount)
        summary.raw_points += Decimal(record.total_raw_points)
        summary.finalized_points += get_effective_finalized_points(record)
        summary.wasted_points += Decimal(record.total_wasted_points)
        summary.weeks_counted += 1
    return _sorted(summaries.values())


async def _load_snapshot(db: AsyncSession, guild_id: str, month: int, year: int) -> Dict[str, MonthlySummary]:
    result = await db.execute(
        select(MonthlyPointsRecord)
        .where(MonthlyPointsRecord.guild_id == guild_id)
        .where(MonthlyPointsRecord.month == month)
        .where(MonthlyPointsRecord.year == year)
        .execution_options(populate_existing=True)
    )
    return _sorted(MonthlySummary.model_validate(row) for row in result.scalars())


async def _store_snapshot(db: AsyncSession, guild_id: str, month: int, year: int, summaries: Iterable[MonthlySummary]) -> None:
    rows = [
        {"guild_id": guild_id, "month": month, "year": year, **summary.model_dump()}
        for summary in summaries
    ]
    if not rows:
        return
    stmt = dialect_insert(db, MonthlyPointsRecord).values(rows).on_conflict_do_nothing(
        index_elements=["guild_id", "user_id", "month", "year"]
    )
    await db.execute(stmt)
    await db.commit()
    logger.info("Persisted monthly snapshot %s-%02d for guild %s (%d moderators)", year, month, guild_id, len(rows))


async def discard_snapshot(db: AsyncSession, guild_id: str, month: int, year: int) -> None:
    await db.execute(
        delete(MonthlyPointsRecord)
        .where(MonthlyPointsRecord.guild_id == guild_id)
        .where(MonthlyPointsRecord.month == month)
        .where(MonthlyPointsRecord.year == year)
    )
    await db.commit()


async def aggregate_month(
    db: AsyncSession,
    guild_id: str,
    month: int,
    year: int,
    today: Optional[date] = None,
    refresh: bool = False,
) -> MonthlyAggregate:
    state = month_state(month, year, today)
    if state == "future":
        raise FutureMonthError("Cannot generate report for a future month.")

    if state == "past":
        if refresh:
            await discard_snapshot(db, guild_id, month, year)
        else:
            snapshot = await _load_snapshot(db, guild_id, month, year)
            if snapshot:
                return MonthlyAggregate(
                    guild_id=guild_id, month=month, year=year, persisted=True,
                    per_moderator=snapshot, totals=_totals(snapshot.values()),
                )

    per_moderator = await derive_month(db, guild_id, month, year)
    persisted = False
    if state == "past" and per_moderator:
        await _store_snapshot(db, guild_id, month, year, per_moderator.values())
        # Read back so every later call returns exactly what was stored
        per_moderator = await _load_snapshot(db, guild_id, month, year)
        persisted = True

    return MonthlyAggregate(
        guild_id=guild_id,
        month=month,
        year=year,
        persisted=persisted,
        per_moderator=per_moderator,
        totals=_totals(per_moderator.values()),
    )


async def monthly_points_for_user(
    db: AsyncSession, guild_id: str, user_id: str, month: int, year: int, today: Optional[date] = None
) -> MonthlySummary:
    aggregate = await aggregate_month(db, guild_id, month, year, today=today)
    return aggregate.per_moderator.get(user_id) or MonthlySummary(user_id=user_id)
