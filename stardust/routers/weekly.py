from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from stardust.database import get_db
from stardust.core.auth import Principal, get_current_user, get_current_admin
from stardust.core.errors import InvalidOverride, OverrideTargetMissing
from stardust.models.weekly_points import WeeklyPointsRecord
from stardust.schemas.points import RawMetrics
from stardust.schemas.weekly import (
    BackfillRequest, BackfillResponse, ClearResponse, OverrideInfo, OverrideRequest,
    ProcessWeekRequest, WeeklyRecordResponse, WeeklyReport
)
from stardust.services.metrics import StaticMetricsSource
from stardust.services.overrides import set_override
from stardust.services.weekly import (
    backfill_weeks, clear_weekly_records, compute_and_store, get_effective_finalized_points,
    get_weekly_record, load_details, process_week, weekly_report
)
from stardust.utils.weeks import is_valid_week

router = APIRouter(prefix="/stardust/weeks", tags=["stardust"])


def to_response(record: WeeklyPointsRecord) -> WeeklyRecordResponse:
    return WeeklyRecordResponse(
        guild_id=record.guild_id,
        user_id=record.user_id,
        week=record.week,
        year=record.year,
        max_possible_points=record.max_possible_points,
        total_raw_points=record.total_raw_points,
        total_finalized_points=record.total_finalized_points,
        total_wasted_points=record.total_wasted_points,
        effective_finalized_points=get_effective_finalized_points(record),
        details=load_details(record.details),
        tier_after_week=record.tier_after_week,
        override=OverrideInfo(
            active=bool(record.override_active),
            finalized_points=record.override_finalized_points,
            raw_points=record.override_raw_points,
            details=load_details(record.override_details) if record.override_details else None,
            reason=record.override_reason,
            applied_by_id=record.override_applied_by_id,
            applied_at=record.override_applied_at,
        ),
        updated_at=record.updated_at,
    )


def check_week(year: int, week: int) -> None:
    if not is_valid_week(week, year):
        raise HTTPException(400, f"{year} has no ISO week {week}")


@router.post("/backfill", response_model=BackfillResponse)
async def backfill(
    request: BackfillRequest,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    source = StaticMetricsSource()
    for entry in request.weeks:
        for user_id, metrics in entry.metrics.items():
            source.add(user_id, entry.week, entry.year, metrics)

    filled = await backfill_weeks(db, admin.guild_id, source, max_weeks=request.max_weeks)
    return BackfillResponse(filled=[{"week": week, "year": year} for week, year in filled])


@router.delete("", response_model=ClearResponse)
async def clear_records(
    user_id: Optional[str] = Query(None),
    confirm: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    if not confirm:
        raise HTTPException(400, "Pass confirm=true to delete weekly records")
    deleted = await clear_weekly_records(db, admin.guild_id, user_id)
    return ClearResponse(deleted=deleted)


@router.get("/{year}/{week}/report", response_model=WeeklyReport)
async def get_weekly_report(
    year: int,
    week: int,
    db: AsyncSession = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    check_week(year, week)
    return await weekly_report(db, current_user.guild_id, week, year)


@router.post("/{year}/{week}/process", response_model=WeeklyReport)
async def process_weekly_metrics(
    year: int,
    week: int,
    request: ProcessWeekRequest,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    check_week(year, week)
    source = StaticMetricsSource.for_week(week, year, request.metrics)
    await process_week(db, admin.guild_id, week, year, source)
    return await weekly_report(db, admin.guild_id, week, year)


@router.get("/{year}/{week}/moderators/{user_id}", response_model=WeeklyRecordResponse)
async def get_weekly_record_for_user(
    year: int,
    week: int,
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    if user_id != current_user.user_id and not current_user.is_admin:
        raise HTTPException(403, "You can only view your own weekly record")
    check_week(year, week)

    record = await get_weekly_record(db, current_user.guild_id, user_id, week, year)
    if not record:
        raise HTTPException(404, "Weekly points not computed yet")
    return to_response(record)


@router.put("/{year}/{week}/moderators/{user_id}", response_model=WeeklyRecordResponse)
async def submit_weekly_metrics(
    year: int,
    week: int,
    user_id: str,
    metrics: RawMetrics,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    check_week(year, week)
    record = await compute_and_store(db, admin.guild_id, user_id, week, year, metrics)
    return to_response(record)


@router.put("/{year}/{week}/moderators/{user_id}/override", response_model=WeeklyRecordResponse)
async def override_weekly_points(
    year: int,
    week: int,
    user_id: str,
    request: OverrideRequest,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    check_week(year, week)
    try:
        record = await set_override(
            db,
            admin.guild_id,
            user_id,
            week,
            year,
            applied_by_id=admin.user_id,
            finalized_points=request.finalized_points,
            reason=request.reason,
            raw_points=request.raw_points,
            metrics=request.metrics,
        )
    except OverrideTargetMissing as e:
        raise HTTPException(404, str(e))
    except InvalidOverride as e:
        raise HTTPException(400, str(e))
    return to_response(record)
