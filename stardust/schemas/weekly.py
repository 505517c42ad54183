from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from stardust.schemas.points import CategoryPointsDetail, RawMetrics

class OverrideInfo(BaseModel):
    active: bool
    finalized_points: Optional[Decimal] = None
    raw_points: Optional[Decimal] = None
    details: Optional[List[CategoryPointsDetail]] = None
    reason: Optional[str] = None
    applied_by_id: Optional[str] = None
    applied_at: Optional[datetime] = None

class WeeklyRecordResponse(BaseModel):
    guild_id: str
    user_id: str
    week: int
    year: int
    max_possible_points: Decimal
    total_raw_points: Decimal
    total_finalized_points: Decimal
    total_wasted_points: Decimal
    effective_finalized_points: Decimal
    details: List[CategoryPointsDetail]
    tier_after_week: int
    override: OverrideInfo
    updated_at: Optional[datetime] = None

class OverrideRequest(BaseModel):
    # Omit or send -1 to clear the override
    finalized_points: Optional[Decimal] = None
    raw_points: Optional[Decimal] = Field(None, ge=0)
    metrics: Optional[RawMetrics] = None
    reason: Optional[str] = Field(None, max_length=1000)

class ProcessWeekRequest(BaseModel):
    metrics: Dict[str, RawMetrics]  # keyed by moderator user id

class BackfillWeek(BaseModel):
    week: int = Field(..., ge=1, le=53)
    year: int = Field(..., ge=2000)
    metrics: Dict[str, RawMetrics]

class BackfillRequest(BaseModel):
    weeks: List[BackfillWeek]
    max_weeks: Optional[int] = Field(None, ge=1, le=52)

class BackfillResponse(BaseModel):
    filled: List[Dict[str, int]]

class WeeklyReportRow(BaseModel):
    user_id: str
    finalized_points: Decimal
    raw_points: Decimal
    wasted_points: Decimal
    tier: int
    overridden: bool = False

class WeeklyReport(BaseModel):
    week: int
    year: int
    participants: int
    total_finalized: Decimal
    average_finalized: Decimal
    rows: List[WeeklyReportRow]

class ClearResponse(BaseModel):
    deleted: int
