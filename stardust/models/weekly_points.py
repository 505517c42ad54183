# stardust/models/weekly_points.py
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Numeric, JSON, UniqueConstraint, func
from stardust.database import Base

POINTS = Numeric(14, 2)

class WeeklyPointsRecord(Base):
    __tablename__ = "weekly_points"

    id = Column(Integer, primary_key=True, index=True)
    guild_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    week = Column(Integer, nullable=False)   # ISO week
    year = Column(Integer, nullable=False)   # ISO week-numbering year

    max_possible_points = Column(POINTS, nullable=False, default=0)
    total_raw_points = Column(POINTS, nullable=False, default=0)
    total_finalized_points = Column(POINTS, nullable=False, default=0)
    total_wasted_points = Column(POINTS, nullable=False, default=0)
    details = Column(JSON, nullable=False, default=list)
    tier_after_week = Column(Integer, nullable=False)

    # Manual override layer, never written by recomputation
    override_active = Column(Boolean, nullable=False, default=False)
    override_finalized_points = Column(POINTS, nullable=True)
    override_raw_points = Column(POINTS, nullable=True)
    override_details = Column(JSON, nullable=True)
    override_reason = Column(Text, nullable=True)
    override_applied_by_id = Column(String, nullable=True)
    override_applied_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("guild_id", "user_id", "week", "year", name="uq_guild_user_week_year"),
    )
