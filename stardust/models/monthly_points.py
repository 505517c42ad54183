from sqlalchemy import Column, Integer, String, DateTime, Numeric, UniqueConstraint, func
from stardust.database import Base

class MonthlyPointsRecord(Base):
    """Snapshot of a fully elapsed month, written once so later weekly corrections don't drift it."""
    __tablename__ = "monthly_points"

    id = Column(Integer, primary_key=True, index=True)
    guild_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    mod_chat_messages = Column(Integer, default=0)
    public_chat_messages = Column(Integer, default=0)
    voice_chat_minutes = Column(Integer, default=0)
    mod_actions_taken = Column(Integer, default=0)
    cases_handled = Column(Integer, default=0)

    raw_points = Column(Numeric(14, 2), nullable=False, default=0)
    finalized_points = Column(Numeric(14, 2), nullable=False, default=0)
    wasted_points = Column(Numeric(14, 2), nullable=False, default=0)
    weeks_counted = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("guild_id", "user_id", "month", "year", name="uq_guild_user_month_year"),
    )
