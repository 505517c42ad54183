from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, func
from stardust.database import Base

class ModeratorTierStatus(Base):
    __tablename__ = "moderator_tier_status"

    id = Column(Integer, primary_key=True, index=True)
    guild_id = Column(String, nullable=False)
    user_id = Column(String, nullable=False)
    current_tier = Column(Integer, nullable=False)  # 0–3, 4 when enabled
    weeks_inactive = Column(Integer, nullable=False, default=0)
    last_evaluated_week = Column(Integer, nullable=True)
    last_evaluated_year = Column(Integer, nullable=True)
    updated_by_id = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("guild_id", "user_id", name="uq_tier_guild_user"),
    )
