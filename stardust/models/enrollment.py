from sqlalchemy import Column, Integer, String, DateTime, Boolean, UniqueConstraint
from stardust.database import Base

class EnrollmentStatus(Base):
    __tablename__ = "moderator_enrollments"

    id = Column(Integer, primary_key=True, index=True)
    guild_id = Column(String, nullable=False)
    user_id = Column(String, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    enrolled_at = Column(DateTime(timezone=True), nullable=False)
    enrolled_by_id = Column(String, nullable=True)
    deactivated_at = Column(DateTime(timezone=True), nullable=True)
    deactivated_by_id = Column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("guild_id", "user_id", name="uq_enrollment_guild_user"),
    )
