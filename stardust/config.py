# stardust/config.py
from pydantic_settings import BaseSettings
from typing import Optional
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30)

    DATABASE_URL: Optional[str] = None
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = Field(False)

    LOG_LEVEL: str = Field("INFO")

    # Tier used when a moderator has no tier status yet (full payout)
    DEFAULT_TIER: int = Field(3, ge=0, le=4)
    TIER_4_ENABLED: bool = Field(False)

    # Optional auto promotion/demotion policy, off unless a deployment opts in
    TIER_AUTO_ADJUST_ENABLED: bool = Field(False)
    TIER_ACTIVE_THRESHOLD: int = Field(10)

    BACKFILL_MAX_WEEKS: int = Field(10)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL or "sqlite+aiosqlite:///./stardust.db"
        # Ensure asyncpg is used
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

settings = Settings()
