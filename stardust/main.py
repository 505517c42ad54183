# stardust/main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from sqlalchemy import exc as sa_exc
from stardust.config import settings
from stardust.database import Base, engine
from stardust.models.weekly_points import WeeklyPointsRecord  # noqa: F401
from stardust.models.monthly_points import MonthlyPointsRecord  # noqa: F401
from stardust.models.tier import ModeratorTierStatus  # noqa: F401
from stardust.models.enrollment import EnrollmentStatus  # noqa: F401
from stardust.routers import points, weekly, monthly, tiers, enrollment

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def create_tables():
    # create tables (async). ignore duplicate-object errors from concurrent workers.
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    # For development; production schemas are managed with Alembic
    await create_tables()
    yield
    await engine.dispose()


app = FastAPI(title="Stardust - Moderator Points Engine", version="1.0", lifespan=lifespan)

# Include Routers
app.include_router(points.router)
app.include_router(weekly.router)
app.include_router(monthly.router)
app.include_router(tiers.router)
app.include_router(enrollment.router)

@app.get("/")
def read_root():
    return {"message": "Stardust points engine"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("stardust.main:app", host="0.0.0.0", port=8000, reload=True)
