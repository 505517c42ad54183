from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from stardust.database import get_db
from stardust.core.auth import Principal, get_current_admin
from stardust.core.errors import EnrollmentStateError
from stardust.schemas.enrollment import (
    EnrollmentBatchCreate, EnrollmentBatchResult, EnrollmentCreate, EnrollmentResponse, EnrollmentResult
)
from stardust.services import enrollment

router = APIRouter(prefix="/stardust/enrollment", tags=["stardust"])


@router.get("", response_model=List[EnrollmentResponse])
async def list_enrolled(
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    return await enrollment.list_active(db, admin.guild_id)


@router.post("", response_model=EnrollmentResult)
async def activate_enrollment(
    enrollment_in: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    try:
        created = await enrollment.activate(db, admin.guild_id, enrollment_in.user_id, admin.user_id)
    except EnrollmentStateError as e:
        raise HTTPException(409, str(e))
    return EnrollmentResult(user_id=enrollment_in.user_id, status="enrolled" if created else "reactivated")


@router.post("/batch", response_model=EnrollmentBatchResult)
async def activate_enrollment_batch(
    batch_in: EnrollmentBatchCreate,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    results = await enrollment.activate_batch(db, admin.guild_id, batch_in.user_ids, admin.user_id)
    return EnrollmentBatchResult(results=results)


@router.delete("/{user_id}", response_model=EnrollmentResult)
async def deactivate_enrollment(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin)
):
    try:
        state = await enrollment.deactivate(db, admin.guild_id, user_id, admin.user_id)
    except EnrollmentStateError as e:
        raise HTTPException(409, str(e))
    return EnrollmentResult(user_id=user_id, status=state)
