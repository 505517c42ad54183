from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Optional

class EnrollmentCreate(BaseModel):
    user_id: str = Field(..., min_length=1)

class EnrollmentBatchCreate(BaseModel):
    user_ids: List[str] = Field(..., min_length=1)

class EnrollmentResponse(BaseModel):
    user_id: str
    active: bool
    enrolled_at: datetime
    enrolled_by_id: Optional[str]
    deactivated_at: Optional[datetime] = None
    deactivated_by_id: Optional[str] = None

    model_config = {"from_attributes": True}

class EnrollmentResult(BaseModel):
    user_id: str
    status: str  # "enrolled", "reactivated", "inactive", "deleted"

class EnrollmentBatchResult(BaseModel):
    results: Dict[str, str]
