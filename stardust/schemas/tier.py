from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Optional

class TierSet(BaseModel):
    tier: int = Field(..., ge=0, le=4)

class TierStatusResponse(BaseModel):
    user_id: str
    current_tier: int
    payout: int
    weeks_inactive: int = 0
    last_evaluated_week: Optional[int] = None
    last_evaluated_year: Optional[int] = None
    updated_by_id: Optional[str] = None
    updated_at: Optional[datetime] = None

class TierListResponse(BaseModel):
    payouts: Dict[int, int]
    moderators: List[TierStatusResponse]

class TierChange(BaseModel):
    user_id: str
    previous_tier: int
    new_tier: int

class TierAdjustResponse(BaseModel):
    week: int
    year: int
    changes: List[TierChange]
