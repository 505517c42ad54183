from pydantic import BaseModel
from decimal import Decimal
from typing import Dict, Optional

class MonthlySummary(BaseModel):
    user_id: Optional[str] = None  # None on the all-moderator totals row
    mod_chat_messages: int = 0
    public_chat_messages: int = 0
    voice_chat_minutes: int = 0
    mod_actions_taken: int = 0
    cases_handled: int = 0
    raw_points: Decimal = Decimal("0")
    finalized_points: Decimal = Decimal("0")
    wasted_points: Decimal = Decimal("0")
    weeks_counted: int = 0

    model_config = {"from_attributes": True}

class MonthlyAggregate(BaseModel):
    guild_id: str
    month: int
    year: int
    persisted: bool = False
    per_moderator: Dict[str, MonthlySummary]
    totals: MonthlySummary
