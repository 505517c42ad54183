from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional
from stardust.core.points_config import WeightClass

# UI policy caps on what a collaborator may submit for one week
MAX_MESSAGE_COUNT = 100_000
MAX_ACTION_COUNT = 10_000

class RawMetrics(BaseModel):
    mod_chat_messages: int = Field(0, ge=0, le=MAX_MESSAGE_COUNT)
    public_chat_messages: int = Field(0, ge=0, le=MAX_MESSAGE_COUNT)
    voice_chat_minutes: int = Field(0, ge=0, le=MAX_MESSAGE_COUNT)
    mod_actions_taken: int = Field(0, ge=0, le=MAX_ACTION_COUNT)
    cases_handled: int = Field(0, ge=0, le=MAX_ACTION_COUNT)

class CategoryPointsDetail(BaseModel):
    category: str
    weight_class: WeightClass
    raw_amount: int
    raw_points: Decimal
    applied_points: Decimal
    wasted_points: Decimal
    bracket_budget: Decimal

class ComputedPoints(BaseModel):
    details: List[CategoryPointsDetail]
    total_raw_points: Decimal
    total_finalized_points: Decimal
    total_wasted_points: Decimal
    dynamic_max_possible: Decimal

    def detail(self, category: str) -> CategoryPointsDetail:
        for item in self.details:
            if item.category == category:
                return item
        raise KeyError(category)

class CalculatorRequest(RawMetrics):
    tier: Optional[int] = Field(None, ge=0, le=4)

class CalculatorResponse(ComputedPoints):
    tier: Optional[int] = None
    tier_payout: Optional[int] = None
