# stardust/core/points_config.py
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType


class WeightClass(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class CategoryConfig:
    weight_class: WeightClass
    points_per_unit: Decimal


# Share of the week's dynamic maximum each weight class may pay out
WEIGHT_BUDGETS = MappingProxyType({
    WeightClass.HIGH: Decimal("0.60"),
    WeightClass.MEDIUM: Decimal("0.25"),
    WeightClass.LOW: Decimal("0.15"),
})

# Ordered: this is also the display order of per-category details
CATEGORY_CONFIG = MappingProxyType({
    "mod_chat_messages": CategoryConfig(WeightClass.MEDIUM, Decimal("1")),
    "public_chat_messages": CategoryConfig(WeightClass.LOW, Decimal("0.5")),
    "voice_chat_minutes": CategoryConfig(WeightClass.LOW, Decimal("0.25")),
    "mod_actions_taken": CategoryConfig(WeightClass.HIGH, Decimal("10")),
    "cases_handled": CategoryConfig(WeightClass.HIGH, Decimal("20")),
})

CATEGORIES = tuple(CATEGORY_CONFIG)
