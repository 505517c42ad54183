"""
Weighted Stardust points calculation.

Every category earns raw points at a fixed per-unit rate. The sum of all raw
points is the week's dynamic maximum, and each weight class may pay out at
most its fraction of that maximum. When a class earns more than its budget,
all of its categories are scaled down by the same factor, so the result does
not depend on the order categories are visited in.
"""
from collections import defaultdict
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any, Mapping, Union

from stardust.core.points_config import CATEGORY_CONFIG, WEIGHT_BUDGETS
from stardust.schemas.points import CategoryPointsDetail, ComputedPoints, RawMetrics

ZERO = Decimal("0")

MetricsLike = Union[RawMetrics, Mapping[str, Any]]


def _clamp_amount(value: Any) -> int:
    """Coerce a raw count to a non-negative integer; anything unusable counts as 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return 0
    if not amount.is_finite() or amount < 0:
        return 0
    return int(amount)


def _amounts(metrics: MetricsLike) -> dict:
    if isinstance(metrics, RawMetrics):
        metrics = metrics.model_dump()
    return {category: _clamp_amount(metrics.get(category)) for category in CATEGORY_CONFIG}


def compute_weighted_points(metrics: MetricsLike) -> ComputedPoints:
    amounts = _amounts(metrics)

    # First pass: uncapped raw points, the dynamic max and per-class raw totals
    raw_points = {}
    class_raw_totals = defaultdict(lambda: ZERO)
    for category, config in CATEGORY_CONFIG.items():
        raw = amounts[category] * config.points_per_unit
        raw_points[category] = raw
        class_raw_totals[config.weight_class] += raw

    dynamic_max = sum(raw_points.values(), ZERO)
    budgets = {weight_class: dynamic_max * fraction for weight_class, fraction in WEIGHT_BUDGETS.items()}

    # Second pass: proportional scale-down within each over-budget class
    details = []
    for category, config in CATEGORY_CONFIG.items():
        raw = raw_points[category]
        budget = budgets[config.weight_class]
        class_total = class_raw_totals[config.weight_class]

        if class_total > budget:
            # raw * (budget / class_total), divided last so exact quotients stay exact
            scaled = raw * budget / class_total
        else:
            scaled = raw
        applied = scaled.to_integral_value(rounding=ROUND_FLOOR)

        details.append(CategoryPointsDetail(
            category=category,
            weight_class=config.weight_class,
            raw_amount=amounts[category],
            raw_points=raw,
            applied_points=applied,
            wasted_points=raw - applied,
            bracket_budget=budget,
        ))

    return ComputedPoints(
        details=details,
        total_raw_points=dynamic_max,
        total_finalized_points=sum((d.applied_points for d in details), ZERO),
        total_wasted_points=sum((d.wasted_points for d in details), ZERO),
        dynamic_max_possible=dynamic_max,
    )
