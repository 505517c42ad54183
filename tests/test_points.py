"""
Tests for the weighted points calculation.
"""
from decimal import Decimal

import pytest

from stardust.core.points_config import CATEGORY_CONFIG, WEIGHT_BUDGETS, WeightClass
from stardust.services.points import compute_weighted_points

SCENARIO = {
    "mod_chat_messages": 100,
    "public_chat_messages": 200,
    "voice_chat_minutes": 600,
    "mod_actions_taken": 10,
    "cases_handled": 5,
}

SAMPLES = [
    SCENARIO,
    {"mod_chat_messages": 1, "public_chat_messages": 3, "voice_chat_minutes": 7, "mod_actions_taken": 0, "cases_handled": 0},
    {"mod_chat_messages": 5000, "public_chat_messages": 0, "voice_chat_minutes": 0, "mod_actions_taken": 1, "cases_handled": 0},
    {"mod_chat_messages": 0, "public_chat_messages": 99999, "voice_chat_minutes": 100000, "mod_actions_taken": 0, "cases_handled": 1},
    {"mod_chat_messages": 17, "public_chat_messages": 33, "voice_chat_minutes": 101, "mod_actions_taken": 9999, "cases_handled": 10000},
    {"mod_chat_messages": 333, "public_chat_messages": 777, "voice_chat_minutes": 1, "mod_actions_taken": 3, "cases_handled": 2},
]


def class_members(weight_class):
    return [category for category, config in CATEGORY_CONFIG.items() if config.weight_class == weight_class]


class TestScenario:
    """The worked example from the program handbook."""

    def test_raw_points(self):
        result = compute_weighted_points(SCENARIO)
        assert result.detail("mod_chat_messages").raw_points == 100
        assert result.detail("public_chat_messages").raw_points == 100
        assert result.detail("voice_chat_minutes").raw_points == 150
        assert result.detail("mod_actions_taken").raw_points == 100
        assert result.detail("cases_handled").raw_points == 100
        assert result.dynamic_max_possible == 550
        assert result.total_raw_points == 550

    def test_low_class_is_scaled_proportionally(self):
        result = compute_weighted_points(SCENARIO)
        public = result.detail("public_chat_messages")
        voice = result.detail("voice_chat_minutes")
        assert public.bracket_budget == Decimal("82.5")
        assert public.applied_points == 33
        assert public.wasted_points == 67
        assert voice.applied_points == 49
        assert voice.wasted_points == Decimal("101")

    def test_classes_under_budget_keep_everything(self):
        result = compute_weighted_points(SCENARIO)
        assert result.detail("mod_chat_messages").applied_points == 100
        assert result.detail("mod_chat_messages").bracket_budget == Decimal("137.5")
        for category in ("mod_actions_taken", "cases_handled"):
            detail = result.detail(category)
            assert detail.applied_points == 100
            assert detail.wasted_points == 0
            assert detail.bracket_budget == 330

    def test_totals(self):
        result = compute_weighted_points(SCENARIO)
        assert result.total_finalized_points == 382
        assert result.total_wasted_points == 168

    def test_details_follow_category_order(self):
        result = compute_weighted_points(SCENARIO)
        assert [d.category for d in result.details] == list(CATEGORY_CONFIG)
        assert result.detail("voice_chat_minutes").weight_class == WeightClass.LOW


@pytest.mark.parametrize("metrics", SAMPLES)
def test_conservation(metrics):
    result = compute_weighted_points(metrics)
    assert result.total_finalized_points + result.total_wasted_points == result.total_raw_points
    for detail in result.details:
        assert detail.applied_points + detail.wasted_points == detail.raw_points
        assert detail.raw_points == detail.raw_amount * CATEGORY_CONFIG[detail.category].points_per_unit
        assert 0 <= detail.applied_points <= detail.raw_points
        assert detail.applied_points == int(detail.applied_points)


@pytest.mark.parametrize("metrics", SAMPLES)
def test_budget_respected_per_class(metrics):
    result = compute_weighted_points(metrics)
    for weight_class, fraction in WEIGHT_BUDGETS.items():
        applied = sum(result.detail(c).applied_points for c in class_members(weight_class))
        assert applied <= result.dynamic_max_possible * fraction


def test_zero_input_gives_zero_output():
    result = compute_weighted_points({c: 0 for c in CATEGORY_CONFIG})
    assert result.dynamic_max_possible == 0
    assert result.total_finalized_points == 0
    assert result.total_wasted_points == 0
    for detail in result.details:
        assert detail.applied_points == 0
        assert detail.wasted_points == 0
        assert detail.bracket_budget == 0


@pytest.mark.parametrize("category,amount,expected_applied", [
    ("mod_chat_messages", 100, 25),
    ("public_chat_messages", 200, 15),
    ("voice_chat_minutes", 400, 15),
    ("mod_actions_taken", 10, 60),
    ("cases_handled", 5, 60),
])
def test_single_active_category_keeps_only_its_class_share(category, amount, expected_applied):
    """Alone, a category's class budget is its own fraction of its own raw points."""
    result = compute_weighted_points({category: amount})
    detail = result.detail(category)
    assert detail.raw_points == 100
    assert detail.applied_points == expected_applied
    assert detail.wasted_points == 100 - expected_applied


def test_single_category_applied_never_decreases_as_it_grows():
    previous = Decimal("-1")
    for amount in range(0, 400, 7):
        applied = compute_weighted_points({"voice_chat_minutes": amount}).detail("voice_chat_minutes").applied_points
        assert applied >= previous
        previous = applied


def test_scaling_is_shared_not_first_come():
    # A sequential budget would give public chat the whole LOW budget and voice nothing
    result = compute_weighted_points(SCENARIO)
    assert result.detail("voice_chat_minutes").applied_points > 0
    assert result.detail("public_chat_messages").applied_points < result.detail("public_chat_messages").raw_points


def test_key_order_does_not_matter():
    reversed_metrics = dict(reversed(list(SCENARIO.items())))
    assert compute_weighted_points(reversed_metrics) == compute_weighted_points(SCENARIO)


def test_invalid_values_are_clamped():
    messy = {
        "mod_chat_messages": -50,
        "public_chat_messages": None,
        "voice_chat_minutes": float("nan"),
        "mod_actions_taken": "not a number",
        "cases_handled": 2.9,
    }
    result = compute_weighted_points(messy)
    assert [d.raw_amount for d in result.details] == [0, 0, 0, 0, 2]
    assert result.total_raw_points == 40


def test_missing_categories_count_as_zero():
    result = compute_weighted_points({"cases_handled": 1})
    assert result.detail("mod_chat_messages").raw_amount == 0
    assert result.total_raw_points == 20
