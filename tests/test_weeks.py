from datetime import date

import pytest

from stardust.utils.weeks import is_valid_week, iso_week, month_state, previous_week, week_range, weeks_in_month


def test_iso_week_uses_iso_year():
    # Monday 29 Dec 2025 opens ISO week 1 of 2026
    assert iso_week(date(2025, 12, 29)) == (1, 2026)
    assert iso_week(date(2025, 9, 1)) == (36, 2025)


def test_week_range():
    assert week_range(36, 2025) == (date(2025, 9, 1), date(2025, 9, 7))


@pytest.mark.parametrize("week,year,expected", [
    (52, 2025, True),
    (53, 2025, False),
    (53, 2026, True),
    (0, 2025, False),
])
def test_is_valid_week(week, year, expected):
    assert is_valid_week(week, year) is expected


def test_previous_week_crosses_year():
    assert previous_week(1, 2026) == (52, 2025)
    assert previous_week(1, 2027) == (53, 2026)
    assert previous_week(10, 2025) == (9, 2025)


class TestWeeksInMonth:
    def test_month_starting_on_monday(self):
        assert weeks_in_month(9, 2025) == [(36, 2025), (37, 2025), (38, 2025), (39, 2025), (40, 2025)]

    def test_december_owns_week_one_of_next_year(self):
        assert weeks_in_month(12, 2025) == [(49, 2025), (50, 2025), (51, 2025), (52, 2025), (1, 2026)]

    def test_january_skips_week_owned_by_december(self):
        assert weeks_in_month(1, 2026) == [(2, 2026), (3, 2026), (4, 2026), (5, 2026)]

    def test_months_never_share_a_week(self):
        seen = set()
        for month in range(1, 13):
            weeks = set(weeks_in_month(month, 2025))
            assert not weeks & seen
            seen |= weeks
        assert len(seen) == 52


def test_month_state():
    today = date(2025, 10, 15)
    assert month_state(9, 2025, today) == "past"
    assert month_state(12, 2024, today) == "past"
    assert month_state(10, 2025, today) == "current"
    assert month_state(11, 2025, today) == "future"
    assert month_state(1, 2026, today) == "future"


def test_month_stays_current_until_its_last_week_ends():
    # week 44 of 2026 starts Mon 26 Oct and ends Sun 1 Nov
    assert month_state(10, 2026, date(2026, 11, 1)) == "current"
    assert month_state(10, 2026, date(2026, 11, 2)) == "past"
    assert month_state(11, 2026, date(2026, 11, 1)) == "current"
