from datetime import date

import pytest

from app.core.errors import InvalidArgumentError
from app.services.periods import (
    best_purchase_date,
    compute_period,
    days_in_month,
    month_offset,
    period_key,
)


def test_due_day_before_closing_falls_next_month():
    period = compute_period(15, 5, 2026, 1)

    assert period.closing_date == date(2026, 1, 15)
    assert period.due_date == date(2026, 2, 5)


def test_day_31_is_clamped_in_february():
    period = compute_period(31, 31, 2026, 2)

    assert period.closing_date == date(2026, 2, 28)
    assert period.due_date == date(2026, 2, 28)


def test_december_due_rolls_into_next_year():
    period = compute_period(20, 10, 2025, 12)

    assert period.closing_date == date(2025, 12, 20)
    assert period.due_date == date(2026, 1, 10)


def test_period_starts_first_of_month_without_previous_closing():
    period = compute_period(15, 5, 2026, 1)

    assert period.period_start == date(2026, 1, 1)
    assert period.period_end == date(2026, 1, 15)


def test_period_starts_day_after_previous_closing():
    period = compute_period(15, 5, 2026, 2, previous_closing=date(2026, 1, 15))

    assert period.period_start == date(2026, 1, 16)
    assert period.period_end == date(2026, 2, 15)
    assert period.contains(date(2026, 1, 16))
    assert not period.contains(date(2026, 1, 15))


@pytest.mark.parametrize("year", [2024, 2025])
def test_closing_day_always_clamped_to_month_length(year):
    for month in range(1, 13):
        for closing_day in range(1, 32):
            for due_day in (1, 15, 31):
                period = compute_period(closing_day, due_day, year, month)
                assert period.closing_date.day == min(closing_day, days_in_month(year, month))
                if due_day < period.closing_date.day:
                    assert (period.due_date.year, period.due_date.month) == month_offset(year, month, 1)
                else:
                    assert (period.due_date.year, period.due_date.month) == (year, month)


@pytest.mark.parametrize(
    "closing_day, due_day, month",
    [(0, 5, 1), (32, 5, 1), (15, 0, 1), (15, 32, 1), (15, 5, 0), (15, 5, 13)],
)
def test_invalid_inputs_are_rejected(closing_day, due_day, month):
    with pytest.raises(InvalidArgumentError):
        compute_period(closing_day, due_day, 2026, month)


def test_month_offset_crosses_year_boundaries():
    assert month_offset(2025, 12, 1) == (2026, 1)
    assert month_offset(2026, 1, -1) == (2025, 12)
    assert month_offset(2026, 3, -15) == (2024, 12)


def test_best_purchase_date():
    assert best_purchase_date(None, 2026, 2) is None
    assert best_purchase_date(31, 2026, 2) == date(2026, 2, 28)
    with pytest.raises(InvalidArgumentError):
        best_purchase_date(40, 2026, 2)


def test_period_key():
    assert period_key(date(2026, 3, 9)) == "2026-03"
