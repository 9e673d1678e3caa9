"""
Calculadora de períodos de facturación.

Dado un día de cierre, un día de vencimiento y un mes de referencia,
devuelve las fechas de cierre y vencimiento del extracto y el rango
de fechas cuyas transacciones le pertenecen.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Tuple

from app.core.errors import InvalidArgumentError


@dataclass(frozen=True)
class BillingPeriod:
    closing_date: date
    due_date: date
    period_start: date
    period_end: date

    def contains(self, day: date) -> bool:
        return self.period_start <= day <= self.period_end


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_offset(year: int, month: int, n: int) -> Tuple[int, int]:
    """(year, month) desplazado n meses; n puede ser negativo."""
    index = year * 12 + (month - 1) + n
    return index // 12, index % 12 + 1


def clamp_day(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, days_in_month(year, month)))


def period_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def _check_day(value: int, name: str) -> None:
    if not 1 <= value <= 31:
        raise InvalidArgumentError(f"{name} debe estar entre 1 y 31.")


def compute_period(
    closing_day: int,
    due_day: int,
    year: int,
    month: int,
    previous_closing: Optional[date] = None,
) -> BillingPeriod:
    _check_day(closing_day, "closing_day")
    _check_day(due_day, "due_day")
    if not 1 <= month <= 12:
        raise InvalidArgumentError("month debe estar entre 1 y 12.")

    closing_date = clamp_day(year, month, closing_day)

    # Si el vencimiento es antes del cierre, cae en el mes siguiente
    due_year, due_month = year, month
    if due_day < closing_date.day:
        due_year, due_month = month_offset(year, month, 1)
    due_date = clamp_day(due_year, due_month, due_day)

    if previous_closing is not None:
        period_start = previous_closing + timedelta(days=1)
    else:
        period_start = date(year, month, 1)

    return BillingPeriod(
        closing_date=closing_date,
        due_date=due_date,
        period_start=period_start,
        period_end=closing_date,
    )


def best_purchase_date(best_purchase_day: Optional[int], year: int, month: int) -> Optional[date]:
    if best_purchase_day is None:
        return None
    _check_day(best_purchase_day, "best_purchase_day")
    return clamp_day(year, month, best_purchase_day)
