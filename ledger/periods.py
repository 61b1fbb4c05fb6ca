from datetime import date
from typing import NamedTuple


class Period(NamedTuple):
    """Half-open date window ``[start, end)``."""
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


def month_start(day: date) -> date:
    return day.replace(day=1)


def shift_month(day: date, months: int) -> date:
    """First day of the month ``months`` away from ``day``'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_period(year: int, month: int) -> Period:
    start = date(year, month, 1)
    return Period(start, shift_month(start, 1))
