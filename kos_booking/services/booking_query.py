"""
Time windows for booking history queries

Precedence: month+year, then start_date+end_date, then year alone, else no
filter. Windows apply to Booking.start_date.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional

from kos_booking.errors import ValidationError

# last year whose window still ends inside the date range
MAX_YEAR = date.max.year - 1


@dataclass(frozen=True)
class TimeWindow:
    start: date
    end: date
    end_inclusive: bool = False

    def contains(self, day: date) -> bool:
        if day < self.start:
            return False
        return day <= self.end if self.end_inclusive else day < self.end

    def apply(self, query, column):
        """Add the window as a filter on column"""
        query = query.filter(column >= self.start)
        if self.end_inclusive:
            return query.filter(column <= self.end)
        return query.filter(column < self.end)


def _check_year(year: int) -> None:
    if not 1 <= year <= MAX_YEAR:
        raise ValidationError(f"Year must be between 1 and {MAX_YEAR}")


def month_window(month: int, year: int) -> TimeWindow:
    """[first day of month, first day of next month)"""
    _check_year(year)
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return TimeWindow(start, end)


def year_window(year: int) -> TimeWindow:
    _check_year(year)
    return TimeWindow(date(year, 1, 1), date(year + 1, 1, 1))


def resolve_time_window(month: Optional[int] = None, year: Optional[int] = None,
                        start_date: Optional[date] = None,
                        end_date: Optional[date] = None) -> Optional[TimeWindow]:
    """Pick the window for a history query; None means no time filtering"""
    if month is not None and year is not None:
        return month_window(month, year)
    if start_date is not None and end_date is not None:
        return TimeWindow(start_date, end_date, end_inclusive=True)
    if year is not None:
        return year_window(year)
    return None
