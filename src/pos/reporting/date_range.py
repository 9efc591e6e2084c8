"""Calendar windows for the dashboards: today, this week, this month, all time.

Windows are computed in the wall-clock timezone of the reference instant and
are inclusive at both ends. A naive reference is read in the shop timezone.
Weeks start on Sunday.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum

from pos import settings


class DateFilter(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def __contains__(self, instant) -> bool:
        return self.start <= localize(instant) <= self.end


def localize(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=settings.shop_timezone())
    return instant


def _start_of_day(day, tz) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def _end_of_day(day, tz) -> datetime:
    # Inclusive bound at the last microsecond, so 23:59:59.9995 still falls inside
    return datetime.combine(day, time.max, tzinfo=tz)


def date_range(date_filter, reference: datetime) -> DateRange | None:
    """Window for ``date_filter`` around ``reference``; ``None`` means unbounded."""
    date_filter = DateFilter(date_filter)
    if date_filter == DateFilter.ALL:
        return None

    reference = localize(reference)
    tz = reference.tzinfo
    today = reference.date()

    if date_filter == DateFilter.DAY:
        return DateRange(_start_of_day(today, tz), _end_of_day(today, tz))

    if date_filter == DateFilter.WEEK:
        # Monday is 0 in Python; shift so Sunday opens the week
        sunday = today - timedelta(days=(today.weekday() + 1) % 7)
        return DateRange(_start_of_day(sunday, tz), _end_of_day(sunday + timedelta(days=6), tz))

    last_day = calendar.monthrange(today.year, today.month)[1]
    return DateRange(
        _start_of_day(today.replace(day=1), tz),
        _end_of_day(today.replace(day=last_day), tz),
    )
