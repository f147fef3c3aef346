"""Lenient calendar arithmetic over wall-clock datetimes."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from enum import Enum


class TriggerUnit(Enum):
    """Calendar unit a candidate advances by when it is not in the future."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class CalendarField(Enum):
    """Fields that can be assigned on a Candidate."""

    YEAR = "year"
    MONTH = "month"
    WEEK_OF_YEAR = "week_of_year"
    WEEK_OF_MONTH = "week_of_month"
    DAY_OF_MONTH = "day_of_month"
    DAY_OF_YEAR = "day_of_year"
    DAY_OF_WEEK = "day_of_week"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"
    MICROSECOND = "microsecond"


def weekday_position(weekday: int, first_weekday: int = 0) -> int:
    """Index of an ISO weekday (0 = Monday) in a week starting on first_weekday."""
    return (weekday - first_weekday) % 7


def week_start(day: date, first_weekday: int = 0) -> date:
    return day - timedelta(days=weekday_position(day.weekday(), first_weekday))


def week_of_month(day: date, first_weekday: int = 0) -> int:
    """Week index of ``day``; week 1 is the week holding the 1st of the month."""
    first_week = week_start(day.replace(day=1), first_weekday)
    return (day - first_week).days // 7 + 1


def week_of_year(day: date, first_weekday: int = 0) -> int:
    """Week index of ``day``; week 1 is the week holding January 1st."""
    first_week = week_start(day.replace(month=1, day=1), first_weekday)
    return (day - first_week).days // 7 + 1


def _first_of_month(year: int, month: int) -> date:
    # Months outside 1..12 roll into neighbouring years
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1)


def _shift_months(instant: datetime, months: int) -> datetime:
    """Adds months, clipping the day to the length of the target month."""
    total_months = (instant.month - 1) + months
    year = instant.year + total_months // 12
    month = (total_months % 12) + 1

    # Clip days (e.g. Jan 31 + 1 month -> Feb 28)
    days_in_month = calendar.monthrange(year, month)[1]
    day = min(instant.day, days_in_month)

    return instant.replace(year=year, month=month, day=day)


def add_unit(instant: datetime, unit: TriggerUnit) -> datetime:
    """Advances a wall-clock instant by one calendar unit."""
    if unit is TriggerUnit.HOUR:
        return instant + timedelta(hours=1)
    if unit is TriggerUnit.DAY:
        return instant + timedelta(days=1)
    if unit is TriggerUnit.WEEK:
        return instant + timedelta(weeks=1)
    if unit is TriggerUnit.MONTH:
        return _shift_months(instant, 1)
    return _shift_months(instant, 12)


@dataclass(frozen=True)
class Candidate:
    """
    A calendar instant under construction.

    Field assignments are recorded in order and folded into a new instant by
    :meth:`resolve`, so assigning ``DAY_OF_WEEK`` and then ``MONTH`` keeps the
    weekday request alive in the new month instead of being lost to the first
    assignment.

    Resolution is lenient: out-of-range values roll over into neighbouring
    units (day 31 of February lands in early March, minute 75 is a quarter
    past the next hour). The date comes from the most recently assigned date
    group: day-of-month, day-of-year, or a week index plus day-of-week. When
    no date field was assigned the day-of-month is kept.

    Examples:
        >>> base = Candidate.from_instant(datetime(2026, 10, 18, 9, 30))
        >>> base.with_field(CalendarField.DAY_OF_MONTH, 1).resolve().instant
        datetime.datetime(2026, 10, 1, 9, 30)
    """

    instant: datetime
    first_weekday: int = 0
    pending: tuple[tuple[CalendarField, int], ...] = ()

    @classmethod
    def from_instant(cls, instant: datetime, first_weekday: int = 0) -> Candidate:
        return cls(instant=instant, first_weekday=first_weekday)

    def with_field(self, field: CalendarField, value: int) -> Candidate:
        return replace(self, pending=self.pending + ((field, value),))

    def get(self, field: CalendarField) -> int:
        """Reads a field of the resolved instant."""
        return self.resolve().fields()[field]

    def fields(self) -> dict[CalendarField, int]:
        """Calendar fields of ``instant``, ignoring pending assignments."""
        day = self.instant.date()
        return {
            CalendarField.YEAR: day.year,
            CalendarField.MONTH: day.month,
            CalendarField.WEEK_OF_YEAR: week_of_year(day, self.first_weekday),
            CalendarField.WEEK_OF_MONTH: week_of_month(day, self.first_weekday),
            CalendarField.DAY_OF_MONTH: day.day,
            CalendarField.DAY_OF_YEAR: day.timetuple().tm_yday,
            CalendarField.DAY_OF_WEEK: day.weekday(),
            CalendarField.HOUR: self.instant.hour,
            CalendarField.MINUTE: self.instant.minute,
            CalendarField.SECOND: self.instant.second,
            CalendarField.MICROSECOND: self.instant.microsecond,
        }

    def resolve(self) -> Candidate:
        """Folds pending assignments into a new, fully resolved candidate."""
        if not self.pending:
            return self

        values = self.fields()
        stamps: dict[CalendarField, int] = {}
        for stamp, (field, value) in enumerate(self.pending, start=1):
            values[field] = value
            stamps[field] = stamp

        clock = timedelta(
            hours=values[CalendarField.HOUR],
            minutes=values[CalendarField.MINUTE],
            seconds=values[CalendarField.SECOND],
            microseconds=values[CalendarField.MICROSECOND],
        )
        midnight = datetime.combine(
            self._resolve_date(values, stamps), time(), tzinfo=self.instant.tzinfo
        )
        return Candidate(instant=midnight + clock, first_weekday=self.first_weekday)

    def _resolve_date(
        self,
        values: dict[CalendarField, int],
        stamps: dict[CalendarField, int],
    ) -> date:
        by_day = stamps.get(CalendarField.DAY_OF_MONTH, 0)
        by_year_day = stamps.get(CalendarField.DAY_OF_YEAR, 0)
        by_week_of_month = stamps.get(CalendarField.WEEK_OF_MONTH, 0)
        by_week_of_year = stamps.get(CalendarField.WEEK_OF_YEAR, 0)
        by_week = max(
            by_week_of_month,
            by_week_of_year,
            stamps.get(CalendarField.DAY_OF_WEEK, 0),
        )
        latest = max(by_day, by_year_day, by_week)

        year = values[CalendarField.YEAR]
        first_of_month = _first_of_month(year, values[CalendarField.MONTH])

        if latest == by_day:
            return first_of_month + timedelta(days=values[CalendarField.DAY_OF_MONTH] - 1)

        if latest == by_year_day:
            return _first_of_month(year, 1) + timedelta(
                days=values[CalendarField.DAY_OF_YEAR] - 1
            )

        # Weekdays beyond 0..6 roll into the following weeks
        weekday = values[CalendarField.DAY_OF_WEEK]
        offset = weekday_position(weekday % 7, self.first_weekday) + 7 * (weekday // 7)

        if by_week_of_year > by_week_of_month:
            first_week = week_start(_first_of_month(year, 1), self.first_weekday)
            week = values[CalendarField.WEEK_OF_YEAR]
        else:
            first_week = week_start(first_of_month, self.first_weekday)
            week = values[CalendarField.WEEK_OF_MONTH]

        return first_week + timedelta(days=7 * (week - 1) + offset)
