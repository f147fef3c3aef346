"""
Recurrence resolution.

Given a RecurrenceRule and a base instant, find the next instant after the
base that satisfies every pinned calendar field. The functions here are pure:
no I/O, no shared state, same inputs always produce the same output.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, NamedTuple

from notify_core.config import notify_settings

from .calendar import CalendarField, Candidate, TriggerUnit, add_unit, weekday_position
from .schemas import RecurrenceRule

logger = logging.getLogger(__name__)

RuleAction = Callable[[RecurrenceRule, Candidate], Candidate]


class RuleStep(NamedTuple):
    """Pins one rule field and names the unit to advance by afterwards."""

    field: str
    action: RuleAction
    unit: TriggerUnit


def is_exhausted(rule: RecurrenceRule, occurrence_index: int) -> bool:
    """True once a bounded rule has produced ``rule.count`` occurrences."""
    return rule.is_bounded and occurrence_index >= rule.count


def _reset_time(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    if not rule.is_set("minute"):
        candidate = candidate.with_field(CalendarField.MINUTE, 0)
    if not rule.is_set("hour"):
        candidate = candidate.with_field(CalendarField.HOUR, 0)
    return candidate


def _reset_weekday(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    if rule.is_set("weekday"):
        return candidate
    return candidate.with_field(CalendarField.DAY_OF_WEEK, candidate.first_weekday)


def _reset_day(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    if rule.is_set("day") or rule.is_set("weekday"):
        return candidate
    return candidate.with_field(CalendarField.DAY_OF_MONTH, 1)


def _pin_weekday_if_later(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    """
    Pins the rule weekday only when it comes later in the week.

    Used after moving to the first day of a month or year: pinning an earlier
    weekday would walk back into the previous month or year.
    """
    if not rule.is_set("weekday"):
        return candidate

    resolved = candidate.resolve()
    current = weekday_position(resolved.get(CalendarField.DAY_OF_WEEK), resolved.first_weekday)
    if current < weekday_position(rule.weekday, resolved.first_weekday):
        return resolved.with_field(CalendarField.DAY_OF_WEEK, rule.weekday)
    return resolved


def _pin_minute(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    return candidate.with_field(CalendarField.MINUTE, rule.minute)


def _pin_hour(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    return _reset_time(rule, candidate.with_field(CalendarField.HOUR, rule.hour))


def _pin_day(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    return _reset_time(rule, candidate.with_field(CalendarField.DAY_OF_MONTH, rule.day))


def _pin_weekday(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    return _reset_time(rule, candidate.with_field(CalendarField.DAY_OF_WEEK, rule.weekday))


def _pin_week_of_month(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    candidate = candidate.with_field(CalendarField.WEEK_OF_MONTH, rule.week_of_month)
    candidate = _reset_weekday(rule, _reset_time(rule, candidate))

    if rule.week_of_month == 1:
        candidate = candidate.with_field(CalendarField.DAY_OF_MONTH, 1)
        candidate = _pin_weekday_if_later(rule, candidate)
    return candidate


def _pin_week(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    candidate = candidate.with_field(CalendarField.WEEK_OF_YEAR, rule.week)
    candidate = _reset_weekday(rule, _reset_time(rule, candidate))

    if rule.week == 1:
        candidate = candidate.with_field(CalendarField.DAY_OF_YEAR, 1)
        candidate = _pin_weekday_if_later(rule, candidate)
    return candidate


def _pin_month(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    if rule.is_set("weekday"):
        return _pin_month_of_weekday(rule, candidate)

    # Rule months are 1-based like CalendarField.MONTH
    candidate = candidate.with_field(CalendarField.MONTH, rule.month)
    return _reset_day(rule, _reset_time(rule, candidate))


def _pin_month_of_weekday(rule: RecurrenceRule, candidate: Candidate) -> Candidate:
    """
    Places the rule weekday inside the pinned month.

    The week index is the rule's ``week_of_month`` or, when unset, the one of
    the current instant. An inherited week index can hold days of the
    neighbouring months, so the result is moved by whole weeks until it lies
    in the pinned month.
    """
    first = (
        candidate.with_field(CalendarField.MONTH, rule.month)
        .with_field(CalendarField.DAY_OF_MONTH, 1)
    )
    first = _reset_time(rule, first).resolve()

    if rule.is_set("week_of_month"):
        if rule.week_of_month == 1:
            return _pin_weekday_if_later(rule, first)
        return (
            first.with_field(CalendarField.WEEK_OF_MONTH, rule.week_of_month)
            .with_field(CalendarField.DAY_OF_WEEK, rule.weekday)
            .resolve()
        )

    week = candidate.fields()[CalendarField.WEEK_OF_MONTH]
    instant = (
        first.with_field(CalendarField.WEEK_OF_MONTH, week)
        .with_field(CalendarField.DAY_OF_WEEK, rule.weekday)
        .resolve()
        .instant
    )
    month = (first.instant.year, first.instant.month)
    while (instant.year, instant.month) < month:
        instant += timedelta(weeks=1)
    while (instant.year, instant.month) > month:
        instant -= timedelta(weeks=1)
    return Candidate.from_instant(instant, candidate.first_weekday)


# Order matters: later steps may reset fields pinned by earlier ones, and the
# unit of the last applied step is the one advanced by.
RULE_STEPS: tuple[RuleStep, ...] = (
    RuleStep("minute", _pin_minute, TriggerUnit.HOUR),
    RuleStep("hour", _pin_hour, TriggerUnit.DAY),
    RuleStep("day", _pin_day, TriggerUnit.MONTH),
    RuleStep("weekday", _pin_weekday, TriggerUnit.WEEK),
    RuleStep("week_of_month", _pin_week_of_month, TriggerUnit.MONTH),
    RuleStep("week", _pin_week, TriggerUnit.YEAR),
    RuleStep("month", _pin_month, TriggerUnit.YEAR),
)


def apply_rule(
    rule: RecurrenceRule,
    candidate: Candidate,
) -> tuple[Candidate, TriggerUnit | None]:
    """
    Pins the rule fields on a candidate.

    Returns:
        The resolved candidate and the coarsest pinned unit, or None as the
        unit when the rule pins no calendar field.
    """
    candidate = candidate.with_field(CalendarField.SECOND, 0).with_field(
        CalendarField.MICROSECOND, 0
    )
    unit: TriggerUnit | None = None

    for step in RULE_STEPS:
        if rule.is_set(step.field):
            candidate = step.action(rule, candidate)
            unit = step.unit

    return candidate.resolve(), unit


def compute_next(
    rule: RecurrenceRule,
    base: datetime,
    occurrence_index: int = 0,
    *,
    first_weekday: int | None = None,
    max_increments: int | None = None,
) -> datetime | None:
    """
    Computes the next occurrence of a rule strictly after ``base``.

    Args:
        rule: The recurrence rule.
        base: Last fire time or initial anchor, in the zone the rule applies to.
        occurrence_index: Occurrences already produced for this rule.
        first_weekday: Weekday starting a calendar week. Defaults to settings.
        max_increments: Bound on advance/re-pin cycles. Defaults to settings.

    Returns:
        The next instant, or None when the series is exhausted, the rule pins
        nothing, or the instant is not before ``rule.before``. A ``before``
        that cannot be compared with ``base`` (naive against aware) also
        gives None.

    Examples:
        >>> rule = RecurrenceRule(minute=10)
        >>> compute_next(rule, datetime(2026, 10, 18, 9, 30))
        datetime.datetime(2026, 10, 18, 10, 10)
    """
    logger.debug(
        "Calculating next trigger, base=%s, occurrence=%d, count=%s",
        base.isoformat(),
        occurrence_index,
        rule.count,
    )

    if is_exhausted(rule, occurrence_index):
        logger.debug("All %d occurrences done", rule.count)
        return None

    if rule.before is not None and (rule.before.tzinfo is None) != (base.tzinfo is None):
        logger.warning(
            "Cut-off %s and base %s mix naive and aware datetimes",
            rule.before.isoformat(),
            base.isoformat(),
        )
        return None

    if first_weekday is None:
        first_weekday = notify_settings.FIRST_WEEKDAY
    if max_increments is None:
        max_increments = notify_settings.MAX_INCREMENTS

    try:
        candidate, unit = apply_rule(rule, Candidate.from_instant(base, first_weekday))
        if unit is None:
            logger.debug("Rule pins no calendar field, nothing to trigger")
            return None

        # A pin can land at or before the base (09:10 for minute=10 at 09:30),
        # so advance by the coarsest unit and pin the fields again.
        increments = 0
        while candidate.instant <= base:
            if increments >= max_increments:
                logger.warning(
                    "No occurrence after %s within %d increments of one %s",
                    base.isoformat(),
                    max_increments,
                    unit.value,
                )
                return None
            advanced = Candidate.from_instant(add_unit(candidate.instant, unit), first_weekday)
            candidate, _ = apply_rule(rule, advanced)
            increments += 1
    except (OverflowError, ValueError):
        logger.warning("Next trigger after %s is out of the calendar range", base.isoformat())
        return None

    if rule.before is not None and candidate.instant >= rule.before:
        logger.debug(
            "Next trigger %s is not before %s",
            candidate.instant.isoformat(),
            rule.before.isoformat(),
        )
        return None

    return candidate.instant
