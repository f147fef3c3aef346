"""MatchTrigger - Fires whenever the calendar matches a recurrence rule."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..resolver import compute_next, is_exhausted
from .base import Trigger

if TYPE_CHECKING:
    from datetime import datetime

    from ..schemas import RecurrenceRule


class MatchTrigger(Trigger):
    """
    Trigger that fires on every instant matching the pinned calendar fields.

    Examples:
        >>> # Every day at 09:30, five times
        >>> trigger = MatchTrigger(RecurrenceRule(hour=9, minute=30, count=5))
        >>> first = trigger.next_trigger(datetime(2026, 10, 18, 12, 0))
        >>> first
        datetime.datetime(2026, 10, 19, 9, 30)
        >>> trigger.occurrence
        1

    Args:
        rule: Calendar constraints, count and ``before`` window.
        occurrence: Occurrences already produced, when restoring a trigger.
        first_weekday: Weekday starting a calendar week. Defaults to settings.
    """

    def __init__(
        self,
        rule: RecurrenceRule,
        occurrence: int = 0,
        first_weekday: int | None = None,
    ) -> None:
        super().__init__(before=rule.before, occurrence=occurrence)
        self.rule = rule
        self.first_weekday = first_weekday

    def is_last_occurrence(self) -> bool:
        return is_exhausted(self.rule, self.occurrence)

    def calculate_next(self, base: datetime) -> datetime | None:
        return compute_next(
            self.rule,
            base,
            self.occurrence,
            first_weekday=self.first_weekday,
        )
