"""Pydantic schemas/data contracts for recurring triggers."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class RecurrenceRule(BaseModel):
    """Calendar-field constraints of a recurring trigger.

    Every field is optional. A set field pins that calendar field when the
    next occurrence is computed; an unset field is inherited from the base
    instant or reset as a side effect of pinning a coarser field.

    Values are passed through without range checks: ``month=13`` is accepted
    and rolls over into January of the following year.

    Examples:
        - minute=10: every hour at :10
        - hour=9, minute=30: every day at 09:30
        - weekday=0, hour=8: every Monday at 08:00 (0 = Monday, 6 = Sunday)
        - week_of_month=1, weekday=2: Wednesday of the first week of each month
        - day=27, month=10, count=3: Oct 27th, three times
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    CALENDAR_FIELDS: ClassVar[tuple[str, ...]] = (
        "minute",
        "hour",
        "day",
        "weekday",
        "week_of_month",
        "week",
        "month",
    )

    minute: int | None = None
    hour: int | None = None
    day: int | None = None
    weekday: int | None = None
    week_of_month: int | None = Field(default=None, alias="weekOfMonth")
    week: int | None = None
    month: int | None = None
    count: int | None = None
    before: datetime | None = None

    def is_set(self, field: str) -> bool:
        return getattr(self, field) is not None

    @property
    def is_empty(self) -> bool:
        """True when no calendar field is pinned, so the rule never fires."""
        return not any(self.is_set(field) for field in self.CALENDAR_FIELDS)

    @property
    def is_bounded(self) -> bool:
        return self.count is not None and self.count > 0

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "RecurrenceRule":
        """
        Builds a rule from a notification trigger payload.

        The payload has the shape ``{"every": {...}, "count": n, "before": t}``
        where ``every`` holds the calendar fields (``weekOfMonth`` or
        ``week_of_month``) and ``before`` is a datetime, an ISO string or a
        unix timestamp.

        Raises:
            TypeError: If ``every`` is not a mapping of calendar fields.
            pydantic.ValidationError: On unknown fields or non-integer values.
        """
        every = options.get("every") or {}
        if not isinstance(every, Mapping):
            msg = f"trigger 'every' must be a mapping, got {type(every).__name__}"
            raise TypeError(msg)
        return cls.model_validate(
            {**every, "count": options.get("count"), "before": options.get("before")}
        )


class ScheduledTrigger(BaseModel):
    """A rule registered for delivery together with its progress."""

    trigger_id: str
    rule: RecurrenceRule
    occurrence: int = 0
    next_fire_time: datetime
    enabled: bool = True
