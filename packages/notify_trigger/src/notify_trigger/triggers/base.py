from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


class Trigger(ABC):
    """
    Abstract base class for recurring triggers.

    A trigger remembers how many occurrences it has produced so callers can
    tell a terminal occurrence (cancel it) from one that repeats (clear it).
    """

    def __init__(self, before: datetime | None = None, occurrence: int = 0) -> None:
        self.before = before
        self.occurrence = occurrence

    @abstractmethod
    def calculate_next(self, base: datetime) -> datetime | None: ...

    @abstractmethod
    def is_last_occurrence(self) -> bool: ...

    def next_trigger(self, base: datetime) -> datetime | None:
        """
        Calculates the next occurrence and counts it when there is one.

        Occurrences at or after ``before`` are dropped, whatever the subclass
        computed.
        """
        next_fire = self.calculate_next(base)
        if next_fire is None or not self.is_within_before(next_fire):
            return None
        self.occurrence += 1
        return next_fire

    def is_within_before(self, instant: datetime) -> bool:
        return self.before is None or instant < self.before

    def __eq__(self, other: object) -> bool:
        if isinstance(other, self.__class__):
            return self.__dict__ == other.__dict__
        return False

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, tuple(sorted(self.__dict__.items()))))

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self.__dict__.items())
        return f"{self.__class__.__name__}({params})"
