from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from notify_trigger.schemas import ScheduledTrigger


class TriggerStore(ABC):
    """
    Interface for scheduled trigger storage.

    Any storage backend must implement these methods.
    """

    @abstractmethod
    async def add(self, scheduled: ScheduledTrigger) -> None:
        """Adds a new scheduled trigger to the store."""
        ...

    @abstractmethod
    async def get(self, trigger_id: str) -> ScheduledTrigger | None:
        """Retrieves a specific scheduled trigger by ID."""
        ...

    @abstractmethod
    async def update(self, scheduled: ScheduledTrigger) -> None:
        """Replaces an existing scheduled trigger."""
        ...

    @abstractmethod
    async def remove(self, trigger_id: str) -> bool:
        """Removes a trigger. Returns True if found and removed."""
        ...

    @abstractmethod
    async def get_all(self) -> list[ScheduledTrigger]:
        """Returns all triggers currently in the store."""
        ...

    @abstractmethod
    async def get_due(self, now: datetime) -> list[ScheduledTrigger]:
        """Returns enabled triggers whose next_fire_time <= now."""
        ...
