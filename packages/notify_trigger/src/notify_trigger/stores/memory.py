from __future__ import annotations

from datetime import datetime

from ..schemas import ScheduledTrigger
from .base import TriggerStore


class MemoryTriggerStore(TriggerStore):
    """
    In-memory trigger store implementation.

    Triggers live in a dictionary and are lost when the process stops.

    Examples:
        >>> store = MemoryTriggerStore()
        >>> await store.add(scheduled)
        >>> retrieved = await store.get("daily-standup")
    """

    def __init__(self) -> None:
        self._triggers: dict[str, ScheduledTrigger] = {}

    async def add(self, scheduled: ScheduledTrigger) -> None:
        """
        Adds a new scheduled trigger.

        Raises:
            ValueError: If a trigger with the same trigger_id already exists.
        """
        if scheduled.trigger_id in self._triggers:
            raise ValueError(f"Trigger '{scheduled.trigger_id}' already exists")
        self._triggers[scheduled.trigger_id] = scheduled

    async def get(self, trigger_id: str) -> ScheduledTrigger | None:
        return self._triggers.get(trigger_id)

    async def update(self, scheduled: ScheduledTrigger) -> None:
        """
        Replaces a stored trigger with the same trigger_id.

        Raises:
            ValueError: If the trigger_id does not exist in the store.
        """
        if scheduled.trigger_id not in self._triggers:
            raise ValueError(f"Trigger '{scheduled.trigger_id}' not found")
        self._triggers[scheduled.trigger_id] = scheduled

    async def remove(self, trigger_id: str) -> bool:
        if trigger_id not in self._triggers:
            return False
        del self._triggers[trigger_id]
        return True

    async def get_all(self) -> list[ScheduledTrigger]:
        return list(self._triggers.values())

    async def get_due(self, now: datetime) -> list[ScheduledTrigger]:
        """
        Returns the triggers that should fire.

        A trigger is due if it is enabled and its next_fire_time is <= now.
        Results are ordered by next_fire_time, earliest first.
        """
        due = [
            scheduled
            for scheduled in self._triggers.values()
            if scheduled.enabled and scheduled.next_fire_time <= now
        ]
        return sorted(due, key=lambda scheduled: scheduled.next_fire_time)
