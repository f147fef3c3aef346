"""
Trigger manager.

Keeps scheduled triggers in a store and moves each one forward when it
fires. Occurrence counters are only changed while holding the trigger's own
lock, so two fired instances of one trigger can never race on its counter.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from notify_core.config import NotifySettings, notify_settings
from notify_core.logging import scoped_trigger

from .resolver import compute_next, is_exhausted
from .schemas import RecurrenceRule, ScheduledTrigger
from .stores.memory import MemoryTriggerStore

if TYPE_CHECKING:
    from datetime import datetime

    from .stores.base import TriggerStore

logger = logging.getLogger(__name__)


class TriggerManager:
    """
    Schedules recurring triggers and handles their fired instances.

    Examples:
        >>> manager = TriggerManager()
        >>> rule = RecurrenceRule(hour=9, count=2)
        >>> scheduled = await manager.schedule("standup", rule, now)
        >>> # ... the notification fires and the user dismisses it ...
        >>> await manager.acknowledge("standup")
    """

    def __init__(
        self,
        store: TriggerStore | None = None,
        settings: NotifySettings | None = None,
    ) -> None:
        """
        Args:
            store: Trigger storage backend. Defaults to MemoryTriggerStore.
            settings: Calendar settings. Defaults to the shared notify_settings.
        """
        self.store = store or MemoryTriggerStore()
        self.settings = settings or notify_settings
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _locked(self, trigger_id: str) -> AsyncIterator[None]:
        """
        Holds the lock of one trigger.

        A lock is dropped once no task holds or waits for it, so callers
        arriving while it is in use always queue on the same lock.
        """
        lock = self._locks.setdefault(trigger_id, asyncio.Lock())
        self._lock_users[trigger_id] = self._lock_users.get(trigger_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[trigger_id] -= 1
            if not self._lock_users[trigger_id]:
                del self._lock_users[trigger_id]
                del self._locks[trigger_id]

    def _next_after(
        self, rule: RecurrenceRule, base: datetime, occurrence: int
    ) -> datetime | None:
        return compute_next(
            rule,
            base,
            occurrence,
            first_weekday=self.settings.FIRST_WEEKDAY,
            max_increments=self.settings.MAX_INCREMENTS,
        )

    async def schedule(
        self, trigger_id: str, rule: RecurrenceRule, anchor: datetime
    ) -> ScheduledTrigger | None:
        """
        Registers a rule and computes its first occurrence after ``anchor``.

        Returns:
            The stored trigger, or None when the rule never fires.

        Raises:
            ValueError: If ``trigger_id`` is already scheduled.
        """
        async with self._locked(trigger_id):
            with scoped_trigger(trigger_id):
                next_fire = self._next_after(rule, anchor, 0)
                if next_fire is None:
                    logger.info("Rule %r never fires, not scheduled", rule)
                    return None

                scheduled = ScheduledTrigger(
                    trigger_id=trigger_id,
                    rule=rule,
                    occurrence=1,
                    next_fire_time=next_fire,
                )
                await self.store.add(scheduled)
                logger.info("Scheduled first occurrence at %s", next_fire.isoformat())
                return scheduled

    async def acknowledge(self, trigger_id: str) -> ScheduledTrigger | None:
        """
        Handles a fired occurrence.

        The last occurrence of a bounded rule cancels the trigger. Any other
        occurrence is cleared and the trigger is rescheduled from the instant
        it fired at, or removed when the rule has no further instant.

        Returns:
            The rescheduled trigger, or None when it was removed or unknown.
        """
        async with self._locked(trigger_id):
            with scoped_trigger(trigger_id):
                scheduled = await self.store.get(trigger_id)
                if scheduled is None:
                    logger.warning("Acknowledged unknown trigger")
                    return None

                if is_exhausted(scheduled.rule, scheduled.occurrence):
                    await self.store.remove(trigger_id)
                    logger.info("Last occurrence fired, trigger cancelled")
                    return None

                next_fire = self._next_after(
                    scheduled.rule, scheduled.next_fire_time, scheduled.occurrence
                )
                if next_fire is None:
                    await self.store.remove(trigger_id)
                    logger.info("No occurrence left, trigger removed")
                    return None

                updated = scheduled.model_copy(
                    update={
                        "occurrence": scheduled.occurrence + 1,
                        "next_fire_time": next_fire,
                    }
                )
                await self.store.update(updated)
                logger.debug("Rescheduled at %s", next_fire.isoformat())
                return updated

    async def cancel(self, trigger_id: str) -> bool:
        """Removes a trigger. Returns True if it was scheduled."""
        async with self._locked(trigger_id):
            with scoped_trigger(trigger_id):
                removed = await self.store.remove(trigger_id)
                if removed:
                    logger.info("Trigger cancelled")
                return removed

    async def due(self, now: datetime) -> list[ScheduledTrigger]:
        """Returns the triggers that should be delivered at ``now``."""
        return await self.store.get_due(now)
