from .base import TriggerStore
from .memory import MemoryTriggerStore

__all__ = ["MemoryTriggerStore", "TriggerStore"]
