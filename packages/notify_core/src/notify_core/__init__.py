from .config import NotifySettings, notify_settings
from .logging import scoped_trigger, setup_logging

__all__ = [
    "NotifySettings",
    "notify_settings",
    "scoped_trigger",
    "setup_logging",
]
