import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar, Token
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Generator, Optional, Union

from .config import NotifySettings, notify_settings

# Id of the trigger whose occurrence is being handled in this context
current_trigger: ContextVar[Optional[str]] = ContextVar("current_trigger", default=None)


class TriggerFormatter(logging.Formatter):
    """
    Formatter that tags records with the current trigger id and enforces UTC.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None):
        super().__init__(fmt, datefmt)
        # Log timestamps are always UTC, whatever zone the triggers use
        self.converter = time.gmtime

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        if datefmt:
            return time.strftime(datefmt, ct)
        return "%s.%03dZ" % (time.strftime("%Y-%m-%d %H:%M:%S", ct), record.msecs)

    def format(self, record: logging.LogRecord) -> str:
        trigger_id = current_trigger.get()
        record.trigger_tag = f"[trigger={trigger_id}] " if trigger_id else ""
        return super().format(record)


def setup_logging(
    settings: Optional[NotifySettings] = None,
    *,
    level: Union[int, str, None] = None,
    log_file: Union[str, Path, None] = None,
    capture_roots: bool = True,
    module_name: str = "notify_trigger",
) -> None:
    """
    Configures console and optional rotating file logging.

    Level, file and rotation come from ``settings`` (the shared
    ``notify_settings`` by default); ``level`` and ``log_file`` override them.

    Args:
        settings: Settings to read ``LOG_*`` values from.
        level: Logging level name or number. Unknown names fall back to INFO.
        log_file: Path to write logs to, in addition to stdout.
        capture_roots: If True, configures the root logger.
                       If False, only configures the ``module_name`` logger.
        module_name: Namespace configured when ``capture_roots`` is False.
    """
    settings = settings or notify_settings
    if level is None:
        level = settings.LOG_LEVEL
    if log_file is None:
        log_file = settings.LOG_FILE
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    target_logger = (
        logging.getLogger() if capture_roots else logging.getLogger(module_name)
    )

    # Reset handlers so tests can reconfigure
    target_logger.handlers.clear()
    target_logger.setLevel(level)

    formatter = TriggerFormatter(
        "%(asctime)s %(levelname)-8s %(trigger_tag)s%(name)s: %(message)s"
    )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    target_logger.addHandler(console)

    if log_file:
        file_path = Path(log_file).resolve()
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=settings.LOG_MAX_BYTES,
                backupCount=settings.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as e:
            # Read-only filesystems keep console logging only
            sys.stderr.write(f"Failed to setup log file: {e}\n")
        else:
            file_handler.setFormatter(formatter)
            target_logger.addHandler(file_handler)

    # A namespaced logger must not duplicate records through the root
    if not capture_roots:
        target_logger.propagate = False


def set_current_trigger(trigger_id: str) -> Token:
    return current_trigger.set(trigger_id)


def reset_current_trigger(token: Token) -> None:
    current_trigger.reset(token)


@contextmanager
def scoped_trigger(trigger_id: str) -> Generator[None, None, None]:
    """
    Tags every record logged inside the block with ``trigger_id``.

    >>> with scoped_trigger("standup"):
    ...     logger.info("Rescheduled")  # [trigger=standup] ...
    """
    token = set_current_trigger(trigger_id)
    try:
        yield
    finally:
        reset_current_trigger(token)
