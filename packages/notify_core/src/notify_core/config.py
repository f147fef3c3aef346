"""
Foundation settings for the notification trigger packages.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotifySettings(BaseSettings):
    """
    Core settings shared by the notify packages.
    Values come from the environment or a local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None
    LOG_MAX_BYTES: int = 10_485_760  # 10MB
    LOG_BACKUP_COUNT: int = 10

    # --- Calendar ---
    # ISO weekday (0 = Monday) that starts a calendar week
    FIRST_WEEKDAY: int = 0
    # Upper bound on increment/re-pin cycles when resolving a next occurrence
    MAX_INCREMENTS: int = 1000

    @model_validator(mode="after")
    def validate_calendar(self) -> "NotifySettings":
        """Rejects calendar settings the resolver cannot work with."""
        if not 0 <= self.FIRST_WEEKDAY <= 6:
            raise ValueError("FIRST_WEEKDAY must be between 0 (Monday) and 6 (Sunday).")
        if self.MAX_INCREMENTS < 1:
            raise ValueError("MAX_INCREMENTS must be positive.")
        return self


# Singleton instance for core use
notify_settings = NotifySettings()
