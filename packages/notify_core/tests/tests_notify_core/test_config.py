import pytest
from notify_core import NotifySettings


class TestNotifySettings:
    def test_defaults(self):
        """By default, weeks start on Monday and logs go to stdout only."""
        settings = NotifySettings()
        assert settings.LOG_LEVEL == "INFO"
        assert settings.LOG_FILE is None
        assert settings.LOG_MAX_BYTES == 10_485_760
        assert settings.LOG_BACKUP_COUNT == 10
        assert settings.FIRST_WEEKDAY == 0
        assert settings.MAX_INCREMENTS == 1000

    @pytest.mark.parametrize("weekday", [-1, 7, 42])
    def test_first_weekday_out_of_range(self, weekday):
        with pytest.raises(ValueError, match="FIRST_WEEKDAY must be between"):
            NotifySettings(FIRST_WEEKDAY=weekday)

    def test_max_increments_must_be_positive(self):
        with pytest.raises(ValueError, match="MAX_INCREMENTS must be positive"):
            NotifySettings(MAX_INCREMENTS=0)

    def test_sunday_first_weekday_accepted(self):
        assert NotifySettings(FIRST_WEEKDAY=6).FIRST_WEEKDAY == 6

    def test_env_variable_overrides(self, monkeypatch):
        """Environment variables override the defaults."""
        monkeypatch.setenv("FIRST_WEEKDAY", "6")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("MAX_INCREMENTS", "50")

        settings = NotifySettings()
        assert settings.FIRST_WEEKDAY == 6
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.MAX_INCREMENTS == 50

    def test_singleton_instance(self):
        from notify_core.config import notify_settings

        assert isinstance(notify_settings, NotifySettings)
