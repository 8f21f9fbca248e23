"""Unit tests for configuration loading.

Tests defaults, environment overrides, and validation error messages.
"""

from zoneinfo import ZoneInfo

import pytest

from src.services.config import LedgerConfig, load_config

CONFIG_VARS = (
    "BILLING_TIMEZONE",
    "RENT_DUE_DAY",
    "GENERATION_HOUR",
    "GENERATION_MINUTE",
    "GENERATION_TIME_LIMIT_SECONDS",
    "SCHEDULER_ENABLED",
    "LOG_FILE",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No config variables set and no .env file in the working directory."""
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults(self, clean_env):
        config = load_config()
        assert config == LedgerConfig()
        assert config.billing_timezone == "Africa/Nairobi"
        assert config.rent_due_day == 5
        assert config.generation_time_limit_seconds == 300
        assert config.scheduler_enabled is True

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("BILLING_TIMEZONE", "Africa/Kampala")
        clean_env.setenv("RENT_DUE_DAY", "10")
        clean_env.setenv("GENERATION_HOUR", "2")
        clean_env.setenv("GENERATION_MINUTE", "30")
        clean_env.setenv("SCHEDULER_ENABLED", "false")

        config = load_config()

        assert config.tz == ZoneInfo("Africa/Kampala")
        assert config.rent_due_day == 10
        assert (config.generation_hour, config.generation_minute) == (2, 30)
        assert config.scheduler_enabled is False

    def test_reads_dotenv_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("RENT_DUE_DAY=7\n")
        # Registers the variable with monkeypatch so the value load_dotenv sets is removed afterwards
        clean_env.setenv("RENT_DUE_DAY", "")
        clean_env.delenv("RENT_DUE_DAY")
        assert load_config().rent_due_day == 7

    def test_unknown_timezone(self, clean_env):
        """Test that an unknown timezone raises ValueError with a clear message."""
        clean_env.setenv("BILLING_TIMEZONE", "Mars/Olympus_Mons")
        with pytest.raises(ValueError, match="not a known IANA timezone"):
            load_config()

    @pytest.mark.parametrize("value", ["0", "29", "-1"])
    def test_due_day_out_of_range(self, clean_env, value):
        clean_env.setenv("RENT_DUE_DAY", value)
        with pytest.raises(ValueError, match="RENT_DUE_DAY must be between 1 and 28"):
            load_config()

    def test_non_integer_hour(self, clean_env):
        clean_env.setenv("GENERATION_HOUR", "midnight")
        with pytest.raises(ValueError, match="GENERATION_HOUR must be an integer"):
            load_config()

    def test_blank_value_uses_default(self, clean_env):
        clean_env.setenv("GENERATION_TIME_LIMIT_SECONDS", "  ")
        assert load_config().generation_time_limit_seconds == 300
