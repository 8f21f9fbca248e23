"""Configuration loading for the rent ledger service.

Loads settings from .env file and environment variables with sensible defaults.
Validates values and provides clear error messages.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class LedgerConfig:
    """Configuration for the rent ledger API and scheduler."""

    billing_timezone: str = "Africa/Nairobi"
    """IANA timezone that decides which billing month "today" belongs to"""

    rent_due_day: int = 5
    """Day of the month rent falls due"""

    generation_hour: int = 0
    """Hour (billing timezone) of the daily generation run"""

    generation_minute: int = 0
    """Minute of the daily generation run"""

    generation_time_limit_seconds: int = 300
    """Upper bound for one generation run; unfinished tenants wait for the next run"""

    scheduler_enabled: bool = True
    """Start the daily scheduler together with the API"""

    log_file: str = "logs/server.log"
    """Path to log file (default: logs/server.log)"""

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.billing_timezone)


def _int_env(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if not minimum <= value <= maximum:
        raise ValueError(f"{name} must be between {minimum} and {maximum}, got {value}")
    return value


def load_config() -> LedgerConfig:
    """
    Load configuration from .env file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (BILLING_TIMEZONE, RENT_DUE_DAY, etc.)
    2. .env file in project root
    3. Default values

    Returns:
        LedgerConfig with all settings

    Raises:
        ValueError: If a value is malformed or out of range

    Example:
        Create .env file:
        ```
        BILLING_TIMEZONE=Africa/Nairobi
        RENT_DUE_DAY=5
        ```

        Then call:
        ```
        config = load_config()
        ```
    """
    # Load .env file from project root
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    billing_timezone = os.getenv("BILLING_TIMEZONE", "Africa/Nairobi").strip()
    try:
        ZoneInfo(billing_timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(
            f"BILLING_TIMEZONE {billing_timezone!r} is not a known IANA timezone"
        ) from e

    return LedgerConfig(
        billing_timezone=billing_timezone,
        rent_due_day=_int_env("RENT_DUE_DAY", 5, 1, 28),
        generation_hour=_int_env("GENERATION_HOUR", 0, 0, 23),
        generation_minute=_int_env("GENERATION_MINUTE", 0, 0, 59),
        generation_time_limit_seconds=_int_env("GENERATION_TIME_LIMIT_SECONDS", 300, 1, 86400),
        scheduler_enabled=os.getenv("SCHEDULER_ENABLED", "true").strip().lower() in TRUE_VALUES,
        log_file=os.getenv("LOG_FILE", "logs/server.log"),
    )
