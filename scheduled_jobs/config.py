"""
Environment configuration for the scheduled job processes.

Values come from the process environment; a .env file in the working
directory is loaded first when present.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Taipei"
# minute hour day month day_of_week; APScheduler numbers weekdays from mon=0,
# so day names are used instead of 1-5
DEFAULT_STOCK_SPEC = "0 15 * * mon-fri"


class ConfigError(Exception):
    """Raised when a required setting is missing or malformed."""
    pass


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Config:
    database_url: str
    finmind_api_token: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    channel_secret: Optional[str] = None
    channel_access_token: Optional[str] = None
    scheduler_timezone: str = DEFAULT_TIMEZONE
    scheduler_stock_spec: str = DEFAULT_STOCK_SPEC
    sync_interval_hours: int = 24
    init_timeout_seconds: int = 30
    db_min_connections: int = 1
    db_max_connections: int = 10
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.database_url:
            raise ConfigError("DATABASE_URL is required")
        if self.sync_interval_hours < 1:
            raise ConfigError("SYNC_INTERVAL_HOURS must be at least 1")
        if self.init_timeout_seconds < 1:
            raise ConfigError("INIT_TIMEOUT_SECONDS must be at least 1")
        if len(self.scheduler_stock_spec.split()) not in (5, 6):
            raise ConfigError(
                f"SCHEDULER_STOCK_SPEC must have 5 or 6 fields, got {self.scheduler_stock_spec!r}"
            )

    @property
    def line_enabled(self) -> bool:
        return bool(self.channel_secret and self.channel_access_token)


def load_config(env_file: Optional[str] = None) -> Config:
    """
    Build a Config from environment variables.

    Args:
        env_file: Optional path to a .env file; defaults to searching for one

    Raises:
        ConfigError: If DATABASE_URL is missing or a value is malformed
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    config = Config(
        database_url=os.getenv('DATABASE_URL', ''),
        finmind_api_token=os.getenv('FINMIND_API_TOKEN') or None,
        telegram_bot_token=os.getenv('TELEGRAM_BOT_TOKEN') or None,
        channel_secret=os.getenv('CHANNEL_SECRET') or None,
        channel_access_token=os.getenv('CHANNEL_ACCESS_TOKEN') or None,
        scheduler_timezone=os.getenv('SCHEDULER_TIMEZONE') or DEFAULT_TIMEZONE,
        scheduler_stock_spec=os.getenv('SCHEDULER_STOCK_SPEC') or DEFAULT_STOCK_SPEC,
        sync_interval_hours=_get_int('SYNC_INTERVAL_HOURS', 24),
        init_timeout_seconds=_get_int('INIT_TIMEOUT_SECONDS', 30),
        db_min_connections=_get_int('DB_MIN_CONNECTIONS', 1),
        db_max_connections=_get_int('DB_MAX_CONNECTIONS', 10),
        log_level=(os.getenv('LOG_LEVEL') or "INFO").upper(),
    )
    logger.info("Configuration loaded")
    return config
