"""Configuration settings for the spaced-repetition core."""
import os
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

# Scheduler defaults (SM-2 family)
INITIAL_EASE_FACTOR = 2.5
MINIMUM_EASE_FACTOR = 1.3
GRADUATING_INTERVALS = [1, 6]  # days for the first and second successful review


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///lugat.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class SchedulerSettings:
    """Review scheduling settings."""
    initial_ease_factor: float = INITIAL_EASE_FACTOR
    minimum_ease_factor: float = MINIMUM_EASE_FACTOR
    easy_bonus: float = 0.1
    medium_penalty: float = 0.08
    hard_penalty: float = 0.2
    graduating_intervals: list[int] = field(default_factory=lambda: list(GRADUATING_INTERVALS))


@dataclass
class SelectionSettings:
    """Review selection settings."""
    overdue_weight: int = int(os.getenv("OVERDUE_WEIGHT", "10"))


@dataclass
class SessionSettings:
    """Flashcard session registry settings."""
    ttl_seconds: int = int(os.getenv("SESSION_TTL_SECONDS", "86400"))
    max_sessions: int = int(os.getenv("MAX_SESSIONS", "1000"))


@dataclass
class StatsSettings:
    """Dashboard statistics settings."""
    streak_lookback_days: int = int(os.getenv("STREAK_LOOKBACK_DAYS", "30"))
    timezone: str = os.getenv("STATS_TIMEZONE", "UTC")


@dataclass
class MonitoringSettings:
    """Prometheus monitoring settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_scheduler_settings() -> SchedulerSettings:
    """Get scheduler settings."""
    return SchedulerSettings()


def get_selection_settings() -> SelectionSettings:
    """Get selection settings."""
    return SelectionSettings()


def get_session_settings() -> SessionSettings:
    """Get session settings."""
    return SessionSettings()


def get_stats_settings() -> StatsSettings:
    """Get stats settings."""
    return StatsSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    scheduler: SchedulerSettings = field(default_factory=get_scheduler_settings)
    selection: SelectionSettings = field(default_factory=get_selection_settings)
    session: SessionSettings = field(default_factory=get_session_settings)
    stats: StatsSettings = field(default_factory=get_stats_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone used for calendar-day boundaries."""
        return ZoneInfo(self.stats.timezone)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        scheduler = self.scheduler
        if scheduler.minimum_ease_factor <= 0:
            raise ValueError("Minimum ease factor must be positive")

        if scheduler.initial_ease_factor < scheduler.minimum_ease_factor:
            raise ValueError("Initial ease factor cannot be lower than the minimum ease factor")

        if len(scheduler.graduating_intervals) != 2 or min(scheduler.graduating_intervals) < 1:
            raise ValueError("Graduating intervals must be two positive day counts")

        if self.selection.overdue_weight < 0:
            raise ValueError("OVERDUE_WEIGHT cannot be negative")

        if self.session.ttl_seconds < 1:
            raise ValueError("SESSION_TTL_SECONDS must be positive")

        if self.session.max_sessions < 1:
            raise ValueError("MAX_SESSIONS must be positive")

        if self.stats.streak_lookback_days < 1:
            raise ValueError("STREAK_LOOKBACK_DAYS must be positive")

        try:
            ZoneInfo(self.stats.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"STATS_TIMEZONE is not a known timezone: {self.stats.timezone}") from e


# Create global settings instance
settings = Settings()
settings.validate()
