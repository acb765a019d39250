from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Civil time used for "today" and for slot times
    TIMEZONE: str = "Europe/Amsterdam"

    # Redis settings (empty URL means in-memory storage)
    REDIS_URL: str | None = None
    REDIS_KEY_PREFIX: str = "bootcamp"
    REDIS_MAX_CONNECTIONS: int = 10

    # =================================================================
    # SESSION SETTINGS
    # =================================================================
    SESSION_LIMIT: int | None = None
    ENABLE_SCHEDULES: bool = True
    EARLY_SLOT_CUTOFF_HOUR: int = 12  # tomorrow's slots before noon are created a day early

    # Reconcile job
    RECONCILE_INTERVAL_MINUTES: int = 60
    RUN_SCHEDULER_IN_PROCESS: bool = True

    HTTP_PORT: int = 8080

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,  # SESSION_LIMIT= means unset
    )

    def tzinfo(self) -> ZoneInfo:
        """Reference timezone for calendar dates."""
        return ZoneInfo(self.TIMEZONE)

    def uses_redis(self) -> bool:
        return bool(self.REDIS_URL and self.REDIS_URL.strip())

    def session_limit(self) -> int | None:
        """
        Global capacity default for new sessions.
        Zero or negative values are treated as "no limit".
        """
        if self.SESSION_LIMIT is None or self.SESSION_LIMIT <= 0:
            return None
        return self.SESSION_LIMIT


settings = Settings()
