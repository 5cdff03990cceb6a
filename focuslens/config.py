from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # =================================================================
    # SCORING SETTINGS
    # =================================================================
    # Strict mode raises on a non-finite score instead of substituting a fallback
    SCORE_STRICT_NUMERICS: bool = True
    SCORE_FALLBACK_NO_ACTIVITY: float = 2.0
    SCORE_FALLBACK_WITH_ACTIVITY: float = 4.0

    # =================================================================
    # ANOMALY SETTINGS
    # =================================================================
    ANOMALY_DEFAULT_THRESHOLD: float = 2.0

    # =================================================================
    # TREND SETTINGS
    # =================================================================
    TREND_TIMEZONE: str = "UTC"
    TREND_MAX_CONCURRENCY: int = 4
    TREND_DAY_TIMEOUT_SECONDS: float = 30.0
    TREND_ROLLING_WINDOW_DAYS: int = 7
    # Longest date range a single trend request may cover
    TREND_MAX_RANGE_DAYS: int = 366
    TEAM_SCORE_WINDOW_DAYS: int = 7

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def trend_tzinfo(self) -> ZoneInfo:
        """Timezone used to cut calendar days into scoring windows."""
        return ZoneInfo(self.TREND_TIMEZONE)

    def get_trend_config(self) -> dict:
        """
        Get trend aggregation configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "max_concurrency": self.TREND_MAX_CONCURRENCY,
            "day_timeout": self.TREND_DAY_TIMEOUT_SECONDS,
            "rolling_window": self.TREND_ROLLING_WINDOW_DAYS,
        }

        if self.environment == "development":
            # Keep local runs light on the activity collaborators
            config.update(
                {
                    "max_concurrency": min(self.TREND_MAX_CONCURRENCY, 2),
                }
            )

        return config


settings = Settings()
