"""
Application configuration and environment variables
"""
import os
from dotenv import load_dotenv

from plan91.core import constants

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables"""

    # Practitioner-local calendar
    APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "America/Los_Angeles")

    # Routines
    DEFAULT_TARGET_COMPLETIONS: int = int(
        os.getenv("DEFAULT_TARGET_COMPLETIONS", str(constants.DEFAULT_TARGET_COMPLETIONS))
    )
    RECURRENCE_SEARCH_HORIZON_DAYS: int = int(
        os.getenv("RECURRENCE_SEARCH_HORIZON_DAYS", str(constants.SEARCH_HORIZON_DAYS))
    )

    # Scheduler
    SCHEDULER_ENABLED: bool = _env_bool("SCHEDULER_ENABLED", True)
    MISS_CHECK_HOUR: int = int(os.getenv("MISS_CHECK_HOUR", "0"))
    MISS_CHECK_MINUTE: int = int(os.getenv("MISS_CHECK_MINUTE", "5"))

    # Server
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# Create a global settings instance
settings = Settings()
