"""
Bill sync settings.

Values come from the environment or a .env file in the working directory.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing at invocation time."""


class Settings(BaseSettings):
    """
    Sync configuration (see .env.example).

    Credentials are optional at import time so that tests and
    diagnostics can load the module; call require() before syncing.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ========================================================================
    # Database
    # ========================================================================
    MONGODB_URI: Optional[str] = None
    MONGODB_DATABASE: str = "nysync"

    # ========================================================================
    # External APIs
    # ========================================================================

    # NYS Open Legislation API (get key at: https://legislation.nysenate.gov/)
    NYS_LEGISLATION_API_KEY: Optional[str] = None

    HTTP_TIMEOUT_SECONDS: float = 30.0

    # ========================================================================
    # Sync behaviour
    # ========================================================================
    REQUEST_DELAY_SECONDS: float = 0.1   # between bill detail fetches
    PAGE_DELAY_SECONDS: float = 0.2      # between listing pages
    FULL_SYNC_MAX_BILLS: int = 500       # per full-sync invocation
    RESYNC_BATCH_SIZE: int = 50
    RESYNC_TIME_BUDGET_SECONDS: float = 50.0

    # ========================================================================
    # Logging
    # ========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ========================================================================
    # Application
    # ========================================================================
    APP_NAME: str = "NYS Bill Sync"
    APP_VERSION: str = "0.1.0"

    # Environment (development, staging, production)
    ENVIRONMENT: str = "development"

    def require(self, *names: str) -> None:
        """
        Ensure the named settings are present.

        Raises:
            ConfigurationError: listing every missing setting
        """
        missing = [name for name in names if not getattr(self, name, None)]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )


# Singleton instance
settings = Settings()
