"""
Environment-driven settings shared by the API and the jobs.

Values come from environment variables, then ``.env``, then the defaults
below. Application settings subclass ``BaseAppSettings``.

Example:
    from common.config import BaseAppSettings

    class Settings(BaseAppSettings):
        SESSION_COOKIE_NAME: str = "schoolflow_session"

    settings = Settings()
    settings.MONGODB_URI
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    """
    Process-level settings: database, server, CORS and logging.
    """

    # ==========================================================================
    # Database
    # ==========================================================================
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "schoolflow"
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    # ==========================================================================
    # Server
    # ==========================================================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development | staging | production
    LOG_LEVEL: str = "INFO"

    # Session cookies need an explicit origin list; "*" cannot carry credentials
    CORS_ORIGINS: str = "http://localhost:3000"
    CORS_ALLOW_CREDENTIALS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=True,
    )

    def get_cors_origins(self) -> List[str]:
        """CORS_ORIGINS as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    def get_log_level(self) -> str:
        """Effective log level; DEBUG forces debug output."""
        if self.DEBUG:
            return "DEBUG"
        return self.LOG_LEVEL.upper()
