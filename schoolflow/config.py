"""
SchoolFlow application settings.

Extends the base settings with session, routing and access-log configuration.
"""

from typing import List

from common.config import BaseAppSettings


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseAppSettings):
    """SchoolFlow-specific settings."""

    # ==========================================================================
    # Session Cookies
    # ==========================================================================
    SESSION_COOKIE_NAME: str = "schoolflow_session"
    TEACHER_SESSION_COOKIE_NAME: str = "schoolflow_teacher_session"
    SESSION_EXPIRE_DAYS: int = 7

    REQUEST_ID_COOKIE_NAME: str = "x-request-id"
    REQUEST_ID_COOKIE_MAX_AGE: int = 60  # seconds

    # ==========================================================================
    # Route Protection
    # ==========================================================================
    API_PREFIX: str = "/api"
    SUPER_ADMIN_PREFIX: str = "/super-admin"
    SCHOOL_ADMIN_PREFIX: str = "/school-admin"
    TEACHER_PREFIX: str = "/teacher"

    LOGIN_PATH: str = "/login"
    TEACHER_LOGIN_PATH: str = "/teacher/login"
    ACCESS_BLOCKED_PATH: str = "/school-admin/access-blocked"

    # Exact paths reachable without a session (comma-separated)
    PUBLIC_PATHS: str = (
        "/,/login,/register,/setup-super-admin,/teacher/login,"
        "/about,/features,/contact,/pricing,"
        "/school-admin/access-blocked,/school-admin/school-suspended,"
        "/school-admin/school-deleted"
    )
    # Path prefixes reachable without a session (comma-separated)
    PUBLIC_PATH_PREFIXES: str = (
        "/static/,/_next/,/docs,/redoc,/openapi.json,/health,/favicon.ico"
    )

    # ==========================================================================
    # Access Logging
    # ==========================================================================
    # Origin the access log is posted to; never derived from a request
    ACCESS_LOG_BASE_URL: str = "http://127.0.0.1:8000"
    ACCESS_LOG_ENABLED: bool = True
    ACCESS_LOG_ENDPOINT: str = "/api/logger"
    ACCESS_LOG_TIMEOUT_SECONDS: float = 2.0

    def get_public_paths(self) -> List[str]:
        """Parse PUBLIC_PATHS into a list."""
        return _split(self.PUBLIC_PATHS)

    def get_public_path_prefixes(self) -> List[str]:
        """Parse PUBLIC_PATH_PREFIXES into a list."""
        return _split(self.PUBLIC_PATH_PREFIXES)

    def session_max_age(self) -> int:
        """Session lifetime in seconds."""
        return self.SESSION_EXPIRE_DAYS * 24 * 60 * 60


# Global settings instance
settings = Settings()
