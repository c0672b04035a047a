"""
SchoolFlow API Routers.

All routers are imported here for easy access.
"""

from schoolflow.routers.auth import router as auth_router
from schoolflow.routers.teacher_auth import router as teacher_auth_router
from schoolflow.routers.sessions import router as sessions_router
from schoolflow.routers.logger import router as logger_router

__all__ = [
    "auth_router",
    "teacher_auth_router",
    "sessions_router",
    "logger_router",
]
