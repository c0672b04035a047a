"""Access logging."""

from schoolflow.services.logging.access_logger import AccessLogger, build_access_event

__all__ = [
    "AccessLogger",
    "build_access_event",
]
