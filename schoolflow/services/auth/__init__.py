"""Auth services."""

from schoolflow.services.auth.token_hasher import TokenHasher
from schoolflow.services.auth.device_detector import DeviceDetector, DeviceInfo, parse_user_agent
from schoolflow.services.auth.ip_utils import extract_ip_address
from schoolflow.services.auth.session_store import SessionStore
from schoolflow.services.auth.session_manager import SessionManager, resolve_request_session
from schoolflow.services.auth.principal_service import PrincipalService
from schoolflow.services.auth.login_history import LoginHistoryService

__all__ = [
    "TokenHasher",
    "DeviceDetector",
    "DeviceInfo",
    "parse_user_agent",
    "extract_ip_address",
    "SessionStore",
    "SessionManager",
    "resolve_request_session",
    "PrincipalService",
    "LoginHistoryService",
]
