"""
SchoolFlow Middleware.
"""

from schoolflow.middleware.route_guard import (
    GuardDecision,
    PathKind,
    RouteGuard,
    RouteGuardMiddleware,
    matches_prefix,
    tenant_subdomain,
)

__all__ = [
    "GuardDecision",
    "PathKind",
    "RouteGuard",
    "RouteGuardMiddleware",
    "matches_prefix",
    "tenant_subdomain",
]
