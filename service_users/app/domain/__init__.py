"""
Request gating for the user routes.

Includes the authentication gate applied to every route and the
capability-based permission gate applied per route.
"""

from .auth_middleware import AuthContext, AuthMiddleware
from .permissions import (
    Capability,
    PermissionDecision,
    PermissionEvaluator,
    PermissionGate,
    RolePermissionEvaluator,
)

__all__ = [
    "AuthContext",
    "AuthMiddleware",
    "Capability",
    "PermissionDecision",
    "PermissionEvaluator",
    "PermissionGate",
    "RolePermissionEvaluator",
]
