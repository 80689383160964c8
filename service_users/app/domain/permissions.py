"""
Capability-based permission gate.

Routes name a ``Capability``; an injected ``PermissionEvaluator`` decides
whether the authenticated caller holds it. The default evaluator grants
capabilities through roles and restricts ``view_own_record`` to the
caller's own id unless the caller may also list users.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Protocol, TYPE_CHECKING, Union

from fastapi import Depends, Request

from shared.errors import AuthorizationError
from shared.logging import get_logger
from .auth_middleware import AuthContext, AuthMiddleware

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class Capability(str, Enum):
    """Privileges a route can require."""
    VIEW_USERS = "view_users"
    VIEW_OWN_RECORD = "view_own_record"


DEFAULT_ROLE_CAPABILITIES: Dict[str, FrozenSet[Capability]] = {
    "admin": frozenset({Capability.VIEW_USERS, Capability.VIEW_OWN_RECORD}),
    "manager": frozenset({Capability.VIEW_USERS, Capability.VIEW_OWN_RECORD}),
    "user": frozenset({Capability.VIEW_OWN_RECORD}),
}


@dataclass(frozen=True)
class PermissionDecision:
    """Outcome of a permission check."""
    allowed: bool
    reason: str


class PermissionEvaluator(Protocol):
    """Decides whether a caller holds a capability for an optional resource."""

    async def evaluate(
        self,
        context: AuthContext,
        capability: Capability,
        resource_id: Optional[str] = None,
    ) -> PermissionDecision:
        ...


class RolePermissionEvaluator:
    """Role table evaluator with an ownership rule for own-record access."""

    def __init__(self, role_capabilities: Optional[Mapping[str, Iterable[Union[str, Capability]]]] = None):
        table = role_capabilities or DEFAULT_ROLE_CAPABILITIES
        # Capability() raises ValueError on unknown names
        self.role_capabilities: Dict[str, FrozenSet[Capability]] = {
            role: frozenset(Capability(name) for name in names)
            for role, names in table.items()
        }
        self.logger = get_logger("users.permissions")

    def capabilities_for(self, roles: Iterable[str]) -> FrozenSet[Capability]:
        granted = set()
        for role in roles:
            granted.update(self.role_capabilities.get(role, ()))
        return frozenset(granted)

    async def evaluate(
        self,
        context: AuthContext,
        capability: Capability,
        resource_id: Optional[str] = None,
    ) -> PermissionDecision:
        granted = self.capabilities_for(context.roles)

        if capability not in granted:
            return PermissionDecision(False, f"Missing capability '{capability.value}'")

        if capability == Capability.VIEW_OWN_RECORD and resource_id is not None:
            if str(resource_id) != context.user_id and Capability.VIEW_USERS not in granted:
                return PermissionDecision(False, "Access restricted to own record")

        return PermissionDecision(True, f"Capability '{capability.value}' granted")


class PermissionGate:
    """Builds per-route FastAPI dependencies that enforce a capability."""

    def __init__(
        self,
        authenticator: AuthMiddleware,
        evaluator: PermissionEvaluator,
        *,
        metrics: Optional["MetricsCollector"] = None,
        resource_param: str = "id",
    ):
        self.authenticator = authenticator
        self.evaluator = evaluator
        self.metrics = metrics
        self.resource_param = resource_param
        self.logger = get_logger("users.permission_gate")

    def require(self, capability: Union[str, Capability]) -> Callable:
        """Return a dependency that raises AuthorizationError unless the caller holds capability."""
        capability = Capability(capability)

        async def check_permission(
            request: Request,
            context: AuthContext = Depends(self.authenticator),
        ) -> AuthContext:
            resource_id = request.path_params.get(self.resource_param)
            decision = await self.evaluator.evaluate(context, capability, resource_id)

            if self.metrics:
                self.metrics.increment_counter(
                    "permission_checks_total",
                    capability=capability.value,
                    decision="allow" if decision.allowed else "deny",
                )

            if not decision.allowed:
                self.logger.warning(
                    "Permission denied",
                    user_id=context.user_id,
                    capability=capability.value,
                    resource_id=resource_id,
                    reason=decision.reason,
                )
                raise AuthorizationError(
                    decision.reason,
                    details={"capability": capability.value},
                )

            return context

        check_permission.__name__ = f"require_{capability.value}"
        return check_permission
