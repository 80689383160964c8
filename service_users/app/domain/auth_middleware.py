"""
Authentication gate for the user routes.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Set

from fastapi import Request
from jose import JWTError, jwt

from shared.errors import AuthenticationError
from shared.logging import get_logger, set_user_context


@dataclass(frozen=True)
class AuthContext:
    """Authenticated caller derived from a verified bearer token."""

    user_id: str
    roles: FrozenSet[str]
    claims: Dict[str, Any]
    token: str


class AuthMiddleware:
    """Verifies bearer JWTs; usable directly as a FastAPI dependency."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        *,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.logger = get_logger("users.auth_middleware")

    async def __call__(self, request: Request) -> AuthContext:
        return await self.authenticate_request(request)

    async def authenticate_request(self, request: Request) -> AuthContext:
        """Authenticate the request from its Authorization header."""
        existing = getattr(request.state, "auth_context", None)
        if isinstance(existing, AuthContext):
            return existing

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            raise AuthenticationError("Authorization header required")

        if not auth_header.startswith("Bearer "):
            raise AuthenticationError("Invalid authorization header format")

        token = auth_header[7:].strip()
        if not token:
            raise AuthenticationError("Authorization header contained empty bearer token")

        claims = self._decode(token)
        subject = claims.get("sub")
        if subject is None or str(subject) == "":
            raise AuthenticationError("Token missing subject claim")

        context = AuthContext(
            user_id=str(subject),
            roles=frozenset(self._extract_roles(claims)),
            claims=claims,
            token=token,
        )

        request.state.auth_context = context
        set_user_context(context.user_id)
        self.logger.info("Request authenticated", user_id=context.user_id, roles=sorted(context.roles))
        return context

    def _decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as exc:
            self.logger.warning("JWT authentication failed", error=str(exc))
            raise AuthenticationError("Invalid or expired token", details={"error": str(exc)}) from exc

    @staticmethod
    def _extract_roles(claims: Dict[str, Any]) -> Set[str]:
        """Collect roles from `roles`, `role` and Keycloak-style `realm_access`."""
        roles: Set[str] = set()

        direct_roles = claims.get("roles")
        if isinstance(direct_roles, list):
            roles.update(role for role in direct_roles if isinstance(role, str))

        single_role = claims.get("role")
        if isinstance(single_role, str) and single_role:
            roles.add(single_role)

        realm_access = claims.get("realm_access", {})
        if isinstance(realm_access, dict):
            realm_roles = realm_access.get("roles")
            if isinstance(realm_roles, list):
                roles.update(role for role in realm_roles if isinstance(role, str))

        return roles
