"""
User Access API service.
"""

from typing import Dict, Optional

from shared.base_service import BaseService
from shared.config import ServiceConfig
from .adapters.credit_score_client import CreditScoreClient
from .adapters.user_directory_client import UserDirectoryClient
from .caching.response_cache import ResponseCache
from .controllers.user_controller import UserController
from .domain.auth_middleware import AuthMiddleware
from .domain.permissions import PermissionEvaluator, PermissionGate, RolePermissionEvaluator
from .routes.users import USERS_PREFIX, build_user_router
from .services.credit_score_service import CreditScoreService


class UsersService(BaseService):
    """User Access API service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        cache: Optional[ResponseCache] = None,
        directory_client: Optional[UserDirectoryClient] = None,
        credit_score_client: Optional[CreditScoreClient] = None,
        evaluator: Optional[PermissionEvaluator] = None,
    ):
        super().__init__("users", 8000, config)

        self.cache = cache or ResponseCache(
            self.config.redis_url,
            namespace=self.config.cache_namespace,
            enabled=self.config.cache_enabled,
            socket_timeout=self.config.redis_socket_timeout,
            metrics=self.metrics,
        )
        self.directory_client = directory_client or UserDirectoryClient(self.config.user_directory_url)
        self.credit_score_client = credit_score_client or CreditScoreClient(self.config.credit_score_service_url)

        self.authenticator = AuthMiddleware(
            self.config.jwt_secret,
            self.config.jwt_algorithm,
            issuer=self.config.jwt_issuer,
            audience=self.config.jwt_audience,
        )
        self.evaluator = evaluator or RolePermissionEvaluator(self.config.role_capabilities or None)
        self.permission_gate = PermissionGate(self.authenticator, self.evaluator, metrics=self.metrics)

        self.user_controller = UserController(self.directory_client)
        self.credit_score_service = CreditScoreService(
            self.credit_score_client,
            self.cache,
            ttl_seconds=self.config.credit_score_cache_ttl,
        )

        self.app.include_router(
            build_user_router(
                self.user_controller,
                self.credit_score_service,
                self.cache,
                self.authenticator,
                self.permission_gate,
                list_ttl=self.config.users_list_cache_ttl,
                by_id_ttl=self.config.user_by_id_cache_ttl,
            )
        )

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": self.service_name,
                "message": "User Access API",
                "version": "1.0.0",
                "endpoints": {"users": USERS_PREFIX, "health": "/health", "metrics": "/metrics"},
            }

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.cache.close()

        self.app.state.users_service = self

    async def _check_dependencies(self) -> Dict[str, str]:
        return {
            "redis": "ok" if await self.cache.ping() else "error",
            "user_directory": await self.directory_client.check_health(),
            "credit_score": await self.credit_score_client.check_health(),
        }


def create_app():
    """Create FastAPI application."""
    service = UsersService()
    return service.app


if __name__ == "__main__":
    service = UsersService()
    service.run()
