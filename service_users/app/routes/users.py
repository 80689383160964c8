"""
User routes.

Every route runs the same fixed chain: authentication (router-wide),
permission check, optional response-cache lookup, then the handler.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple

from fastapi import APIRouter, Depends, Request

from ..caching.cache_keys import user_by_id_key, user_list_key
from ..caching.response_cache import CachePolicy, ResponseCache
from ..controllers.user_controller import UserController
from ..domain.auth_middleware import AuthMiddleware
from ..domain.permissions import Capability, PermissionGate
from ..models import SuccessEnvelope
from ..services.credit_score_service import CreditScoreService

Handler = Callable[[Request], Awaitable[Any]]

USERS_PREFIX = "/api/users"

_ID_PARAMETER = {"in": "path", "name": "id", "required": True, "schema": {"type": "string"}, "description": "User ID"}
_LIST_PARAMETERS = [
    {"in": "query", "name": "includeDeleted", "schema": {"type": "boolean", "default": False}},
    {"in": "query", "name": "page", "schema": {"type": "integer", "default": 1, "minimum": 1}},
    {"in": "query", "name": "limit", "schema": {"type": "integer", "default": 20, "minimum": 1, "maximum": 100}},
]
_COMMON_RESPONSES: Dict[int, Dict[str, str]] = {
    401: {"description": "Unauthorized - User not authenticated"},
    403: {"description": "Forbidden - User doesn't have required permissions"},
}


@dataclass(frozen=True)
class RouteDescriptor:
    """One route: method, path, required capability, handler and optional cache policy."""

    method: str
    path: str
    name: str
    capability: Capability
    handler: Handler
    cache_policy: Optional[CachePolicy] = None
    summary: str = ""
    description: str = ""
    parameters: Tuple[Dict[str, Any], ...] = ()
    responses: Dict[int, Dict[str, str]] = field(default_factory=dict)


def _list_query(request: Request) -> Dict[str, Any]:
    query = request.query_params
    return {
        "include_deleted": query.get("includeDeleted") == "true",
        "page": query.get("page") or 1,
        "limit": query.get("limit") or 20,
    }


def user_list_cache_key(request: Request) -> str:
    return user_list_key(**_list_query(request))


def user_by_id_cache_key(request: Request) -> str:
    return user_by_id_key(request.path_params["id"])


def user_route_table(
    controller: UserController,
    credit_scores: CreditScoreService,
    *,
    list_ttl: int = 120,
    by_id_ttl: int = 300,
) -> Tuple[RouteDescriptor, ...]:
    """Build the user route table bound to its collaborators."""

    async def get_all_users(request: Request):
        return await controller.get_all_users(**_list_query(request))

    async def get_user_by_id(request: Request):
        return await controller.get_user_by_id(request.path_params["id"])

    async def get_credit_score(request: Request):
        data = await credit_scores.get_credit_score_cached(request.path_params["id"])
        return SuccessEnvelope[Any](data=data)

    return (
        RouteDescriptor(
            method="GET",
            path="",
            name="get_all_users",
            capability=Capability.VIEW_USERS,
            handler=get_all_users,
            cache_policy=CachePolicy(user_list_cache_key, list_ttl),
            summary="Get all users",
            description="Retrieve a list of all users (Admin only)",
            parameters=tuple(_LIST_PARAMETERS),
            responses={**_COMMON_RESPONSES, 400: {"description": "Invalid pagination parameters"}},
        ),
        RouteDescriptor(
            method="GET",
            path="/{id}",
            name="get_user_by_id",
            capability=Capability.VIEW_OWN_RECORD,
            handler=get_user_by_id,
            cache_policy=CachePolicy(user_by_id_cache_key, by_id_ttl),
            summary="Get user by ID",
            description="Retrieve a specific user's details by their ID",
            parameters=(_ID_PARAMETER,),
            responses={**_COMMON_RESPONSES, 404: {"description": "User not found"}},
        ),
        RouteDescriptor(
            method="GET",
            path="/{id}/credit-score",
            name="get_user_credit_score",
            capability=Capability.VIEW_OWN_RECORD,
            handler=get_credit_score,
            summary="Get user credit score",
            description="Retrieve a user's credit score (cached by the scoring service adapter)",
            parameters=(_ID_PARAMETER,),
            responses={
                **_COMMON_RESPONSES,
                404: {"description": "Credit score not found"},
                503: {"description": "Credit score service unavailable"},
            },
        ),
    )


def _make_endpoint(descriptor: RouteDescriptor, cache: ResponseCache) -> Handler:
    if descriptor.cache_policy is None:
        async def endpoint(request: Request):
            return await descriptor.handler(request)
    else:
        async def endpoint(request: Request):
            return await cache.respond(request, descriptor.cache_policy, descriptor.handler, route=descriptor.name)

    endpoint.__name__ = descriptor.name
    return endpoint


def register_routes(
    router: APIRouter,
    descriptors: Iterable[RouteDescriptor],
    gate: PermissionGate,
    cache: ResponseCache,
) -> APIRouter:
    """Attach each descriptor to router with its permission dependency."""
    for descriptor in descriptors:
        openapi_extra = {"parameters": list(descriptor.parameters)} if descriptor.parameters else None
        router.add_api_route(
            descriptor.path,
            _make_endpoint(descriptor, cache),
            methods=[descriptor.method],
            name=descriptor.name,
            summary=descriptor.summary or None,
            description=descriptor.description or None,
            dependencies=[Depends(gate.require(descriptor.capability))],
            responses=descriptor.responses or None,
            openapi_extra=openapi_extra,
        )
    return router


def build_user_router(
    controller: UserController,
    credit_scores: CreditScoreService,
    cache: ResponseCache,
    authenticator: AuthMiddleware,
    gate: PermissionGate,
    *,
    list_ttl: int = 120,
    by_id_ttl: int = 300,
) -> APIRouter:
    """Router for /api/users with authentication applied to every route."""
    router = APIRouter(
        prefix=USERS_PREFIX,
        tags=["Users"],
        dependencies=[Depends(authenticator)],
    )
    descriptors = user_route_table(controller, credit_scores, list_ttl=list_ttl, by_id_ttl=by_id_ttl)
    return register_routes(router, descriptors, gate, cache)
