"""
Route tables for the User Access API.
"""

from .users import RouteDescriptor, build_user_router, register_routes, user_route_table

__all__ = [
    "RouteDescriptor",
    "build_user_router",
    "register_routes",
    "user_route_table",
]
