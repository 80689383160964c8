"""Request handlers delegating to downstream services."""

from .user_controller import UserController

__all__ = ["UserController"]
