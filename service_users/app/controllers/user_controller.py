"""
User controller.
"""

from typing import Any, Dict, List, Union

from pydantic import ValidationError as PydanticValidationError

from shared.errors import NotFoundError, ValidationError
from shared.logging import get_logger
from ..adapters.user_directory_client import UserDirectoryClient
from ..models import User, UserListQuery, serialize_users


class UserController:
    """Reads users from the directory and shapes them for the API."""

    def __init__(self, directory: UserDirectoryClient):
        self.directory = directory
        self.logger = get_logger("users.controller")

    async def get_all_users(
        self,
        include_deleted: bool = False,
        page: Union[int, str] = 1,
        limit: Union[int, str] = 20,
    ) -> List[Dict[str, Any]]:
        """Return one page of users."""
        try:
            query = UserListQuery(include_deleted=include_deleted, page=page, limit=limit)
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid pagination parameters",
                details={"errors": [
                    {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
                    for error in exc.errors()
                ]},
            ) from exc

        users = await self.directory.list_users(
            include_deleted=query.include_deleted,
            page=query.page,
            limit=query.limit,
        )
        self.logger.info(
            "Users listed",
            count=len(users),
            page=query.page,
            limit=query.limit,
            include_deleted=query.include_deleted,
        )
        return serialize_users(users)

    async def get_user_by_id(self, user_id: str) -> Dict[str, Any]:
        """Return a single user or raise NotFoundError."""
        user = await self.directory.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return User.model_validate(user).model_dump(by_alias=True)
