"""
Response models for the user routes.
"""

from typing import Any, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class User(BaseModel):
    """User record as exposed by the API."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Union[str, int] = Field(..., alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class SuccessEnvelope(BaseModel, Generic[T]):
    """Uniform success wrapper."""

    success: bool = True
    data: T


class UserListQuery(BaseModel):
    """Validated pagination for the user list."""

    include_deleted: bool = False
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


def serialize_users(users: List[Any]) -> List[dict]:
    return [User.model_validate(user).model_dump(by_alias=True) for user in users]
