"""
Cache key builders for user routes.

Keys are plain strings so they stay readable in Redis and can be matched
by pattern when a user's entries need to be invalidated.
"""

from typing import Any, List, Union


def _flag(value: Any) -> str:
    return "true" if value is True else "false"


def user_list_key(include_deleted: bool = False, page: Union[int, str] = 1, limit: Union[int, str] = 20) -> str:
    """Key for a page of the user list."""
    return f"users:list:include_deleted={_flag(include_deleted)}:page={page}:limit={limit}"


def user_by_id_key(user_id: Union[int, str]) -> str:
    """Key for a single user record."""
    return f"users:id:{user_id}"


def credit_score_key(user_id: Union[int, str]) -> str:
    """Key for a user's credit score."""
    return f"users:credit_score:{user_id}"


def user_key_patterns(user_id: Union[int, str]) -> List[str]:
    """Patterns covering every cached entry affected by a change to one user."""
    return [
        user_by_id_key(user_id),
        credit_score_key(user_id),
        "users:list:*",
    ]
