"""
User directory client.
"""

from typing import Any, Dict, List, Optional, Union

from .service_client import ServiceClient


class UserDirectoryClient(ServiceClient):
    """Reads user records from the user directory service."""

    service_name = "user_directory"

    async def list_users(
        self,
        include_deleted: bool = False,
        page: int = 1,
        limit: int = 20,
    ) -> List[Dict[str, Any]]:
        """Fetch one page of users."""
        params = {
            "include_deleted": "true" if include_deleted else "false",
            "page": page,
            "limit": limit,
        }
        payload = await self._get_json("/users", params)
        if payload is None:
            return []
        if isinstance(payload, dict):
            # Some directory versions wrap the page
            return list(payload.get("users", []))
        return list(payload)

    async def get_user(self, user_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Fetch a single user, or None if it does not exist."""
        return await self._get_json(f"/users/{user_id}")
