"""
Credit score service client.
"""

from typing import Any, Dict, Optional, Union

from .service_client import ServiceClient


class CreditScoreClient(ServiceClient):
    """Fetches computed credit scores."""

    service_name = "credit_score"

    async def get_credit_score(self, user_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Fetch the current credit score for a user, or None if unknown."""
        return await self._get_json(f"/credit-scores/{user_id}")
