"""
Cache-through access to credit scores.
"""

from typing import Any, Dict

from shared.errors import NotFoundError
from shared.logging import get_logger
from ..adapters.credit_score_client import CreditScoreClient
from ..caching.cache_keys import credit_score_key
from ..caching.response_cache import ResponseCache

DEFAULT_CREDIT_SCORE_TTL = 600


class CreditScoreService:
    """Serves credit scores from the response cache, falling back to the scoring service."""

    def __init__(self, client: CreditScoreClient, cache: ResponseCache, ttl_seconds: int = DEFAULT_CREDIT_SCORE_TTL):
        self.client = client
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.logger = get_logger("users.credit_score_service")

    async def get_credit_score_cached(self, user_id: str) -> Dict[str, Any]:
        """Return the user's credit score, populating the cache on a miss.

        Raises:
            NotFoundError: the scoring service has no score for the user.
            ExternalServiceError: the scoring service is unavailable.
        """
        key = credit_score_key(user_id)
        cached = await self.cache.get(key)
        if cached is not None:
            self.logger.debug("Credit score served from cache", user_id=user_id)
            return cached

        score = await self.client.get_credit_score(user_id)
        if score is None:
            raise NotFoundError("Credit score not found", details={"user_id": user_id})

        await self.cache.set(key, score, self.ttl_seconds)
        self.logger.info("Credit score fetched", user_id=user_id, ttl=self.ttl_seconds)
        return score
