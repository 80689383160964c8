"""
Response caching package.

Cache keys are built by pure functions of the request so every component
that reads or invalidates an entry derives the same key.
"""

from .cache_keys import credit_score_key, user_by_id_key, user_list_key, user_key_patterns
from .response_cache import CachePolicy, ResponseCache

__all__ = [
    "CachePolicy",
    "ResponseCache",
    "credit_score_key",
    "user_by_id_key",
    "user_key_patterns",
    "user_list_key",
]
