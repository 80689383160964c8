"""
HTTP clients for the services behind the user routes.

These adapters encapsulate:

- Base URLs and request shapes
- Retry policies and circuit breakers
- Error handling that maps to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .service_client import ServiceClient
from .user_directory_client import UserDirectoryClient
from .credit_score_client import CreditScoreClient

__all__ = [
    "CreditScoreClient",
    "ServiceClient",
    "UserDirectoryClient",
]
