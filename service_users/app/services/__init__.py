"""Cached lookups against downstream services."""

from .credit_score_service import CreditScoreService

__all__ = ["CreditScoreService"]
