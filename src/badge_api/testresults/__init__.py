"""CI test result badges backed by a stale-fallback cache."""

from .cache import CacheEntry, StaleFallbackCache
from .client import TestResultClient
from .models import TestResultData
from .service import TestResultService, cache_key

__all__ = [
    "CacheEntry",
    "StaleFallbackCache",
    "TestResultClient",
    "TestResultData",
    "TestResultService",
    "cache_key",
]
