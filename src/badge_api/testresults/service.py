"""Cached access to CI test results.

Cache keys always carry a platform and a track; a package qualifier is
appended when given::

    test-results:{platform}:{track}[:{package}]

so clearing ``test-results:{platform}:`` drops every track of a platform.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..constants import Constants
from .cache import StaleFallbackCache
from .client import TestResultClient
from .models import TestResultData

logger = logging.getLogger(__name__)

KEY_PREFIX = "test-results"


def cache_key(platform: str, track: str = Constants.DEFAULT_TEST_TRACK, package: Optional[str] = None) -> str:
    key = f"{KEY_PREFIX}:{platform}:{track}"
    if package:
        key = f"{key}:{package}"
    return key


class TestResultService:
    """Serves test results through a stale-fallback cache."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(
        self,
        client: TestResultClient,
        cache: Optional[StaleFallbackCache[TestResultData]] = None,
        ttl: float = Constants.TEST_RESULTS_CACHE_TTL_SEC,
    ):
        self.client = client
        self.ttl = ttl
        self.cache = cache if cache is not None else StaleFallbackCache(
            default_ttl=ttl, validator=TestResultData.from_payload
        )

    async def get_test_results(
        self,
        platform: str,
        track: str = Constants.DEFAULT_TEST_TRACK,
        package: Optional[str] = None,
    ) -> Optional[TestResultData]:
        """Return fresh, refetched or stale results, or None when unavailable."""
        if platform not in Constants.PLATFORMS:
            raise ValueError(f"Invalid platform: {platform}")

        key = cache_key(platform, track, package)

        async def fetch():
            return await self.client.fetch(platform, track, package)

        data = await self.cache.get_or_fetch(key, fetch, self.ttl)
        if data is not None:
            logger.debug(
                "Test results for %s: passed=%d failed=%d total=%d",
                key, data.passed, data.failed, data.total,
            )
        return data

    async def get_redirect_url(
        self,
        platform: str,
        track: str = Constants.DEFAULT_TEST_TRACK,
        package: Optional[str] = None,
    ) -> Optional[str]:
        data = await self.get_test_results(platform, track, package)
        return data.url_html if data else None

    def clear_cache(self, platform: Optional[str] = None, track: Optional[str] = None) -> None:
        """Clear one key, one platform or everything."""
        if platform and track:
            self.cache.invalidate(cache_key(platform, track))
        elif platform:
            self.cache.invalidate_prefix(f"{KEY_PREFIX}:{platform}:")
        else:
            self.cache.clear()

    def cache_status(self):
        return self.cache.status()
