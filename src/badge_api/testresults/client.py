"""Client for the CI test result documents published as gists."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..common.logging_utils import Timer, safe_url
from ..constants import Constants
from ..errors import UpstreamError

logger = logging.getLogger(__name__)


class TestResultClient:
    """Fetches ``test-results-{platform}.json`` for a track or package."""

    __test__ = False  # keep pytest from collecting this class

    DEFAULT_BASE_URLS = {
        "v1": Constants.GIST_BASE_URL_V1,
        "v2": Constants.GIST_BASE_URL_V2,
    }

    def __init__(
        self,
        base_urls: Optional[Dict[str, str]] = None,
        package_base_url: Optional[str] = None,
        timeout: float = Constants.TEST_RESULTS_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            base_urls: Override base URLs by track.
            package_base_url: Base URL used when a package qualifier is given.
            timeout: Total request timeout in seconds.
        """
        self._base_urls = {**self.DEFAULT_BASE_URLS}
        if base_urls:
            self._base_urls.update(base_urls)
        self._package_base_url = package_base_url or Constants.GIST_BASE_URL_WITH_PACKAGE
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def build_url(self, platform: str, track: str, package: Optional[str] = None) -> str:
        if package:
            base = self._package_base_url
        else:
            base = self._base_urls.get(track, self._base_urls[Constants.DEFAULT_TEST_TRACK])
        return f"{base}test-results-{platform}.json"

    async def fetch(self, platform: str, track: str, package: Optional[str] = None) -> Any:
        """Fetch and decode the result document.

        Raises:
            UpstreamError: on transport errors, timeouts, non-200 responses
                or a body that is not JSON.
        """
        if self._session is None:
            await self.start()
        assert self._session is not None

        url = self.build_url(platform, track, package)
        headers = {
            "Accept": "application/json",
            "User-Agent": Constants.TEST_RESULTS_USER_AGENT,
        }
        logger.info("Fetching %s test results (track: %s) from %s", platform, track, safe_url(url))

        with Timer() as t:
            try:
                async with self._session.get(url, headers=headers) as response:
                    if response.status != 200:
                        raise UpstreamError(
                            f"Test results for {platform} returned HTTP {response.status}",
                            status_code=response.status,
                        )
                    body = await response.read()
            except asyncio.TimeoutError as exc:
                raise UpstreamError(
                    f"Test results for {platform} timed out after {self._timeout.total}s"
                ) from exc
            except aiohttp.ClientError as exc:
                raise UpstreamError(f"Test results for {platform} failed: {exc}") from exc

        try:
            # Covers both undecodable bytes and malformed JSON.
            data = json.loads(body)
        except ValueError as exc:
            raise UpstreamError(f"Test results for {platform} are not valid JSON") from exc

        logger.debug("Fetched %s test results in %d ms", platform, t.duration_ms())
        return data

    async def __aenter__(self) -> "TestResultClient":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.stop()
