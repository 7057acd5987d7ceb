"""Badge server using aiohttp."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any, Dict, Optional

from aiohttp import web

from ..badges import Badge, package_badge, redirect_target, results_badge
from ..constants import Constants
from ..errors import QueryValidationError, UpstreamError
from ..sources import GitHubSource, NuGetSource
from ..testresults import TestResultClient, TestResultService
from ..versioning.models import Source
from ..versioning.parser import parse_package_request
from ..versioning.resolver import VersionResolver
from .config import ServerConfig

logger = logging.getLogger(__name__)

INVALID_PLATFORM = "Invalid platform. Use: linux, windows, macos"
INVALID_TRACK = "Invalid track parameter. Must be 'v1' or 'v2'"
INVALID_TEST_PACKAGE = (
    "Invalid package parameter. Must be 'LocalStack.Aspire.Hosting' if track is not specified"
)


def json_error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


def badge_response(badge: Badge) -> web.Response:
    return web.json_response(badge.body, headers={"Cache-Control": badge.cache_control})


class BadgeServer:
    """HTTP front end for package and test result badges.

    Routes (matched case-insensitively):

    - ``/badge/packages/{package}`` and the legacy ``/?package=``
    - ``/badge/tests/{platform}``
    - ``/redirect/test-results/{platform}``
    - ``/_health``
    """

    def __init__(
        self,
        config: ServerConfig,
        resolver: Optional[VersionResolver] = None,
        test_results: Optional[TestResultService] = None,
    ):
        """Initialize the server.

        Args:
            config: Server configuration.
            resolver: Version resolver; built from config when omitted.
            test_results: Cached test result service; built from config when omitted.
        """
        self._config = config
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None

        self._resolver = resolver or VersionResolver(sources={
            Source.NUGET: NuGetSource(base_url=config.nuget_base_url),
            Source.GITHUB: GitHubSource(org=config.github_org, token=config.github_token),
        })
        self._test_results = test_results or TestResultService(
            client=TestResultClient(
                base_urls={"v1": config.gist_base_url_v1, "v2": config.gist_base_url_v2},
                package_base_url=config.gist_base_url_package,
                timeout=config.test_results_timeout,
            ),
            ttl=config.test_results_ttl,
        )

    @property
    def test_results(self) -> TestResultService:
        return self._test_results

    def create_app(self) -> web.Application:
        """Create the aiohttp application."""
        app = web.Application()
        app.router.add_get("/_health", self._health_check)
        app.router.add_get("/{path:.*}", self._handle_request)
        app.on_startup.append(self._on_startup)
        app.on_cleanup.append(self._on_cleanup)
        return app

    async def _health_check(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response({
            "status": "ok",
            "cache": self._test_results.cache_status(),
        })

    async def _on_startup(self, app: web.Application) -> None:
        await self._test_results.client.start()
        logger.info("Badge server starting on %s:%s", self._config.host, self._config.port)

    async def _on_cleanup(self, app: web.Application) -> None:
        await self._test_results.client.stop()
        logger.info("Badge server stopped")

    async def _handle_request(self, request: web.Request) -> web.Response:
        """Dispatch a request by its lower-cased path."""
        path = request.rel_url.path.lower().strip().lstrip("/")
        try:
            if path.startswith("badge/tests/"):
                platform = path.split("/")[-1]
                if platform not in Constants.PLATFORMS:
                    return json_error(404, INVALID_PLATFORM)
                return await self.handle_test_badge(request, platform)

            if path.startswith("badge/packages/"):
                package = path.split("/")[2]
                if not package:
                    return json_error(404, "Package name required")
                return await self.handle_package_badge(request, package)

            if path.startswith("redirect/test-results/"):
                platform = path.split("/")[-1]
                if platform not in Constants.PLATFORMS:
                    return json_error(404, INVALID_PLATFORM)
                return await self.handle_test_redirect(request, platform)

            if path == "":
                return await self.handle_package_badge(request, None)

            return json_error(404, f"Route not found: /{path}")
        except Exception:  # pylint: disable=broad-except
            logger.exception("Router error for /%s", path)
            return json_error(500, "Internal server error")

    async def handle_package_badge(
        self, request: web.Request, package_from_path: Optional[str]
    ) -> web.Response:
        """Resolve a package version and render its badge."""
        try:
            badge_request = parse_package_request(request.query, package_from_path)
        except QueryValidationError as exc:
            return json_error(400, str(exc))

        query = badge_request.query
        if badge_request.verbose:
            logger.info("Package badge request: %s", query)

        loop = asyncio.get_running_loop()
        try:
            # Version sources use blocking requests calls.
            outcome = await loop.run_in_executor(
                None, self._resolver.resolve_package, query, badge_request.verbose
            )
        except UpstreamError as exc:
            logger.error("%s fetch error for %s: %s", query.source.value, query.package, exc)
            return json_error(500, str(exc))

        return badge_response(package_badge(
            outcome,
            query.package,
            query.source,
            label=badge_request.label,
            color=badge_request.color,
        ))

    def _parse_test_params(self, request: web.Request, allow_package: bool):
        """Return (track, package, error_response) for the test endpoints."""
        track = request.query.get("track")
        package = request.query.get("package")
        if track is not None:
            if track not in Constants.TEST_TRACKS:
                return None, None, json_error(400, INVALID_TRACK)
            return track, None, None
        if allow_package and package is not None:
            if package not in Constants.TEST_PACKAGES:
                return None, None, json_error(400, INVALID_TEST_PACKAGE)
            return Constants.DEFAULT_TEST_TRACK, package, None
        return Constants.DEFAULT_TEST_TRACK, None, None

    async def handle_test_badge(self, request: web.Request, platform: str) -> web.Response:
        """Render the test result badge for ``platform``."""
        track, package, error = self._parse_test_params(request, allow_package=True)
        if error is not None:
            return error

        try:
            data = await self._test_results.get_test_results(platform, track, package)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Error generating test badge for %s (track: %s)", platform, track)
            data = None

        if data is None:
            logger.warning("No test data available for %s (track: %s)", platform, track)
        return badge_response(results_badge(data))

    async def handle_test_redirect(self, request: web.Request, platform: str) -> web.Response:
        """Redirect to the CI run page for ``platform``."""
        track, _, error = self._parse_test_params(request, allow_package=False)
        if error is not None:
            return error

        try:
            url = await self._test_results.get_redirect_url(platform, track)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Error generating redirect for %s (track: %s)", platform, track)
            url = None

        if not url:
            logger.warning("No redirect URL for %s (track: %s), using fallback", platform, track)
        return web.Response(
            status=302,
            headers={
                "Location": redirect_target(url),
                "Cache-Control": Constants.CACHE_CONTROL_REDIRECT,
            },
        )

    def cache_stats(self) -> Dict[str, Any]:
        return self._test_results.cache_status()

    async def start(self) -> None:
        """Start the badge server."""
        self._app = self.create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self._config.host, self._config.port)
        await site.start()

        logger.info(
            "Badge server listening on http://%s:%s",
            self._config.host, self._config.port,
        )
        logger.info("GitHub organization: %s", self._config.github_org)
        if not self._config.github_token:
            logger.warning("GITHUB_TOKEN is not set; source=github badges will fail")

    async def stop(self) -> None:
        """Stop the badge server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._app = None


def run_server_sync(config: ServerConfig) -> None:
    """Run the badge server until SIGTERM or SIGINT.

    Args:
        config: Server configuration.
    """
    server = BadgeServer(config)
    loop = asyncio.new_event_loop()

    async def run():
        await server.start()
        stop_event = asyncio.Event()
        running_loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            running_loop.add_signal_handler(sig, stop_event.set)
        await stop_event.wait()
        logger.info("Shutdown signal received, stopping...")
        await server.stop()

    try:
        loop.run_until_complete(run())
    except KeyboardInterrupt:
        # Fallback for platforms where signal handlers don't work (Windows)
        loop.run_until_complete(server.stop())
    finally:
        loop.close()
        logger.info("Badge server shutdown complete")
