"""GitHub Packages version source for NuGet packages of one organization.

The organization is fixed per deployment; any package name within it may be
queried. The API returns versions newest first. That order is only
informational because the resolver re-sorts by semver.
"""
from __future__ import annotations

import logging
import os
import urllib.parse
from typing import Dict, List, Optional

from ..common.http_client import get_json
from ..common.logging_utils import safe_url
from ..constants import Constants
from ..errors import AuthenticationRequiredError, PackageNotFoundError, UpstreamError
from ..versioning.models import Source
from .base import VersionSource

logger = logging.getLogger(__name__)


def github_package_name(package: str) -> str:
    """Title-case each dot segment: ``localstack.client`` -> ``Localstack.Client``."""
    return ".".join(part[:1].upper() + part[1:].lower() for part in package.split("."))


class GitHubSource(VersionSource):
    """Lightweight REST client for organization package versions.

    Supports optional authentication via the GITHUB_TOKEN environment variable;
    the packages API normally requires it.
    """

    def __init__(
        self,
        org: Optional[str] = None,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        """Initialize GitHub source.

        Args:
            org: Organization owning the packages (defaults to Constants.GITHUB_DEFAULT_ORG)
            token: Personal access token (defaults to GITHUB_TOKEN env var)
            base_url: Base URL for the GitHub API (defaults to Constants.GITHUB_API_BASE)
        """
        self.org = org or Constants.GITHUB_DEFAULT_ORG
        self.token = token or os.environ.get(Constants.ENV_GITHUB_TOKEN)
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")

    @property
    def source(self) -> Source:
        return Source.GITHUB

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authorization if token is available."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": Constants.GITHUB_API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def versions_url(self, package: str) -> str:
        name = urllib.parse.quote(github_package_name(package), safe="")
        return f"{self.base_url}/orgs/{self.org}/packages/nuget/{name}/versions"

    def fetch(self, package: str) -> List[str]:
        url = self.versions_url(package)
        logger.debug("GET GitHub %s", safe_url(url))
        try:
            data = get_json(url, headers=self._get_headers())
        except PackageNotFoundError:
            raise PackageNotFoundError(
                f"GitHub package not found: {self.org}/{github_package_name(package)}",
                status_code=404,
            ) from None
        except UpstreamError as exc:
            if exc.status_code == 401:
                raise AuthenticationRequiredError(
                    "GitHub API requires authentication. Set GITHUB_TOKEN environment variable.",
                    status_code=401,
                ) from exc
            raise

        if not isinstance(data, list):
            raise UpstreamError(f"GitHub versions for {package} is not a list")
        names = [item.get("name") for item in data if isinstance(item, dict)]
        names = [n for n in names if isinstance(n, str)]
        logger.debug("GitHub versions (newest first): %s", names)
        return names
