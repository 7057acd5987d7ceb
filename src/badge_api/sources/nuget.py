"""NuGet version source backed by the V3 flat container index."""

import logging
import urllib.parse
from typing import List, Optional

from ..common.http_client import get_json
from ..common.logging_utils import safe_url
from ..constants import Constants
from ..errors import UpstreamError
from ..versioning.models import Source
from .base import VersionSource

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Accept": "application/json"}


class NuGetSource(VersionSource):
    """Reads ``/v3-flatcontainer/{id}/index.json``; the list is unordered."""

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url or Constants.REGISTRY_URL_NUGET_FLAT
        if not self.base_url.endswith("/"):
            self.base_url += "/"

    @property
    def source(self) -> Source:
        return Source.NUGET

    def index_url(self, package: str) -> str:
        # Flat container ids are lower-case.
        encoded_id = urllib.parse.quote(package.lower(), safe="")
        return f"{self.base_url}{encoded_id}/index.json"

    def fetch(self, package: str) -> List[str]:
        url = self.index_url(package)
        logger.debug("GET NuGet %s", safe_url(url))
        data = get_json(url, headers=HEADERS_JSON)

        versions = data.get("versions") if isinstance(data, dict) else None
        if not isinstance(versions, list):
            raise UpstreamError(f"NuGet index for {package} has no 'versions' list")
        return [v for v in versions if isinstance(v, str)]
