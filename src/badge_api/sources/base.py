"""Common interface for upstream version sources."""

from abc import ABC, abstractmethod
from typing import List

from ..versioning.models import Source


class VersionSource(ABC):
    """Fetches the published version strings of a package."""

    @property
    @abstractmethod
    def source(self) -> Source:
        """Return the source this client serves."""
        raise NotImplementedError

    @abstractmethod
    def fetch(self, package: str) -> List[str]:
        """Return every published version string of ``package``.

        Raises:
            PackageNotFoundError: the package does not exist upstream.
            UpstreamError: any other transport, status or body failure.
        """
        raise NotImplementedError
