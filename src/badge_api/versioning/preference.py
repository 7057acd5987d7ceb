"""Tie-breaking strategies applied after filtering.

Some vendors publish a manually tagged prerelease (``2.0.0-preview1``) next to
automated builds of the same logical version carrying a timestamp suffix
(``2.0.0-preview1-20250716-125702``). Strict semver ranks the automated build
higher, which is rarely what a badge should show.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Pattern, Union

from .filters import sort_descending

TIMESTAMP_SUFFIX = re.compile(r"-\d{8}-\d{6}$")


class VersionPreference(ABC):
    """Collapse a candidate list to the versions a caller would prefer."""

    @abstractmethod
    def reduce(self, versions: Iterable[str]) -> List[str]:
        """Return the preferred versions, sorted semver-descending."""
        raise NotImplementedError


class TimestampSuffixPreference(VersionPreference):
    """Prefer clean tags over timestamp-suffixed builds of the same version."""

    def __init__(self, suffix: Union[str, Pattern[str]] = TIMESTAMP_SUFFIX):
        self._suffix = re.compile(suffix) if isinstance(suffix, str) else suffix

    def base_identity(self, version: str) -> str:
        """Strip a trailing build suffix, if any."""
        return self._suffix.sub("", version)

    def is_clean(self, version: str) -> bool:
        return self.base_identity(version) == version

    def reduce(self, versions: Iterable[str]) -> List[str]:
        preferred: Dict[str, str] = {}
        for v in versions:
            base = self.base_identity(v)
            # First seen wins among suffixed builds; a clean tag always wins.
            if base not in preferred or v == base:
                preferred[base] = v
        return sort_descending(preferred.values())
