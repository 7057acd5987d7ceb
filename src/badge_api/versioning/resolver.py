"""Select the best version of a package for a query."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..errors import PackageNotFoundError
from ..sources.base import VersionSource
from .filters import FilterSet, sort_descending, valid_versions
from .models import NotFound, ResolutionOutcome, Selected, Source, VersionQuery
from .preference import TimestampSuffixPreference, VersionPreference

logger = logging.getLogger(__name__)

NO_VERSIONS = "no versions retrieved"
NO_VALID_VERSIONS = "no valid semver versions"
NO_MATCH = "no versions match criteria"
PACKAGE_NOT_FOUND = "package not found"


class VersionResolver:
    """Resolve a query against the raw version list of a source.

    Sources are only needed for ``resolve_package``; ``resolve`` is pure.
    """

    def __init__(
        self,
        sources: Optional[Dict[Source, VersionSource]] = None,
        preference: Optional[VersionPreference] = None,
    ):
        self._sources: Dict[Source, VersionSource] = dict(sources or {})
        self._preference = preference or TimestampSuffixPreference()

    def source_for(self, source: Source) -> VersionSource:
        try:
            return self._sources[source]
        except KeyError:
            raise ValueError(f"Unsupported source: {source.value}") from None

    def resolve(
        self, raw_versions: Iterable[str], query: VersionQuery, verbose: bool = False
    ) -> ResolutionOutcome:
        """Apply the query's filters and tie-breaking to ``raw_versions``.

        Args:
            raw_versions: Version strings as published by the source.
            query: Validated selection criteria.
            verbose: Log the per-filter diagnostics at INFO instead of DEBUG.

        Returns:
            Selected with the version string as received, or NotFound.
        """
        trace = logger.info if verbose else logger.debug
        raw: List[str] = list(raw_versions)
        if not raw:
            trace("No versions retrieved for %s", query.package)
            return NotFound(NO_VERSIONS)
        trace("%d versions retrieved for %s", len(raw), query.package)

        if not valid_versions(raw):
            trace("No valid semver versions for %s", query.package)
            return NotFound(NO_VALID_VERSIONS)

        filters = FilterSet(
            track=query.track,
            include_prerelease=query.include_prerelease,
            bounds=query.bounds,
            trace=trace,
        )
        candidates = filters.apply(raw)
        if not candidates:
            trace("No versions match filters for %s", query.package)
            return NotFound(NO_MATCH)

        if query.source == Source.GITHUB and query.prefer_clean:
            preferred = self._preference.reduce(candidates)
            trace("Prefer-clean applied: %d preferred versions", len(preferred))
            selected = preferred[0]
        else:
            selected = sort_descending(candidates)[0]

        trace("Selected version for %s: %s", query.package, selected)
        return Selected(selected)

    def resolve_package(self, query: VersionQuery, verbose: bool = False) -> ResolutionOutcome:
        """Fetch versions from the query's source and resolve them.

        A package missing upstream is a NotFound outcome; every other
        upstream error propagates to the caller.
        """
        client = self.source_for(query.source)
        try:
            versions = client.fetch(query.package)
        except PackageNotFoundError as exc:
            (logger.info if verbose else logger.debug)("Package not found: %s", exc)
            return NotFound(PACKAGE_NOT_FOUND)
        return self.resolve(versions, query, verbose=verbose)
