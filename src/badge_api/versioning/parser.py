"""Parameter validation and query construction for package badges.

Every check here runs before any network call; failures raise
QueryValidationError, which the server renders as HTTP 400.
"""

import re
from typing import Mapping, Optional

import semantic_version

from ..constants import Constants
from ..errors import QueryValidationError
from .models import PackageBadgeRequest, RangeBounds, Source, VersionQuery

PACKAGE_NAME_RE = re.compile(r"^[a-z0-9_.-]+$")
VERSION_BOUND_RE = re.compile(r"^[\d.]+(-[\w.-]+)?(\+[\w.-]+)?$")
TRACK_RE = re.compile(r"^[0-9]+$")

# Long and symbolic spellings accepted for each range bound.
BOUND_ALIASES = {
    "gt": ("gt", ">"),
    "gte": ("gte", ">="),
    "lt": ("lt", "<"),
    "lte": ("lte", "<="),
    "eq": ("eq", "="),
}


def _first(params: Mapping[str, str], *names: str) -> Optional[str]:
    """Return the first non-empty value among ``names``."""
    for name in names:
        value = params.get(name)
        if value:
            return value
    return None


def _is_true(params: Mapping[str, str], *names: str) -> bool:
    return any(params.get(name) == "true" for name in names)


def normalize_package_name(raw: Optional[str]) -> str:
    """Lower-case, trim and validate a package name."""
    pkg = (raw or "").lower().strip()
    if not pkg:
        raise QueryValidationError("Package name is required")
    if not PACKAGE_NAME_RE.match(pkg):
        raise QueryValidationError("Invalid package name format")
    return pkg


def parse_source(raw: Optional[str]) -> Source:
    """Absent means NuGet; anything else must name a supported source exactly."""
    if raw is None:
        return Source(Constants.DEFAULT_SOURCE)
    if not raw.strip() or raw not in Constants.SUPPORTED_SOURCES:
        raise QueryValidationError(f"Invalid source '{raw}'. Must be 'nuget' or 'github'")
    return Source(raw)


def parse_track(raw: Optional[str]) -> Optional[int]:
    """Parse ``1``, ``v2`` or ``V3`` into a major version number."""
    if not raw:
        return None
    cleaned = str(raw).lower()
    if cleaned.startswith("v"):
        cleaned = cleaned[1:]
    if not TRACK_RE.match(cleaned) or str(int(cleaned)) != cleaned:
        raise QueryValidationError(
            f"Invalid track parameter: '{raw}'. Must be a positive integer (e.g., '1', 'v2')"
        )
    return int(cleaned)


def coerce_version_bound(raw: Optional[str], param_name: str) -> Optional[str]:
    """Validate a range bound and coerce partial versions to a full triple.

    ``2.0`` becomes ``2.0.0``; a prerelease suffix such as ``2.0.0-0`` is kept
    so that prereleases can be admitted into ranges.
    """
    if not raw:
        return None
    error = QueryValidationError(f"Invalid semver format for parameter '{param_name}': '{raw}'")
    value = str(raw)
    if not VERSION_BOUND_RE.match(value):
        raise error
    if len(value.split(".")) > 3 and "-" not in value and "+" not in value:
        raise error
    try:
        coerced = semantic_version.Version.coerce(value)
    except ValueError:
        raise error from None
    return str(coerced)


def parse_bounds(params: Mapping[str, str]) -> RangeBounds:
    return RangeBounds(**{
        name: coerce_version_bound(_first(params, *aliases), name)
        for name, aliases in BOUND_ALIASES.items()
    })


def parse_package_request(
    params: Mapping[str, str], package_from_path: Optional[str] = None
) -> PackageBadgeRequest:
    """Build a validated badge request from query parameters.

    Args:
        params: Query string parameters.
        package_from_path: Package name from ``/badge/packages/{name}``; when
            absent the legacy ``?package=`` parameter is used.

    Returns:
        PackageBadgeRequest with an immutable VersionQuery.
    """
    pkg = normalize_package_name(package_from_path if package_from_path else params.get("package"))
    query = VersionQuery(
        package=pkg,
        source=parse_source(params.get("source")),
        track=parse_track(params.get("track")),
        include_prerelease=_is_true(
            params, "include-prerelease", "includePrerelease", "includeprerelease"
        ),
        prefer_clean=_is_true(params, "prefer-clean", "preferClean"),
        bounds=parse_bounds(params),
    )
    return PackageBadgeRequest(
        query=query,
        label=params.get("label") or None,
        color=params.get("color") or None,
        verbose=_is_true(params, "log"),
    )
