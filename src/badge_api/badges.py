"""Render outcomes as shields.io endpoint badge documents.

See https://shields.io/badges/endpoint-badge for the schema. Everything here
is pure; HTTP status is always 200 for a rendered badge.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .constants import Constants
from .testresults.models import TestResultData
from .versioning.filters import has_prerelease
from .versioning.models import NotFound, ResolutionOutcome, Selected, Source


@dataclass(frozen=True)
class Badge:
    """A badge body plus the Cache-Control header it should be served with."""

    body: Dict[str, Any]
    cache_control: str


def _badge_body(
    label: str,
    message: str,
    color: str,
    named_logo: Optional[str] = None,
    cache_seconds: Optional[int] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "schemaVersion": Constants.BADGE_SCHEMA_VERSION,
        "label": label,
        "message": message,
        "color": color,
    }
    if named_logo is not None:
        body["namedLogo"] = named_logo
    if cache_seconds is not None:
        body["cacheSeconds"] = cache_seconds
    return body


def default_label(package: str, source: Source) -> str:
    return f"{package} {source.value}"


def version_color(version: str) -> str:
    """Orange for prereleases, blue for stable releases."""
    return "orange" if has_prerelease(version) else "blue"


def package_badge(
    outcome: ResolutionOutcome,
    package: str,
    source: Source,
    label: Optional[str] = None,
    color: Optional[str] = None,
) -> Badge:
    """Render a resolution outcome.

    Label overrides always apply. Color overrides apply to a selected version
    only; a not-found badge is always lightgrey.
    """
    badge_label = label or default_label(package, source)
    logo = source.value

    if isinstance(outcome, Selected):
        return Badge(
            body=_badge_body(badge_label, outcome.version, color or version_color(outcome.version), logo),
            cache_control=Constants.CACHE_CONTROL_PACKAGE,
        )
    if isinstance(outcome, NotFound):
        return Badge(
            body=_badge_body(badge_label, "not found", "lightgrey", logo),
            cache_control=Constants.CACHE_CONTROL_NOT_FOUND,
        )
    raise TypeError(f"Unexpected resolution outcome: {outcome!r}")


def results_badge(data: Optional[TestResultData]) -> Badge:
    """Render a test result summary; None renders the unavailable badge."""
    if data is None:
        message, color = "unavailable", "lightgrey"
        seconds = Constants.TEST_BADGE_UNAVAILABLE_CACHE_SECONDS
    elif data.failed > 0:
        message, color = f"{data.failed} failed, {data.passed} passed", "critical"
        seconds = Constants.TEST_BADGE_CACHE_SECONDS
    else:
        message, color = f"{data.passed} passed", "success"
        seconds = Constants.TEST_BADGE_CACHE_SECONDS
    return Badge(
        body=_badge_body("tests", message, color, cache_seconds=seconds),
        cache_control=f"public, max-age={seconds}",
    )


def redirect_target(url: Optional[str], fallback_url: Optional[str] = None) -> str:
    """Pick the redirect Location, falling back to the CI overview page."""
    return url or fallback_url or Constants.TEST_RESULTS_FALLBACK_URL
