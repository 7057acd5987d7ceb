"""Semver predicates and ordering over raw version strings.

All helpers take and return the version strings exactly as published so the
selected value can be echoed back unchanged; parsing is only used for the
comparisons.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

import semantic_version

from .models import RangeBounds, RangeOperator

logger = logging.getLogger(__name__)


def parse_version(v: str) -> Optional[semantic_version.Version]:
    """Safely parse a strict semantic version string."""
    try:
        return semantic_version.Version(v)
    except (ValueError, TypeError):
        return None


def _eq(ver: semantic_version.Version, bound: semantic_version.Version) -> bool:
    # Version.__eq__ also compares build metadata; precedence does not.
    return not ver < bound and not ver > bound


_COMPARATORS: Dict[RangeOperator, Callable[[semantic_version.Version, semantic_version.Version], bool]] = {
    RangeOperator.GT: lambda ver, bound: ver > bound,
    RangeOperator.GTE: lambda ver, bound: ver >= bound,
    RangeOperator.LT: lambda ver, bound: ver < bound,
    RangeOperator.LTE: lambda ver, bound: ver <= bound,
    RangeOperator.EQ: _eq,
}

RANGE_SYMBOLS = {
    RangeOperator.GT: ">",
    RangeOperator.GTE: ">=",
    RangeOperator.LT: "<",
    RangeOperator.LTE: "<=",
    RangeOperator.EQ: "=",
}


def valid_versions(raw: Iterable[str]) -> List[str]:
    """Keep only strings that parse as semantic versions, preserving order."""
    return [v for v in raw if isinstance(v, str) and parse_version(v) is not None]


def filter_track(versions: List[str], track: Optional[int]) -> List[str]:
    """Keep versions whose major component equals ``track``."""
    if track is None:
        return list(versions)
    result = []
    for v in versions:
        ver = parse_version(v)
        if ver is not None and ver.major == track:
            result.append(v)
    return result


def filter_prerelease(versions: List[str], include_prerelease: bool) -> List[str]:
    """Drop prerelease versions unless ``include_prerelease`` is set."""
    if include_prerelease:
        return list(versions)
    result = []
    for v in versions:
        ver = parse_version(v)
        if ver is not None and not ver.prerelease:
            result.append(v)
    return result


def filter_bound(versions: List[str], op: RangeOperator, bound: str) -> List[str]:
    """Keep versions satisfying a single comparison against ``bound``."""
    bound_ver = semantic_version.Version(bound)
    compare = _COMPARATORS[op]
    result = []
    for v in versions:
        ver = parse_version(v)
        if ver is not None and compare(ver, bound_ver):
            result.append(v)
    return result


def filter_range(
    versions: List[str],
    bounds: RangeBounds,
    trace: Optional[Callable[..., None]] = None,
) -> List[str]:
    """Apply every present bound of ``bounds``, reporting each step to ``trace``."""
    trace = trace or logger.debug
    result = list(versions)
    for op, bound in bounds.active().items():
        result = filter_bound(result, op, bound)
        trace("%s%s filter: %d versions", RANGE_SYMBOLS[op], bound, len(result))
    return result


def sort_descending(versions: Iterable[str]) -> List[str]:
    """Sort by semver precedence, highest first.

    The sort is stable: versions of equal precedence (differing only in build
    metadata) keep their input order.
    """
    parsed = [(v, parse_version(v)) for v in versions]
    parsed = [(v, ver) for v, ver in parsed if ver is not None]
    parsed.sort(key=lambda item: item[1], reverse=True)
    return [v for v, _ in parsed]


def has_prerelease(v: str) -> bool:
    """Return True when ``v`` parses and carries a prerelease component."""
    ver = parse_version(v)
    return bool(ver is not None and ver.prerelease)


class FilterSet:
    """The validity, track, prerelease and range filters of one query.

    ``apply`` runs them in that fixed order and returns the survivors sorted
    descending. Applying the same set to its own output is a no-op.
    """

    def __init__(
        self,
        track: Optional[int] = None,
        include_prerelease: bool = False,
        bounds: Optional[RangeBounds] = None,
        trace: Optional[Callable[..., None]] = None,
    ):
        self.track = track
        self.include_prerelease = include_prerelease
        self.bounds = bounds or RangeBounds()
        self._trace = trace or logger.debug

    def apply(self, versions: Iterable[str]) -> List[str]:
        """Return the descending-sorted versions passing every active filter."""
        result = valid_versions(versions)
        if self.track is not None:
            result = filter_track(result, self.track)
            self._trace("Track %s filter: %d versions", self.track, len(result))
        if not self.include_prerelease:
            result = filter_prerelease(result, False)
            self._trace("Stable only filter: %d versions", len(result))
        result = filter_range(result, self.bounds, self._trace)
        return sort_descending(result)
