"""Data models for version queries and resolution outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union


class Source(Enum):
    """Enum for supported version sources."""
    NUGET = "nuget"
    GITHUB = "github"


class RangeOperator(Enum):
    """Comparison operators accepted as range bounds."""
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    EQ = "eq"


@dataclass(frozen=True)
class RangeBounds:
    """Coerced range bounds; each is a full semver string or None."""
    gt: Optional[str] = None
    gte: Optional[str] = None
    lt: Optional[str] = None
    lte: Optional[str] = None
    eq: Optional[str] = None

    def active(self) -> Dict[RangeOperator, str]:
        """Return the present bounds in gt, gte, lt, lte, eq order."""
        result: Dict[RangeOperator, str] = {}
        for op in RangeOperator:
            value = getattr(self, op.value)
            if value is not None:
                result[op] = value
        return result


@dataclass(frozen=True)
class VersionQuery:
    """Validated selection criteria for one resolution call."""
    package: str
    source: Source = Source.NUGET
    track: Optional[int] = None
    include_prerelease: bool = False
    prefer_clean: bool = False
    bounds: RangeBounds = field(default_factory=RangeBounds)


@dataclass(frozen=True)
class PackageBadgeRequest:
    """A parsed package badge request: the query plus presentation options."""
    query: VersionQuery
    label: Optional[str] = None
    color: Optional[str] = None
    verbose: bool = False


@dataclass(frozen=True)
class Selected:
    """A version was selected."""
    version: str


@dataclass(frozen=True)
class NotFound:
    """No version could be selected."""
    reason: str


ResolutionOutcome = Union[Selected, NotFound]
