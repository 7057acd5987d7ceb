"""Upstream version sources."""

from .base import VersionSource
from .nuget import NuGetSource
from .github import GitHubSource

__all__ = [
    "VersionSource",
    "NuGetSource",
    "GitHubSource",
]
