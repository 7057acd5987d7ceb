"""Tests for VersionResolver."""

import logging

import pytest

from badge_api.errors import PackageNotFoundError, UpstreamError
from badge_api.sources.base import VersionSource
from badge_api.versioning.models import NotFound, RangeBounds, Selected, Source, VersionQuery
from badge_api.versioning.resolver import (
    NO_MATCH,
    NO_VALID_VERSIONS,
    NO_VERSIONS,
    PACKAGE_NOT_FOUND,
    VersionResolver,
)


class FakeSource(VersionSource):
    """In-memory version source."""

    def __init__(self, source, versions=None, error=None):
        self._source = source
        self._versions = versions or []
        self._error = error
        self.calls = []

    @property
    def source(self):
        return self._source

    def fetch(self, package):
        self.calls.append(package)
        if self._error is not None:
            raise self._error
        return list(self._versions)


def nuget(package="localstack.client", **kwargs):
    return VersionQuery(package=package, source=Source.NUGET, **kwargs)


def github(package="localstack.client", **kwargs):
    return VersionQuery(package=package, source=Source.GITHUB, **kwargs)


class TestResolve:
    """Test pure resolution over a version list."""

    def setup_method(self):
        self.resolver = VersionResolver()

    def test_latest_stable(self):
        versions = ["1.0.0", "1.2.0", "2.0.0-preview1", "2.0.0"]
        assert self.resolver.resolve(versions, nuget()) == Selected("2.0.0")

    def test_track_one(self):
        versions = ["1.0.0", "1.2.0", "2.0.0-preview1", "2.0.0"]
        assert self.resolver.resolve(versions, nuget(track=1)) == Selected("1.2.0")

    def test_prerelease_included(self):
        versions = ["1.0.0", "2.0.0-preview1"]
        outcome = self.resolver.resolve(versions, nuget(include_prerelease=True))
        assert outcome == Selected("2.0.0-preview1")

    def test_only_prereleases_without_flag(self):
        outcome = self.resolver.resolve(["2.0.0-preview1", "2.0.0-rc.1"], nuget())
        assert outcome == NotFound(NO_MATCH)

    def test_empty_list(self):
        assert self.resolver.resolve([], nuget()) == NotFound(NO_VERSIONS)

    def test_no_valid_versions(self):
        assert self.resolver.resolve(["latest", "1.0"], nuget()) == NotFound(NO_VALID_VERSIONS)

    def test_range_bounds(self):
        versions = ["1.0.0", "1.5.0", "2.0.0", "2.5.0"]
        query = nuget(bounds=RangeBounds(gte="1.5.0", lt="2.5.0"))
        assert self.resolver.resolve(versions, query) == Selected("2.0.0")

    def test_bound_above_everything(self):
        versions = ["1.0.0", "1.2.0", "2.0.0"]
        query = nuget(bounds=RangeBounds(gt="99.0.0"))
        assert self.resolver.resolve(versions, query) == NotFound(NO_MATCH)

    def test_prefer_clean_on_github(self):
        versions = ["2.0.0-preview1", "2.0.0-preview1-20250716-125702"]
        query = github(include_prerelease=True, prefer_clean=True)
        assert self.resolver.resolve(versions, query) == Selected("2.0.0-preview1")

    def test_github_without_prefer_clean_takes_highest(self):
        versions = ["2.0.0-preview1", "2.0.0-preview1-20250716-125702"]
        query = github(include_prerelease=True)
        assert self.resolver.resolve(versions, query) == Selected("2.0.0-preview1-20250716-125702")

    def test_prefer_clean_ignored_for_nuget(self):
        versions = ["2.0.0-preview1", "2.0.0-preview1-20250716-125702"]
        query = nuget(include_prerelease=True, prefer_clean=True)
        assert self.resolver.resolve(versions, query) == Selected("2.0.0-preview1-20250716-125702")

    def test_selected_string_is_returned_unchanged(self):
        assert self.resolver.resolve(["1.0.0+build.7"], nuget()) == Selected("1.0.0+build.7")

    @pytest.mark.parametrize(
        "query",
        [
            nuget(),
            nuget(track=1),
            nuget(include_prerelease=True),
            github(include_prerelease=True, prefer_clean=True),
            nuget(bounds=RangeBounds(lt="2.0.0")),
        ],
    )
    def test_selected_version_is_member_of_input(self, query):
        versions = [
            "0.9.0", "1.0.0", "1.2.0", "1.10.0-beta", "2.0.0-preview1",
            "2.0.0-preview1-20250716-125702", "2.0.0", "junk",
        ]
        outcome = self.resolver.resolve(versions, query)
        assert isinstance(outcome, Selected)
        assert outcome.version in versions

    def test_resolution_is_deterministic(self):
        versions = ["1.0.0", "3.1.0", "2.0.0"]
        first = self.resolver.resolve(versions, nuget())
        assert all(self.resolver.resolve(versions, nuget()) == first for _ in range(3))

    def test_verbose_logs_at_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="badge_api.versioning.resolver"):
            self.resolver.resolve(["1.0.0"], nuget(), verbose=True)
        assert "Selected version for localstack.client: 1.0.0" in caplog.text

    def test_quiet_does_not_log_at_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="badge_api.versioning.resolver"):
            self.resolver.resolve(["1.0.0"], nuget())
        assert caplog.text == ""


class TestResolvePackage:
    """Test resolution through a version source."""

    def test_fetches_from_the_query_source(self):
        nuget_source = FakeSource(Source.NUGET, ["1.0.0", "1.1.0"])
        github_source = FakeSource(Source.GITHUB, ["9.0.0"])
        resolver = VersionResolver(sources={Source.NUGET: nuget_source, Source.GITHUB: github_source})

        assert resolver.resolve_package(nuget()) == Selected("1.1.0")
        assert nuget_source.calls == ["localstack.client"]
        assert github_source.calls == []

    def test_package_not_found_is_an_outcome(self):
        source = FakeSource(Source.NUGET, error=PackageNotFoundError("missing", status_code=404))
        resolver = VersionResolver(sources={Source.NUGET: source})
        assert resolver.resolve_package(nuget()) == NotFound(PACKAGE_NOT_FOUND)

    def test_other_upstream_errors_propagate(self):
        source = FakeSource(Source.NUGET, error=UpstreamError("NuGet API error: 503", status_code=503))
        resolver = VersionResolver(sources={Source.NUGET: source})
        with pytest.raises(UpstreamError, match="503"):
            resolver.resolve_package(nuget())

    def test_unconfigured_source(self):
        resolver = VersionResolver(sources={Source.NUGET: FakeSource(Source.NUGET)})
        with pytest.raises(ValueError, match="Unsupported source: github"):
            resolver.resolve_package(github())
