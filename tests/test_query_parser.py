"""Tests for package badge parameter validation."""

import pytest

from badge_api.errors import QueryValidationError
from badge_api.versioning.models import RangeBounds, Source
from badge_api.versioning.parser import (
    coerce_version_bound,
    normalize_package_name,
    parse_bounds,
    parse_package_request,
    parse_source,
    parse_track,
)


class TestPackageName:
    """Test package name normalization."""

    def test_lower_cases_and_trims(self):
        assert normalize_package_name("  LocalStack.Client ") == "localstack.client"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_required(self, raw):
        with pytest.raises(QueryValidationError, match="Package name is required"):
            normalize_package_name(raw)

    @pytest.mark.parametrize("raw", ["bad name", "pkg/../etc", "a@b", "pkg%20"])
    def test_invalid_format(self, raw):
        with pytest.raises(QueryValidationError, match="Invalid package name format"):
            normalize_package_name(raw)


class TestSource:
    """Test source parsing."""

    def test_absent_defaults_to_nuget(self):
        assert parse_source(None) == Source.NUGET

    def test_github(self):
        assert parse_source("github") == Source.GITHUB

    @pytest.mark.parametrize("raw", ["npm", "", "GitHub", " nuget"])
    def test_invalid(self, raw):
        with pytest.raises(QueryValidationError, match="Must be 'nuget' or 'github'"):
            parse_source(raw)


class TestTrack:
    """Test major track parsing."""

    @pytest.mark.parametrize("raw,expected", [("1", 1), ("v2", 2), ("V3", 3), ("0", 0), ("10", 10)])
    def test_valid(self, raw, expected):
        assert parse_track(raw) == expected

    def test_absent(self):
        assert parse_track(None) is None
        assert parse_track("") is None

    @pytest.mark.parametrize("raw", ["one", "-1", "1.0", "01", "v", "vv2"])
    def test_invalid(self, raw):
        with pytest.raises(QueryValidationError, match="Invalid track parameter"):
            parse_track(raw)


class TestVersionBounds:
    """Test range bound coercion."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("2", "2.0.0"),
            ("2.1", "2.1.0"),
            ("2.1.3", "2.1.3"),
            ("2.0.0-0", "2.0.0-0"),
            ("2.0-preview1", "2.0.0-preview1"),
        ],
    )
    def test_coerces_partial_versions(self, raw, expected):
        assert coerce_version_bound(raw, "gte") == expected

    def test_absent(self):
        assert coerce_version_bound(None, "gt") is None
        assert coerce_version_bound("", "gt") is None

    @pytest.mark.parametrize("raw", ["abc", "1.2.3.4", ">1.0", "1..2", "v1.0.0"])
    def test_invalid(self, raw):
        with pytest.raises(QueryValidationError) as excinfo:
            coerce_version_bound(raw, "lt")
        assert str(excinfo.value) == f"Invalid semver format for parameter 'lt': '{raw}'"

    def test_symbolic_aliases(self):
        bounds = parse_bounds({">=": "1.0", "<": "2"})
        assert bounds == RangeBounds(gte="1.0.0", lt="2.0.0")

    def test_long_name_wins_over_symbol(self):
        assert parse_bounds({"gt": "1.0.0", ">": "5.0.0"}).gt == "1.0.0"


class TestParsePackageRequest:
    """Test full request construction."""

    def test_defaults(self):
        request = parse_package_request({}, "LocalStack.Client")
        query = request.query
        assert query.package == "localstack.client"
        assert query.source == Source.NUGET
        assert query.track is None
        assert query.include_prerelease is False
        assert query.prefer_clean is False
        assert query.bounds == RangeBounds()
        assert request.label is None
        assert request.color is None
        assert request.verbose is False

    def test_path_package_wins_over_query(self):
        request = parse_package_request({"package": "other"}, "from.path")
        assert request.query.package == "from.path"

    def test_legacy_package_parameter(self):
        assert parse_package_request({"package": "Legacy.Pkg"}).query.package == "legacy.pkg"

    @pytest.mark.parametrize("name", ["include-prerelease", "includePrerelease", "includeprerelease"])
    def test_prerelease_spellings(self, name):
        assert parse_package_request({name: "true"}, "p").query.include_prerelease is True

    def test_flags_need_literal_true(self):
        request = parse_package_request({"include-prerelease": "1", "prefer-clean": "yes", "log": "True"}, "p")
        assert request.query.include_prerelease is False
        assert request.query.prefer_clean is False
        assert request.verbose is False

    def test_all_options(self):
        request = parse_package_request(
            {
                "source": "github",
                "track": "v2",
                "preferClean": "true",
                "gte": "2.0.0-0",
                "label": "client",
                "color": "green",
                "log": "true",
            },
            "localstack.client",
        )
        assert request.query.source == Source.GITHUB
        assert request.query.track == 2
        assert request.query.prefer_clean is True
        assert request.query.bounds.gte == "2.0.0-0"
        assert (request.label, request.color, request.verbose) == ("client", "green", True)

    def test_empty_label_and_color_are_none(self):
        request = parse_package_request({"label": "", "color": ""}, "p")
        assert request.label is None
        assert request.color is None

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_package_request({"track": "x"}, "p")
