"""Tests for release naming patterns."""

import pytest

from tilefetch.exceptions import MissingCaptureGroupError, PatternError
from tilefetch.fetch.interfaces import ReleaseID, Stemcell
from tilefetch.fetch.patterns import ReleasePattern, match_keys

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]

BUILT_REGEX = (
    r"^2.5/.+/(?P<release_name>[a-z-_]+)-"
    r"(?P<release_version>[0-9\.]+(-\w+(\.[0-9]+)?)?)\.tgz$"
)
COMPILED_REGEX = (
    r"^2.5/.+/(?P<release_name>[a-z-_]+)-"
    r"(?P<release_version>[0-9\.]+(-\w+(\.[0-9]+)?)?)"
    r"(?:-(?P<stemcell_os>[a-z-_]+))?(?:-(?P<stemcell_version>[\d\.]+))?\.tgz$"
)


class TestPatternValidation:
    """Required groups are checked when the pattern is built."""

    def test_built_pattern_without_name_group_is_rejected(self):
        with pytest.raises(MissingCaptureGroupError) as exc_info:
            ReleasePattern(r"^2.5/.+/([a-z-_]+)-(?P<release_version>[0-9\.]+)\.tgz$")

        assert exc_info.value.missing_groups == ["release_name"]
        assert "missing required capture group" in str(exc_info.value)
        assert "release_name" in str(exc_info.value)

    def test_compiled_pattern_needs_stemcell_groups(self):
        with pytest.raises(MissingCaptureGroupError) as exc_info:
            ReleasePattern(BUILT_REGEX, require_stemcell=True)

        assert exc_info.value.missing_groups == ["stemcell_os", "stemcell_version"]

    def test_built_pattern_accepts_extra_groups(self):
        pattern = ReleasePattern(COMPILED_REGEX)
        assert pattern.require_stemcell is False

    def test_invalid_regex_raises_pattern_error(self):
        with pytest.raises(PatternError) as exc_info:
            ReleasePattern(r"(?P<release_name>[a-z")

        assert not isinstance(exc_info.value, MissingCaptureGroupError)
        assert exc_info.value.field == "regex"


class TestPatternMatch:
    """Tests for ReleasePattern.match."""

    def test_non_matching_keys_yield_nothing(self):
        pattern = ReleasePattern(BUILT_REGEX)
        assert pattern.match("some-key") is None
        assert pattern.match("1.10/uaa/uaa-1.2.3.tgz") is None

    def test_built_key(self):
        candidate = ReleasePattern(BUILT_REGEX).match("2.5/bpm/bpm-1.2.3-lts.tgz")

        assert candidate.release_id == ReleaseID("bpm", "1.2.3-lts")
        assert candidate.stemcell is None
        assert candidate.key == "2.5/bpm/bpm-1.2.3-lts.tgz"

    def test_compiled_key(self):
        pattern = ReleasePattern(COMPILED_REGEX, require_stemcell=True)
        candidate = pattern.match("2.5/bpm/bpm-1.2.3-lts-ubuntu-xenial-190.0.0.tgz")

        assert candidate.release_id == ReleaseID("bpm", "1.2.3-lts")
        assert candidate.stemcell == Stemcell("ubuntu-xenial", "190.0.0")

    def test_compiled_pattern_on_key_without_stemcell(self):
        pattern = ReleasePattern(COMPILED_REGEX, require_stemcell=True)
        candidate = pattern.match("2.5/bpm/bpm-4.5.6.tgz")

        assert candidate.release_id == ReleaseID("bpm", "4.5.6")
        assert candidate.stemcell is None

    def test_match_keys_filters_a_page(self):
        pattern = ReleasePattern(BUILT_REGEX)
        keys = ["some-key", "1.10/uaa/uaa-1.2.3.tgz", "2.5/bpm/bpm-1.2.3-lts.tgz"]

        candidates = list(match_keys(pattern, keys))

        assert [c.key for c in candidates] == ["2.5/bpm/bpm-1.2.3-lts.tgz"]
