"""Tests for release identity types and located-release file names."""

import pytest

from tilefetch.fetch.interfaces import (
    BuiltRelease,
    CompiledRelease,
    ReleaseID,
    ReleaseSource,
    Stemcell,
)

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]


class TestReleaseID:
    """Tests for ReleaseID value semantics."""

    def test_equal_ids_are_interchangeable_as_keys(self):
        desired = {ReleaseID("bpm", "1.2.3"): None}
        assert ReleaseID("bpm", "1.2.3") in desired

    def test_str(self):
        assert str(ReleaseID("bpm", "1.2.3-lts")) == "bpm/1.2.3-lts"

    def test_is_immutable(self):
        release_id = ReleaseID("bpm", "1.2.3")
        with pytest.raises(AttributeError):
            release_id.name = "uaa"


class TestLocatedReleaseFilenames:
    """File names depend only on identity and stemcell."""

    def test_compiled_filename(self):
        release = CompiledRelease(
            id=ReleaseID("bpm", "1.2.3"),
            stemcell_os="ubuntu-trusty",
            stemcell_version="1234",
            path="some/deep/key/whatever.tgz",
        )
        assert release.filename == "bpm-1.2.3-ubuntu-trusty-1234.tgz"

    def test_built_filename_ignores_repository_path(self):
        release = BuiltRelease(id=ReleaseID("bpm", "1.2.3-lts"), path="2.5/x/y/z.tgz")
        assert release.filename == "bpm-1.2.3-lts.tgz"

    def test_compiled_stemcell_property(self):
        release = CompiledRelease(ReleaseID("bpm", "1.2.3"), "ubuntu-xenial", "190.0.0", "k")
        assert release.stemcell == Stemcell("ubuntu-xenial", "190.0.0")
        assert str(release.stemcell) == "ubuntu-xenial/190.0.0"


class TestReleaseSource:
    """Tests for the ReleaseSource abstract base class."""

    def test_cannot_instantiate_without_methods(self):
        with pytest.raises(TypeError):
            ReleaseSource()

    def test_default_name_is_class_name(self):
        class FakeSource(ReleaseSource):
            def locate(self, desired, stemcell):
                return {}

            def retrieve(self, release_dir, matched, concurrency):
                return {}

        assert FakeSource().name == "FakeSource"
