"""Tests for inspecting release tarballs already on disk."""

import tarfile

import pytest

from tilefetch.fetch.interfaces import ReleaseID, Stemcell
from tilefetch.fetch.local_releases import LocalReleaseDirectory, read_release_manifest

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]

XENIAL = Stemcell("ubuntu-xenial", "190.0.0")


class TestReadReleaseManifest:
    """Tests for read_release_manifest."""

    def test_reads_manifest(self, release_dir, make_release_tarball):
        path = make_release_tarball(release_dir, "bpm.tgz", "bpm", "1.2.3")

        manifest = read_release_manifest(str(path))

        assert manifest["name"] == "bpm"
        assert manifest["version"] == "1.2.3"

    def test_archive_without_manifest(self, release_dir):
        path = release_dir / "empty.tgz"
        with tarfile.open(path, "w:gz"):
            pass

        with pytest.raises(KeyError):
            read_release_manifest(str(path))


class TestLocalReleaseDirectory:
    """Tests for LocalReleaseDirectory."""

    def test_identifies_built_and_compiled_tarballs(self, release_dir, make_release_tarball):
        make_release_tarball(release_dir, "bpm-1.2.3.tgz", "bpm", "1.2.3")
        make_release_tarball(
            release_dir,
            "uaa-74.0.0-ubuntu-xenial-190.0.0.tgz",
            "uaa",
            "74.0.0",
            stemcell="ubuntu-xenial/190.0.0",
        )

        releases = {r.id: r for r in LocalReleaseDirectory(str(release_dir)).releases()}

        assert releases[ReleaseID("bpm", "1.2.3")].stemcell is None
        assert releases[ReleaseID("uaa", "74.0.0")].stemcell == XENIAL

    def test_unreadable_tarballs_are_skipped(self, release_dir):
        (release_dir / "broken.tgz").write_bytes(b"not a tarball")
        (release_dir / "notes.txt").write_text("ignored")

        assert LocalReleaseDirectory(str(release_dir)).releases() == []

    def test_missing_directory_has_no_releases(self, tmp_path):
        assert LocalReleaseDirectory(str(tmp_path / "absent")).releases() == []

    def test_present_respects_stemcell(self, release_dir, make_release_tarball):
        make_release_tarball(release_dir, "bpm-1.2.3.tgz", "bpm", "1.2.3")
        make_release_tarball(
            release_dir, "uaa.tgz", "uaa", "74.0.0", stemcell="ubuntu-xenial/191.0.0"
        )
        make_release_tarball(
            release_dir, "capi.tgz", "capi", "1.0.0", stemcell="ubuntu-xenial/190.0.0"
        )
        desired = {
            ReleaseID("bpm", "1.2.3"): None,
            ReleaseID("uaa", "74.0.0"): None,
            ReleaseID("capi", "1.0.0"): None,
        }

        present = LocalReleaseDirectory(str(release_dir)).present(desired, XENIAL)

        assert set(present) == {ReleaseID("bpm", "1.2.3"), ReleaseID("capi", "1.0.0")}

    def test_present_ignores_undesired_releases(self, release_dir, make_release_tarball):
        make_release_tarball(release_dir, "bpm.tgz", "bpm", "1.0.0")

        present = LocalReleaseDirectory(str(release_dir)).present(
            {ReleaseID("bpm", "2.0.0"): None}
        )

        assert present == {}

    def test_delete_extra_releases(self, release_dir, make_release_tarball):
        keep = make_release_tarball(release_dir, "bpm.tgz", "bpm", "1.2.3")
        extra = make_release_tarball(release_dir, "old.tgz", "bpm", "1.0.0")
        notes = release_dir / "notes.txt"
        notes.write_text("keep me")

        deleted = LocalReleaseDirectory(str(release_dir)).delete_extra_releases([str(keep)])

        assert deleted == [str(extra)]
        assert keep.exists()
        assert not extra.exists()
        assert notes.exists()
