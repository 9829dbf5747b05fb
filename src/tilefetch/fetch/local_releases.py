"""
Local Release Directory

Inspects release tarballs already present in the releases directory. Each
tarball carries a `release.MF` manifest naming the release and version; for
compiled releases the manifest's compiled packages also name the stemcell.
"""

import os
import tarfile
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import yaml

from tilefetch.constants import RELEASE_MANIFEST_NAME, RELEASE_TARBALL_EXTENSION
from tilefetch.log_utils import logger

from .interfaces import ReleaseID, ReleaseRequirement, Stemcell


@dataclass(frozen=True)
class LocalRelease:
    """A release tarball found on disk."""

    id: ReleaseID
    stemcell: Optional[Stemcell]
    path: str


def read_release_manifest(tarball_path: str) -> Dict[str, Any]:
    """
    Return the parsed `release.MF` of a release tarball.

    Raises:
        tarfile.TarError: If the file is not a readable tar archive.
        KeyError: If the archive has no release manifest.
        yaml.YAMLError: If the manifest is not valid YAML.
        OSError: If the file cannot be read.
    """
    with tarfile.open(tarball_path, "r:*") as archive:
        member = None
        for candidate in archive.getmembers():
            if os.path.normpath(candidate.name) == RELEASE_MANIFEST_NAME:
                member = candidate
                break
        if member is None:
            raise KeyError(f"{RELEASE_MANIFEST_NAME} not found in {tarball_path}")
        extracted = archive.extractfile(member)
        if extracted is None:
            raise KeyError(f"{RELEASE_MANIFEST_NAME} in {tarball_path} is not a file")
        with extracted:
            manifest = yaml.safe_load(extracted)
    if not isinstance(manifest, dict):
        raise KeyError(f"{RELEASE_MANIFEST_NAME} in {tarball_path} is not a mapping")
    return manifest


def _manifest_stemcell(manifest: Dict[str, Any]) -> Optional[Stemcell]:
    # compiled_packages entries carry "stemcell: <os>/<version>"
    for package in manifest.get("compiled_packages") or []:
        stemcell = package.get("stemcell") if isinstance(package, dict) else None
        if stemcell and "/" in str(stemcell):
            stemcell_os, stemcell_version = str(stemcell).split("/", 1)
            return Stemcell(stemcell_os, stemcell_version)
    return None


class LocalReleaseDirectory:
    """Release tarballs stored in one directory."""

    def __init__(self, path: str):
        self.path = path

    def tarball_paths(self) -> List[str]:
        if not os.path.isdir(self.path):
            return []
        return sorted(
            os.path.join(self.path, entry)
            for entry in os.listdir(self.path)
            if entry.endswith(RELEASE_TARBALL_EXTENSION)
        )

    def releases(self) -> List[LocalRelease]:
        """
        Identify every release tarball in the directory.

        Tarballs whose manifest cannot be read are logged and skipped.
        """
        found: List[LocalRelease] = []
        for tarball in self.tarball_paths():
            try:
                manifest = read_release_manifest(tarball)
                release_id = ReleaseID(str(manifest["name"]), str(manifest["version"]))
            except (tarfile.TarError, KeyError, yaml.YAMLError, OSError) as e:
                logger.warning(f"Ignoring unreadable release tarball {tarball}: {e}")
                continue
            found.append(LocalRelease(release_id, _manifest_stemcell(manifest), tarball))
        return found

    def present(
        self, desired: ReleaseRequirement, stemcell: Optional[Stemcell] = None
    ) -> Dict[ReleaseID, LocalRelease]:
        """
        Desired releases already on disk.

        A compiled tarball counts only when its stemcell equals the release's
        constraint (its own, else `stemcell`); a built tarball always counts.
        """
        present: Dict[ReleaseID, LocalRelease] = {}
        for release in self.releases():
            if release.id not in desired:
                continue
            constraint = desired.get(release.id) or stemcell
            if release.stemcell is not None and constraint is not None:
                if release.stemcell != constraint:
                    logger.debug(
                        f"{release.path} is compiled against {release.stemcell}, "
                        f"not {constraint}"
                    )
                    continue
            present[release.id] = release
        return present

    def delete_extra_releases(self, keep_paths: Iterable[str]) -> List[str]:
        """
        Remove every release tarball not listed in `keep_paths`.

        Returns:
            List[str]: Paths of the removed tarballs.
        """
        keep = {os.path.abspath(path) for path in keep_paths}
        deleted: List[str] = []
        for tarball in self.tarball_paths():
            if os.path.abspath(tarball) in keep:
                continue
            try:
                os.remove(tarball)
            except OSError as e:
                logger.error(f"Error removing extra release {tarball}: {e}")
                continue
            logger.info(f"Removed extra release {os.path.basename(tarball)}")
            deleted.append(tarball)
        return deleted
