"""
bosh.io Release Source

Looks releases up in the public bosh.io index. A release named `uaa` may be
published from any of several GitHub organisations and repository names
(`uaa-release`, `uaa-boshrelease`, ...), so each combination is tried in turn
until one lists the desired version.
"""

import logging
from typing import Any, BinaryIO, Dict, List, Optional
from urllib.parse import quote

import requests

from tilefetch.constants import (
    BOSHIO_API_TIMEOUT,
    BOSHIO_DOWNLOAD_PATH,
    BOSHIO_KNOWN_ORGANIZATIONS,
    BOSHIO_RELEASES_API_PATH,
    BOSHIO_REPOSITORY_SUFFIXES,
    BOSHIO_URL,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
)
from tilefetch.log_utils import logger as default_logger
from tilefetch.utils import create_retry_session

from .downloader import ReleaseDownloader
from .interfaces import (
    BuiltRelease,
    LocatedRelease,
    MatchedSet,
    ReleaseID,
    ReleaseRequirement,
    ReleaseSource,
    Stemcell,
)


class BOSHIOReleaseSource(ReleaseSource):
    """Release source backed by the bosh.io releases API."""

    def __init__(
        self,
        server_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        workers: int = 1,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Parameters:
            server_url (str | None): Index base URL; defaults to https://bosh.io.
            session (requests.Session | None): HTTP session; a retrying session is created if omitted.
            workers (int): Artifacts downloaded at once.
            logger (logging.Logger | None): Logger for progress messages.
        """
        self.server_url = (server_url or BOSHIO_URL).rstrip("/")
        self.session = session or create_retry_session()
        self.workers = workers
        self.logger = logger or default_logger

    @property
    def name(self) -> str:
        return f"bosh.io ({self.server_url})"

    def releases_url(self, org: str, repo: str) -> str:
        return f"{self.server_url}/{BOSHIO_RELEASES_API_PATH}/github.com/{org}/{repo}"

    def download_url(self, org: str, repo: str, version: str) -> str:
        return (
            f"{self.server_url}/{BOSHIO_DOWNLOAD_PATH}/github.com/{org}/{repo}"
            f"?v={quote(version, safe='')}"
        )

    def locate(
        self, desired: ReleaseRequirement, stemcell: Optional[Stemcell]
    ) -> MatchedSet:
        matched: MatchedSet = {}
        for release_id in desired:
            located = self._find(release_id)
            if located is not None:
                matched[release_id] = located
        self.logger.debug(
            f"{self.name}: located {len(matched)} of {len(desired)} desired releases"
        )
        return matched

    def _find(self, release_id: ReleaseID) -> Optional[BuiltRelease]:
        for org in BOSHIO_KNOWN_ORGANIZATIONS:
            for suffix in BOSHIO_REPOSITORY_SUFFIXES:
                repo = f"{release_id.name}{suffix}"
                versions = self._published_versions(org, repo)
                if versions is None:
                    continue
                if release_id.version in versions:
                    self.logger.debug(f"Found {release_id} at github.com/{org}/{repo}")
                    return BuiltRelease(
                        id=release_id,
                        path=self.download_url(org, repo, release_id.version),
                    )
                self.logger.debug(
                    f"github.com/{org}/{repo} does not publish version {release_id.version}"
                )
        return None

    def _published_versions(self, org: str, repo: str) -> Optional[List[str]]:
        """
        Versions bosh.io publishes for `github.com/{org}/{repo}`.

        Returns None when bosh.io does not know the repository. Any other HTTP
        failure is raised as a requests exception.
        """
        url = self.releases_url(org, repo)
        response = self.session.get(url, timeout=BOSHIO_API_TIMEOUT)
        try:
            if response.status_code == 404:
                return None
            response.raise_for_status()
            payload: Any = response.json()
        finally:
            response.close()

        if not payload:
            return None
        return [str(entry.get("version")) for entry in payload if isinstance(entry, dict)]

    def retrieve(
        self, release_dir: str, matched: MatchedSet, concurrency: int
    ) -> Dict[ReleaseID, str]:
        if concurrency > 0:
            self.logger.debug(
                f"{self.name} downloads over a single stream; ignoring concurrency {concurrency}"
            )
        downloader = ReleaseDownloader(self._transfer, workers=self.workers)
        return downloader.download_releases(release_dir, matched, concurrency)

    def _transfer(self, release: LocatedRelease, fileobj: BinaryIO, concurrency: int) -> None:
        response = self.session.get(
            release.path, stream=True, timeout=DEFAULT_REQUEST_TIMEOUT
        )
        try:
            response.raise_for_status()
            for chunk in response.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                if chunk:
                    fileobj.write(chunk)
        finally:
            response.close()
