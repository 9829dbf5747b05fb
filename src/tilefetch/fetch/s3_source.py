"""
S3 Release Sources

Compiled and built release repositories share one implementation: both list a
bucket, run its naming pattern over every key and keep the desired releases.
They differ only in their ReleaseKind, which decides the required pattern
groups, the compatibility rule and the located-release variant produced.
"""

import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Optional

from tilefetch.log_utils import logger as default_logger

from .downloader import ReleaseDownloader
from .interfaces import (
    BuiltRelease,
    CompiledRelease,
    LocatedRelease,
    MatchedSet,
    ReleaseID,
    ReleaseRequirement,
    ReleaseSource,
    Stemcell,
)
from .patterns import ReleaseCandidate, ReleasePattern, match_keys
from .s3_client import S3ObjectStore, build_s3_client


@dataclass(frozen=True)
class ReleaseKind:
    """How a repository names and qualifies its artifacts."""

    label: str
    require_stemcell: bool

    def constraint_for(
        self, desired: ReleaseRequirement, release_id: ReleaseID, stemcell: Optional[Stemcell]
    ) -> Optional[Stemcell]:
        """The stemcell a candidate must match; a per-release constraint wins."""
        return desired.get(release_id) or stemcell

    def accepts(
        self,
        candidate: ReleaseCandidate,
        desired: ReleaseRequirement,
        stemcell: Optional[Stemcell],
    ) -> bool:
        if candidate.release_id not in desired:
            return False
        if not self.require_stemcell:
            return True
        constraint = self.constraint_for(desired, candidate.release_id, stemcell)
        return constraint is not None and candidate.stemcell == constraint

    def located(self, candidate: ReleaseCandidate) -> LocatedRelease:
        if self.require_stemcell:
            return CompiledRelease(
                id=candidate.release_id,
                stemcell_os=candidate.stemcell.os,
                stemcell_version=candidate.stemcell.version,
                path=candidate.key,
            )
        return BuiltRelease(id=candidate.release_id, path=candidate.key)


COMPILED = ReleaseKind("compiled", require_stemcell=True)
BUILT = ReleaseKind("built", require_stemcell=False)


class S3ReleaseSource(ReleaseSource):
    """
    Release source backed by one S3 bucket.

    The naming pattern is compiled at construction, so a pattern missing a
    required group fails while sources are being configured, before any
    listing and whatever releases are requested.
    """

    def __init__(
        self,
        store: S3ObjectStore,
        bucket: str,
        regex: str,
        kind: ReleaseKind,
        prefix: str = "",
        workers: int = 1,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.bucket = bucket
        self.regex = regex
        self.kind = kind
        self.prefix = prefix
        self.workers = workers
        self.logger = logger or default_logger
        self.pattern = ReleasePattern(regex, require_stemcell=kind.require_stemcell)

    @classmethod
    def compiled(cls, store: S3ObjectStore, bucket: str, regex: str, **kwargs: Any) -> "S3ReleaseSource":
        """Source for releases compiled against a specific stemcell."""
        return cls(store, bucket, regex, COMPILED, **kwargs)

    @classmethod
    def built(cls, store: S3ObjectStore, bucket: str, regex: str, **kwargs: Any) -> "S3ReleaseSource":
        """Source for stemcell-independent release tarballs."""
        return cls(store, bucket, regex, BUILT, **kwargs)

    @classmethod
    def from_settings(cls, settings: Dict[str, Any], kind: ReleaseKind, workers: int = 1) -> "S3ReleaseSource":
        """
        Build a source from a COMPILED_RELEASES / BUILT_RELEASES configuration block.

        Parameters:
            settings (Dict[str, Any]): Block with BUCKET and REGEX, plus optional REGION,
                ACCESS_KEY_ID, SECRET_ACCESS_KEY, ENDPOINT, PATH_STYLE and PREFIX.
            kind (ReleaseKind): COMPILED or BUILT.
            workers (int): Artifacts downloaded at once.
        """
        client = build_s3_client(
            region=settings.get("REGION"),
            access_key_id=settings.get("ACCESS_KEY_ID"),
            secret_access_key=settings.get("SECRET_ACCESS_KEY"),
            endpoint=settings.get("ENDPOINT"),
            path_style=bool(settings.get("PATH_STYLE", False)),
        )
        return cls(
            S3ObjectStore(client),
            settings["BUCKET"],
            settings["REGEX"],
            kind,
            prefix=settings.get("PREFIX") or "",
            workers=workers,
        )

    @property
    def name(self) -> str:
        return f"{self.kind.label} releases (s3://{self.bucket})"

    def locate(
        self, desired: ReleaseRequirement, stemcell: Optional[Stemcell]
    ) -> MatchedSet:
        pattern = self.pattern
        matched: MatchedSet = {}
        if not desired:
            return matched

        for keys in self.store.iter_key_pages(self.bucket, self.prefix):
            for candidate in match_keys(pattern, keys):
                if not self.kind.accepts(candidate, desired, stemcell):
                    self.logger.debug(
                        f"Skipping {candidate.key}: not a desired {self.kind.label} release"
                    )
                    continue
                if candidate.release_id in matched:
                    self.logger.debug(
                        f"{candidate.release_id} listed again at {candidate.key}; "
                        f"replacing {matched[candidate.release_id].path}"
                    )
                matched[candidate.release_id] = self.kind.located(candidate)

        self.logger.debug(
            f"{self.name}: located {len(matched)} of {len(desired)} desired releases"
        )
        return matched

    def retrieve(
        self, release_dir: str, matched: MatchedSet, concurrency: int
    ) -> Dict[ReleaseID, str]:
        downloader = ReleaseDownloader(self._transfer, workers=self.workers)
        return downloader.download_releases(release_dir, matched, concurrency)

    def _transfer(self, release: LocatedRelease, fileobj: BinaryIO, concurrency: int) -> None:
        self.store.download(self.bucket, release.path, fileobj, concurrency)
