"""
Fetch Orchestrator

Runs one complete fetch: builds the configured release sources in priority
order, skips releases already on disk, resolves and downloads the rest, and
optionally removes tarballs that are no longer wanted.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from tilefetch.config import get_int_setting, get_source_settings
from tilefetch.constants import (
    BOSHIO_URL,
    BUILT_RELEASES_KEY,
    COMPILED_RELEASES_KEY,
    DEFAULT_DOWNLOAD_THREADS,
    DEFAULT_PARALLEL_RELEASE_DOWNLOADS,
    DEFAULT_RELEASES_DIR,
)
from tilefetch.exceptions import MissingReleasesError
from tilefetch.log_utils import logger
from tilefetch.utils import format_release_ids

from .boshio_source import BOSHIOReleaseSource
from .interfaces import ReleaseID, ReleaseRequirement, ReleaseSource, Stemcell
from .local_releases import LocalReleaseDirectory
from .resolver import ReleaseResolver
from .s3_source import BUILT, COMPILED, S3ReleaseSource


@dataclass
class FetchResult:
    """Summary of one fetch run."""

    downloaded: Dict[ReleaseID, str] = field(default_factory=dict)
    already_present: Dict[ReleaseID, str] = field(default_factory=dict)
    unmatched: List[ReleaseID] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)


def build_release_sources(config: Dict[str, Any]) -> List[ReleaseSource]:
    """
    Build release sources from configuration, highest priority first.

    The compiled bucket comes first when configured, bosh.io is always
    consulted, and the built bucket comes last when configured.
    """
    workers = get_int_setting(
        config, "PARALLEL_RELEASE_DOWNLOADS", DEFAULT_PARALLEL_RELEASE_DOWNLOADS
    )
    sources: List[ReleaseSource] = []

    compiled_settings = get_source_settings(config, COMPILED_RELEASES_KEY)
    if compiled_settings:
        sources.append(S3ReleaseSource.from_settings(compiled_settings, COMPILED, workers))

    sources.append(
        BOSHIOReleaseSource(config.get("BOSHIO_URL") or BOSHIO_URL, workers=workers)
    )

    built_settings = get_source_settings(config, BUILT_RELEASES_KEY)
    if built_settings:
        sources.append(S3ReleaseSource.from_settings(built_settings, BUILT, workers))

    return sources


class FetchOrchestrator:
    """Coordinates local inspection, resolution and download for a release set."""

    def __init__(
        self,
        config: Dict[str, Any],
        sources: Optional[Sequence[ReleaseSource]] = None,
    ):
        """
        Parameters:
            config (Dict[str, Any]): Loaded configuration (see tilefetch.config).
            sources (Sequence[ReleaseSource] | None): Sources in priority order; built from
                `config` when omitted.
        """
        self.config = config
        self.sources: List[ReleaseSource] = (
            list(sources) if sources is not None else build_release_sources(config)
        )
        self.release_dir = str(config.get("RELEASES_DIR") or DEFAULT_RELEASES_DIR)
        self.local = LocalReleaseDirectory(self.release_dir)

    def fetch(
        self, desired: ReleaseRequirement, stemcell: Optional[Stemcell] = None
    ) -> FetchResult:
        """
        Make the releases directory hold every desired release.

        Returns:
            FetchResult: What was downloaded, already present, unmatched and deleted.

        Raises:
            MissingReleasesError: If FAIL_ON_MISSING_RELEASES is set and some releases
                are in no source. Nothing is downloaded in that case.
            ReleaseFileError: If a release file cannot be written.
            DownloadError: If a transfer fails.
        """
        os.makedirs(self.release_dir, exist_ok=True)
        result = FetchResult()

        present = self.local.present(desired, stemcell)
        result.already_present = {rid: local.path for rid, local in present.items()}
        if present:
            logger.info(f"Already present: {format_release_ids(present)}")

        remaining = {rid: sc for rid, sc in desired.items() if rid not in present}
        resolver = ReleaseResolver(self.sources)
        resolution = resolver.resolve(remaining, stemcell)
        result.unmatched = sorted(resolution.unmatched, key=str)

        if not resolution.complete:
            if self.config.get("FAIL_ON_MISSING_RELEASES", True):
                raise MissingReleasesError(
                    "could not find the following releases", result.unmatched
                )
            logger.warning(
                f"Could not find releases: {format_release_ids(result.unmatched)}"
            )

        concurrency = get_int_setting(
            self.config, "DOWNLOAD_THREADS", DEFAULT_DOWNLOAD_THREADS
        )
        result.downloaded = resolver.download(self.release_dir, resolution, concurrency)

        if self.config.get("DELETE_EXTRA_RELEASES", False):
            keep = list(result.already_present.values()) + list(result.downloaded.values())
            result.deleted = self.local.delete_extra_releases(keep)

        logger.info(
            f"Fetch complete: {len(result.downloaded)} downloaded, "
            f"{len(result.already_present)} already present, "
            f"{len(result.deleted)} removed"
        )
        return result
