"""
Multi-Source Release Resolver

Asks each release source, highest priority first, for the releases that are
still unmatched, and remembers which source located each release so it can
later be retrieved through that same source.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from tilefetch.log_utils import logger as default_logger
from tilefetch.utils import format_release_ids

from .interfaces import (
    MatchedSet,
    ReleaseID,
    ReleaseRequirement,
    ReleaseSource,
    Stemcell,
)


@dataclass
class Resolution:
    """Outcome of resolving a desired release set against the configured sources."""

    matched: MatchedSet = field(default_factory=dict)
    unmatched: Dict[ReleaseID, Optional[Stemcell]] = field(default_factory=dict)
    located_by_source: Dict[ReleaseID, ReleaseSource] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.unmatched

    def matched_by(self, source: ReleaseSource) -> MatchedSet:
        """Entries located by `source`."""
        return {
            release_id: release
            for release_id, release in self.matched.items()
            if self.located_by_source[release_id] is source
        }


class ReleaseResolver:
    """
    Resolves releases across sources in a fixed priority order.

    A release found by an earlier source is never replaced by a later one.
    Releases no source holds are returned in `Resolution.unmatched`; deciding
    whether that is fatal is up to the caller.
    """

    def __init__(
        self, sources: Sequence[ReleaseSource], logger: Optional[logging.Logger] = None
    ):
        self.sources: List[ReleaseSource] = list(sources)
        self.logger = logger or default_logger

    def resolve(
        self, desired: ReleaseRequirement, stemcell: Optional[Stemcell] = None
    ) -> Resolution:
        """
        Locate every desired release in the first source that holds it.

        Raises:
            MissingCaptureGroupError: If a source's naming pattern is misconfigured.
            Exception: Listing failures propagate unchanged from the source.
        """
        resolution = Resolution(unmatched=dict(desired))

        for source in self.sources:
            if not resolution.unmatched:
                self.logger.debug(f"All releases resolved; skipping {source.name}")
                continue

            found = source.locate(dict(resolution.unmatched), stemcell)
            accepted = []
            for release_id, release in found.items():
                if release_id not in resolution.unmatched:
                    continue
                resolution.matched[release_id] = release
                resolution.located_by_source[release_id] = source
                del resolution.unmatched[release_id]
                accepted.append(release_id)

            if accepted:
                self.logger.info(
                    f"{source.name} provides {format_release_ids(accepted)}"
                )

        if resolution.unmatched:
            self.logger.debug(
                f"No source holds {format_release_ids(resolution.unmatched)}"
            )
        return resolution

    def download(
        self, release_dir: str, resolution: Resolution, concurrency: int = 0
    ) -> Dict[ReleaseID, str]:
        """
        Retrieve every matched release through the source that located it.

        Returns:
            Dict[ReleaseID, str]: Path written for each release.

        Raises:
            ReleaseFileError: If a destination file cannot be created.
            DownloadError: If a transfer fails.
        """
        written: Dict[ReleaseID, str] = {}
        for source in self.sources:
            own = resolution.matched_by(source)
            if own:
                written.update(source.retrieve(release_dir, own, concurrency))
        return written
