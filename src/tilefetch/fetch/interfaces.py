"""
Core Interfaces for the tilefetch Fetch Subsystem

This module defines the value types that identify releases and stemcells,
the located-release variants returned by sources, and the ReleaseSource
interface every repository implementation fulfils.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Union

from tilefetch.constants import RELEASE_TARBALL_EXTENSION


@dataclass(frozen=True)
class ReleaseID:
    """Identifies a release across a whole resolution."""

    name: str
    """The release name (e.g., 'bpm')"""

    version: str
    """The release version (e.g., '1.2.3-lts')"""

    def __str__(self) -> str:
        return f"{self.name}/{self.version}"


@dataclass(frozen=True)
class Stemcell:
    """The base runtime image a compiled release is built against."""

    os: str
    """Stemcell operating system (e.g., 'ubuntu-xenial')"""

    version: str
    """Stemcell version (e.g., '190.0.0')"""

    def __str__(self) -> str:
        return f"{self.os}/{self.version}"


@dataclass(frozen=True)
class CompiledRelease:
    """A release compiled against a specific stemcell, located in a repository."""

    id: ReleaseID
    stemcell_os: str
    stemcell_version: str
    path: str
    """Repository location of the artifact; only the producing source interprets it."""

    @property
    def stemcell(self) -> Stemcell:
        return Stemcell(self.stemcell_os, self.stemcell_version)

    @property
    def filename(self) -> str:
        """Local file name: `<name>-<version>-<stemcell_os>-<stemcell_version>.tgz`."""
        return (
            f"{self.id.name}-{self.id.version}-"
            f"{self.stemcell_os}-{self.stemcell_version}{RELEASE_TARBALL_EXTENSION}"
        )


@dataclass(frozen=True)
class BuiltRelease:
    """A stemcell-independent release located in a repository."""

    id: ReleaseID
    path: str
    """Repository location of the artifact; only the producing source interprets it."""

    @property
    def filename(self) -> str:
        """Local file name: `<name>-<version>.tgz`."""
        return f"{self.id.name}-{self.id.version}{RELEASE_TARBALL_EXTENSION}"


LocatedRelease = Union[CompiledRelease, BuiltRelease]

# Desired release set: each release with an optional stemcell constraint
ReleaseRequirement = Mapping[ReleaseID, Optional[Stemcell]]

MatchedSet = Dict[ReleaseID, LocatedRelease]


class ReleaseSource(ABC):
    """
    Abstract base class for release sources.

    A ReleaseSource finds desired releases in one artifact repository and
    retrieves the ones it found.
    """

    @property
    def name(self) -> str:
        """Short human-readable identifier used in log messages."""
        return type(self).__name__

    @abstractmethod
    def locate(
        self, desired: ReleaseRequirement, stemcell: Optional[Stemcell]
    ) -> MatchedSet:
        """
        Find which of the desired releases this source holds.

        Parameters:
            desired (ReleaseRequirement): Releases still needed, each with an optional stemcell constraint.
            stemcell (Optional[Stemcell]): Stemcell constraint applied when a release carries none of its own.

        Returns:
            MatchedSet: Located releases keyed by identity; every key is a key of `desired`.

        Raises:
            MissingCaptureGroupError: If the source's naming pattern is misconfigured.
            Exception: Listing failures from the underlying repository client propagate unchanged.
        """

    @abstractmethod
    def retrieve(
        self, release_dir: str, matched: MatchedSet, concurrency: int
    ) -> Dict[ReleaseID, str]:
        """
        Download releases previously located by this source into `release_dir`.

        Parameters:
            release_dir (str): Existing destination directory.
            matched (MatchedSet): Releases located by this source.
            concurrency (int): Parallel transfer hint per artifact; `<= 0` means the transport default.

        Returns:
            Dict[ReleaseID, str]: Path written for each release.

        Raises:
            ReleaseFileError: If a destination file cannot be created.
            DownloadError: If a transfer fails.
        """
