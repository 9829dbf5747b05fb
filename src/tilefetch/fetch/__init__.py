"""
tilefetch Fetch Subsystem

Resolves a desired release set against a prioritized list of artifact
repositories and downloads the matched tarballs.

Core Components:
- interfaces: Release identity types and the ReleaseSource interface
- patterns: Naming pattern matcher for repository keys
- s3_client: boto3 transport for S3 buckets
- s3_source: Compiled and built release sources backed by S3
- boshio_source: Release source backed by the public bosh.io index
- resolver: Multi-source resolution in priority order
- downloader: Writes located releases to the releases directory
- local_releases: Releases already present on disk
- orchestrator: End-to-end fetch workflow
"""

from .boshio_source import BOSHIOReleaseSource
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
from .local_releases import LocalRelease, LocalReleaseDirectory
from .orchestrator import FetchOrchestrator, FetchResult, build_release_sources
from .patterns import ReleaseCandidate, ReleasePattern, match_keys
from .resolver import ReleaseResolver, Resolution
from .s3_client import S3ObjectStore, build_s3_client
from .s3_source import BUILT, COMPILED, ReleaseKind, S3ReleaseSource

__all__ = [
    # Interfaces
    "ReleaseID",
    "Stemcell",
    "CompiledRelease",
    "BuiltRelease",
    "LocatedRelease",
    "MatchedSet",
    "ReleaseRequirement",
    "ReleaseSource",
    # Matching
    "ReleasePattern",
    "ReleaseCandidate",
    "match_keys",
    # Sources
    "S3ObjectStore",
    "build_s3_client",
    "S3ReleaseSource",
    "ReleaseKind",
    "COMPILED",
    "BUILT",
    "BOSHIOReleaseSource",
    # Resolution and retrieval
    "ReleaseResolver",
    "Resolution",
    "ReleaseDownloader",
    "LocalRelease",
    "LocalReleaseDirectory",
    # Orchestration
    "FetchOrchestrator",
    "FetchResult",
    "build_release_sources",
]
