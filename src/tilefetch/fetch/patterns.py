"""
Release Naming Patterns

Turns raw repository keys into candidate release identities using a regular
expression with named capture groups. The group set is validated when the
pattern is built, so a misconfigured pattern fails before any listing happens.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from tilefetch.constants import (
    BUILT_RELEASE_GROUPS,
    COMPILED_RELEASE_GROUPS,
    MSG_MISSING_CAPTURE_GROUP,
    RELEASE_NAME_GROUP,
    RELEASE_VERSION_GROUP,
    STEMCELL_OS_GROUP,
    STEMCELL_VERSION_GROUP,
)
from tilefetch.exceptions import MissingCaptureGroupError, PatternError

from .interfaces import ReleaseID, Stemcell


@dataclass(frozen=True)
class ReleaseCandidate:
    """Identity extracted from one repository key."""

    release_id: ReleaseID
    stemcell: Optional[Stemcell]
    """Set only when the key carried both stemcell OS and version."""

    key: str


class ReleasePattern:
    """
    A compiled naming pattern for one kind of release repository.

    Built-release patterns must define `release_name` and `release_version`;
    compiled-release patterns must additionally define `stemcell_os` and
    `stemcell_version`.
    """

    def __init__(self, regex: str, require_stemcell: bool = False):
        """
        Compile `regex` and check it defines every group the release kind needs.

        Raises:
            PatternError: If the expression does not compile.
            MissingCaptureGroupError: If a required named group is absent.
        """
        self.regex = regex
        self.require_stemcell = require_stemcell
        try:
            self._compiled = re.compile(regex)
        except re.error as e:
            raise PatternError(
                "invalid release pattern", field="regex", value=regex, details=str(e)
            ) from e

        required = COMPILED_RELEASE_GROUPS if require_stemcell else BUILT_RELEASE_GROUPS
        defined = self._compiled.groupindex
        missing = [group for group in required if group not in defined]
        if missing:
            raise MissingCaptureGroupError(MSG_MISSING_CAPTURE_GROUP, regex, missing)

    def match(self, key: str) -> Optional[ReleaseCandidate]:
        """
        Extract a candidate from `key`.

        Returns:
            ReleaseCandidate | None: The candidate, or None when the key does not match
            (it belongs to some unrelated artifact) or captured an empty name/version.
        """
        found = self._compiled.search(key)
        if found is None:
            return None

        name = found.group(RELEASE_NAME_GROUP)
        version = found.group(RELEASE_VERSION_GROUP)
        if not name or not version:
            return None

        stemcell = None
        if STEMCELL_OS_GROUP in self._compiled.groupindex and (
            STEMCELL_VERSION_GROUP in self._compiled.groupindex
        ):
            stemcell_os = found.group(STEMCELL_OS_GROUP)
            stemcell_version = found.group(STEMCELL_VERSION_GROUP)
            if stemcell_os and stemcell_version:
                stemcell = Stemcell(stemcell_os, stemcell_version)

        return ReleaseCandidate(ReleaseID(name, version), stemcell, key)

    def __repr__(self) -> str:
        return f"ReleasePattern({self.regex!r}, require_stemcell={self.require_stemcell})"


def match_keys(pattern: ReleasePattern, keys: Iterable[str]) -> Iterator[ReleaseCandidate]:
    """Yield the candidates of every key in `keys` that matches `pattern`."""
    for key in keys:
        candidate = pattern.match(key)
        if candidate is not None:
            yield candidate
