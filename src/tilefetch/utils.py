# src/tilefetch/utils.py
import importlib.metadata
from typing import Iterable, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry  # type: ignore

from tilefetch.constants import DEFAULT_BACKOFF_FACTOR, DEFAULT_CONNECT_RETRIES

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE: Optional[str] = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `tilefetch/{version}`, where `{version}` is the installed package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version("tilefetch")
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"tilefetch/{app_version}"

    return _USER_AGENT_CACHE


def create_retry_session(
    retries: int = DEFAULT_CONNECT_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
) -> requests.Session:
    """
    Build a requests Session that retries transient failures.

    Connection, read and status errors (408, 429 and 5xx gateway statuses) are retried
    by urllib3 for idempotent methods. Final HTTP errors are not raised by the retry
    layer; callers surface them with `raise_for_status()`.

    Parameters:
        retries (int): Maximum retry attempts for each kind of failure.
        backoff_factor (float): Exponential backoff factor between attempts.

    Returns:
        requests.Session: A session with the retrying adapter mounted for http and https.
    """
    retry_strategy = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff_factor,
        status_forcelist=[408, 429, 500, 502, 503, 504],
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers["User-Agent"] = get_user_agent()
    return session


def format_release_ids(release_ids: Iterable[object]) -> str:
    """Render release identities as a sorted, comma separated list for messages."""
    return ", ".join(sorted(str(release_id) for release_id in release_ids))
