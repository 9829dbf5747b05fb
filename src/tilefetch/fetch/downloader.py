"""
Release Downloader

Writes located releases into a local directory under names derived purely
from their identity. The byte transfer itself is delegated to a callable
supplied by the release source that located them.
"""

import os
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import BinaryIO, Callable, Dict, Optional

from tilefetch.constants import MSG_DOWNLOAD_FAILED, PARTIAL_DOWNLOAD_SUFFIX
from tilefetch.exceptions import DownloadError, ReleaseFileError
from tilefetch.log_utils import logger

from .interfaces import LocatedRelease, MatchedSet, ReleaseID

# transfer(release, fileobj, concurrency) streams one artifact into fileobj
TransferFn = Callable[[LocatedRelease, BinaryIO, int], None]


class ReleaseDownloader:
    """
    Downloads a matched release set through one source's transport.

    Each artifact is written to `<filename>.part` and moved into place once the
    transfer completes; a failed transfer leaves no file behind.
    """

    def __init__(self, transfer: TransferFn, workers: int = 1):
        """
        Parameters:
            transfer (TransferFn): Streams a located release into an open binary file.
                Any exception it raises is reported as DownloadError.
            workers (int): Number of artifacts downloaded at once; 1 downloads sequentially.
        """
        self.transfer = transfer
        self.workers = max(1, workers)

    def download_releases(
        self, release_dir: str, matched: MatchedSet, concurrency: int = 0
    ) -> Dict[ReleaseID, str]:
        """
        Download every release in `matched` into `release_dir`.

        Parameters:
            release_dir (str): Existing destination directory.
            matched (MatchedSet): Releases to download.
            concurrency (int): Per-transfer parallelism hint passed to the transport.

        Returns:
            Dict[ReleaseID, str]: Path of the file written for each release.

        Raises:
            ReleaseFileError: If a destination file cannot be created. Later entries are not attempted.
            DownloadError: If a transfer fails.
        """
        if not matched:
            return {}

        if self.workers == 1 or len(matched) == 1:
            return {
                release_id: self._download_one(release_dir, release, concurrency)
                for release_id, release in matched.items()
            }
        return self._download_parallel(release_dir, matched, concurrency)

    def _download_parallel(
        self, release_dir: str, matched: MatchedSet, concurrency: int
    ) -> Dict[ReleaseID, str]:
        written: Dict[ReleaseID, str] = {}
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {
                executor.submit(self._download_one, release_dir, release, concurrency): release_id
                for release_id, release in matched.items()
            }
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            first_error: Optional[BaseException] = None
            for future in done:
                error = future.exception()
                if error is not None:
                    first_error = first_error or error
                    continue
                written[futures[future]] = future.result()
            if first_error is not None:
                for pending_future in pending:
                    pending_future.cancel()
                raise first_error
        return written

    def _download_one(
        self, release_dir: str, release: LocatedRelease, concurrency: int
    ) -> str:
        destination = os.path.join(release_dir, release.filename)
        partial = destination + PARTIAL_DOWNLOAD_SUFFIX

        try:
            fileobj = open(partial, "wb")
        except OSError as e:
            raise ReleaseFileError(
                f"failed to create release file {destination}",
                path=destination,
                details=str(e),
            ) from e

        logger.debug(f"Downloading {release.path} to {destination}")
        try:
            with fileobj:
                self.transfer(release, fileobj, concurrency)
        except Exception as e:
            _remove_partial(partial)
            raise DownloadError(
                MSG_DOWNLOAD_FAILED.format(cause=e), location=release.path
            ) from e
        except BaseException:
            _remove_partial(partial)
            raise

        try:
            os.replace(partial, destination)
        except OSError as e:
            _remove_partial(partial)
            raise ReleaseFileError(
                f"failed to move release file into place at {destination}",
                path=destination,
                details=str(e),
            ) from e

        logger.info(f"Downloaded {release.filename}")
        return destination


def _remove_partial(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial download {path}: {e}")
