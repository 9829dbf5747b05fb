"""
Constants and configuration values for tilefetch.

This module contains hardcoded values, URLs, timeouts, and other constants
used throughout the application.
"""

# Public release index
BOSHIO_URL = "https://bosh.io"
BOSHIO_RELEASES_API_PATH = "api/v1/releases"
BOSHIO_DOWNLOAD_PATH = "d"

# GitHub organisations whose releases are published on bosh.io, searched in order
BOSHIO_KNOWN_ORGANIZATIONS = (
    "cloudfoundry",
    "pivotal-cf",
    "cloudfoundry-incubator",
    "cloudfoundry-community",
)
BOSHIO_REPOSITORY_SUFFIXES = ("-release", "-boshrelease", "-bosh-release", "")

# Named capture groups understood by release patterns
RELEASE_NAME_GROUP = "release_name"
RELEASE_VERSION_GROUP = "release_version"
STEMCELL_OS_GROUP = "stemcell_os"
STEMCELL_VERSION_GROUP = "stemcell_version"

BUILT_RELEASE_GROUPS = (RELEASE_NAME_GROUP, RELEASE_VERSION_GROUP)
COMPILED_RELEASE_GROUPS = (
    RELEASE_NAME_GROUP,
    RELEASE_VERSION_GROUP,
    STEMCELL_OS_GROUP,
    STEMCELL_VERSION_GROUP,
)

# Network timeouts (in seconds)
BOSHIO_API_TIMEOUT = 10
DEFAULT_REQUEST_TIMEOUT = 30

# Download configuration defaults
DEFAULT_CONNECT_RETRIES = 5
DEFAULT_BACKOFF_FACTOR = 0.3
DEFAULT_CHUNK_SIZE = 8192
DEFAULT_DOWNLOAD_THREADS = 0  # 0 means "use the transport default"
DEFAULT_PARALLEL_RELEASE_DOWNLOADS = 1

# File and directory names
RELEASE_TARBALL_EXTENSION = ".tgz"
PARTIAL_DOWNLOAD_SUFFIX = ".part"
RELEASE_MANIFEST_NAME = "release.MF"
DEFAULT_RELEASES_DIR = "releases"

# Configuration file names and keys
CONFIG_FILE_NAME = "tilefetch.yaml"
APP_NAME = "tilefetch"
COMPILED_RELEASES_KEY = "COMPILED_RELEASES"
BUILT_RELEASES_KEY = "BUILT_RELEASES"
RELEASE_SOURCE_KEYS = (COMPILED_RELEASES_KEY, BUILT_RELEASES_KEY)

# Logging configuration
LOGGER_NAME = "tilefetch"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_NAME = "tilefetch.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Environment variable names
LOG_LEVEL_ENV_VAR = "TILEFETCH_LOG_LEVEL"

# Messages
MSG_DOWNLOAD_FAILED = "failed to download file, {cause}"
MSG_MISSING_CAPTURE_GROUP = "missing required capture group"
