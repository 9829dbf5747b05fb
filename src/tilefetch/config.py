"""
Configuration loading for tilefetch.

Configuration is a plain dictionary with upper-case keys, read from a YAML
file. Release source settings live under COMPILED_RELEASES and BUILT_RELEASES;
a source is active only when its BUCKET is set.
"""

import os
from typing import Any, Dict, Optional

import platformdirs
import yaml

from tilefetch.constants import (
    APP_NAME,
    BOSHIO_URL,
    CONFIG_FILE_NAME,
    DEFAULT_DOWNLOAD_THREADS,
    DEFAULT_PARALLEL_RELEASE_DOWNLOADS,
    DEFAULT_RELEASES_DIR,
    RELEASE_SOURCE_KEYS,
)
from tilefetch.exceptions import ConfigFileError, ConfigValidationError
from tilefetch.log_utils import logger

DEFAULT_CONFIG: Dict[str, Any] = {
    "RELEASES_DIR": DEFAULT_RELEASES_DIR,
    "DOWNLOAD_THREADS": DEFAULT_DOWNLOAD_THREADS,
    "PARALLEL_RELEASE_DOWNLOADS": DEFAULT_PARALLEL_RELEASE_DOWNLOADS,
    "BOSHIO_URL": BOSHIO_URL,
    "DELETE_EXTRA_RELEASES": False,
    "FAIL_ON_MISSING_RELEASES": True,
}


def get_config_file_path() -> str:
    """Return the platform-specific default path of the configuration file."""
    return os.path.join(platformdirs.user_config_dir(APP_NAME), CONFIG_FILE_NAME)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the tilefetch configuration YAML and merge it over the defaults.

    Parameters:
        path (str | None): Explicit configuration file. When omitted the platformdirs
            location is used; a missing default file yields the defaults alone.

    Returns:
        Dict[str, Any]: The validated configuration.

    Raises:
        ConfigFileError: If an explicit file is missing, or any file cannot be read or parsed.
        ConfigValidationError: If the loaded values are invalid.
    """
    explicit = path is not None
    config_path = path or get_config_file_path()

    config: Dict[str, Any] = dict(DEFAULT_CONFIG)
    if not os.path.exists(config_path):
        if explicit:
            raise ConfigFileError(
                "Configuration file not found", details=str(config_path)
            )
        logger.debug(f"No configuration file at {config_path}; using defaults")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(
            f"Cannot read configuration file {config_path}", details=str(e)
        ) from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(
            "Configuration file must contain a mapping",
            details=f"{config_path} holds {type(loaded).__name__}",
        )

    config.update(loaded)
    validate_config(config)
    logger.debug(f"Loaded configuration from {config_path}")
    return config


def validate_config(config: Dict[str, Any]) -> None:
    """
    Check configuration values that the fetch workflow depends on.

    Raises:
        ConfigValidationError: If a release source block is malformed, an active
            source has no REGEX, or a numeric setting is not an integer.
    """
    for key in RELEASE_SOURCE_KEYS:
        settings = config.get(key)
        if settings is None:
            continue
        if not isinstance(settings, dict):
            raise ConfigValidationError(
                f"{key} must be a mapping", details=f"got {type(settings).__name__}"
            )
        if settings.get("BUCKET") and not settings.get("REGEX"):
            raise ConfigValidationError(
                f"{key} requires REGEX when BUCKET is set",
                details=f"bucket {settings['BUCKET']!r}",
            )

    for key in ("DOWNLOAD_THREADS", "PARALLEL_RELEASE_DOWNLOADS"):
        get_int_setting(config, key, 0)


def get_source_settings(config: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    """
    Return the settings of an S3 release source, or None when it is not configured.

    A source counts as configured only when its BUCKET is non-empty, so the
    compiled and built sources are gated by their buckets.
    """
    settings = config.get(key) or {}
    if not settings.get("BUCKET"):
        return None
    return dict(settings)


def get_int_setting(config: Dict[str, Any], key: str, default: int) -> int:
    """
    Read an integer setting, falling back to `default` when unset.

    Raises:
        ConfigValidationError: If the value cannot be interpreted as an integer.
    """
    raw_value = config.get(key, default)
    if raw_value is None:
        return default
    if isinstance(raw_value, bool):
        raise ConfigValidationError(f"{key} must be an integer", details=repr(raw_value))
    try:
        return int(raw_value)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(
            f"{key} must be an integer", details=repr(raw_value)
        ) from e

