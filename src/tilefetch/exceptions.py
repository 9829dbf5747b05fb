"""
Custom exceptions for tilefetch.

This module defines domain-specific exceptions that provide better error
categorization and more informative error messages for users and developers.
"""

from typing import Iterable, List, Optional


class TilefetchError(Exception):
    """
    Base exception for all tilefetch errors.

    All custom exceptions in tilefetch should inherit from this class
    to allow for easy catching of all application-specific errors.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(TilefetchError):
    """
    Exception raised when configuration is invalid or missing.

    This includes:
    - Missing required configuration keys
    - Invalid configuration values
    - Configuration file parsing errors
    """

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when configuration file cannot be read."""

    pass


class ConfigValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(TilefetchError):
    """
    Exception raised when validation fails.

    Attributes:
        field: The name of the field that failed validation.
        value: The value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class PatternError(ValidationError):
    """Exception raised when a release pattern cannot be compiled."""

    pass


class MissingCaptureGroupError(PatternError):
    """
    Exception raised when a release pattern lacks a required named group.

    Attributes:
        missing_groups: Names of the required groups the pattern does not define.
    """

    def __init__(self, message: str, pattern: str, missing_groups: Iterable[str]):
        self.missing_groups: List[str] = list(missing_groups)
        super().__init__(
            message,
            field="regex",
            value=pattern,
            details=(
                f"pattern {pattern!r} does not define "
                f"{', '.join(self.missing_groups)}"
            ),
        )


# =============================================================================
# Download Errors
# =============================================================================


class DownloadError(TilefetchError):
    """
    Exception raised when the bytes of a located release cannot be transferred.

    Attributes:
        location: The repository location that was being downloaded.
    """

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.location = location


class MissingReleasesError(TilefetchError):
    """
    Exception raised when desired releases could not be found in any source.

    Attributes:
        release_ids: The release identities that remained unmatched.
    """

    def __init__(self, message: str, release_ids: Iterable[object]) -> None:
        self.release_ids = list(release_ids)
        super().__init__(
            message, details=", ".join(str(rid) for rid in self.release_ids)
        )


# =============================================================================
# File System Errors
# =============================================================================


class FileSystemError(TilefetchError):
    """
    Exception raised for file system-related errors.

    Attributes:
        path: The file path that caused the error.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class ReleaseFileError(FileSystemError):
    """Exception raised when a release file cannot be created in the releases directory."""

    pass
