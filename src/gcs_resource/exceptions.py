"""
Custom exceptions for gcs-resource.

Every failure the resource can report derives from GCSResourceError so the
CLI can translate any of them into a diagnostic on stderr and a non-zero exit.
"""


class GCSResourceError(Exception):
    """
    Base exception for all gcs-resource errors.

    All custom exceptions should inherit from this class to allow for easy
    catching of all application-specific errors.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
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


class ConfigurationError(GCSResourceError):
    """
    Exception raised when the source or params configuration is invalid.

    Raised before any storage I/O takes place.
    """

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when the local defaults file cannot be read or parsed."""

    pass


class RequestError(GCSResourceError):
    """Exception raised when the request on stdin is not valid JSON."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(GCSResourceError):
    """
    Exception raised when a value fails validation.

    Attributes:
        field: The name of the field that failed validation.
        value: The value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class PatternError(ValidationError):
    """Exception raised when a regular expression fails to compile."""

    pass


class VersionError(ValidationError):
    """Exception raised when a version or generation cannot be interpreted."""

    pass


class InvalidVersionError(VersionError):
    """
    Exception raised when a capturing group matched text that is not a version.

    This points at a misconfigured pattern, so it is fatal rather than a skip.
    """

    pass


# =============================================================================
# Resolution Errors
# =============================================================================


class NoMatchError(GCSResourceError):
    """Exception raised when a listing yields no version-bearing objects."""

    pass


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(GCSResourceError):
    """
    Exception raised when the storage backend reports a failure.

    Attributes:
        bucket: The bucket being accessed.
        path: The object path being accessed, if any.
    """

    def __init__(
        self,
        message: str,
        bucket: str | None = None,
        path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.bucket = bucket
        self.path = path


class NotVersionedError(StorageError):
    """Exception raised when a generation operation targets an unversioned bucket."""

    pass


# =============================================================================
# File System Errors
# =============================================================================


class FileSystemError(GCSResourceError):
    """
    Exception raised for local file system errors.

    Attributes:
        path: The file path or glob that caused the error.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class NoFileError(FileSystemError):
    """Exception raised when a publish glob matches no local file."""

    pass


class AmbiguousFileError(FileSystemError):
    """Exception raised when a publish glob matches more than one local file."""

    pass


# =============================================================================
# Archive Errors
# =============================================================================


class ArchiveError(GCSResourceError):
    """
    Exception raised for archive-related errors.

    Attributes:
        archive_path: Path to the problematic archive.
    """

    def __init__(
        self,
        message: str,
        archive_path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.archive_path = archive_path


class ExtractionError(ArchiveError):
    """Exception raised when unpacking a fetched artifact fails."""

    pass
