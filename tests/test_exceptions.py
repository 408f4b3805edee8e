import pytest

from gcs_resource.exceptions import (
    AmbiguousFileError,
    ArchiveError,
    ConfigFileError,
    ConfigurationError,
    ExtractionError,
    FileSystemError,
    GCSResourceError,
    InvalidVersionError,
    NoFileError,
    NoMatchError,
    NotVersionedError,
    PatternError,
    RequestError,
    StorageError,
    ValidationError,
    VersionError,
)

pytestmark = pytest.mark.unit


def test_message_only():
    error = GCSResourceError("please specify the bucket")

    assert str(error) == "please specify the bucket"
    assert error.details is None


def test_message_with_details():
    error = GCSResourceError("reading request from stdin", details="Expecting value")

    assert str(error) == "reading request from stdin - Expecting value"


@pytest.mark.parametrize(
    "exc_cls, parent",
    [
        (ConfigurationError, GCSResourceError),
        (ConfigFileError, ConfigurationError),
        (RequestError, GCSResourceError),
        (ValidationError, GCSResourceError),
        (PatternError, ValidationError),
        (VersionError, ValidationError),
        (InvalidVersionError, VersionError),
        (NoMatchError, GCSResourceError),
        (StorageError, GCSResourceError),
        (NotVersionedError, StorageError),
        (FileSystemError, GCSResourceError),
        (NoFileError, FileSystemError),
        (AmbiguousFileError, FileSystemError),
        (ArchiveError, GCSResourceError),
        (ExtractionError, ArchiveError),
    ],
)
def test_hierarchy(exc_cls, parent):
    assert issubclass(exc_cls, parent)


def test_attributes():
    validation = PatternError("invalid regexp: (", field="regexp", value="(")
    storage = NotVersionedError("bucket is not versioned", bucket="b", path="p")
    files = NoFileError("no matches found for pattern: *", path="*")
    archive = ExtractionError("failed", archive_path="/tmp/a.zip", details="bad")

    assert (validation.field, validation.value) == ("regexp", "(")
    assert (storage.bucket, storage.path) == ("b", "p")
    assert files.path == "*"
    assert archive.archive_path == "/tmp/a.zip"
    assert str(archive) == "failed - bad"
