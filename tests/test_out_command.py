import pytest

from gcs_resource.commands import OutCommand
from gcs_resource.exceptions import (
    AmbiguousFileError,
    ConfigurationError,
    NoFileError,
    NotVersionedError,
    StorageError,
)
from gcs_resource.models import MetadataPair, OutRequest, Version

pytestmark = pytest.mark.unit


def _request(source, params):
    return OutRequest.from_dict({"source": source, "params": params})


@pytest.fixture
def sources_dir(tmp_path):
    files_dir = tmp_path / "files"
    files_dir.mkdir()
    (files_dir / "file.tgz").write_bytes(b"artifact")
    (tmp_path / "version").write_text("3.53")
    return tmp_path


class TestOutByRegexp:
    def test_uploads_next_to_regexp_parent(self, mock_storage, regexp_source, sources_dir):
        mock_storage.upload.return_value = None
        mock_storage.resolve_url.return_value = "gs://bucket-name/folder/file.tgz"

        response = OutCommand(mock_storage).run(
            str(sources_dir),
            _request(
                regexp_source,
                {
                    "file": "files/file.tgz",
                    "content_type": "application/gzip",
                    "predefined_acl": "publicRead",
                },
            ),
        )

        mock_storage.upload.assert_called_once_with(
            "bucket-name",
            "folder/file.tgz",
            str(sources_dir / "files" / "file.tgz"),
            content_type="application/gzip",
            predefined_acl="publicRead",
            cache_control=None,
        )
        mock_storage.resolve_url.assert_called_once_with(
            "bucket-name", "folder/file.tgz", None
        )
        assert response.version == Version(path="folder/file.tgz")
        assert response.metadata == [
            MetadataPair("filename", "file.tgz"),
            MetadataPair("url", "gs://bucket-name/folder/file.tgz"),
        ]

    def test_glob(self, mock_storage, regexp_source, sources_dir):
        mock_storage.resolve_url.return_value = "gs://x"

        response = OutCommand(mock_storage).run(
            str(sources_dir), _request(regexp_source, {"file": "files/*.tgz"})
        )

        assert response.version == Version(path="folder/file.tgz")

    def test_url_failure_drops_url(self, mock_storage, regexp_source, sources_dir):
        mock_storage.resolve_url.side_effect = StorageError("error resolving url")

        response = OutCommand(mock_storage).run(
            str(sources_dir), _request(regexp_source, {"file": "files/file.tgz"})
        )

        assert response.metadata == [MetadataPair("filename", "file.tgz")]

    def test_no_matching_file(self, mock_storage, regexp_source, sources_dir):
        with pytest.raises(NoFileError):
            OutCommand(mock_storage).run(
                str(sources_dir), _request(regexp_source, {"file": "missing/*"})
            )

        mock_storage.upload.assert_not_called()

    def test_ambiguous_file(self, mock_storage, regexp_source, sources_dir):
        (sources_dir / "files" / "other.tgz").write_bytes(b"other")

        with pytest.raises(AmbiguousFileError):
            OutCommand(mock_storage).run(
                str(sources_dir), _request(regexp_source, {"file": "files/*.tgz"})
            )

    def test_file_param_required(self, mock_storage, regexp_source, sources_dir):
        with pytest.raises(ConfigurationError, match="please specify the file"):
            OutCommand(mock_storage).run(str(sources_dir), _request(regexp_source, {}))

    def test_upload_failure_propagates(self, mock_storage, regexp_source, sources_dir):
        mock_storage.upload.side_effect = StorageError("error uploading file")

        with pytest.raises(StorageError):
            OutCommand(mock_storage).run(
                str(sources_dir), _request(regexp_source, {"file": "files/file.tgz"})
            )


class TestOutByVersionedFile:
    def test_reports_uploaded_generation(self, mock_storage, versioned_source, sources_dir):
        mock_storage.upload.return_value = 12345
        mock_storage.resolve_url.return_value = "gs://bucket-name/folder/version#12345"

        response = OutCommand(mock_storage).run(
            str(sources_dir),
            _request(versioned_source, {"file": "version", "cache_control": "no-cache"}),
        )

        mock_storage.upload.assert_called_once_with(
            "bucket-name",
            "folder/version",
            str(sources_dir / "version"),
            content_type=None,
            predefined_acl=None,
            cache_control="no-cache",
        )
        mock_storage.resolve_url.assert_called_once_with(
            "bucket-name", "folder/version", 12345
        )
        assert response.to_dict() == {
            "version": {"generation": "12345"},
            "metadata": [
                {"name": "filename", "value": "version"},
                {"name": "url", "value": "gs://bucket-name/folder/version#12345"},
            ],
        }

    def test_unversioned_bucket_is_refused_before_upload(
        self, mock_storage, versioned_source, sources_dir
    ):
        mock_storage.is_versioned.return_value = False

        with pytest.raises(NotVersionedError) as exc_info:
            OutCommand(mock_storage).run(
                str(sources_dir), _request(versioned_source, {"file": "version"})
            )

        mock_storage.is_versioned.assert_called_once_with("bucket-name")
        mock_storage.upload.assert_not_called()
        assert exc_info.value.path == "folder/version"

    def test_regexp_mode_does_not_require_versioning(
        self, mock_storage, regexp_source, sources_dir
    ):
        mock_storage.is_versioned.return_value = False
        mock_storage.upload.return_value = None

        response = OutCommand(mock_storage).run(
            str(sources_dir), _request(regexp_source, {"file": "files/file.tgz"})
        )

        mock_storage.is_versioned.assert_not_called()
        assert response.version == Version(path="folder/file.tgz")
