"""
Google Cloud Storage backend.

Implements StorageClient on top of the google-cloud-storage client library.
Backend failures are re-raised as StorageError with the library exception
chained.
"""

import functools
import json
from typing import Callable, List, Optional, TypeVar

from google.api_core.client_info import ClientInfo
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage
from google.oauth2 import service_account

from gcs_resource.constants import GCS_URL_SCHEME, MSG_BUCKET_NOT_VERSIONED, USER_AGENT
from gcs_resource.exceptions import (
    ConfigurationError,
    NotVersionedError,
    StorageError,
)
from gcs_resource.log_utils import logger

from .interfaces import StorageClient

T = TypeVar("T")


def _wrap_backend_errors(action: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorate a client method so backend errors surface as StorageError."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(self, bucket: str, path: str, *args, **kwargs) -> T:
            try:
                return func(self, bucket, path, *args, **kwargs)
            except (GoogleAPIError, GoogleAuthError) as e:
                raise StorageError(
                    f"error {action}",
                    bucket=bucket,
                    path=path or None,
                    details=str(e),
                ) from e

        return wrapper

    return decorator


def gcs_url(bucket: str, path: str, generation: Optional[int] = None) -> str:
    if generation is not None:
        return f"{GCS_URL_SCHEME}{bucket}/{path}#{generation}"
    return f"{GCS_URL_SCHEME}{bucket}/{path}"


class GCSClient(StorageClient):
    """
    StorageClient backed by Google Cloud Storage.

    Usage:
        client = GCSClient.from_json_key(source.json_key, project=source.project)
        names = client.list_object_names("bucket", "folder/")
    """

    def __init__(self, client: storage.Client):
        self._client = client

    @classmethod
    def from_json_key(cls, json_key: str = "", project: str = "") -> "GCSClient":
        """
        Build a client from a service account key, or from application default credentials when `json_key` is empty.

        Raises:
            ConfigurationError: If `json_key` is not valid service account JSON.
        """
        client_info = ClientInfo(user_agent=USER_AGENT)
        if not json_key:
            logger.debug("Using application default credentials")
            try:
                return cls(
                    storage.Client(project=project or None, client_info=client_info)
                )
            except GoogleAuthError as e:
                raise ConfigurationError(
                    "no json_key given and application default credentials are unavailable",
                    details=str(e),
                ) from e

        try:
            info = json.loads(json_key)
            credentials = service_account.Credentials.from_service_account_info(info)
        except (ValueError, KeyError, GoogleAuthError) as e:
            raise ConfigurationError(
                "json_key is not a valid service account key", details=str(e)
            ) from e

        return cls(
            storage.Client(
                project=project or info.get("project_id"),
                credentials=credentials,
                client_info=client_info,
            )
        )

    def _is_bucket_versioned(self, bucket: str) -> bool:
        return bool(self._client.get_bucket(bucket).versioning_enabled)

    def is_versioned(self, bucket: str) -> bool:
        try:
            return self._is_bucket_versioned(bucket)
        except (GoogleAPIError, GoogleAuthError) as e:
            raise StorageError(
                "error reading bucket", bucket=bucket, details=str(e)
            ) from e

    def _require_versioning(self, bucket: str, path: str) -> None:
        if not self._is_bucket_versioned(bucket):
            raise NotVersionedError(MSG_BUCKET_NOT_VERSIONED, bucket=bucket, path=path)

    @_wrap_backend_errors("listing objects")
    def list_object_names(self, bucket: str, prefix: str) -> List[str]:
        blobs = self._client.list_blobs(bucket, prefix=prefix or None, versions=False)
        return [blob.name for blob in blobs]

    @_wrap_backend_errors("listing object generations")
    def list_object_generations(self, bucket: str, path: str) -> List[int]:
        self._require_versioning(bucket, path)
        blobs = self._client.list_blobs(bucket, prefix=path, versions=True)
        # The prefix also matches longer names; keep the exact object only
        return [blob.generation for blob in blobs if blob.name == path]

    @_wrap_backend_errors("uploading file")
    def upload(
        self,
        bucket: str,
        path: str,
        local_path: str,
        content_type: Optional[str] = None,
        predefined_acl: Optional[str] = None,
        cache_control: Optional[str] = None,
    ) -> Optional[int]:
        versioned = self._is_bucket_versioned(bucket)

        blob = self._client.bucket(bucket).blob(path)
        if cache_control:
            blob.cache_control = cache_control

        logger.info("Uploading %s to %s", local_path, gcs_url(bucket, path))
        blob.upload_from_filename(
            local_path,
            content_type=content_type or None,
            predefined_acl=predefined_acl or None,
        )

        if not versioned:
            return None
        return blob.generation

    @_wrap_backend_errors("downloading file")
    def download(
        self, bucket: str, path: str, generation: Optional[int], local_path: str
    ) -> None:
        if generation is not None:
            self._require_versioning(bucket, path)

        blob = self._client.bucket(bucket).blob(path, generation=generation)
        logger.info("Downloading %s to %s", gcs_url(bucket, path, generation), local_path)
        blob.download_to_filename(local_path)

    @_wrap_backend_errors("resolving url")
    def resolve_url(self, bucket: str, path: str, generation: Optional[int]) -> str:
        blob = self._client.bucket(bucket).blob(path, generation=generation)
        blob.reload()
        if generation is not None:
            return gcs_url(bucket, path, blob.generation)
        return gcs_url(bucket, path)

    @_wrap_backend_errors("deleting object")
    def delete(self, bucket: str, path: str, generation: Optional[int]) -> None:
        self._client.bucket(bucket).blob(path, generation=generation).delete()
