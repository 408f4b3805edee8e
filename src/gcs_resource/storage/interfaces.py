"""
Storage Interface for gcs-resource

This module defines the capability interface the check, in and out commands
use to reach an object store. Implementations wrap a concrete backend.
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class StorageClient(ABC):
    """
    Abstract base class for object storage backends.

    Generations identify one overwrite of an object in a versioned bucket.
    A generation of None addresses the live object.
    """

    @abstractmethod
    def list_object_names(self, bucket: str, prefix: str) -> List[str]:
        """
        List the names of the live objects in a bucket.

        Parameters:
            bucket (str): Bucket name.
            prefix (str): Only names starting with this prefix are returned; "" lists everything.

        Returns:
            List[str]: Object names in listing order.
        """

    @abstractmethod
    def list_object_generations(self, bucket: str, path: str) -> List[int]:
        """
        List every generation held for one object path.

        Returns:
            List[int]: Generations in listing order.

        Raises:
            NotVersionedError: If the bucket does not have versioning enabled.
        """

    @abstractmethod
    def is_versioned(self, bucket: str) -> bool:
        """
        Report whether the bucket keeps a generation for every overwrite.

        Raises:
            StorageError: If the bucket cannot be read.
        """

    @abstractmethod
    def upload(
        self,
        bucket: str,
        path: str,
        local_path: str,
        content_type: Optional[str] = None,
        predefined_acl: Optional[str] = None,
        cache_control: Optional[str] = None,
    ) -> Optional[int]:
        """
        Upload a local file to `path`, replacing the live object.

        Returns:
            Optional[int]: The generation created by the upload, or None when the bucket is not versioned.
        """

    @abstractmethod
    def download(
        self, bucket: str, path: str, generation: Optional[int], local_path: str
    ) -> None:
        """
        Download an object (or one generation of it) to `local_path`.
        """

    @abstractmethod
    def resolve_url(self, bucket: str, path: str, generation: Optional[int]) -> str:
        """
        Resolve the URL of an object, verifying that it exists.

        Returns:
            str: `gs://bucket/path` or, for a generation, `gs://bucket/path#generation`.
        """

    @abstractmethod
    def delete(self, bucket: str, path: str, generation: Optional[int]) -> None:
        """
        Delete an object, or one generation of it.
        """
