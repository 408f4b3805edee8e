"""
The `out` operation: publish a local file and report the version it became.
"""

from typing import Optional

from gcs_resource.constants import MSG_BUCKET_NOT_VERSIONED
from gcs_resource.exceptions import NotVersionedError, StorageError
from gcs_resource.log_utils import logger
from gcs_resource.models import OutRequest, VersionResponse
from gcs_resource.resolvers import PublishResolver, build_metadata
from gcs_resource.storage.interfaces import StorageClient


class OutCommand:
    def __init__(self, storage: StorageClient):
        self.storage = storage
        self.resolver = PublishResolver()

    def run(self, source_dir: str, request: OutRequest) -> VersionResponse:
        """
        Upload the file selected by `params.file` under `source_dir`.

        Raises:
            ConfigurationError: If the source or params are invalid.
            NoFileError: If no local file matches.
            AmbiguousFileError: If several local files match.
            StorageError: If the upload fails.
            NotVersionedError: Versioned-file mode on an unversioned bucket.
        """
        source = request.source
        source.validate()
        request.params.validate()

        plan = self.resolver.resolve(source, request.params, source_dir)
        if not source.is_regexp_mode and not self.storage.is_versioned(source.bucket):
            raise NotVersionedError(
                MSG_BUCKET_NOT_VERSIONED, bucket=source.bucket, path=plan.object_path
            )

        generation = self.storage.upload(
            source.bucket,
            plan.object_path,
            plan.local_path,
            content_type=plan.content_type,
            predefined_acl=plan.predefined_acl,
            cache_control=plan.cache_control,
        )
        version = self.resolver.published_version(source, plan, generation)

        url: Optional[str] = None
        try:
            url = self.storage.resolve_url(
                source.bucket,
                plan.object_path,
                self.resolver.url_generation(source, generation),
            )
        except StorageError as e:
            logger.warning("Could not resolve URL for %s: %s", plan.object_path, e)

        logger.info("Published %s as %s", plan.local_path, plan.object_path)
        return VersionResponse(
            version=version, metadata=build_metadata(plan.object_path, url)
        )
