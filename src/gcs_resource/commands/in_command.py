"""
The `in` operation: materialize a version in a destination directory.
"""

import os
from typing import Optional

from gcs_resource.archive import unpack_file
from gcs_resource.exceptions import StorageError
from gcs_resource.files import (
    atomic_write_bytes,
    ensure_directory,
    write_generation_file,
    write_url_file,
    write_version_file,
)
from gcs_resource.log_utils import logger
from gcs_resource.models import InRequest, Source, VersionResponse
from gcs_resource.resolvers import FetchPlan, FetchResolver, build_metadata
from gcs_resource.storage.interfaces import StorageClient


class InCommand:
    """
    Runs `in`: downloads the requested object, or writes the configured
    initial content for the bootstrap version, and leaves `version`,
    `generation` and `url` marker files beside it.
    """

    def __init__(self, storage: StorageClient):
        self.storage = storage
        self.resolver = FetchResolver(storage)

    def run(self, destination_dir: str, request: InRequest) -> VersionResponse:
        """
        Fetch `request.version` into `destination_dir`.

        Raises:
            ConfigurationError: If the source is invalid.
            NoMatchError: Regexp mode without a version and nothing in the bucket.
            VersionError: Versioned-file mode without a generation.
            StorageError: If the download fails.
            ExtractionError: If `params.unpack` is set and unpacking fails.
            FileSystemError: If the destination cannot be written.
        """
        source = request.source
        source.validate()

        ensure_directory(destination_dir)
        plan = self.resolver.resolve(source, request.version)
        local_path = os.path.join(destination_dir, plan.local_filename)

        url = None
        if plan.is_bootstrap:
            logger.info("Writing initial content to %s", local_path)
            atomic_write_bytes(local_path, plan.initial_content or b"")
        else:
            if request.should_skip_download():
                logger.info("Skipping download of %s", plan.object_path)
            else:
                self.storage.download(
                    source.bucket, plan.object_path, plan.generation, local_path
                )
                if request.params.unpack:
                    unpack_file(local_path)

            url = self._resolve_url(source, plan)
            if url:
                write_url_file(destination_dir, url)

        if plan.version_text is not None:
            write_version_file(destination_dir, plan.version_text)
        if plan.generation is not None:
            write_generation_file(destination_dir, plan.generation)

        return VersionResponse(
            version=plan.version,
            metadata=build_metadata(plan.object_path, url),
        )

    def _resolve_url(self, source: Source, plan: FetchPlan) -> Optional[str]:
        try:
            return self.storage.resolve_url(
                source.bucket, plan.object_path, plan.generation
            )
        except StorageError as e:
            logger.warning("Could not resolve URL for %s: %s", plan.object_path, e)
            return None
