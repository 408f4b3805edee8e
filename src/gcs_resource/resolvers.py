"""
Fetch and publish resolution.

Decides what `in` must materialize and what `out` must upload without
performing any transfer. The commands carry out the resulting plans.
"""

import os
import posixpath
from dataclasses import dataclass
from typing import List, Optional

from gcs_resource.constants import (
    METADATA_FILENAME,
    METADATA_URL,
    MSG_BUCKET_NOT_VERSIONED,
    MSG_MULTIPLE_FILE_MATCHES,
    MSG_NO_EXTRACTIONS,
    MSG_NO_FILE_MATCHES,
)
from gcs_resource.exceptions import (
    AmbiguousFileError,
    NoFileError,
    NoMatchError,
    NotVersionedError,
    VersionError,
)
from gcs_resource.files import glob_files
from gcs_resource.log_utils import logger
from gcs_resource.models import MetadataPair, OutParams, Source, Version
from gcs_resource.storage.interfaces import StorageClient
from gcs_resource.versions import extract, get_bucket_object_versions


def build_metadata(object_path: str, url: Optional[str]) -> List[MetadataPair]:
    """Metadata for a version: the object's file name, plus its URL when known."""
    metadata = [MetadataPair(METADATA_FILENAME, posixpath.basename(object_path))]
    if url:
        metadata.append(MetadataPair(METADATA_URL, url))
    return metadata


@dataclass
class FetchPlan:
    """What `in` has to put into the destination directory."""

    version: Version
    """Version reported back to the scheduler"""

    object_path: str
    """Object to download, or the bootstrap path/file"""

    generation: Optional[int]
    """Generation qualifier for the download; None for regexp mode"""

    local_filename: str
    """File name of the artifact inside the destination directory"""

    initial_content: Optional[bytes] = None
    """Literal content to write instead of downloading (bootstrap version)"""

    version_text: Optional[str] = None
    """Captured version text for the `version` marker (regexp mode)"""

    @property
    def is_bootstrap(self) -> bool:
        return self.initial_content is not None


class FetchResolver:
    """
    Resolves the object a fetch must retrieve.

    Only reaches the storage backend to list the bucket when a regexp-mode
    fetch arrives without a path.
    """

    def __init__(self, storage: StorageClient):
        self.storage = storage

    def resolve(self, source: Source, version: Version) -> FetchPlan:
        """
        Build the fetch plan for `version`.

        Raises:
            NoMatchError: Regexp mode without a path and no versioned object in the bucket.
            VersionError: Versioned-file mode without a generation.
            InvalidVersionError: The object path captures text that is not a version.
        """
        if source.is_regexp_mode:
            return self._resolve_by_regexp(source, version)
        return self._resolve_by_versioned_file(source, version)

    def _resolve_by_regexp(self, source: Source, version: Version) -> FetchPlan:
        initial_content = None
        if source.initial_path and version.path == source.initial_path:
            logger.debug("Version %s is the initial path", version.path)
            object_path = source.initial_path
            initial_content = source.initial_content()
        else:
            object_path = version.path or self._latest_path(source)

        extraction = extract(object_path, source.regexp)
        return FetchPlan(
            version=Version(path=object_path),
            object_path=object_path,
            generation=None,
            local_filename=posixpath.basename(object_path),
            initial_content=initial_content,
            version_text=extraction.version_text if extraction else None,
        )

    def _latest_path(self, source: Source) -> str:
        extractions = get_bucket_object_versions(self.storage, source)
        if len(extractions) == 0:
            raise NoMatchError(MSG_NO_EXTRACTIONS)
        latest = extractions.latest()
        logger.debug("No version requested; using latest %s", latest.path)
        return latest.path

    def _resolve_by_versioned_file(self, source: Source, version: Version) -> FetchPlan:
        if version.generation is None:
            raise VersionError(
                "a generation is required to fetch a versioned_file",
                field="generation",
            )

        initial_content = None
        if (
            source.initial_generation is not None
            and version.generation == source.initial_generation
        ):
            logger.debug("Generation %d is the initial version", version.generation)
            initial_content = source.initial_content()

        return FetchPlan(
            version=Version(generation=version.generation),
            object_path=source.versioned_file,
            generation=version.generation,
            local_filename=posixpath.basename(source.versioned_file),
            initial_content=initial_content,
        )


@dataclass
class PublishPlan:
    """What `out` has to upload and where."""

    local_path: str
    object_path: str
    content_type: Optional[str] = None
    predefined_acl: Optional[str] = None
    cache_control: Optional[str] = None


def parent_dir(regexp: str) -> str:
    """Return the regexp text up to and including its final `/`."""
    return regexp[: regexp.rfind("/") + 1]


class PublishResolver:
    """Resolves the local file to publish and the object it becomes."""

    def find_local_file(self, source_dir: str, pattern: str) -> str:
        """
        Locate exactly one file matching the glob `pattern` under `source_dir`.

        Raises:
            NoFileError: Nothing matches.
            AmbiguousFileError: More than one file matches.
        """
        matches = glob_files(source_dir, pattern)
        if not matches:
            raise NoFileError(MSG_NO_FILE_MATCHES.format(pattern=pattern), path=pattern)
        if len(matches) > 1:
            raise AmbiguousFileError(
                MSG_MULTIPLE_FILE_MATCHES.format(pattern=pattern),
                path=pattern,
                details=", ".join(matches),
            )
        return matches[0]

    def object_path(self, source: Source, local_path: str) -> str:
        if source.is_regexp_mode:
            return posixpath.normpath(
                posixpath.join(parent_dir(source.regexp), os.path.basename(local_path))
            )
        return source.versioned_file

    def resolve(self, source: Source, params: OutParams, source_dir: str) -> PublishPlan:
        local_path = self.find_local_file(source_dir, params.file)
        return PublishPlan(
            local_path=local_path,
            object_path=self.object_path(source, local_path),
            content_type=params.content_type or None,
            predefined_acl=params.predefined_acl or None,
            cache_control=params.cache_control or None,
        )

    def published_version(
        self, source: Source, plan: PublishPlan, generation: Optional[int]
    ) -> Version:
        """
        Version reported after the upload.

        Raises:
            NotVersionedError: Versioned-file mode and the upload produced no generation.
        """
        if source.is_regexp_mode:
            return Version(path=plan.object_path)
        if generation is None:
            raise NotVersionedError(
                MSG_BUCKET_NOT_VERSIONED, bucket=source.bucket, path=plan.object_path
            )
        return Version(generation=generation)

    def url_generation(self, source: Source, generation: Optional[int]) -> Optional[int]:
        """Regexp-addressed objects are never generation-qualified."""
        return None if source.is_regexp_mode else generation
