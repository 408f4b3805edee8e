"""
The `check` operation: discover versions newer than the last one seen.
"""

from typing import List, Optional

from gcs_resource.log_utils import logger
from gcs_resource.models import CheckRequest, Source, Version
from gcs_resource.storage.interfaces import StorageClient
from gcs_resource.versions import (
    extract,
    get_bucket_object_versions,
    select_generation_versions,
    select_pattern_versions,
)


class CheckCommand:
    """
    Runs `check` for either addressing mode.

    Usage:
        versions = CheckCommand(storage).run(CheckRequest.from_dict(payload))
    """

    def __init__(self, storage: StorageClient):
        self.storage = storage

    def run(self, request: CheckRequest) -> List[Version]:
        """
        Return the versions to report, oldest first.

        Raises:
            ConfigurationError: If the source is invalid.
            InvalidVersionError: If a listed object captures non-version text.
            StorageError: If listing the bucket fails.
        """
        source = request.source
        source.validate()

        if source.is_regexp_mode:
            return self._check_by_regexp(source, request.version.path)
        return self._check_by_versioned_file(source, request.version.generation)

    def _check_by_regexp(self, source: Source, previous_path: Optional[str]) -> List[Version]:
        candidates = get_bucket_object_versions(self.storage, source)

        if source.initial_path:
            initial = extract(source.initial_path, source.regexp)
            if initial is not None:
                candidates.prepend(initial)
            else:
                logger.debug(
                    "initial_path %s captures no version; not reported",
                    source.initial_path,
                )

        selected = select_pattern_versions(candidates, previous_path, source.regexp)
        logger.info("Found %d new version(s) for %s", len(selected), source.regexp)
        return [Version(path=extraction.path) for extraction in selected]

    def _check_by_versioned_file(
        self, source: Source, previous_generation: Optional[int]
    ) -> List[Version]:
        generations = self.storage.list_object_generations(
            source.bucket, source.versioned_file
        )

        initial_generation = source.initial_generation
        if initial_generation is not None:
            generations = [*generations, initial_generation]

        selected = select_generation_versions(generations, previous_generation)
        logger.info(
            "Found %d new generation(s) for %s", len(selected), source.versioned_file
        )
        return [Version(generation=generation) for generation in selected]
