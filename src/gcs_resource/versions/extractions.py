"""
Extractions: version-bearing objects found in a bucket listing.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Sequence

from gcs_resource.log_utils import logger

from .pattern import compute_prefix, match
from .version import VersionValue, extract_version_text, parse_version

if TYPE_CHECKING:
    from gcs_resource.models import Source
    from gcs_resource.storage.interfaces import StorageClient


@dataclass(frozen=True)
class Extraction:
    """A bucket object whose path carries a parsed version."""

    path: str
    """Object path in the bucket"""

    version: VersionValue
    """Parsed version used for ordering"""

    version_text: str
    """The raw captured version text"""


def extract(path: str, pattern: str) -> Optional[Extraction]:
    """
    Build an Extraction for `path`, or None if `pattern` captures nothing in it.

    Raises:
        InvalidVersionError: If the captured text is not a version.
    """
    text = extract_version_text(path, pattern)
    if text is None:
        return None
    return Extraction(path=path, version=parse_version(text), version_text=text)


class ExtractionSet:
    """
    An ordered collection of extractions.

    Built in listing order; `sort_ascending()` orders it by version with ties
    kept in encounter order.
    """

    def __init__(self, extractions: Optional[Iterable[Extraction]] = None):
        self._extractions: List[Extraction] = list(extractions or [])

    @classmethod
    def build(cls, names: Sequence[str], pattern: str) -> "ExtractionSet":
        """
        Extract versions from every name that fully matches `pattern`.

        Names that match but capture nothing are skipped. Captured text that
        does not parse as a version raises InvalidVersionError.
        """
        extractions = []
        for path in match(names, pattern):
            extraction = extract(path, pattern)
            if extraction is None:
                logger.debug("Skipping %s: no version captured", path)
                continue
            extractions.append(extraction)
        return cls(extractions)

    def sort_ascending(self) -> "ExtractionSet":
        """Sort in place by version, lowest first, and return self."""
        self._extractions.sort(key=lambda extraction: extraction.version)
        return self

    def prepend(self, extraction: Extraction) -> None:
        self._extractions.insert(0, extraction)

    def latest(self) -> Extraction:
        """
        Return the last extraction.

        Raises:
            IndexError: If the set is empty.
        """
        return self._extractions[-1]

    def newer_than(self, version: VersionValue) -> List[Extraction]:
        """Return every extraction strictly greater than `version`, in set order."""
        return [
            extraction
            for extraction in self._extractions
            if extraction.version.compare(version) > 0
        ]

    def paths(self) -> List[str]:
        return [extraction.path for extraction in self._extractions]

    def __iter__(self) -> Iterator[Extraction]:
        return iter(self._extractions)

    def __len__(self) -> int:
        return len(self._extractions)

    def __getitem__(self, index: int) -> Extraction:
        return self._extractions[index]

    def __repr__(self) -> str:
        return f"ExtractionSet({self.paths()!r})"


def get_bucket_object_versions(
    storage: "StorageClient", source: "Source"
) -> ExtractionSet:
    """
    List the bucket once and return the sorted extractions for `source.regexp`.

    The listing is narrowed with the literal prefix of the regular expression.
    """
    pattern = source.regexp
    prefix = compute_prefix(pattern)
    logger.debug("Listing gs://%s with prefix %r", source.bucket, prefix)

    names = storage.list_object_names(source.bucket, prefix)
    extractions = ExtractionSet.build(names, pattern).sort_ascending()
    logger.debug(
        "Found %d versioned objects out of %d listed", len(extractions), len(names)
    )
    return extractions
