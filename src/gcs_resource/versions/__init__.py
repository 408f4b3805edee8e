"""
Version resolution for gcs-resource.

Core Components:
- pattern: listing prefix and name matching for regular expressions
- version: version text extraction, parsing and ordering
- extractions: version-bearing objects from a bucket listing
- selectors: new-version selection for both addressing modes
"""

from .extractions import (
    Extraction,
    ExtractionSet,
    extract,
    get_bucket_object_versions,
)
from .pattern import compile_pattern, compute_prefix, match, match_unanchored
from .selectors import select_generation_versions, select_pattern_versions
from .version import (
    VersionValue,
    compare_versions,
    extract_version_text,
    parse_version,
)

__all__ = [
    # Patterns
    "compile_pattern",
    "compute_prefix",
    "match",
    "match_unanchored",
    # Versions
    "VersionValue",
    "parse_version",
    "compare_versions",
    "extract_version_text",
    # Extractions
    "Extraction",
    "ExtractionSet",
    "extract",
    "get_bucket_object_versions",
    # Selection
    "select_pattern_versions",
    "select_generation_versions",
]
