"""
Selection of new versions for `check`.

The two addressing modes deliberately differ when the previous version cannot
be used: regexp mode falls back to the latest object, versioned-file mode
reports nothing.
"""

from typing import List, Optional, Sequence

from .extractions import Extraction, ExtractionSet, extract


def select_pattern_versions(
    candidates: ExtractionSet, previous_path: Optional[str], pattern: str
) -> List[Extraction]:
    """
    Select the extractions to report for regexp mode.

    Parameters:
        candidates (ExtractionSet): Sorted extractions, possibly with the
            initial extraction prepended.
        previous_path (Optional[str]): Last reported path; empty or None on
            the first check.
        pattern (str): The source regular expression.

    Returns:
        List[Extraction]: Empty when there are no candidates. Only the latest
        candidate when there is no usable previous path. Otherwise every
        candidate strictly newer than the previous one, in candidate order.
    """
    if len(candidates) == 0:
        return []

    if not previous_path:
        return [candidates.latest()]

    previous = extract(previous_path, pattern)
    if previous is None:
        return [candidates.latest()]

    return candidates.newer_than(previous.version)


def select_generation_versions(
    generations: Sequence[int], previous_generation: Optional[int]
) -> List[int]:
    """
    Select the generations to report for versioned-file mode.

    Returns:
        List[int]: Empty when there are no generations. The highest generation
        when there is no previous one. Otherwise every generation strictly
        greater than the previous one, ascending; possibly empty.
    """
    if not generations:
        return []

    if previous_generation is None:
        return [max(generations)]

    return sorted(
        generation for generation in generations if generation > previous_generation
    )
