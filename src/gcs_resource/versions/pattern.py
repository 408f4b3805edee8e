"""
Pattern compilation for regexp-addressed objects.

Derives a literal listing prefix from a user regular expression so the bucket
listing can be narrowed, and matches candidate object names against it.
"""

import re
from typing import List, Sequence

from gcs_resource.constants import REGEXP_SPECIAL_CHARS
from gcs_resource.exceptions import PatternError

_SPECIAL_CLASS = "".join(re.escape(char) for char in REGEXP_SPECIAL_CHARS)

# One literal character: an escaped metacharacter or any non-metacharacter
_LITERAL_CHAR_RX = re.compile(
    rf"\\(?P<escaped>[{_SPECIAL_CLASS}])|(?P<plain>[^{_SPECIAL_CLASS}])"
)
_LITERAL_SECTION_RX = re.compile(rf"(?:{_LITERAL_CHAR_RX.pattern})*")


def compile_pattern(pattern: str) -> "re.Pattern[str]":
    """
    Compile a user-supplied regular expression.

    Raises:
        PatternError: If the expression does not compile.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(
            f"invalid regexp: {pattern}",
            field="regexp",
            value=pattern,
            details=str(e),
        ) from e


def _unescape(section: str) -> str:
    return _LITERAL_CHAR_RX.sub(
        lambda m: m.group("escaped") or m.group("plain"), section
    )


def compute_prefix(pattern: str) -> str:
    """
    Compute the literal directory prefix of a regular expression.

    The pattern is scanned one `/`-separated section at a time. Sections made
    only of plain characters and escaped metacharacters are kept (unescaped);
    the scan stops at the first section containing an unescaped metacharacter.

    Parameters:
        pattern (str): The user regular expression.

    Returns:
        str: The kept sections joined with `/` plus a trailing `/`, or "" if
        the first section is already non-literal.
    """
    literal_sections: List[str] = []
    for section in pattern.split("/"):
        if not _LITERAL_SECTION_RX.fullmatch(section):
            break
        literal_sections.append(_unescape(section))

    if not literal_sections:
        return ""

    return "/".join(literal_sections) + "/"


def match_unanchored(names: Sequence[str], pattern: str) -> List[str]:
    """Return the names in which `pattern` matches anywhere, in input order."""
    compiled = compile_pattern(pattern)
    return [name for name in names if compiled.search(name)]


def match(names: Sequence[str], pattern: str) -> List[str]:
    """
    Return the names that `pattern` matches in full, in input order.

    Raises:
        PatternError: If the pattern does not compile.
    """
    compiled = compile_pattern(pattern)
    return [name for name in names if compiled.fullmatch(name)]
