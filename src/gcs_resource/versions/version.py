"""
Version parsing and ordering for regexp-addressed objects.

A version is a dotted sequence of numeric release components with an optional
pre-release suffix (`1.5.6-build.10`) and optional build metadata
(`1.2.3+linux`). Ordering is numeric, never lexicographic.
"""

import functools
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from gcs_resource.constants import VERSION_GROUP_NAME
from gcs_resource.exceptions import InvalidVersionError

from .pattern import compile_pattern

Identifier = Union[int, str]


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class VersionValue:
    """
    A parsed version with a total order.

    Release components compare numerically, with the shorter sequence treated
    as zero-padded. Pre-release identifiers follow semantic versioning
    precedence and any pre-release sorts before the plain release. Build
    metadata is kept for display only.
    """

    release: Tuple[int, ...]
    prerelease: Tuple[Identifier, ...] = ()
    build: Tuple[str, ...] = ()

    VERSION_RX = re.compile(
        r"(?P<release>[0-9]+(?:\.[0-9]+)*)"
        r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
        r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    )

    @classmethod
    def parse(cls, text: str) -> "VersionValue":
        """
        Parse version text.

        Raises:
            InvalidVersionError: If `text` is not a dotted numeric version with
            an optional pre-release and build suffix.
        """
        m = cls.VERSION_RX.fullmatch(text)
        if not m:
            raise InvalidVersionError(
                f"version number was not valid: {text!r}", field="version", value=text
            )

        release = tuple(int(part) for part in m.group("release").split("."))
        prerelease: Tuple[Identifier, ...] = ()
        if m.group("prerelease"):
            prerelease = tuple(
                int(part) if part.isdigit() else part
                for part in m.group("prerelease").split(".")
            )
        build = tuple(m.group("build").split(".")) if m.group("build") else ()
        return cls(release=release, prerelease=prerelease, build=build)

    def _key(self) -> tuple:
        release = list(self.release)
        while len(release) > 1 and release[-1] == 0:
            release.pop()
        if not self.prerelease:
            # A plain release outranks every pre-release of the same release
            return (tuple(release), 1, ())
        identifiers = tuple(
            (0, part, "") if isinstance(part, int) else (1, 0, part)
            for part in self.prerelease
        )
        return (tuple(release), 0, identifiers)

    def compare(self, other: "VersionValue") -> int:
        """Return -1, 0 or 1 as this version is lower, equal or higher than `other`."""
        mine, theirs = self._key(), other._key()
        if mine < theirs:
            return -1
        if mine > theirs:
            return 1
        return 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionValue):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "VersionValue") -> bool:
        if not isinstance(other, VersionValue):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = ".".join(str(part) for part in self.release)
        if self.prerelease:
            text += "-" + ".".join(str(part) for part in self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def parse_version(text: str) -> VersionValue:
    """Parse `text` into a VersionValue, raising InvalidVersionError on garbage."""
    return VersionValue.parse(text)


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two version strings.

    Returns:
        int: 1 if version1 > version2, 0 if equal, -1 if version1 < version2
    """
    return parse_version(version1).compare(parse_version(version2))


def extract_version_text(path: str, pattern: str) -> Optional[str]:
    """
    Extract the captured version text from an object path.

    The pattern is searched (not anchored) in `path`. When the pattern has a
    single capturing group that group is used; with several groups a group
    named `version` wins, otherwise the first group is used.

    Parameters:
        path (str): Object path to inspect.
        pattern (str): User regular expression with at least one capturing group.

    Returns:
        Optional[str]: The captured text, or None if the pattern has no
        capturing group or does not match `path`.
    """
    compiled = compile_pattern(pattern)
    if compiled.groups < 1:
        return None

    m = compiled.search(path)
    if not m:
        return None

    if compiled.groups > 1 and VERSION_GROUP_NAME in compiled.groupindex:
        text = m.group(VERSION_GROUP_NAME)
    else:
        text = m.group(1)

    # A group that did not participate captured nothing
    return text or ""
