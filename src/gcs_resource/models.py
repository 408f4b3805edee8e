"""
Request and response models for the check, in and out operations.

These mirror the JSON documents exchanged with the pipeline scheduler on
stdin/stdout and carry the source validation rules.
"""

import base64
import binascii
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gcs_resource.constants import (
    FALSE_STRINGS,
    MSG_INITIAL_CONTENT_BASE64,
    MSG_INITIAL_CONTENT_BOTH,
    MSG_INITIAL_CONTENT_WITHOUT_SEED,
    MSG_INITIAL_PATH_FOR_REGEXP,
    MSG_INITIAL_VERSION_FOR_FILE,
    MSG_INITIAL_VERSION_INT,
    MSG_INVALID_SKIP_DOWNLOAD,
    MSG_SPECIFY_BUCKET,
    MSG_SPECIFY_FILE,
    MSG_SPECIFY_MODE,
    TRUE_STRINGS,
)
from gcs_resource.exceptions import ConfigurationError, VersionError
from gcs_resource.log_utils import logger
from gcs_resource.versions.pattern import compile_pattern

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
_INT_RX = re.compile(r"[+-]?[0-9]+")


def parse_int64(value: Any) -> Optional[int]:
    """
    Interpret `value` as a signed 64-bit integer.

    Returns:
        Optional[int]: The integer, or None if `value` is not an integer or a
        decimal string in the int64 range. Booleans are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _INT_RX.fullmatch(value):
        number = int(value)
    else:
        return None
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number


def parse_bool(value: Any) -> Optional[bool]:
    """Interpret a bool or bool-like string; None if it is neither."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return None


def _require_mapping(data: Any, what: str) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{what} must be a JSON object")
    return data


def _string_field(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ConfigurationError(f"{key} must be a string")
    return str(value)


@dataclass
class Source:
    """Resource configuration shared by check, in and out."""

    bucket: str = ""
    """Name of the bucket holding the artifacts"""

    regexp: str = ""
    """Regular expression locating versioned objects (regexp mode)"""

    versioned_file: str = ""
    """Fixed object path whose generations are the versions (versioned-file mode)"""

    json_key: str = ""
    """Service account key JSON; empty to use application default credentials"""

    project: str = ""
    """Optional project used by the storage client"""

    skip_download: bool = False
    """Skip downloading the object on `in` unless overridden by params"""

    initial_path: str = ""
    """Bootstrap path reported before any object matches (regexp mode)"""

    initial_version: str = ""
    """Bootstrap generation reported before any generation exists (versioned-file mode)"""

    initial_content_text: str = ""
    """Text written by `in` when fetching the bootstrap version"""

    initial_content_binary: str = ""
    """Base64 content written by `in` when fetching the bootstrap version"""

    @classmethod
    def from_dict(cls, data: Any) -> "Source":
        """
        Build a Source from the `source` object of a request.

        Unknown keys are ignored. The result is not validated; call validate().
        """
        data = _require_mapping(data, "source")
        known = {f for f in cls.__dataclass_fields__}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.debug("Ignoring unknown source keys: %s", ", ".join(unknown))

        raw_skip = data.get("skip_download")
        skip_download = False if raw_skip in (None, "") else parse_bool(raw_skip)
        if skip_download is None:
            raise ConfigurationError(MSG_INVALID_SKIP_DOWNLOAD.format(value=raw_skip))

        return cls(
            bucket=_string_field(data, "bucket"),
            regexp=_string_field(data, "regexp"),
            versioned_file=_string_field(data, "versioned_file"),
            json_key=_string_field(data, "json_key"),
            project=_string_field(data, "project"),
            skip_download=skip_download,
            initial_path=_string_field(data, "initial_path"),
            initial_version=_string_field(data, "initial_version"),
            initial_content_text=_string_field(data, "initial_content_text"),
            initial_content_binary=_string_field(data, "initial_content_binary"),
        )

    def validate(self) -> None:
        """
        Check the configuration before any storage I/O.

        Raises:
            ConfigurationError: With the first violated rule's message.
            PatternError: If `regexp` does not compile.
        """
        if not self.bucket:
            raise ConfigurationError(MSG_SPECIFY_BUCKET)

        if self.regexp and self.versioned_file:
            raise ConfigurationError(MSG_SPECIFY_MODE)

        if self.initial_version and parse_int64(self.initial_version) is None:
            raise ConfigurationError(MSG_INITIAL_VERSION_INT)

        if self.initial_content_text and self.initial_content_binary:
            raise ConfigurationError(MSG_INITIAL_CONTENT_BOTH)

        if self.initial_content_binary:
            try:
                base64.b64decode(self.initial_content_binary, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ConfigurationError(MSG_INITIAL_CONTENT_BASE64) from e

        if self.regexp and self.initial_version:
            raise ConfigurationError(MSG_INITIAL_PATH_FOR_REGEXP)

        if self.versioned_file and self.initial_path:
            raise ConfigurationError(MSG_INITIAL_VERSION_FOR_FILE)

        has_initial_content = bool(
            self.initial_content_text or self.initial_content_binary
        )
        if has_initial_content and not (self.initial_path or self.initial_version):
            raise ConfigurationError(MSG_INITIAL_CONTENT_WITHOUT_SEED)

        if not self.regexp and not self.versioned_file:
            raise ConfigurationError(MSG_SPECIFY_MODE)

        if self.regexp:
            compile_pattern(self.regexp)

    @property
    def is_regexp_mode(self) -> bool:
        return bool(self.regexp)

    @property
    def initial_generation(self) -> Optional[int]:
        """The bootstrap generation as an integer, or None if not configured."""
        if not self.initial_version:
            return None
        return parse_int64(self.initial_version)

    def initial_content(self) -> bytes:
        """Return the bootstrap content: decoded binary, else the UTF-8 text."""
        if self.initial_content_binary:
            return base64.b64decode(self.initial_content_binary, validate=True)
        return self.initial_content_text.encode("utf-8")


@dataclass
class Version:
    """A version as exchanged with the scheduler: a path or a generation."""

    path: Optional[str] = None
    """Object path (regexp mode)"""

    generation: Optional[int] = None
    """Object generation (versioned-file mode)"""

    @classmethod
    def from_dict(cls, data: Any) -> "Version":
        """
        Build a Version from a request's `version` object.

        Raises:
            VersionError: If `generation` is present but not an integer.
        """
        data = _require_mapping(data, "version")
        path = data.get("path") or None
        if path is not None and not isinstance(path, str):
            raise VersionError("version path must be a string", field="path")

        raw_generation = data.get("generation")
        generation = None
        if raw_generation not in (None, ""):
            generation = parse_int64(raw_generation)
            if generation is None:
                raise VersionError(
                    f"invalid generation: {raw_generation!r}",
                    field="generation",
                    value=str(raw_generation),
                )
        return cls(path=path, generation=generation)

    def to_dict(self) -> Dict[str, str]:
        """Render the version for the scheduler; generations are decimal strings."""
        result: Dict[str, str] = {}
        if self.path:
            result["path"] = self.path
        if self.generation is not None:
            result["generation"] = str(self.generation)
        return result


@dataclass
class MetadataPair:
    """A name/value pair displayed by the scheduler alongside a version."""

    name: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass
class CheckRequest:
    source: Source
    version: Version = field(default_factory=Version)

    @classmethod
    def from_dict(cls, data: Any) -> "CheckRequest":
        data = _require_mapping(data, "request")
        return cls(
            source=Source.from_dict(data.get("source")),
            version=Version.from_dict(data.get("version")),
        )


@dataclass
class InParams:
    unpack: bool = False
    """Unpack zip, tar and gzip artifacts after download"""

    skip_download: Optional[bool] = None
    """Overrides `source.skip_download` when set"""

    @classmethod
    def from_dict(cls, data: Any) -> "InParams":
        """
        Raises:
            ConfigurationError: If `skip_download` or `unpack` is not bool-like.
        """
        data = _require_mapping(data, "params")

        skip_download = None
        raw_skip = data.get("skip_download")
        if raw_skip not in (None, ""):
            skip_download = parse_bool(raw_skip)
            if skip_download is None:
                raise ConfigurationError(
                    MSG_INVALID_SKIP_DOWNLOAD.format(value=raw_skip)
                )

        unpack = parse_bool(data.get("unpack", False))
        if unpack is None:
            raise ConfigurationError(f"invalid unpack value specified: {data['unpack']}")

        return cls(unpack=unpack, skip_download=skip_download)


@dataclass
class InRequest:
    source: Source
    version: Version = field(default_factory=Version)
    params: InParams = field(default_factory=InParams)

    @classmethod
    def from_dict(cls, data: Any) -> "InRequest":
        data = _require_mapping(data, "request")
        return cls(
            source=Source.from_dict(data.get("source")),
            version=Version.from_dict(data.get("version")),
            params=InParams.from_dict(data.get("params")),
        )

    def should_skip_download(self) -> bool:
        if self.params.skip_download is not None:
            return self.params.skip_download
        return self.source.skip_download


@dataclass
class OutParams:
    file: str = ""
    """Glob, relative to the sources directory, selecting the file to upload"""

    predefined_acl: str = ""
    content_type: str = ""
    cache_control: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "OutParams":
        data = _require_mapping(data, "params")
        return cls(
            file=_string_field(data, "file"),
            predefined_acl=_string_field(data, "predefined_acl"),
            content_type=_string_field(data, "content_type"),
            cache_control=_string_field(data, "cache_control"),
        )

    def validate(self) -> None:
        if not self.file:
            raise ConfigurationError(MSG_SPECIFY_FILE)


@dataclass
class OutRequest:
    source: Source
    params: OutParams = field(default_factory=OutParams)

    @classmethod
    def from_dict(cls, data: Any) -> "OutRequest":
        data = _require_mapping(data, "request")
        return cls(
            source=Source.from_dict(data.get("source")),
            params=OutParams.from_dict(data.get("params")),
        )


@dataclass
class VersionResponse:
    """Response of `in` and `out`: the version plus display metadata."""

    version: Version
    metadata: List[MetadataPair] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version.to_dict(),
            "metadata": [pair.to_dict() for pair in self.metadata],
        }


def check_response_to_list(versions: List[Version]) -> List[Dict[str, str]]:
    return [version.to_dict() for version in versions]
