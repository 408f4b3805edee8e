"""
File operations for gcs-resource.

Atomic writes for the artifact and marker files placed in the destination
directory, path containment checks for archive extraction, and the glob
expansion used to pick the file to publish.
"""

import fnmatch
import os
import tempfile
from typing import List, Optional

from gcs_resource.constants import (
    DIRECTORY_PERMISSIONS,
    FILE_PERMISSIONS,
    GENERATION_FILE_NAME,
    URL_FILE_NAME,
    VERSION_FILE_NAME,
)
from gcs_resource.exceptions import FileSystemError
from gcs_resource.log_utils import logger


def _is_within_base(real_base_dir: str, candidate: str) -> bool:
    """
    Determine whether the candidate path resides within the given base directory.

    Returns:
        True if the candidate path is inside `real_base_dir`, False otherwise.
    """
    try:
        return os.path.commonpath([real_base_dir, candidate]) == real_base_dir
    except ValueError:
        return False


def safe_extract_path(extract_dir: str, file_path: str) -> str:
    """
    Resolve a safe absolute extraction path and prevent directory traversal.

    Parameters:
        extract_dir (str): Base directory intended for extraction.
        file_path (str): Member path from the archive to be extracted.

    Returns:
        str: Absolute, normalized path inside extract_dir suitable for extraction.

    Raises:
        ValueError: If the resolved path is outside extract_dir.
    """
    real_extract_dir = os.path.realpath(extract_dir)
    prospective_path = os.path.join(real_extract_dir, file_path)
    normalized_path = os.path.realpath(prospective_path)

    if not _is_within_base(real_extract_dir, normalized_path):
        raise ValueError(
            f"Unsafe extraction path '{file_path}' is outside base '{extract_dir}'"
        )

    return normalized_path


def ensure_directory(directory: str) -> None:
    """
    Create `directory` and its parents if missing.

    Raises:
        FileSystemError: If the directory cannot be created.
    """
    try:
        os.makedirs(directory, mode=DIRECTORY_PERMISSIONS, exist_ok=True)
    except OSError as e:
        raise FileSystemError(
            f"could not create directory {directory}", path=directory, details=str(e)
        ) from e


def atomic_write_bytes(file_path: str, content: bytes) -> None:
    """
    Write `content` to `file_path` atomically via a temporary file and os.replace.

    Raises:
        FileSystemError: If the temporary file cannot be written or moved into place.
    """
    temp_path: Optional[str] = None
    try:
        temp_fd, temp_path = tempfile.mkstemp(
            dir=os.path.dirname(file_path) or ".", prefix="tmp-", suffix=".tmp"
        )
        with os.fdopen(temp_fd, "wb") as temp_f:
            temp_f.write(content)
        os.chmod(temp_path, FILE_PERMISSIONS)
        os.replace(temp_path, file_path)
    except OSError as e:
        raise FileSystemError(
            f"could not write {file_path}", path=file_path, details=str(e)
        ) from e
    finally:
        if temp_path and os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                logger.debug("Could not remove temporary file %s", temp_path)


def _has_glob_magic(segment: str) -> bool:
    return any(char in segment for char in "*?[")


def glob_files(base_dir: str, pattern: str) -> List[str]:
    """
    Expand a `/`-separated glob `pattern` relative to `base_dir`.

    Unlike `glob.glob`, wildcards also match names that start with a dot.
    Directories that cannot be read contribute no matches.

    Returns:
        List[str]: Matching paths, sorted.
    """
    candidates = [base_dir]
    for segment in pattern.split("/"):
        if not segment:
            continue
        matched: List[str] = []
        for directory in candidates:
            if not _has_glob_magic(segment):
                path = os.path.join(directory, segment)
                if os.path.lexists(path):
                    matched.append(path)
                continue
            try:
                with os.scandir(directory) as entries:
                    names = sorted(entry.name for entry in entries)
            except OSError:
                continue
            matched.extend(
                os.path.join(directory, name)
                for name in names
                if fnmatch.fnmatchcase(name, segment)
            )
        candidates = matched
    return sorted(candidates)


def atomic_write(file_path: str, content: str) -> None:
    """Atomically write UTF-8 text to `file_path`."""
    atomic_write_bytes(file_path, content.encode("utf-8"))


def write_version_file(destination_dir: str, version_text: str) -> None:
    atomic_write(os.path.join(destination_dir, VERSION_FILE_NAME), version_text)


def write_generation_file(destination_dir: str, generation: int) -> None:
    atomic_write(os.path.join(destination_dir, GENERATION_FILE_NAME), str(generation))


def write_url_file(destination_dir: str, url: str) -> None:
    atomic_write(os.path.join(destination_dir, URL_FILE_NAME), url)
