"""
Unpacking of fetched artifacts for the `unpack` parameter of `in`.

The file type is detected from leading magic bytes. gzip layers are removed
until the payload is no longer gzip, then zip and tar archives are extracted
next to the downloaded file.
"""

import gzip
import os
import shutil
import tarfile
import zipfile
from typing import List, Optional

from gcs_resource.constants import (
    GZIP_MAGIC,
    MAGIC_HEADER_SIZE,
    MIME_TYPE_GZIP,
    MIME_TYPE_TAR,
    MIME_TYPE_ZIP,
    MSG_UNPACK_FAILED,
    TAR_MAGIC,
    TAR_MAGIC_OFFSET,
    UNCOMPRESSED_SUFFIX,
    ZIP_EMPTY_MAGIC,
    ZIP_MAGIC,
)
from gcs_resource.exceptions import ExtractionError
from gcs_resource.files import safe_extract_path
from gcs_resource.log_utils import logger

SUPPORTED_MIME_TYPES = frozenset({MIME_TYPE_ZIP, MIME_TYPE_TAR, MIME_TYPE_GZIP})


def detect_mime_type(path: str) -> Optional[str]:
    """
    Detect whether `path` holds a zip, tar or gzip payload.

    Returns:
        Optional[str]: The MIME type, or None for anything else.
    """
    with open(path, "rb") as f:
        header = f.read(MAGIC_HEADER_SIZE)

    if header.startswith(ZIP_MAGIC) or header.startswith(ZIP_EMPTY_MAGIC):
        return MIME_TYPE_ZIP
    if header.startswith(GZIP_MAGIC):
        return MIME_TYPE_GZIP
    if header[TAR_MAGIC_OFFSET : TAR_MAGIC_OFFSET + len(TAR_MAGIC)] == TAR_MAGIC:
        return MIME_TYPE_TAR
    return None


def _gunzip_destination(source_path: str) -> str:
    if source_path.endswith(".tgz"):
        return source_path[: -len(".tgz")] + ".tar"
    if source_path.endswith(".gz"):
        return source_path[: -len(".gz")]
    return source_path + UNCOMPRESSED_SUFFIX


def gunzip(source_path: str) -> str:
    """Decompress a gzip file next to itself and return the output path."""
    destination_path = _gunzip_destination(source_path)
    with gzip.open(source_path, "rb") as source, open(destination_path, "wb") as target:
        shutil.copyfileobj(source, target)
    logger.debug("Decompressed %s to %s", source_path, destination_path)
    return destination_path


def _apply_mode(path: str, mode: int) -> None:
    mode &= 0o777
    if mode:
        os.chmod(path, mode)


def unzip(source_path: str, destination_dir: str) -> List[str]:
    """Extract a zip archive into `destination_dir`; members escaping it are skipped."""
    extracted = []
    with zipfile.ZipFile(source_path, "r") as zip_ref:
        for info in zip_ref.infolist():
            try:
                target = safe_extract_path(destination_dir, info.filename)
            except ValueError as e:
                logger.warning("Skipping unsafe archive member: %s", e)
                continue

            if info.is_dir():
                os.makedirs(target, exist_ok=True)
                continue

            os.makedirs(os.path.dirname(target), exist_ok=True)
            with zip_ref.open(info) as source, open(target, "wb") as out:
                shutil.copyfileobj(source, out)
            _apply_mode(target, info.external_attr >> 16)
            extracted.append(target)
    return extracted


def untar(source_path: str, destination_dir: str) -> List[str]:
    """Extract a tar archive into `destination_dir`; links and unsafe members are skipped."""
    extracted = []
    with tarfile.open(source_path, "r") as tar:
        for member in tar:
            try:
                target = safe_extract_path(destination_dir, member.name)
            except ValueError as e:
                logger.warning("Skipping unsafe archive member: %s", e)
                continue

            if member.isdir():
                os.makedirs(target, exist_ok=True)
                continue
            if not member.isfile():
                logger.warning("Skipping non-regular archive member %s", member.name)
                continue

            os.makedirs(os.path.dirname(target), exist_ok=True)
            source = tar.extractfile(member)
            if source is None:
                continue
            with source, open(target, "wb") as out:
                shutil.copyfileobj(source, out)
            _apply_mode(target, member.mode)
            extracted.append(target)
    return extracted


def unpack_file(source_path: str) -> List[str]:
    """
    Unpack a downloaded artifact in place.

    Returns:
        List[str]: Paths of the extracted files (empty for a plain gzip file).

    Raises:
        ExtractionError: For unsupported types and any failure while unpacking.
    """
    file_name = os.path.basename(source_path)

    def _failure(reason: str) -> ExtractionError:
        return ExtractionError(
            MSG_UNPACK_FAILED.format(name=file_name, reason=reason),
            archive_path=source_path,
        )

    try:
        mime_type = detect_mime_type(source_path)
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise _failure(f"unsupported file type {mime_type or 'unknown'}")

        while mime_type == MIME_TYPE_GZIP:
            source_path = gunzip(source_path)
            mime_type = detect_mime_type(source_path)

        destination_dir = os.path.dirname(source_path)
        if mime_type == MIME_TYPE_ZIP:
            return unzip(source_path, destination_dir)
        if mime_type == MIME_TYPE_TAR:
            return untar(source_path, destination_dir)
        return []
    except (OSError, EOFError, zipfile.BadZipFile, tarfile.TarError) as e:
        raise _failure(str(e)) from e
