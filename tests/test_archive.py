import gzip
import io
import os
import tarfile
import zipfile

import pytest

from gcs_resource.archive import detect_mime_type, gunzip, unpack_file, untar, unzip
from gcs_resource.constants import MIME_TYPE_GZIP, MIME_TYPE_TAR, MIME_TYPE_ZIP
from gcs_resource.exceptions import ExtractionError

pytestmark = [pytest.mark.unit, pytest.mark.files]


def _write_tar(path, members):
    with tarfile.open(path, "w") as tar:
        for name, payload in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(payload)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(payload))


def _write_zip(path, members):
    with zipfile.ZipFile(path, "w") as zf:
        for name, payload in members.items():
            zf.writestr(name, payload)


def test_detect_mime_type(tmp_path):
    zip_path = tmp_path / "a.zip"
    _write_zip(zip_path, {"x.txt": b"x"})
    tar_path = tmp_path / "a.tar"
    _write_tar(tar_path, {"x.txt": b"x"})
    gz_path = tmp_path / "a.gz"
    gz_path.write_bytes(gzip.compress(b"x"))
    text_path = tmp_path / "a.txt"
    text_path.write_text("plain")

    assert detect_mime_type(str(zip_path)) == MIME_TYPE_ZIP
    assert detect_mime_type(str(tar_path)) == MIME_TYPE_TAR
    assert detect_mime_type(str(gz_path)) == MIME_TYPE_GZIP
    assert detect_mime_type(str(text_path)) is None


def test_detect_empty_zip(tmp_path):
    path = tmp_path / "empty.zip"
    _write_zip(path, {})

    assert detect_mime_type(str(path)) == MIME_TYPE_ZIP


@pytest.mark.parametrize(
    "name, expected",
    [("data.tgz", "data.tar"), ("data.txt.gz", "data.txt"), ("data", "data.uncompressed")],
)
def test_gunzip_output_name(tmp_path, name, expected):
    path = tmp_path / name
    path.write_bytes(gzip.compress(b"content"))

    result = gunzip(str(path))

    assert result == str(tmp_path / expected)
    assert (tmp_path / expected).read_bytes() == b"content"


def test_unzip(tmp_path):
    archive = tmp_path / "a.zip"
    _write_zip(archive, {"dir/": b"", "dir/one.txt": b"one", "two.txt": b"two"})
    destination = tmp_path / "out"
    destination.mkdir()

    extracted = unzip(str(archive), str(destination))

    assert (destination / "dir" / "one.txt").read_bytes() == b"one"
    assert (destination / "two.txt").read_bytes() == b"two"
    assert len(extracted) == 2


def test_unzip_skips_traversal(tmp_path):
    archive = tmp_path / "a.zip"
    _write_zip(archive, {"../evil.txt": b"evil", "ok.txt": b"ok"})
    destination = tmp_path / "out"
    destination.mkdir()

    unzip(str(archive), str(destination))

    assert not (tmp_path / "evil.txt").exists()
    assert (destination / "ok.txt").read_bytes() == b"ok"


def test_untar_preserves_mode_and_skips_traversal(tmp_path):
    archive = tmp_path / "a.tar"
    _write_tar(archive, {"bin/run.sh": b"#!/bin/sh\n", "../../escape.txt": b"no"})
    destination = tmp_path / "out"
    destination.mkdir()

    extracted = untar(str(archive), str(destination))

    run_sh = destination / "bin" / "run.sh"
    assert extracted == [str(run_sh.resolve())]
    assert os.stat(run_sh).st_mode & 0o777 == 0o755
    assert not (tmp_path.parent / "escape.txt").exists()


def test_untar_skips_symlinks(tmp_path):
    archive = tmp_path / "a.tar"
    with tarfile.open(archive, "w") as tar:
        link = tarfile.TarInfo("link")
        link.type = tarfile.SYMTYPE
        link.linkname = "/etc/passwd"
        tar.addfile(link)
    destination = tmp_path / "out"
    destination.mkdir()

    assert untar(str(archive), str(destination)) == []
    assert not (destination / "link").exists()


def test_unpack_gzipped_tar(tmp_path):
    tar_path = tmp_path / "release.tar"
    _write_tar(tar_path, {"release/app.bin": b"binary"})
    tgz_path = tmp_path / "release.tgz"
    tgz_path.write_bytes(gzip.compress(tar_path.read_bytes()))
    tar_path.unlink()

    unpack_file(str(tgz_path))

    assert (tmp_path / "release" / "app.bin").read_bytes() == b"binary"


def test_unpack_double_gzip(tmp_path):
    path = tmp_path / "notes.txt.gz.gz"
    path.write_bytes(gzip.compress(gzip.compress(b"notes")))

    assert unpack_file(str(path)) == []
    assert (tmp_path / "notes.txt").read_bytes() == b"notes"


def test_unpack_zip(tmp_path):
    path = tmp_path / "bundle.zip"
    _write_zip(path, {"readme.md": b"# hi"})

    unpack_file(str(path))

    assert (tmp_path / "readme.md").read_bytes() == b"# hi"


def test_unpack_unsupported(tmp_path):
    path = tmp_path / "file.bin"
    path.write_bytes(b"\x00\x01\x02")

    with pytest.raises(ExtractionError) as exc_info:
        unpack_file(str(path))

    assert str(exc_info.value).startswith(
        "failed to extract 'file.bin' with the 'params.unpack' option enabled: "
        "unsupported file type"
    )
    assert exc_info.value.archive_path == str(path)


def test_unpack_corrupt_gzip(tmp_path):
    path = tmp_path / "broken.gz"
    path.write_bytes(b"\x1f\x8b" + b"garbage")

    with pytest.raises(ExtractionError, match="failed to extract 'broken.gz'"):
        unpack_file(str(path))
