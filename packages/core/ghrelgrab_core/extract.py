"""Write a fetched artifact into the output directory.

Archives (tar+gzip, zip) are unpacked entry by entry in container order;
anything else is copied as a single file. Only regular files end up in the
returned list; directories are created but not reported.

Entry names are joined onto the output root after normalization, and a name
that would land outside the root (``../x``, ``a/../../x``) aborts the whole
extraction with :class:`UnsafeEntryPathError`. Files written by earlier
entries are left in place when a later entry fails.
"""

from __future__ import annotations

import gzip
import os
import shutil
import tarfile
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO

from .errors import ArchiveFormatError, OutputError, UnsafeEntryPathError
from .formats import ArchiveFormat
from .logging_setup import get_logger
from .template import local_name


DIR_MODE = 0o755
PLAIN_FILE_MODE = 0o644
DEFAULT_ZIP_FILE_MODE = 0o644

_CONTAINER_ERRORS = (
    tarfile.TarError,
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    gzip.BadGzipFile,
    zlib.error,
    EOFError,
)


def ensure_dir(path: Path) -> None:
    try:
        path.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputError(f"create directory {path}: {exc}") from exc


def entry_destination(out_dir: Path, entry_name: str) -> Path:
    """Map an archive entry name to a path under ``out_dir``.

    Leading slashes are dropped so absolute entry names stay inside the root;
    ``..`` segments are collapsed and rejected if they climb above it.
    """
    cleaned = os.path.normpath(entry_name.lstrip("/"))
    if cleaned == os.curdir:
        return out_dir
    if cleaned == os.pardir or cleaned.startswith(os.pardir + os.sep) or os.path.isabs(cleaned):
        raise UnsafeEntryPathError(entry_name, str(out_dir))
    return out_dir / cleaned


def _write_file(source: BinaryIO, dest: Path, mode: int) -> None:
    ensure_dir(dest.parent)
    try:
        # The mode only applies when the file is created (and is masked by umask).
        fd = os.open(dest, os.O_CREAT | os.O_WRONLY | os.O_TRUNC | getattr(os, "O_BINARY", 0), mode)
    except OSError as exc:
        raise OutputError(f"create {dest}: {exc}") from exc
    with os.fdopen(fd, "wb") as out:
        try:
            shutil.copyfileobj(source, out)
        except _CONTAINER_ERRORS:
            raise
        except OSError as exc:
            raise OutputError(f"write {dest}: {exc}") from exc


def is_supported_tar_entry(member: tarfile.TarInfo) -> bool:
    """Directories and regular files are extracted; links, devices and fifos are skipped."""
    return member.isdir() or member.isreg()


def extract_tar_gz(archive: Path, out_dir: Path) -> list[Path]:
    logger = get_logger()
    produced: list[Path] = []
    try:
        # Stream mode: headers and contents are read strictly in order.
        with tarfile.open(archive, mode="r|gz") as tar:
            for member in tar:
                if not is_supported_tar_entry(member):
                    logger.debug(
                        f"skipping unsupported tar entry {member.name}",
                        extra={"event": "entry_skipped"},
                    )
                    continue
                dest = entry_destination(out_dir, member.name)
                if member.isdir():
                    ensure_dir(dest)
                    continue
                source = tar.extractfile(member)
                if source is None:
                    raise ArchiveFormatError(f"read {archive}: no data for entry {member.name}")
                with source:
                    _write_file(source, dest, member.mode & 0o777)
                produced.append(dest)
    except _CONTAINER_ERRORS as exc:
        raise ArchiveFormatError(f"read {archive}: {exc}") from exc
    return produced


def _zip_entry_mode(info: zipfile.ZipInfo) -> int:
    # Archives built on Windows carry no Unix mode in the high bits.
    return ((info.external_attr >> 16) & 0o777) or DEFAULT_ZIP_FILE_MODE


def extract_zip(archive: Path, out_dir: Path) -> list[Path]:
    produced: list[Path] = []
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                dest = entry_destination(out_dir, info.filename)
                if info.is_dir():
                    ensure_dir(dest)
                    continue
                with zf.open(info) as source:
                    _write_file(source, dest, _zip_entry_mode(info))
                produced.append(dest)
    except _CONTAINER_ERRORS as exc:
        raise ArchiveFormatError(f"read {archive}: {exc}") from exc
    return produced


def copy_plain(source: Path, out_dir: Path, filename: str) -> list[Path]:
    dest = out_dir / local_name(filename)
    with source.open("rb") as src:
        _write_file(src, dest, PLAIN_FILE_MODE)
    return [dest]


def materialize(archive_format: ArchiveFormat, source: Path, out_dir: Path, filename: str) -> list[Path]:
    ensure_dir(out_dir)
    if archive_format is ArchiveFormat.TAR_GZ:
        return extract_tar_gz(source, out_dir)
    if archive_format is ArchiveFormat.ZIP:
        return extract_zip(source, out_dir)
    return copy_plain(source, out_dir, filename)
