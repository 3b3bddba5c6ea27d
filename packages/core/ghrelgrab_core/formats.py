"""Artifact format detection by file name suffix."""

from __future__ import annotations

from enum import Enum


class ArchiveFormat(str, Enum):
    TAR_GZ = "tar.gz"
    ZIP = "zip"
    FILE = "file"


_TAR_GZ_SUFFIXES = (".tar.gz", ".tgz")


def detect_format(filename: str) -> ArchiveFormat:
    lower = filename.lower()
    if lower.endswith(_TAR_GZ_SUFFIXES):
        return ArchiveFormat.TAR_GZ
    if lower.endswith(".zip"):
        return ArchiveFormat.ZIP
    return ArchiveFormat.FILE
