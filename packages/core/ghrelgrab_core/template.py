"""Asset filename templates and release download URLs."""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass


DEFAULT_BASE_URL = "https://github.com"


@dataclass(frozen=True)
class TemplateContext:
    version: str
    os_name: str
    arch: str

    def placeholders(self) -> dict[str, str]:
        return {
            "{version}": self.version,
            "{os}": self.os_name,
            "{arch}": self.arch,
        }


def expand_template(template: str, ctx: TemplateContext) -> str:
    """Replace every ``{version}``, ``{os}`` and ``{arch}`` literally.

    Placeholders missing from the template are fine, and the result is not
    normalized in any way: it becomes both the URL path segment and, for
    plain files, the local file name.
    """
    filename = template
    for token, value in ctx.placeholders().items():
        filename = filename.replace(token, value)
    return filename


def build_download_url(repo: str, version: str, filename: str, base_url: str = DEFAULT_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/{repo}/releases/download/{version}/{filename}"


def local_name(filename: str) -> str:
    """Last path segment of ``filename``, ignoring trailing separators.

    Only the platform's own separators split: on POSIX a backslash is an
    ordinary file name character.
    """
    name = filename
    if os.sep != "/":
        name = name.replace(os.sep, "/")
    if os.altsep and os.altsep != "/":
        name = name.replace(os.altsep, "/")
    stripped = name.rstrip("/")
    if not stripped:
        return "/" if name else "."
    return posixpath.basename(stripped)
