"""Failure categories for resolving, fetching and materializing release assets.

Every error is fatal to the invocation. Callers that only need a yes/no
answer catch :class:`GrabError`; the subclasses let the CLI and tests tell a
missing flag from an HTTP failure from a corrupt archive.
"""

from __future__ import annotations

__all__ = [
    "ArchiveFormatError",
    "ConfigError",
    "ExtractionError",
    "FetchError",
    "GrabError",
    "HttpStatusError",
    "OutputError",
    "TransportError",
    "UnsafeEntryPathError",
]


class GrabError(RuntimeError):
    """Base exception for every ghrelgrab failure."""


class ConfigError(GrabError):
    """Raised when required invocation inputs are missing or empty."""


class FetchError(GrabError):
    """Raised when the artifact could not be downloaded."""

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"download {url}: {detail}")
        self.url = url
        self.detail = detail


class HttpStatusError(FetchError):
    """The server answered with a non-success status."""

    def __init__(self, url: str, status: int, body: str) -> None:
        super().__init__(url, f"HTTP {status}: {body}")
        self.status = status
        self.body = body


class TransportError(FetchError):
    """The request never produced a response (DNS, TLS, timeout, reset)."""


class ExtractionError(GrabError):
    """Raised when the fetched artifact could not be written out."""


class ArchiveFormatError(ExtractionError):
    """The gzip envelope or the tar/zip structure is corrupt."""


class UnsafeEntryPathError(ExtractionError):
    """An archive entry would land outside the output directory."""

    def __init__(self, entry_name: str, out_dir: str) -> None:
        super().__init__(f"entry {entry_name!r} escapes output directory {out_dir}")
        self.entry_name = entry_name
        self.out_dir = out_dir


class OutputError(ExtractionError):
    """A directory or file under the output root could not be created or written."""
