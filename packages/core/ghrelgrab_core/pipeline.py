"""Resolve, fetch and materialize a single release asset."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .config import DEFAULT_TIMEOUT_S
from .errors import ConfigError
from .extract import materialize
from .formats import ArchiveFormat, detect_format
from .logging_setup import get_logger
from .substitution import substitute
from .template import DEFAULT_BASE_URL, TemplateContext, build_download_url, expand_template


# Called as fetcher(url, token=..., timeout_s=...); the yielded path is gone after exit.
Fetcher = Callable[..., AbstractContextManager[Path]]


@dataclass(frozen=True)
class GrabRequest:
    repo: str
    version: str
    file_template: str
    out_dir: Path
    os_name: str
    arch: str
    os_map: str = ""
    arch_map: str = ""
    token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout_s: int = DEFAULT_TIMEOUT_S

    def validate(self) -> None:
        if not self.repo or not self.version or not self.file_template:
            raise ConfigError("--repo, --version, and --file are required")


@dataclass(frozen=True)
class GrabResult:
    context: TemplateContext
    filename: str
    url: str
    archive_format: ArchiveFormat
    produced: list[Path] = field(default_factory=list)


def resolve_filename(request: GrabRequest) -> tuple[TemplateContext, str]:
    logger = get_logger()
    os_sub = substitute(request.os_name, request.os_map)
    if os_sub != request.os_name:
        logger.debug(f"OS substituted: {request.os_name} -> {os_sub}")
    arch_sub = substitute(request.arch, request.arch_map)
    if arch_sub != request.arch:
        logger.debug(f"architecture substituted: {request.arch} -> {arch_sub}")

    ctx = TemplateContext(version=request.version, os_name=os_sub, arch=arch_sub)
    return ctx, expand_template(request.file_template, ctx)


def grab(request: GrabRequest, fetcher: Fetcher) -> GrabResult:
    """Run the whole pipeline for one request.

    The output directory is only touched once the download has completed, so
    a failed fetch leaves it as it was. The temporary artifact belongs to
    ``fetcher`` and is removed when its context exits, whether materializing
    succeeded or not.
    """
    request.validate()
    logger = get_logger()

    logger.debug(
        f"repo={request.repo} version={request.version} os={request.os_name} arch={request.arch}",
    )
    ctx, filename = resolve_filename(request)
    url = build_download_url(request.repo, request.version, filename, request.base_url)
    archive_format = detect_format(filename)
    logger.debug(f"download URL: {url}", extra={"event": "resolved"})

    logger.info(f"fetching {url}", extra={"event": "fetch_start"})
    with fetcher(url, token=request.token, timeout_s=request.timeout_s) as artifact:
        logger.info(f"fetched {filename}", extra={"event": "fetch_done"})
        logger.debug(
            f"materializing {archive_format.value} into {request.out_dir}",
            extra={"event": "extract_start"},
        )
        produced = materialize(archive_format, artifact, request.out_dir, filename)

    logger.info(
        f"wrote {len(produced)} file(s) under {request.out_dir}",
        extra={"event": "extract_done"},
    )
    return GrabResult(
        context=ctx,
        filename=filename,
        url=url,
        archive_format=archive_format,
        produced=produced,
    )
