"""Core services for resolving, fetching and unpacking release assets."""

from .config import GrabConfig, load_config, save_config
from .errors import (
    ArchiveFormatError,
    ConfigError,
    ExtractionError,
    FetchError,
    GrabError,
    HttpStatusError,
    OutputError,
    TransportError,
    UnsafeEntryPathError,
)
from .extract import copy_plain, extract_tar_gz, extract_zip, materialize
from .formats import ArchiveFormat, detect_format
from .pipeline import GrabRequest, GrabResult, grab, resolve_filename
from .substitution import parse_subst_map, substitute
from .targets import PlatformTarget, detect_target, resolve_target
from .template import TemplateContext, build_download_url, expand_template
from .version import BuildInfo, build_info, resolve_version

__all__ = [
    "ArchiveFormat",
    "ArchiveFormatError",
    "BuildInfo",
    "ConfigError",
    "ExtractionError",
    "FetchError",
    "GrabConfig",
    "GrabError",
    "GrabRequest",
    "GrabResult",
    "HttpStatusError",
    "OutputError",
    "PlatformTarget",
    "TemplateContext",
    "TransportError",
    "UnsafeEntryPathError",
    "build_download_url",
    "build_info",
    "copy_plain",
    "detect_format",
    "detect_target",
    "expand_template",
    "extract_tar_gz",
    "extract_zip",
    "grab",
    "load_config",
    "materialize",
    "parse_subst_map",
    "resolve_filename",
    "resolve_target",
    "resolve_version",
    "save_config",
    "substitute",
]
