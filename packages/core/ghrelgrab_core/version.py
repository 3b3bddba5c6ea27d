"""Build version reported in the startup banner and User-Agent."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import metadata


# Release builds rewrite this line; source checkouts keep "dev".
BUILD_VERSION = "dev"

DIST_NAME = "ghrelgrab"


@dataclass(frozen=True)
class BuildInfo:
    version: str

    @property
    def user_agent(self) -> str:
        return f"ghrelgrab/{self.version}"


def resolve_version(injected: str = BUILD_VERSION, dist_name: str = DIST_NAME) -> str:
    """Prefer the injected build version, else the installed distribution's."""
    if injected and injected != "dev":
        return injected
    try:
        installed = metadata.version(dist_name)
    except metadata.PackageNotFoundError:
        return "dev"
    return installed or "dev"


def build_info() -> BuildInfo:
    return BuildInfo(version=resolve_version())
