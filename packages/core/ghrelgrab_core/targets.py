"""Detected OS/architecture tokens used for ``{os}`` and ``{arch}``."""

from __future__ import annotations

import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformTarget:
    os_name: str
    arch: str


def _normalize_os(system: str) -> str:
    s = system.lower()
    if s.startswith("win"):
        return "windows"
    if s.startswith("darwin") or s.startswith("mac"):
        return "darwin"
    return s or "linux"


def _normalize_arch(machine: str) -> str:
    m = machine.lower()
    if m in ("x86_64", "amd64", "x64"):
        return "amd64"
    if m in ("aarch64", "arm64", "armv8l"):
        return "arm64"
    if m in ("i386", "i686", "x86"):
        return "386"
    if m in ("armv6l", "armv7l", "arm"):
        return "arm"
    return m


def resolve_target(system: str, machine: str) -> PlatformTarget:
    return PlatformTarget(os_name=_normalize_os(system), arch=_normalize_arch(machine))


def detect_target() -> PlatformTarget:
    return resolve_target(platform.system(), platform.machine())
