"""Persistent defaults for ghrelgrab invocations and load/save helpers."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .logging_setup import config_root
from .template import DEFAULT_BASE_URL


CONFIG_VERSION = 1

DEFAULT_TIMEOUT_S = 60
MAX_TIMEOUT_S = 600


@dataclass
class DefaultsConfig:
    out_dir: str = "."
    os_map: str = ""
    arch_map: str = ""


@dataclass
class NetworkConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout_s: int = DEFAULT_TIMEOUT_S


@dataclass
class LoggingConfig:
    keep_log_files: int = 7
    file_logging: bool = True


@dataclass
class GrabConfig:
    config_version: int = CONFIG_VERSION
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def config_path() -> Path:
    override = os.environ.get("GHRELGRAB_CONFIG", "").strip()
    if override:
        return Path(override).expanduser()
    return config_root() / "config.json"


def _merge(dataclass_type, raw: Any):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_defaults(cfg: GrabConfig) -> None:
    cfg.defaults.out_dir = str(cfg.defaults.out_dir or ".")
    cfg.defaults.os_map = str(cfg.defaults.os_map or "")
    cfg.defaults.arch_map = str(cfg.defaults.arch_map or "")


def _normalize_network(cfg: GrabConfig) -> None:
    base_url = str(cfg.network.base_url or "").strip().rstrip("/")
    cfg.network.base_url = base_url or DEFAULT_BASE_URL
    try:
        timeout = int(cfg.network.timeout_s)
    except (TypeError, ValueError):
        timeout = DEFAULT_TIMEOUT_S
    cfg.network.timeout_s = max(1, min(MAX_TIMEOUT_S, timeout))


def _normalize_logging(cfg: GrabConfig) -> None:
    try:
        cfg.logging.keep_log_files = max(2, int(cfg.logging.keep_log_files))
    except (TypeError, ValueError):
        cfg.logging.keep_log_files = 7
    cfg.logging.file_logging = bool(cfg.logging.file_logging)


def load_config(path: Path | None = None) -> GrabConfig:
    path = path or config_path()
    if not path.exists():
        return GrabConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return GrabConfig()
    if not isinstance(raw, dict):
        return GrabConfig()

    cfg = GrabConfig(
        config_version=CONFIG_VERSION,
        defaults=_merge(DefaultsConfig, raw.get("defaults", {})),
        network=_merge(NetworkConfig, raw.get("network", {})),
        logging=_merge(LoggingConfig, raw.get("logging", {})),
    )

    _normalize_defaults(cfg)
    _normalize_network(cfg)
    _normalize_logging(cfg)
    return cfg


def save_config(cfg: GrabConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path


def env_token() -> str:
    return os.environ.get("GH_TOKEN", "").strip()
