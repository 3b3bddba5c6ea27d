"""CLI entrypoint that fetches a GitHub release asset and unpacks it."""

from __future__ import annotations

import argparse
import json
import sys
from functools import partial
from pathlib import Path

from ghrelgrab_core import (
    BuildInfo,
    GrabConfig,
    GrabError,
    GrabRequest,
    GrabResult,
    build_info,
    detect_target,
    grab,
    load_config,
    save_config,
)
from ghrelgrab_core.config import MAX_TIMEOUT_S, env_token
from ghrelgrab_core.logging_setup import configure_logging, get_logger, install_crash_hooks
from ghrelgrab_transport import download


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _pre_parse(argv: list[str] | None) -> argparse.Namespace:
    # Flags needed before the full parser exists: the config file and banner suppression.
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre.add_argument("--json", action="store_true")
    known, _rest = pre.parse_known_args(argv)
    return known


def _timeout_arg(value: str) -> int:
    try:
        timeout = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if not 1 <= timeout <= MAX_TIMEOUT_S:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_TIMEOUT_S} seconds")
    return timeout


def build_parser(cfg: GrabConfig | None = None) -> argparse.ArgumentParser:
    cfg = cfg or GrabConfig()
    target = detect_target()

    parser = argparse.ArgumentParser(prog="ghrelgrab", description="Download a GitHub release asset and unpack it")
    parser.add_argument("--repo", default="", help="owner/repo for GitHub project (required)")
    parser.add_argument("--version", default="", help="release tag, e.g. v1.2.3 (required)")
    parser.add_argument(
        "--file",
        default="",
        help="asset filename with {version}, {os} and/or {arch} tokens (required)",
    )
    parser.add_argument("--out", default=cfg.defaults.out_dir, help="output directory (will be created if missing)")
    parser.add_argument("--debug", action="store_true", help="enable debug output")

    parser.add_argument("--os", dest="os_name", default=target.os_name, help="override OS used for {os} substitution")
    parser.add_argument(
        "--os-map",
        default=cfg.defaults.os_map,
        help="comma-separated DETECTED=SUBSTITUTE pairs (e.g. 'linux=ubuntu,windows=win32')",
    )
    parser.add_argument("--arch", default=target.arch, help="override arch used for {arch} substitution")
    parser.add_argument(
        "--arch-map",
        default=cfg.defaults.arch_map,
        help="comma-separated DETECTED=SUBSTITUTE pairs (e.g. 'amd64=x86_64,arm64=aarch64')",
    )

    parser.add_argument("--token", default=env_token(), help="GitHub token (defaults to GH_TOKEN env)")
    parser.add_argument("--base-url", default=cfg.network.base_url, help="release host, e.g. a GitHub Enterprise URL")
    parser.add_argument(
        "--timeout",
        type=_timeout_arg,
        default=cfg.network.timeout_s,
        help="deadline in seconds for the whole download",
    )
    parser.add_argument("--json", action="store_true", help="print the result as JSON instead of Saved: lines")
    parser.add_argument("--config", default=None, help="config file (defaults to GHRELGRAB_CONFIG or the per-user file)")
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="store --out, --os-map, --arch-map, --base-url and --timeout as defaults",
    )
    return parser


def _save_defaults(cfg: GrabConfig, args: argparse.Namespace, path: Path | None) -> Path:
    cfg.defaults.out_dir = args.out
    cfg.defaults.os_map = args.os_map
    cfg.defaults.arch_map = args.arch_map
    cfg.network.base_url = args.base_url
    cfg.network.timeout_s = args.timeout
    return save_config(cfg, path)


def _request_from_args(args: argparse.Namespace) -> GrabRequest:
    return GrabRequest(
        repo=args.repo,
        version=args.version,
        file_template=args.file,
        out_dir=Path(args.out),
        os_name=args.os_name,
        arch=args.arch,
        os_map=args.os_map,
        arch_map=args.arch_map,
        token=args.token or None,
        base_url=args.base_url,
        timeout_s=args.timeout,
    )


def _result_payload(result: GrabResult, info: BuildInfo) -> dict[str, object]:
    return {
        "ghrelgrab_version": info.version,
        "url": result.url,
        "filename": result.filename,
        "format": result.archive_format.value,
        "version": result.context.version,
        "os": result.context.os_name,
        "arch": result.context.arch,
        "produced": [str(p) for p in result.produced],
    }


def main(argv: list[str] | None = None) -> int:
    info = build_info()
    early = _pre_parse(argv)
    if not early.json:
        print("ghrelgrab version:", info.version, flush=True)

    config_file = Path(early.config).expanduser() if early.config else None
    cfg = load_config(config_file)
    parser = build_parser(cfg)
    args = parser.parse_args(argv)

    if args.save_defaults:
        saved = _save_defaults(cfg, args, config_file)
        print(f"Defaults saved: {saved}", file=sys.stderr)
        if not (args.repo or args.version or args.file):
            return 0

    request = _request_from_args(args)
    try:
        request.validate()
    except GrabError as exc:
        parser.print_usage(sys.stderr)
        print(exc, file=sys.stderr)
        return 2

    configure_logging(
        keep_files=cfg.logging.keep_log_files,
        console=True,
        debug=args.debug,
        file_logging=cfg.logging.file_logging,
    )
    install_crash_hooks()
    logger = get_logger()

    fetcher = partial(download, user_agent=info.user_agent)
    try:
        result = grab(request, fetcher)
    except (GrabError, OSError) as exc:
        logger.debug(f"fatal: {exc}", exc_info=True, extra={"event": "fatal"})
        print(exc, file=sys.stderr)
        return 1

    if args.json:
        _print_json(_result_payload(result, info))
    else:
        for path in result.produced:
            print("Saved:", path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
