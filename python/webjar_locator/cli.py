# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
import argparse
import json
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, LocatorConfig
from .discovery import default_search_roots, resolve_search_roots
from .errors import (
    AssetNotFoundError,
    ConfigError,
    DepthExceededError,
    DiscoveryError,
    MultipleMatchesError,
    WebJarError,
)
from .locator import WebJarAssetLocator
from .resolvers import RESOLVERS


# (error type, exit code, JSON error code); first match wins
ERROR_CODES = (
    (AssetNotFoundError, 2, "NOT_FOUND"),
    (MultipleMatchesError, 3, "MULTIPLE_MATCHES"),
    (DepthExceededError, 4, "DEPTH_EXCEEDED"),
    (DiscoveryError, 4, "DISCOVERY_ERROR"),
    (ConfigError, 5, "CONFIG_ERROR"),
    (WebJarError, 1, "WEBJAR_ERROR"),
)


def _emit_json(payload):
    sys.stdout.write(json.dumps(payload, ensure_ascii=True) + "\n")


def _load_config(args):
    if getattr(args, "config", None):
        return LocatorConfig.load(Path(args.config))
    default = Path.cwd() / CONFIG_FILENAME
    if default.exists():
        return LocatorConfig.load(default)
    return LocatorConfig.defaults()


def _locator_settings(args):
    """Merge CLI flags over webjars.toml over built-in defaults."""
    config = _load_config(args)
    roots = list(args.root) if args.root else config.get_search_roots()
    if roots is None:
        roots = default_search_roots()
    if args.max_depth is not None and args.max_depth < 0:
        raise ConfigError(f"--max-depth must be a non-negative integer, got {args.max_depth}")
    resolver_name = args.resolver or config.resolver_name
    return {
        "search_roots": roots,
        "filter_expr": args.filter or config.filter,
        "max_depth": args.max_depth if args.max_depth is not None else config.max_depth,
        "path_prefix": (args.prefix or config.path_prefix).strip("/"),
        "resolver": RESOLVERS[resolver_name],
        "resolver_name": resolver_name,
    }


def _build_locator(args, settings):
    if getattr(args, "verbose", False):
        for location in resolve_search_roots(settings["search_roots"], settings["path_prefix"]):
            sys.stderr.write(f"[scan] {location.scheme} {location.target}\n")
    return WebJarAssetLocator.from_search_roots(
        settings["search_roots"],
        settings["filter_expr"],
        max_depth=settings["max_depth"],
        path_prefix=settings["path_prefix"],
        resolver=settings["resolver"],
    )


def cmd_resolve(args):
    locator = _build_locator(args, _locator_settings(args))
    full_path = locator.get_full_path(args.partial_path)
    if args.json:
        _emit_json({
            "schema": "webjars.resolve.v1",
            "ok": True,
            "partial_path": args.partial_path,
            "full_path": full_path,
        })
    else:
        sys.stdout.write(full_path + "\n")


def cmd_list(args):
    locator = _build_locator(args, _locator_settings(args))
    assets = sorted(locator.list_assets(args.folder))
    if args.json:
        _emit_json({
            "schema": "webjars.list.v1",
            "ok": True,
            "folder": args.folder,
            "count": len(assets),
            "assets": assets,
        })
    else:
        for asset in assets:
            sys.stdout.write(asset + "\n")
        if not assets:
            sys.stderr.write(f"[warn] no assets under {locator.path_prefix}{args.folder}\n")


def cmd_index(args):
    locator = _build_locator(args, _locator_settings(args))
    index = locator.full_path_index
    if args.json:
        _emit_json({
            "schema": "webjars.index.v1",
            "ok": True,
            "count": len(index),
            "entries": [{"key": key, "full_path": path} for key, path in index.items()],
        })
    else:
        for key, path in index.items():
            sys.stdout.write(f"{key} -> {path}\n")


def cmd_doctor(args):
    from . import __version__

    settings = _locator_settings(args)
    locations = resolve_search_roots(settings["search_roots"], settings["path_prefix"])
    locator = _build_locator(args, settings)
    report = {
        "version": __version__,
        "python": sys.version.split()[0],
        "platform": sys.platform,
        "path_prefix": settings["path_prefix"],
        "filter": str(settings["filter_expr"]),
        "max_depth": settings["max_depth"],
        "resolver": settings["resolver_name"],
        "locations": [str(location) for location in locations],
        "asset_count": len(locator.full_path_index),
    }
    if args.json:
        _emit_json({"schema": "webjars.doctor.v1", "ok": True, **report})
    else:
        for k, v in report.items():
            sys.stdout.write(f"{k}: {v}\n")


def _report_resolution(args, locator):
    try:
        full_path = locator.get_full_path(args.partial_path)
    except (AssetNotFoundError, MultipleMatchesError) as exc:
        if args.json:
            _emit_json(_error_payload(exc))
        else:
            sys.stderr.write(f"[error] {exc}\n")
        return
    if args.json:
        _emit_json({
            "schema": "webjars.resolve.v1",
            "ok": True,
            "partial_path": args.partial_path,
            "full_path": full_path,
        })
    else:
        sys.stdout.write(f"[ok] {args.partial_path} -> {full_path}\n")


def cmd_watch(args):
    """Resolve a partial path, then re-resolve on every change to the search roots."""
    from . import watcher as watcher_module

    settings = _locator_settings(args)

    def build():
        return _build_locator(args, settings)

    def on_rebuild(locator):
        if not args.json:
            sys.stdout.write(f"[watch] rebuilt index ({len(locator.full_path_index)} assets)\n")
        _report_resolution(args, locator)

    def on_error(exc):
        sys.stderr.write(f"[error] rebuild failed: {exc}\n")

    _report_resolution(args, build())
    if not args.json:
        sys.stdout.write(f"[watch] watching {len(settings['search_roots'])} search roots for changes...\n")
    watcher_module.watch_search_roots(
        settings["search_roots"], build, on_rebuild, delay=args.delay, on_error=on_error
    )


def _add_locator_flags(p):
    p.add_argument("--root", action="append", help="Search root: directory, archive or pkg:<package> (repeatable)")
    p.add_argument("--config", help=f"Path to {CONFIG_FILENAME}")
    p.add_argument("--filter", help="Regular expression asset paths must fully match")
    p.add_argument("--max-depth", type=int, help="Maximum directory depth below the prefix")
    p.add_argument("--prefix", help="Resource path prefix (default: META-INF/resources/webjars)")
    p.add_argument("--resolver", choices=sorted(RESOLVERS), help="Resolution policy")
    p.add_argument("--verbose", action="store_true", help="Print each scanned search location")
    p.add_argument("--json", action="store_true", default=argparse.SUPPRESS)


def _build_parser():
    parser = argparse.ArgumentParser(prog="webjars")
    parser.add_argument("--json", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Resolve a partial path to a full asset path")
    p_resolve.add_argument("partial_path", help="Trailing path segments, e.g. jquery.js or 3.1.0/jquery.js")
    _add_locator_flags(p_resolve)
    p_resolve.set_defaults(func=cmd_resolve)

    p_list = sub.add_parser("list", help="List assets within a folder")
    p_list.add_argument("folder", help="Folder below the prefix, beginning with '/' (e.g. /jquery)")
    _add_locator_flags(p_list)
    p_list.set_defaults(func=cmd_list)

    p_index = sub.add_parser("index", help="Print the reversed-path index")
    _add_locator_flags(p_index)
    p_index.set_defaults(func=cmd_index)

    p_doc = sub.add_parser("doctor", help="Report search locations and index size")
    _add_locator_flags(p_doc)
    p_doc.set_defaults(func=cmd_doctor)

    p_watch = sub.add_parser("watch", help="Re-resolve a partial path whenever search roots change")
    p_watch.add_argument("partial_path")
    p_watch.add_argument("--delay", type=float, default=0.5, help="Debounce delay in seconds")
    _add_locator_flags(p_watch)
    p_watch.set_defaults(func=cmd_watch)

    return parser


def _error_payload(exc):
    code = "CLI_ERROR"
    for error_type, _exit_code, error_code in ERROR_CODES:
        if isinstance(exc, error_type):
            code = error_code
            break
    return {
        "schema": "webjars.error.v1",
        "ok": False,
        "code": code,
        "message": str(exc),
    }


def _exit_code(exc):
    for error_type, exit_code, _error_code in ERROR_CODES:
        if isinstance(exc, error_type):
            return exit_code
    return 1


def main(argv=None):
    """Execute CLI command dispatch and standardized error handling."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except Exception as exc:
        if args.json:
            _emit_json(_error_payload(exc))
        else:
            sys.stderr.write(f"[error] {exc}\n")
        return _exit_code(exc)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
