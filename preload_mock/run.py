import argparse
import logging
import os

import uvicorn

from preload_mock.config import DEFAULT_MOUNT_NAME
from preload_mock.services.export_analysis import get_export_analyzer
from preload_mock.services.project import ProjectConfigError, load_plugin_manifest
from preload_mock.services.scaffold import build_preload_bundle, scaffold_mocks


def _load_manifest(config: str):
    try:
        return load_plugin_manifest(config)
    except ProjectConfigError as e:
        raise SystemExit(f"❌ {e}")


def _print_report(report) -> None:
    for path in report.written:
        print(f"📝 Wrote {path}")
    for path in report.skipped:
        print(f"⏭️  Kept existing {path}")
    for error in report.errors:
        print(f"⚠️  {error}")


def _cmd_analyze(args) -> None:
    target = os.path.abspath(args.file)
    if not os.path.isfile(target):
        raise SystemExit(f"File does not exist: {target}")
    result = get_export_analyzer().analyze_file(target)
    print(result.model_dump_json(by_alias=True, indent=2))


def _cmd_scaffold(args) -> None:
    manifest = _load_manifest(args.config)
    print(f"📂 Preload entry: {manifest.preload}")
    _print_report(scaffold_mocks(manifest.preload, args.mount_name))


def _cmd_bundle(args) -> None:
    manifest = _load_manifest(args.config)
    compiled = os.path.abspath(args.compiled)
    if not os.path.isfile(compiled):
        raise SystemExit(f"Compiled bundle does not exist: {compiled}")
    print(f"📦 Cleaning compiled bundle {compiled}")
    report = build_preload_bundle(compiled, os.path.abspath(args.out), manifest.preload, args.mount_name)
    _print_report(report)


def _cmd_serve(args) -> None:
    url = f"http://{args.host}:{args.port}"
    print(f"🚀 Starting server at {url}")
    print("   Press Ctrl+C to stop.")

    uvicorn.run(
        "preload_mock.main:app",
        host=args.host,
        port=args.port,
        reload=False,
    )


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the CLI.

    - `analyze` prints the export surface of a module as JSON.
    - `scaffold` regenerates the mock files next to a plugin's preload entry.
    - `bundle` turns a compiled CommonJS preload into the script the host loads.
    - `serve` starts the HTTP API.
    """
    parser = argparse.ArgumentParser(
        prog="preload-mock",
        description="Mock generation and bundle cleanup for plugin preload scripts.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output from the analyzer.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Print the export surface of a module.")
    analyze.add_argument("file", help="Path to the module to analyze.")
    analyze.set_defaults(func=_cmd_analyze)

    scaffold = subparsers.add_parser("scaffold", help="Write mock files beside the preload entry.")
    scaffold.add_argument(
        "--config",
        default="plugin.json",
        help="Path to plugin.json (default: ./plugin.json).",
    )
    scaffold.add_argument(
        "--mount-name",
        default=DEFAULT_MOUNT_NAME,
        help=f"Window property the named exports are mounted on (default: {DEFAULT_MOUNT_NAME}).",
    )
    scaffold.set_defaults(func=_cmd_scaffold)

    bundle = subparsers.add_parser("bundle", help="Clean a compiled CommonJS preload bundle.")
    bundle.add_argument("--config", default="plugin.json", help="Path to plugin.json.")
    bundle.add_argument("--compiled", required=True, help="Compiled CommonJS bundle to clean.")
    bundle.add_argument("--out", required=True, help="Where to write the cleaned preload script.")
    bundle.add_argument("--mount-name", default=DEFAULT_MOUNT_NAME)
    bundle.set_defaults(func=_cmd_bundle)

    serve = subparsers.add_parser("serve", help="Start the HTTP API.")
    serve.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host interface to bind the server to (default: 127.0.0.1).",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000).",
    )
    serve.set_defaults(func=_cmd_serve)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
