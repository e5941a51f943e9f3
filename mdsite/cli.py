from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from .builder import BuildReport, build_site, watch
from .config import DEFAULT_CONFIG, SiteConfig, read_site_config
from .errors import SiteError

logger = logging.getLogger("mdsite")

EXIT_OK = 0
EXIT_DOCUMENT_FAILURES = 1
EXIT_FATAL = 2


def setup_logging(verbosity: int) -> None:
    level = logging.INFO
    if verbosity > 0:
        level = logging.DEBUG
    elif verbosity < 0:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr, force=True)


def make_parser(defaults: SiteConfig, config_path: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mdsite", description="Build a static blog from Markdown content.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--content", type=Path, help=f"Directory containing Markdown content (default: {defaults.content_dir}).")
    parser.add_argument("--static", type=Path, help=f"Directory of static assets (default: {defaults.static_dir}).")
    parser.add_argument("--output", type=Path, help=f"Output directory for the site (default: {defaults.output_dir}).")
    parser.add_argument("--layout", type=Path, help="Page shell template overriding the bundled one.")
    parser.add_argument(
        "--drafts",
        action=argparse.BooleanOptionalAction,
        default=defaults.include_drafts,
        help="Include documents marked as draft.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=defaults.clean,
        help="Clean output directory before build.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=defaults.build_workers,
        help="Number of worker threads for parsing/rendering (0 = auto).",
    )
    parser.add_argument("--watch", action="store_true", help="Rebuild whenever content, static files or config change.")
    parser.add_argument("--interval", type=float, default=1.0, help="Polling interval in seconds for --watch.")
    parser.add_argument("-v", "--verbose", action="store_const", const=1, default=0, dest="verbosity", help="Debug output.")
    parser.add_argument("-q", "--quiet", action="store_const", const=-1, dest="verbosity", help="Only report errors.")
    return parser


def apply_args(config: SiteConfig, args: argparse.Namespace) -> SiteConfig:
    return config.with_overrides(
        content_dir=args.content,
        static_dir=args.static,
        output_dir=args.output,
        layout=args.layout,
        include_drafts=args.drafts,
        clean=args.clean,
        build_workers=args.workers,
    )


def report_build(report: BuildReport) -> None:
    if report.ok:
        print(report.summary())
    else:
        print(report.summary(), file=sys.stderr)


def main(argv: Optional[list[str]] = None) -> int:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default=DEFAULT_CONFIG)
    pre_args, _ = pre_parser.parse_known_args(argv)
    config_path = Path(pre_args.config)

    try:
        defaults = read_site_config(config_path)
    except SiteError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    args = make_parser(defaults, pre_args.config).parse_args(argv)
    setup_logging(args.verbosity)
    config = apply_args(defaults, args)

    if args.watch:

        def make_config() -> SiteConfig:
            return apply_args(read_site_config(config_path), args)

        def on_build(report: Optional[BuildReport]) -> None:
            if report is not None:
                report_build(report)

        logger.info("Watching for changes (Ctrl+C to stop)")
        try:
            watch(make_config, interval=args.interval, on_build=on_build, extra_paths=[config_path])
        except KeyboardInterrupt:
            pass
        return EXIT_OK

    start = time.perf_counter()
    try:
        report = build_site(config)
    except (SiteError, OSError) as exc:
        print(f"Build aborted: {exc}", file=sys.stderr)
        return EXIT_FATAL
    elapsed = time.perf_counter() - start
    report_build(report)
    print(f"Build completed in {elapsed:.2f}s.")
    if not report.ok:
        return EXIT_DOCUMENT_FAILURES
    print(f"Site generated in: {config.output_dir}")
    return EXIT_OK


def app() -> None:
    raise SystemExit(main())
