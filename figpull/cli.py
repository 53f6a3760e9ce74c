"""CLI entrypoints for figpull commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .client import FigmaClient
from .config import ICON_FORMATS, ConfigError, FigpullConfig, load_config
from .errors import FigpullError
from .logging import configure_logging
from .pipeline import PullOptions, PullOutcome, PullPipeline
from .stores.ledger import Ledger


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project directory containing .figpull.yml (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="figpull",
        description="Pull design tokens and assets from a Figma file.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Only print warnings and errors."
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pull_parser = subparsers.add_parser(
        "pull",
        help="Fetch the Figma file and regenerate colors and icons that changed.",
    )
    _add_verbose_option(pull_parser, suppress_default=True)
    _add_path_argument(pull_parser)
    pull_parser.add_argument("-k", "--file-key", help="Figma file key to pull from.")
    pull_parser.add_argument(
        "-t", "--token", help="Figma API access token (defaults to $FIGMA_TOKEN)."
    )
    pull_parser.add_argument("-o", "--output-dir", help="Output directory for generated files.")
    pull_parser.add_argument("-a", "--assets-dir", help="Directory for downloaded icons.")
    pull_parser.add_argument("-f", "--icons-frame", help="Name pattern of the frame holding icons.")
    pull_parser.add_argument(
        "--icon-format", choices=ICON_FORMATS, help="Format for downloaded icons."
    )
    scope = pull_parser.add_mutually_exclusive_group()
    scope.add_argument("--colors-only", action="store_true", help="Only extract colors.")
    scope.add_argument("--icons-only", action="store_true", help="Only extract icons.")
    pull_parser.add_argument(
        "--categorized", action="store_true", help="Generate categorized output files."
    )
    pull_parser.add_argument(
        "--theme-extension",
        action="store_true",
        help="Generate a Flutter theme extension for colors.",
    )
    pull_parser.add_argument(
        "--icon-widgets", action="store_true", help="Generate Flutter widget helpers for icons."
    )
    pull_parser.add_argument(
        "--clean",
        action="store_true",
        help="Delete generated files and downloaded assets before pulling.",
    )
    pull_parser.add_argument(
        "--prune",
        action="store_true",
        help="Remove ledger entries and icon files no longer present in Figma.",
    )

    status_parser = subparsers.add_parser(
        "status",
        help="Show what the change-detection ledger currently tracks.",
    )
    _add_verbose_option(status_parser, suppress_default=True)
    _add_path_argument(status_parser)
    status_parser.add_argument("-o", "--output-dir", help="Directory holding the ledger.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for figpull commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=args.quiet, log_file=args.log_file)

    try:
        config = load_config(Path(args.path))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "pull":
        _run_pull(parser, args, config)
    elif args.command == "status":
        _run_status(args, config)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_pull(
    parser: argparse.ArgumentParser, args: argparse.Namespace, config: FigpullConfig
) -> None:
    options = _build_pull_options(args, config)
    if not options.file_key:
        parser.exit(1, "A Figma file key is required (--file-key or figma.file_key).\n")

    try:
        client = FigmaClient(
            args.token or config.figma.token,
            base_url=config.figma.base_url,
            request_timeout=config.figma.request_timeout,
        )
        outcome = asyncio.run(PullPipeline(client).run(options))
    except FigpullError as exc:
        parser.exit(1, f"figpull pull failed: {exc}\nRun with --verbose for more details.\n")

    _print_outcome(outcome, options)
    if outcome.partial:
        parser.exit(2, "Some icons could not be downloaded; rerun to retry them.\n")


def _build_pull_options(args: argparse.Namespace, config: FigpullConfig) -> PullOptions:
    overrides: dict[str, object] = {
        "file_key": args.file_key,
        "output_dir": Path(args.output_dir) if args.output_dir else None,
        "assets_dir": Path(args.assets_dir) if args.assets_dir else None,
        "icons_frame": args.icons_frame,
        "icon_format": args.icon_format,
        "include_colors": not args.icons_only,
        "include_icons": not args.colors_only,
        "clean": args.clean,
    }
    # Flags only switch features on; config values stand when a flag is absent.
    for flag, option in (
        ("categorized", "categorized"),
        ("theme_extension", "theme_extension"),
        ("icon_widgets", "icon_widgets"),
        ("prune", "prune_orphans"),
    ):
        if getattr(args, flag):
            overrides[option] = True
    return PullOptions.from_config(config, **overrides)


def _print_outcome(outcome: PullOutcome, options: PullOptions) -> None:
    summary = outcome.summary
    print(f"Pulled {outcome.document_name or options.file_key}")
    if options.include_colors:
        print(
            f"  colors: {len(outcome.colors)} total, {len(summary.new_colors)} new, "
            f"{len(summary.changed_colors)} changed"
        )
    if options.include_icons:
        downloads = outcome.downloads
        downloaded = len(downloads.downloaded) if downloads else 0
        unchanged = len(downloads.unchanged) if downloads else 0
        failed = len(downloads.failed) if downloads else 0
        print(
            f"  icons: {len(outcome.icons)} total, {downloaded} downloaded, "
            f"{unchanged} unchanged, {failed} failed, "
            f"{len(outcome.skipped_duplicates)} duplicates skipped"
        )
    orphans = len(summary.orphaned_colors) + len(summary.orphaned_icons)
    if orphans:
        action = "removed" if options.prune_orphans else "found (use --prune to remove)"
        print(f"  orphans: {orphans} {action}")
    if summary.is_empty(outcome.downloads):
        print("  No changes detected")
    for path in outcome.generated_files:
        print(f"  wrote {_relativize(path)}")
    if outcome.pubspec_assets:
        print("\nAdd these assets to your pubspec.yaml:")
        print(outcome.pubspec_assets, end="")


def _run_status(args: argparse.Namespace, config: FigpullConfig) -> None:
    output_dir = Path(args.output_dir) if args.output_dir else config.output_dir
    ledger = Ledger.for_output_dir(output_dir)
    stats = ledger.stats()
    print(f"Ledger: {_relativize(ledger.path) if ledger.path else '(none)'}")
    print(f"  source document: {ledger.source_document_key or '(unknown)'}")
    print(f"  last sync: {ledger.last_sync or 'never'}")
    print(
        f"  colors: {stats['colors']}, icons: {stats['icons']}, "
        f"generated files: {stats['generatedFiles']}"
    )


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
