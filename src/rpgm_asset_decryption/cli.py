"""Command-line interface for the asset decryption tool.

Exit status is 0 when every asset was restored, 1 when the run could not
start (bad game directory, no key) and 2 when some assets failed.
"""

import argparse
import json
import sys
from pathlib import Path

from .core.errors import DecryptionError, GameRootError, KeyDiscoveryError
from .core.game import GameRoot
from .core.types import BatchReport
from .pipeline import DecryptionPipeline, default_workers, discover_key

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_PARTIAL = 2


def print_summary(report: BatchReport) -> None:
    """Print the outcome of a run to stderr."""
    print(
        f"Decrypted {report.success_count} of {report.total} assets, "
        f"{report.failure_count} failed",
        file=sys.stderr,
    )
    for failure in report.failures:
        print(
            f"  (err) {failure.path}: {failure.error_kind.value}: {failure.detail}",  # type: ignore[union-attr]
            file=sys.stderr,
        )
    if report.warnings:
        print(f"{len(report.warnings)} advisory warnings:", file=sys.stderr)
        for warning in report.warnings:
            print(f"  {warning}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpgm-decrypt",
        description="Batch decrypt RPG Maker MV/MZ image and audio assets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Decrypt in place, key read from System.json or Game.exe
  rpgm-decrypt /path/to/game

  # Supply the key manually and write restored files elsewhere
  rpgm-decrypt /path/to/game --key 000102030405060708090a0b0c0d0e0f --output ./restored

  # Machine readable report
  rpgm-decrypt /path/to/game --json > report.json
        """,
    )

    parser.add_argument("game_dir", type=Path, help="Directory containing the game")

    key_group = parser.add_mutually_exclusive_group()
    key_group.add_argument("-k", "--key", help="Encryption key as 32 hex characters")
    key_group.add_argument(
        "--keyless",
        action="store_true",
        help="Skip key discovery and restore known headers (PNG only)",
    )

    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        default=default_workers(),
        help="Number of parallel workers (default: CPU count)",
    )
    parser.add_argument(
        "-o", "--output", type=Path, help="Write restored files under this directory"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail files whose restored header doesn't match their type",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the batch report as JSON to stdout"
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the decryption tool."""
    args = build_parser().parse_args(argv)

    if args.workers < 1:
        print("Error: --workers must be at least 1", file=sys.stderr)
        return EXIT_FATAL

    verbose = not args.quiet

    try:
        game = GameRoot.detect(args.game_dir)
    except GameRootError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL

    if verbose:
        print(f"Game directory: {game.path} (RPG Maker {game.layout.value})", file=sys.stderr)

    key = None
    if not args.keyless:
        try:
            key, source = discover_key(game, explicit_key=args.key, verbose=verbose)
        except KeyDiscoveryError as e:
            print(f"Error: {e.kind.value if e.kind else 'KeyDiscovery'}: {e}", file=sys.stderr)
            for attempt in e.attempts:
                print(f"  also tried: {attempt}", file=sys.stderr)
            return EXIT_FATAL
        if verbose:
            print(f"Using encryption key {key} (from {source.name})", file=sys.stderr)

    try:
        report = DecryptionPipeline(
            game,
            key,
            workers=args.workers,
            output_dir=args.output,
            strict=args.strict,
            progress=verbose,
        ).run()
    except DecryptionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL

    if verbose or not report.ok:
        print_summary(report)

    if args.json:
        json.dump(report.to_dict(), sys.stdout, indent=2)
        print()

    return EXIT_OK if report.ok else EXIT_PARTIAL


if __name__ == "__main__":
    sys.exit(main())
