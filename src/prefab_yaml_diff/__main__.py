"""
Entry point for prefab-yaml-diff.

Usage:
    prefab-yaml-diff OLD NEW                      # Text report
    prefab-yaml-diff OLD NEW --json               # JSON report
    prefab-yaml-diff OLD NEW --project-root DIR   # Resolve script names
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from prefab_yaml_diff import __version__
from prefab_yaml_diff.core.diff_engine import DiffOptions, compare_texts
from prefab_yaml_diff.utils.guid_resolver import GuidResolver
from prefab_yaml_diff.utils.log_handler import setup_logging
from prefab_yaml_diff.utils.report import differences_to_json, format_result

logger = logging.getLogger(__name__)

EXIT_NO_DIFFERENCES = 0
EXIT_DIFFERENCES = 1
EXIT_ERROR = 2


def non_negative_int(value: str) -> int:
    """argparse type for counts where 0 means "no limit"."""
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {value}")
    return number


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="prefab-yaml-diff",
        description="Structural diff for Unity YAML assets (prefabs, scenes)",
    )

    parser.add_argument("old", type=Path, help="Old version of the file")
    parser.add_argument("new", type=Path, help="New version of the file")

    parser.add_argument(
        "--project-root", "-p",
        type=Path,
        help="Unity project root used to resolve script and asset names "
             "(detected from the file paths when omitted)",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )

    parser.add_argument(
        "--no-filter",
        action="store_true",
        help="Report editor bookkeeping changes too",
    )

    parser.add_argument(
        "--no-moves",
        action="store_true",
        help="Report re-parenting as separate removals and additions",
    )

    parser.add_argument(
        "--max-value-length",
        type=non_negative_int,
        default=200,
        metavar="N",
        help="Trim displayed values to N characters (0 disables trimming)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def validate_files(paths: list[Path]) -> bool:
    """Validate that all files exist."""
    valid_extensions = {
        ".prefab", ".unity", ".asset", ".anim", ".controller",
        ".mat", ".physicmaterial", ".mixer", ".preset",
    }

    for path in paths:
        if not path.is_file():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return False
        if path.suffix.lower() not in valid_extensions:
            logger.warning("Unknown file type: %s", path.suffix)

    return True


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def create_resolver(args: argparse.Namespace) -> Optional[GuidResolver]:
    """Resolver for the given or detected Unity project, or None."""
    project_root = args.project_root
    if project_root is None:
        for path in (args.new, args.old):
            project_root = GuidResolver.find_project_root(path)
            if project_root:
                break
    if project_root is None:
        return None
    logger.debug("Using Unity project root %s", project_root)
    return GuidResolver(project_root)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.WARNING)

    if not validate_files([args.old, args.new]):
        return EXIT_ERROR

    options = DiffOptions(
        filter_noise=not args.no_filter,
        detect_moves=not args.no_moves,
        max_value_length=args.max_value_length or None,
    )
    result = compare_texts(
        read_text(args.old),
        read_text(args.new),
        resolver=create_resolver(args),
        options=options,
    )

    if args.json:
        print(differences_to_json(result))
    else:
        print(format_result(result))

    return EXIT_DIFFERENCES if result.has_differences else EXIT_NO_DIFFERENCES


if __name__ == "__main__":
    sys.exit(main())
