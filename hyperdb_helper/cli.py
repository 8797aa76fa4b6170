"""Command-line entry point: ``hyperdb-helper <command> [dir] [options]``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional

from .dependencies import install_command
from .errors import HelperError
from .helper import HyperdbHelper
from .utils import (
    console,
    display_path,
    format_duration,
    print_error,
    print_panel,
    print_success,
    print_summary_table,
    print_warning,
)

COMMANDS = ("init", "build", "clean", "help")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hyperdb-helper",
        description="Generate and build HyperDB databases from schema files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Commands:\n"
            "  init [dir]     Initialize database schema files (default: ./database)\n"
            "  build [dir]    Build database from schema files (default: ./database)\n"
            "  clean [dir]    Remove generated code (default: ./database)\n"
            "  help           Show this help\n"
            "\n"
            "Examples:\n"
            "  hyperdb-helper init --examples\n"
            "  hyperdb-helper build ./db\n"
        ),
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        metavar="command",
        help="One of: " + ", ".join(COMMANDS),
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Database schema directory (default: ./database)",
    )
    parser.add_argument(
        "--examples", "-e",
        action="store_true",
        help="Use with init to include example code",
    )
    return parser


async def _run(helper: HyperdbHelper, args: argparse.Namespace) -> int:
    if args.command == "init":
        result = await helper.init(args.directory, examples=args.examples)
        print_success("Created database schema files:")
        for path in result.files_written:
            console.print(f"  {display_path(path, helper.cwd)}")
        if result.dependencies_needed:
            console.print()
            print_panel(
                "Please install the required dependencies using npm:\n\n"
                f"  {install_command(result.dependencies_needed)}",
                title="Missing dependencies",
                style="yellow",
            )
        return 0

    if args.command == "build":
        result = await helper.build(args.directory)
        if helper.config is not None:
            print_summary_table(helper.config.summary(), title="hyperdb-helper build")
        print_success(f"Build finished in {format_duration(result.duration_seconds)}")
        return 0

    removed = await helper.cleanup(args.directory)
    if removed is None:
        print_warning("Nothing to clean")
    else:
        print_success(f"Removed {display_path(removed, helper.cwd)}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for ``hyperdb-helper`` and ``python -m hyperdb_helper``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in (None, "help"):
        parser.print_help()
        return 0

    helper = HyperdbHelper()
    try:
        return asyncio.run(_run(helper, args))
    except HelperError as exc:
        print_error(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
