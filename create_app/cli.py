"""Command-line entry point.

Usage::

    create-modern-app
    create-modern-app my-app
    create-modern-app my-app --template redux
    python -m create_app my-app -t base --verbose
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from pydantic import ValidationError

from create_app import __version__
from create_app.config import Config
from create_app.creator import ProjectCreator
from create_app.utils import print_error

PROG = "create-modern-app"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "Create a modern React application with TypeScript, Vite, and TailwindCSS"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            f"  {PROG}\n"
            f"  {PROG} my-app\n"
            f"  {PROG} my-app --template redux\n"
        ),
    )
    parser.add_argument(
        "project_name",
        nargs="?",
        default=None,
        metavar="project-name",
        help="name of the project to create (optional in interactive mode)",
    )
    parser.add_argument(
        "--template", "-t",
        default=None,
        help="template to use",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="show resolved paths, sources and steps",
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, create the project and return the process exit code."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # --help / --version exit 0; usage errors are fatal errors (1).
        return 0 if exc.code in (0, None) else 1

    try:
        config = Config.from_env()
    except (ValidationError, ValueError) as exc:
        print_error(f"Invalid configuration: {exc}")
        return 1

    creator = ProjectCreator(config, verbose=args.verbose)
    try:
        result = asyncio.run(creator.create(args.project_name, args.template))
    except (KeyboardInterrupt, asyncio.CancelledError):
        print_error("\nAborted.")
        return 1

    return result.exit_code


def main() -> None:
    """CLI entry point for ``create-modern-app`` and ``python -m create_app``."""
    sys.exit(run())


if __name__ == "__main__":
    main()
