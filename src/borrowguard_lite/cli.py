"""borrowguard-lite CLI entry point.

Usage: uv run borrowguard-lite check [PATH ...]
"""
import argparse
import dataclasses
import logging
import sys

from borrowguard_lite.checker.config import CheckerConfig


def _add_check_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "check",
        help="Run the advisory borrow checker over Python files.",
    )
    p.add_argument(
        "paths", nargs="*", default=["."],
        help="Files or directories to check (default: current directory)",
    )
    p.add_argument(
        "--owner-type", action="append", default=[], metavar="NAME",
        help="Extra class name that constructs an owner (repeatable).",
    )
    p.add_argument(
        "--shared-method", action="append", default=[], metavar="NAME",
        help="Extra method name that takes a shared borrow (repeatable).",
    )
    p.add_argument(
        "--exclusive-method", action="append", default=[], metavar="NAME",
        help="Extra method name that takes an exclusive borrow (repeatable).",
    )
    p.add_argument(
        "--report-untracked", action="store_true",
        help="Also note borrows on variables the checker is not tracking.",
    )


def _run_check(args: argparse.Namespace) -> int:
    from borrowguard_lite.checker.visitor import check_paths

    config = CheckerConfig().with_names(
        owner_types=args.owner_type,
        shared_methods=args.shared_method,
        exclusive_methods=args.exclusive_method,
    )
    if args.report_untracked:
        config = dataclasses.replace(config, report_untracked=True)

    diagnostics = check_paths(args.paths, config)
    for diag in diagnostics:
        print(diag.format())

    errors = sum(1 for d in diagnostics if d.is_error)
    if diagnostics:
        print(f"{len(diagnostics)} diagnostic(s), {errors} error(s)", file=sys.stderr)
    return 1 if errors else 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="borrowguard-lite",
        description="Runtime ownership and borrow checking -- pure Python.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log debug output to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    _add_check_parser(subparsers)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "check":
        sys.exit(_run_check(args))
