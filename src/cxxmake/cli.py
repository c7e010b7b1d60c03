"""
Command-line interface for cxxmake.

This module provides the `cxxmake` CLI tool:

    cxxmake includes src -e cpp -I include     # Report includes and where they resolve
    cxxmake run -- g++ -c main.cpp             # Run one command, exit with its status
    cxxmake launch --source make.cc ./make     # Rebuild ./make if stale, then run it
"""

import argparse
import contextlib
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from cxxmake import __version__
from cxxmake.build.command import INHERIT, cmd_run
from cxxmake.build.self_rebuild import rebuild_self, relaunch
from cxxmake.fatal import SourceLocation
from cxxmake.includes import extensions
from cxxmake.includes.resolver import resolve_all, unresolved
from cxxmake.includes.walker import walk
from cxxmake.output import set_output_file, set_timestamps, set_verbose
from cxxmake.toolchain import ToolchainConfig


@dataclass
class IncludesArgs:
    """Arguments for the includes command."""

    root: Path
    extensions: FrozenSet[str]
    include_dirs: List[Path] = field(default_factory=list)


@dataclass
class RunArgs:
    """Arguments for the run command."""

    argv: List[str]


@dataclass
class LaunchArgs:
    """Arguments for the launch command."""

    source: Path
    program: str
    args: List[str] = field(default_factory=list)


def parse_extensions(values: Optional[Sequence[str]]) -> FrozenSet[str]:
    """Turn -e values (group names or literal .ext) into one extension set."""
    if not values:
        return extensions.CPP | extensions.C
    selected: FrozenSet[str] = frozenset()
    for value in values:
        if value.startswith("."):
            selected |= {value}
        else:
            selected |= extensions.by_name(value)
    return selected


def includes_command(args: IncludesArgs, console: Optional[Console] = None) -> None:
    """Print every scanned file with its includes and their resolved paths.

    Examples:
        cxxmake includes src                   # C and C++ files under src/
        cxxmake includes src -e cpp-header     # Only C++ headers
        cxxmake includes src -I include -I third_party
    """
    console = console or Console(highlight=False)

    view = resolve_all(walk(args.root, args.extensions), args.include_dirs)

    for path, resolved in view.items():
        tree = Tree(Text(str(path)))
        for include, target in resolved.items():
            label = str(include) if target is None else f"{include} -- {target}"
            tree.add(Text(label))
        console.print(tree)

    missing = sum(len(names) for names in unresolved(view).values())
    console.print(f"{len(view)} file(s), {missing} unresolved include(s)")


def run_command(args: RunArgs) -> None:
    """Run one command and exit with its normalized status.

    Examples:
        cxxmake run -- g++ -std=c++20 -c main.cpp
    """
    status = cmd_run(args.argv, stdin=INHERIT, location=SourceLocation.current(0))
    sys.exit(status.exit_code)


def launch_command(args: LaunchArgs, toolchain: Optional[ToolchainConfig] = None) -> None:
    """Run a compiled build program, rebuilding it first if its source changed.

    Examples:
        cxxmake launch --source make.cc ./make
        cxxmake launch --source make.cc ./make -- clean
    """
    argv = [args.program, *args.args]
    location = SourceLocation.current(0)
    rebuild_self(args.source, argv, toolchain or ToolchainConfig.from_env(), location)
    relaunch(argv, location)


def _strip_separator(values: List[str]) -> List[str]:
    if values and values[0] == "--":
        return values[1:]
    return values


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cxxmake",
        description="cxxmake - include scanning and toolchain execution for C/C++ builds",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cxxmake {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug output",
    )
    parser.add_argument(
        "--timestamps",
        action="store_true",
        help="Prefix output lines with elapsed time",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also append diagnostic output to this file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Includes command
    includes_parser = subparsers.add_parser(
        "includes",
        help="Scan a source tree and resolve its includes",
    )
    includes_parser.add_argument(
        "root",
        type=Path,
        help="Directory to scan recursively",
    )
    includes_parser.add_argument(
        "-e",
        "--extension",
        action="append",
        default=None,
        help=f"Extension group ({', '.join(sorted(extensions.GROUPS))}) or literal '.ext' (repeatable, default: c and cpp)",
    )
    includes_parser.add_argument(
        "-I",
        "--include-dir",
        action="append",
        type=Path,
        default=[],
        help="Search directory, in precedence order (repeatable)",
    )

    # Run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run one command and exit with its status",
    )
    run_parser.add_argument(
        "argv",
        nargs=argparse.REMAINDER,
        help="Program and arguments (use -- to separate from cxxmake options)",
    )

    # Launch command
    launch_parser = subparsers.add_parser(
        "launch",
        help="Rebuild a compiled build program if stale, then run it",
    )
    launch_parser.add_argument(
        "--source",
        type=Path,
        required=True,
        help="Source file the program is compiled from",
    )
    launch_parser.add_argument(
        "program",
        help="Path of the compiled program",
    )
    launch_parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the program",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """cxxmake entry point."""
    parser = build_parser()
    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    set_verbose(parsed_args.verbose)
    set_timestamps(parsed_args.timestamps)

    with contextlib.ExitStack() as stack:
        if parsed_args.log_file is not None:
            set_output_file(stack.enter_context(open(parsed_args.log_file, "a", encoding="utf-8")))
            stack.callback(set_output_file, None)
        _dispatch(parser, parsed_args)


def _dispatch(parser: argparse.ArgumentParser, parsed_args: argparse.Namespace) -> None:
    if parsed_args.command == "includes":
        try:
            selected = parse_extensions(parsed_args.extension)
        except KeyError as e:
            parser.error(str(e.args[0]))
        includes_command(
            IncludesArgs(
                root=parsed_args.root,
                extensions=selected,
                include_dirs=parsed_args.include_dir,
            )
        )
    elif parsed_args.command == "run":
        command = _strip_separator(parsed_args.argv)
        if not command:
            parser.error("run: missing program to execute")
        run_command(RunArgs(argv=command))
    elif parsed_args.command == "launch":
        launch_command(
            LaunchArgs(
                source=parsed_args.source,
                program=parsed_args.program,
                args=_strip_separator(parsed_args.args),
            )
        )


if __name__ == "__main__":
    main()
