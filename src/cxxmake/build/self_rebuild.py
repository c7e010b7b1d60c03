"""Self-rebuild of a compiled build program.

A build program compiled from a single C++ source can keep itself up to date:
at startup it calls rebuild_self() with its own source path. The decision is
made once per process start:

- fresh (program mtime >= source mtime): nothing happens, no files are written
  and no process is spawned.
- stale: the program is copied to `<program>.old`, recompiled in place, and
  the new binary is launched with the original arguments. The current process
  then exits with the child's normalized exit code, so whoever started the
  first generation sees a single consistent status.

Rebuilds cannot loop as long as modification times are well ordered: the
fresh binary is always at least as new as its source.
"""

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence, Union

from cxxmake.fatal import SourceLocation, fatal
from cxxmake.output import log
from cxxmake.toolchain import ToolchainConfig

from .command import INHERIT, Cmd, cmd_run, cmd_run_checked

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".old"

PathLike = Union[str, Path]


def backup_path(program: PathLike) -> Path:
    """Sibling path that receives the previous binary on rebuild."""
    program_path = Path(program)
    return program_path.with_name(program_path.name + BACKUP_SUFFIX)


def _mtime_ns(path: Path, what: str, location: SourceLocation) -> int:
    try:
        return path.stat().st_mtime_ns
    except OSError as e:
        fatal(f"cannot read modification time of {what} {path}: {e.strerror or e}", location)


def is_stale(program: PathLike, source: PathLike, location: Optional[SourceLocation] = None) -> bool:
    """Whether the source is strictly newer than the compiled program.

    Both files must exist; a missing one is fatal.
    """
    if location is None:
        location = SourceLocation.current()
    program_mtime = _mtime_ns(Path(program), "program", location)
    source_mtime = _mtime_ns(Path(source), "source", location)
    return source_mtime > program_mtime


def launch_path(program: PathLike) -> str:
    """Spelling of a program path that is never looked up on PATH.

    A bare name such as `make` names the file in the working directory, the
    same file the freshness check looked at.
    """
    spelled = os.fspath(program)
    if not os.path.dirname(spelled):
        return os.path.join(os.curdir, spelled)
    return spelled


def relaunch(argv: Sequence[str], location: Optional[SourceLocation] = None) -> NoReturn:
    """Run a program with the given arguments and exit with its status."""
    if location is None:
        location = SourceLocation.current()
    if not argv:
        fatal("cannot relaunch: program path is missing from argv", location)
    status = cmd_run(Cmd(launch_path(argv[0]), *argv[1:]), stdin=INHERIT, location=location)
    logger.debug(f"Relaunched program finished with {status.describe()}")
    sys.exit(status.exit_code)


def rebuild_self(
    source: PathLike,
    argv: Optional[Sequence[str]] = None,
    toolchain: Optional[ToolchainConfig] = None,
    location: Optional[SourceLocation] = None,
) -> None:
    """Recompile and relaunch the running program if its source changed.

    Returns only when the program is fresh. When stale, the process ends
    with the exit code of the rebuilt program.

    Args:
        source: Source file the program is compiled from
        argv: Program path followed by its arguments (defaults to sys.argv)
        toolchain: Compiler configuration (defaults to ToolchainConfig.from_env())
        location: Call site for diagnostics (defaults to the caller)
    """
    if location is None:
        location = SourceLocation.current()

    args = list(sys.argv if argv is None else argv)
    if not args:
        fatal("cannot rebuild: program path is missing from argv", location)

    program = Path(args[0])
    source_path = Path(source)

    if not is_stale(program, source_path, location):
        logger.debug(f"{program} is up to date with {source_path}")
        return

    if toolchain is None:
        toolchain = ToolchainConfig.from_env()

    backup = backup_path(program)
    log(f"{source_path} changed, rebuilding {program} (previous binary kept as {backup.name})", verbose_only=True)
    try:
        shutil.copy2(program, backup)
    except OSError as e:
        fatal(f"cannot back up {program} to {backup}: {e.strerror or e}", location)

    cmd_run_checked(Cmd(toolchain.compile_command(program, source_path)), location=location)
    relaunch([str(program), *args[1:]], location)
