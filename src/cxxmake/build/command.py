"""External command execution.

A Cmd is built incrementally from single values and sequences of values,
echoed as `[CMD] <rendered argv>`, and run as exactly one child process.
The caller blocks until that child exits or is killed by a signal; the
outcome is reported as a Status whose exit code lives in one numeric
domain (signal N maps to 128 + N, as in a POSIX shell).

Failing to launch a program is fatal. cmd_run_checked() additionally treats
any non-zero exit or signal as fatal, so a failed toolchain step always
stops the whole run.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from cxxmake.fatal import SourceLocation, fatal
from cxxmake.output import log_cmd
from cxxmake.subprocess_utils import safe_popen

logger = logging.getLogger(__name__)

Arg = Union[str, "os.PathLike[str]"]
ArgOrArgs = Union[Arg, Iterable[Arg]]

# Marker for "inherit the parent's stdin" as opposed to safe_popen's DEVNULL default
INHERIT = None

SIGNAL_EXIT_BASE = 128


def _flatten(args: Iterable[ArgOrArgs]) -> Iterator[str]:
    for arg in args:
        if isinstance(arg, (str, os.PathLike)):
            yield os.fspath(arg)
        else:
            for item in arg:
                yield os.fspath(item)


class Cmd:
    """Mutable argument vector of one external command.

    Example:
        cmd = Cmd("g++", ["-Wall", "-Wextra"], "-o", output)
        cmd.append(sources)
        cmd_run_checked(cmd)
    """

    def __init__(self, *args: ArgOrArgs):
        self.argv: List[str] = []
        self.append(*args)

    def append(self, *args: ArgOrArgs) -> "Cmd":
        """Append values and sequences of values, flattened in order."""
        self.argv.extend(_flatten(args))
        return self

    def __len__(self) -> int:
        return len(self.argv)

    def __iter__(self) -> Iterator[str]:
        return iter(self.argv)

    def __repr__(self) -> str:
        quoted = ", ".join('"' + arg.replace("\\", "\\\\").replace('"', '\\"') + '"' for arg in self.argv)
        return f"Cmd{{{quoted}}}"

    def __str__(self) -> str:
        return cmd_render(self.argv)


class StatusKind(Enum):
    """How a child process terminated."""

    EXITED = "exited"
    SIGNALED = "signaled"


@dataclass(frozen=True)
class Status:
    """Outcome of one process execution.

    Attributes:
        kind: Normal exit or termination by signal
        value: Exit code (EXITED) or signal number (SIGNALED)
    """

    kind: StatusKind
    value: int

    @classmethod
    def exited(cls, code: int) -> "Status":
        return cls(StatusKind.EXITED, code)

    @classmethod
    def signaled(cls, signum: int) -> "Status":
        return cls(StatusKind.SIGNALED, signum)

    @classmethod
    def from_returncode(cls, returncode: int) -> "Status":
        """Convert a Popen return code (negative means killed by signal)."""
        if returncode < 0:
            return cls.signaled(-returncode)
        return cls.exited(returncode)

    @property
    def exit_code(self) -> int:
        """Exit code normalized into the 0-255 shell domain."""
        if self.kind is StatusKind.SIGNALED:
            return SIGNAL_EXIT_BASE + self.value
        return self.value

    @property
    def success(self) -> bool:
        return self.kind is StatusKind.EXITED and self.value == 0

    def describe(self) -> str:
        """Human readable outcome, e.g. 'exit code 7' or 'signal SIGSEGV'."""
        if self.kind is StatusKind.EXITED:
            return f"exit code {self.value}"
        try:
            return f"signal {signal.Signals(self.value).name}"
        except ValueError:
            return f"signal {self.value}"


def quote_arg(arg: str) -> str:
    """Quote one argument for display.

    Arguments containing a space, a double quote or a single quote are wrapped
    in single quotes; embedded single quotes are written as '"'"'.
    """
    if arg == "":
        return "''"
    if "'" in arg:
        return "'" + arg.replace("'", "'\"'\"'") + "'"
    if " " in arg or '"' in arg:
        return f"'{arg}'"
    return arg


def cmd_render(argv: Iterable[str]) -> str:
    """Render an argument vector as a single display string."""
    return " ".join(quote_arg(arg) for arg in argv)


def _as_argv(cmd: Union[Cmd, Sequence[Arg]]) -> List[str]:
    if isinstance(cmd, Cmd):
        return list(cmd.argv)
    return list(_flatten(cmd))


def cmd_run(
    cmd: Union[Cmd, Sequence[Arg]],
    stdin: Optional[int] = subprocess.DEVNULL,
    location: Optional[SourceLocation] = None,
) -> Status:
    """Run a command and wait for it to terminate.

    The child inherits the current environment, stdout and stderr.

    Args:
        cmd: Program followed by its arguments
        stdin: stdin for the child; INHERIT (None) shares the parent's
        location: Call site for diagnostics (defaults to the caller)

    Returns:
        Status of the terminated child
    """
    if location is None:
        location = SourceLocation.current()

    argv = _as_argv(cmd)
    if not argv:
        fatal("cannot run an empty command", location)

    rendered = cmd_render(argv)
    log_cmd(rendered)

    try:
        process = safe_popen(argv, stdin=stdin)
    except OSError as e:
        fatal(f"failed to launch `{rendered}`: {e.strerror or e}", location)

    # wait() only returns on exit or signal; stop/continue notifications are not reported
    returncode = process.wait()
    status = Status.from_returncode(returncode)
    logger.debug(f"Process {process.pid} finished with {status.describe()}")
    return status


def cmd_run_checked(
    cmd: Union[Cmd, Sequence[Arg]],
    stdin: Optional[int] = subprocess.DEVNULL,
    location: Optional[SourceLocation] = None,
) -> Status:
    """Run a command and abort the process unless it exits with code 0.

    Args:
        cmd: Program followed by its arguments
        stdin: stdin for the child; INHERIT (None) shares the parent's
        location: Call site for diagnostics (defaults to the caller)

    Returns:
        The successful Status
    """
    if location is None:
        location = SourceLocation.current()

    status = cmd_run(cmd, stdin=stdin, location=location)
    if not status.success:
        fatal(f"command `{cmd_render(_as_argv(cmd))}` failed with {status.describe()}", location)
    return status
