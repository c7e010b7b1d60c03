"""Fatal error reporting.

cxxmake has exactly two failure classes: expected absence (returned as an
empty result or None) and fatal faults. A fatal fault is reported once as

    [ERROR] at <file>:<line> (<function>): <message>

and then stops the whole process. There is no retry and no partial result;
a failed toolchain step must never be silently ignored.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import NoReturn, Optional

from cxxmake.output import log_error

logger = logging.getLogger(__name__)

# Exit code used when cxxmake aborts on its own (not propagating a child status)
FATAL_EXIT_CODE = 1


@dataclass(frozen=True)
class SourceLocation:
    """Call site a diagnostic is attributed to."""

    file: str
    line: int
    function: str

    @classmethod
    def current(cls, depth: int = 1) -> "SourceLocation":
        """Capture the location of a frame on the current call stack.

        Args:
            depth: How many frames above the caller of current() to look.
                depth=0 is the caller itself, depth=1 is the caller's caller.

        Returns:
            SourceLocation of the selected frame
        """
        frame = sys._getframe(depth + 1)
        return cls(
            file=frame.f_code.co_filename,
            line=frame.f_lineno,
            function=frame.f_code.co_name,
        )

    def __str__(self) -> str:
        return f"{self.file}:{self.line} ({self.function})"


def fatal(message: str, location: Optional[SourceLocation] = None) -> NoReturn:
    """Report a fatal error and abort the process.

    Args:
        message: Failure detail
        location: Call site to blame; defaults to the caller of fatal()

    Raises:
        SystemExit: always, with FATAL_EXIT_CODE
    """
    if location is None:
        location = SourceLocation.current()
    logger.debug(f"Aborting: {message} ({location})")
    log_error(str(location), message)
    raise SystemExit(FATAL_EXIT_CODE)
