"""Lexical #include scanner.

Each physical line runs an independent state machine that always starts in
AWAIT_HASH:

    AWAIT_HASH       skip blanks; '#' advances, anything else ends the line
    AWAIT_INCLUDE    skip blanks; the literal "include" advances
    AWAIT_OPENING    skip blanks; '"' or "'" -> AWAIT_CLOSING_QUOTE,
                     '<' -> AWAIT_CLOSING_ANGLE
    AWAIT_CLOSING_*  the first matching delimiter on the line emits one Include

This is not a preprocessor. Conditional blocks, macros, comments and line
continuations are not evaluated, so the result is a superset of what a
compiler would actually include. Text between the delimiters is taken
literally, including any comment characters that happen to be there.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from .models import Include, IncludeSet, QuoteKind

logger = logging.getLogger(__name__)

_BLANKS = " \t"
_DIRECTIVE = "include"


class ScanState(Enum):
    """States of the per-line include state machine."""

    AWAIT_HASH = "await-hash"
    AWAIT_INCLUDE = "await-include"
    AWAIT_OPENING = "await-opening-delimiter"
    AWAIT_CLOSING_QUOTE = "await-closing-quote"
    AWAIT_CLOSING_ANGLE = "await-closing-angle"


# Outcome of one transition: next state and the unconsumed rest of the line,
# or None when the line is abandoned or finished.
Step = Optional[Tuple[ScanState, str]]


def transition(state: ScanState, rest: str) -> Tuple[Step, Optional[Include]]:
    """Apply one transition of the scanner state machine.

    Args:
        state: Current state
        rest: Unconsumed remainder of the line

    Returns:
        (next step, emitted include). The step is None once the line is done,
        either because an include was emitted or because the line was abandoned.
    """
    if state is ScanState.AWAIT_HASH:
        stripped = rest.lstrip(_BLANKS)
        if stripped.startswith("#"):
            return (ScanState.AWAIT_INCLUDE, stripped[1:]), None
        return None, None

    if state is ScanState.AWAIT_INCLUDE:
        stripped = rest.lstrip(_BLANKS)
        if stripped.startswith(_DIRECTIVE):
            return (ScanState.AWAIT_OPENING, stripped[len(_DIRECTIVE):]), None
        return None, None

    if state is ScanState.AWAIT_OPENING:
        stripped = rest.lstrip(_BLANKS)
        if stripped[:1] in ('"', "'"):
            return (ScanState.AWAIT_CLOSING_QUOTE, stripped[1:]), None
        if stripped[:1] == "<":
            return (ScanState.AWAIT_CLOSING_ANGLE, stripped[1:]), None
        return None, None

    if state is ScanState.AWAIT_CLOSING_QUOTE:
        end = rest.find('"')
        if end < 0:
            return None, None
        return None, Include(rest[:end], QuoteKind.QUOTE_RELATIVE)

    if state is ScanState.AWAIT_CLOSING_ANGLE:
        end = rest.find(">")
        if end < 0:
            return None, None
        return None, Include(rest[:end], QuoteKind.ANGLE_BRACKET)

    raise ValueError(f"Unknown scanner state: {state!r}")


def scan_line(line: str) -> Optional[Include]:
    """Recognize at most one include directive on a single line.

    Args:
        line: One physical line, with or without its line terminator

    Returns:
        The first include on the line, or None if the line has none
    """
    step: Step = (ScanState.AWAIT_HASH, line.rstrip("\r\n"))
    while step is not None:
        state, rest = step
        if not rest:
            # Line exhausted before reaching a closing delimiter
            return None
        step, include = transition(state, rest)
        if include is not None:
            return include
    return None


def scan_text(lines: Iterable[str]) -> IncludeSet:
    """Collect the include set of already-read source lines."""
    includes = set()
    for line in lines:
        include = scan_line(line)
        if include is not None:
            includes.add(include)
    return frozenset(includes)


def scan(path: Union[str, Path]) -> IncludeSet:
    """Extract the include set of a single source file.

    A missing or unreadable file yields an empty set.

    Args:
        path: Source file to scan

    Returns:
        Duplicate-free set of includes found in the file
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as source:
            includes = scan_text(source)
    except OSError as e:
        logger.debug(f"Cannot read {path}, treating as include-free: {e}")
        return frozenset()

    logger.debug(f"Scanned {path}: {len(includes)} include(s)")
    return includes
