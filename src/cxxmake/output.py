"""
Centralized diagnostic output module for cxxmake.

Every command executed by cxxmake is echoed here before launch, and every
fatal error is reported here before the process aborts. Lines are written
verbatim by default:

    [CMD] g++ -std=c++20 -o make make.cc
    [ERROR] at make.py:12 (main): command failed with exit code 1

Timestamps are opt-in. When enabled, each line is prefixed with the elapsed
time since program launch in MM:SS.cc format (minutes:seconds.centiseconds):

    00:00.12 [CMD] g++ -std=c++20 -o make make.cc

Usage:
    from cxxmake.output import log, log_cmd, log_error

    log("Scanning src/...")
    log_cmd("g++ -c main.cpp")
    log_error("build.py:3 (main)", "something went wrong")
"""

import sys
import time
from typing import Optional, TextIO

# Global state for the timer
_start_time: Optional[float] = None
_output_stream: Optional[TextIO] = None
_verbose: bool = True
_timestamps: bool = False
_output_file: Optional[TextIO] = None


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Initialize the program timer.

    Call this at program startup to set the reference time for all timestamps.
    If not called explicitly, it will be called automatically on first log.

    Args:
        output_stream: Optional output stream (defaults to sys.stdout)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    if output_stream is not None:
        _output_stream = output_stream


def set_output_stream(output_stream: Optional[TextIO]) -> None:
    """Redirect output to a stream, or back to sys.stdout with None."""
    global _output_stream
    _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    """
    Set verbose mode for logging.

    Args:
        verbose: If True, all messages are printed. If False, only non-verbose messages.
    """
    global _verbose
    _verbose = verbose


def set_timestamps(enabled: bool) -> None:
    """Enable or disable the elapsed-time prefix on every line."""
    global _timestamps
    _timestamps = enabled


def set_output_file(output_file: Optional[TextIO]) -> None:
    """
    Set a file to receive all log output (in addition to stdout).

    Args:
        output_file: File object to receive output, or None to disable file output
    """
    global _output_file
    _output_file = output_file


def get_elapsed() -> float:
    """
    Get elapsed time since timer initialization.

    Returns:
        Elapsed time in seconds
    """
    global _start_time
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore


def format_timestamp() -> str:
    """
    Format the current elapsed time as MM:SS.cc.

    Returns:
        Formatted timestamp string
    """
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _print(message: str, end: str = "\n") -> None:
    """
    Internal print function.

    Args:
        message: Message to print
        end: End character (default newline)
    """
    if _timestamps:
        line = f"{format_timestamp()} {message}{end}"
    else:
        line = f"{message}{end}"

    # Resolved per call so redirected sys.stdout (pytest capture) is honored
    stream = _output_stream if _output_stream is not None else sys.stdout
    stream.write(line)
    stream.flush()

    # Also write to output file if set
    if _output_file is not None:
        _output_file.write(line)
        _output_file.flush()


def log(message: str, verbose_only: bool = False) -> None:
    """
    Log a message.

    Args:
        message: Message to log
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(message)


def log_cmd(rendered: str) -> None:
    """
    Echo a command line before it is launched.

    Format: [CMD] <rendered argv>

    Args:
        rendered: Command line as produced by cmd_render()
    """
    _print(f"[CMD] {rendered}")


def log_error(location: str, message: str) -> None:
    """
    Log a fatal error message.

    Format: [ERROR] at <location>: <message>

    Args:
        location: Source location the failure is attributed to
        message: Error detail
    """
    _print(f"[ERROR] at {location}: {message}")
