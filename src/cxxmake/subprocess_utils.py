"""Process spawning shared by every command cxxmake runs.

Toolchain commands run detached from the terminal's input: a compiler has
no reason to read stdin, and one that tries gets end-of-file instead of
blocking the build. Programs the user asked for directly (`cxxmake run`, a
relaunched build program) are the exception and inherit stdin.
"""

import subprocess
import sys
from typing import Any, Sequence


def get_subprocess_creation_flags() -> int:
    """Creation flags for child processes on this platform.

    On Windows, CREATE_NO_WINDOW keeps each compiler invocation from opening
    a console window. Elsewhere no flags are needed.
    """
    return subprocess.CREATE_NO_WINDOW if sys.platform == "win32" else 0


def safe_popen(cmd: Sequence[str], **kwargs: Any) -> subprocess.Popen:
    """Start a child process with cxxmake's defaults applied.

    Args:
        cmd: Program followed by its arguments
        **kwargs: Passed through to subprocess.Popen. A caller's
            creationflags are combined with the platform flags. Without an
            explicit stdin the child reads from DEVNULL; stdin=None gives it
            this process's stdin.

    Returns:
        Handle of the started process
    """
    platform_flags = get_subprocess_creation_flags()
    creationflags = kwargs.pop("creationflags", 0) | platform_flags
    if creationflags:
        kwargs["creationflags"] = creationflags

    kwargs.setdefault("stdin", subprocess.DEVNULL)
    return subprocess.Popen(list(cmd), **kwargs)
