"""Recursive include extraction over a directory tree."""

import logging
import os
import stat
from pathlib import Path
from typing import Collection, Union

from cxxmake.fatal import fatal

from .models import FileIncludeMap
from .scanner import scan

logger = logging.getLogger(__name__)


def _canonical(path: Path) -> Path:
    """Resolve a path that must exist; abort the process if it does not."""
    try:
        return path.resolve(strict=True)
    except OSError as e:
        fatal(f"Cannot canonicalize {path}: {e.strerror or e}")


def _raise_walk_error(error: OSError) -> None:
    raise error


def walk(root: Union[str, Path], extensions: Collection[str]) -> FileIncludeMap:
    """Scan every matching file below a directory.

    The walk assumes a stable snapshot of the tree. A root that does not
    exist, an unreadable directory, or a file that vanishes mid-walk aborts
    the process instead of being skipped. Directory symlinks are not followed.

    Args:
        root: Directory to traverse recursively
        extensions: Extensions to match, with leading dot (e.g. {".cpp", ".h"})

    Returns:
        Canonical file path -> include set, ordered by path
    """
    root_path = _canonical(Path(root))
    if not root_path.is_dir():
        fatal(f"Cannot walk {root}: not a directory")

    includes_per_file: FileIncludeMap = {}

    try:
        for dirpath, _dirnames, filenames in os.walk(root_path, onerror=_raise_walk_error):
            for filename in filenames:
                path = Path(dirpath) / filename
                if path.suffix not in extensions:
                    continue
                canonical = _canonical(path)
                # Symlinks to regular files count; sockets, fifos and devices do not
                if not stat.S_ISREG(os.stat(canonical).st_mode):
                    continue
                includes_per_file[canonical] = scan(path)
    except OSError as e:
        fatal(f"Cannot traverse {e.filename or root_path}: {e.strerror or e}")

    logger.debug(f"Walked {root_path}: {len(includes_per_file)} matching file(s)")
    return dict(sorted(includes_per_file.items()))
