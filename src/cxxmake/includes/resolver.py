"""Include resolution against compiler-style search paths.

Follows GCC's lookup order (https://gcc.gnu.org/onlinedocs/cpp/Search-Path.html):

1. the spelling itself, if it already names an existing file
2. absolute spellings that do not exist are never searched
3. quoted includes: the including file's directory
4. the search directories, in the order given; the first hit wins

An include that resolves nowhere (system or generated headers) is an expected
outcome and is reported as None, not as an error.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Sequence, Union

from .models import FileIncludeMap, Include

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# File -> each of its includes -> resolved canonical path (None if unresolved)
DependencyView = Dict[Path, Dict[Include, Optional[Path]]]


def resolve(
    include: Include,
    search_dirs: Iterable[PathLike],
    includer_dir: PathLike,
) -> Optional[Path]:
    """Resolve one include to the canonical path of an existing file.

    Args:
        include: Include to resolve
        search_dirs: Ordered search directories (-I style)
        includer_dir: Directory of the file containing the directive

    Returns:
        Canonical path of the first match, or None if nothing matches
    """
    spelled = Path(include.spelling)

    if spelled.is_file():
        return spelled.resolve()

    if spelled.is_absolute():
        return None

    if include.maybe_relative:
        candidate = Path(includer_dir) / spelled
        if candidate.is_file():
            return candidate.resolve()

    for directory in search_dirs:
        candidate = Path(directory) / spelled
        if candidate.is_file():
            return candidate.resolve()

    logger.debug(f"Unresolved include {include} from {includer_dir}")
    return None


def resolve_all(file_map: Mapping[Path, Iterable[Include]], search_dirs: Sequence[PathLike]) -> DependencyView:
    """Resolve every include of every scanned file.

    Each file's own directory is used for quoted includes.

    Args:
        file_map: Output of walk(), or any path -> includes mapping
        search_dirs: Ordered search directories

    Returns:
        Dependency view ordered by file path, then by include
    """
    view: DependencyView = {}
    for path in sorted(file_map):
        includer_dir = Path(path).parent
        view[path] = {include: resolve(include, search_dirs, includer_dir) for include in sorted(file_map[path])}
    return view


def unresolved(view: DependencyView) -> FileIncludeMap:
    """Collect the includes of a dependency view that did not resolve."""
    missing: FileIncludeMap = {}
    for path, resolved in view.items():
        names = frozenset(include for include, target in resolved.items() if target is None)
        if names:
            missing[path] = names
    return missing
