"""Source file extension groups for C and C++ projects.

Extensions carry their leading dot and are compared exactly (case-sensitive),
the same way Path.suffix reports them.
"""

from typing import Dict, FrozenSet

CPP_IMPLEMENTATION: FrozenSet[str] = frozenset({".cc", ".cpp", ".cxx"})
CPP_HEADER: FrozenSet[str] = frozenset({".h", ".hh", ".hpp", ".hxx"})
CPP: FrozenSet[str] = CPP_IMPLEMENTATION | CPP_HEADER

C: FrozenSet[str] = frozenset({".c", ".h"})
C_HEADER: FrozenSet[str] = frozenset({".h"})
C_IMPLEMENTATION: FrozenSet[str] = frozenset({".c"})

GROUPS: Dict[str, FrozenSet[str]] = {
    "cpp": CPP,
    "cpp-header": CPP_HEADER,
    "cpp-implementation": CPP_IMPLEMENTATION,
    "c": C,
    "c-header": C_HEADER,
    "c-implementation": C_IMPLEMENTATION,
}


def by_name(name: str) -> FrozenSet[str]:
    """Look up an extension group by name.

    Args:
        name: Group name, e.g. "cpp" or "c-header" (case-insensitive)

    Returns:
        The extension group

    Raises:
        KeyError: If no group has that name
    """
    key = name.lower().replace("_", "-")
    if key not in GROUPS:
        raise KeyError(f"Unknown extension group '{name}'. Available: {', '.join(sorted(GROUPS))}")
    return GROUPS[key]
