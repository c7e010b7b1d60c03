"""Include directive data model."""

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Dict, FrozenSet


class QuoteKind(IntEnum):
    """Delimiter style of an include directive.

    Ordered so that angle-bracket includes sort before quoted ones.
    """

    ANGLE_BRACKET = 0
    QUOTE_RELATIVE = 1

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, order=True)
class Include:
    """A parsed `#include` operand.

    Attributes:
        spelling: Text between the delimiters, verbatim
        kind: Whether the directive used quotes or angle brackets
    """

    spelling: str
    kind: QuoteKind

    @property
    def maybe_relative(self) -> bool:
        """True when the includer's directory is searched first."""
        return self.kind is QuoteKind.QUOTE_RELATIVE

    def __str__(self) -> str:
        if self.maybe_relative:
            return f'"{self.spelling}"'
        return f"<{self.spelling}>"


IncludeSet = FrozenSet[Include]

# Canonical absolute file path -> includes found in that file
FileIncludeMap = Dict[Path, IncludeSet]
