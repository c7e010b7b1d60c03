"""Include extraction and resolution.

This package contains the lexical #include scanner, the directory walker
that applies it to a source tree, and the search-path resolver.
"""

from cxxmake.includes.models import FileIncludeMap, Include, IncludeSet, QuoteKind
from cxxmake.includes.resolver import resolve, resolve_all
from cxxmake.includes.scanner import scan, scan_line, scan_text
from cxxmake.includes.walker import walk

__all__ = [
    "FileIncludeMap",
    "Include",
    "IncludeSet",
    "QuoteKind",
    "resolve",
    "resolve_all",
    "scan",
    "scan_line",
    "scan_text",
    "walk",
]
