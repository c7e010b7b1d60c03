"""Toolchain configuration.

The compiler identity is chosen once at startup and passed explicitly to
whatever runs the toolchain; nothing re-reads the environment per call.

Environment variables:
    CXXMAKE_COMPILER: gcc/g++, clang/clang++, posix/c++, or any program name.
        Unset means the first of g++, clang++ found on PATH, else c++.
    CXXMAKE_FLAGS: Extra compiler flags. Split on runs of whitespace with no
        quoting or escaping, so a single flag cannot contain spaces.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

COMPILER_ENV = "CXXMAKE_COMPILER"
FLAGS_ENV = "CXXMAKE_FLAGS"

# Language standard every self-rebuild compiles with
STD_FLAG = "-std=c++20"


class Compiler(Enum):
    """Known C++ compiler drivers."""

    GCC = "g++"
    CLANG = "clang++"
    POSIX = "c++"

    def __str__(self) -> str:
        return self.value


_ALIASES = {
    "gcc": Compiler.GCC,
    "g++": Compiler.GCC,
    "clang": Compiler.CLANG,
    "clang++": Compiler.CLANG,
    "posix": Compiler.POSIX,
    "c++": Compiler.POSIX,
}


def split_flags(value: Optional[str]) -> Tuple[str, ...]:
    """Split an environment value into arguments on runs of whitespace."""
    if not value:
        return ()
    return tuple(value.split())


def detect_compiler() -> Compiler:
    """Pick the first known compiler driver available on PATH."""
    for compiler in (Compiler.GCC, Compiler.CLANG):
        if shutil.which(compiler.value):
            return compiler
    return Compiler.POSIX


@dataclass(frozen=True)
class ToolchainConfig:
    """Compiler selection and flags for toolchain invocations.

    Attributes:
        compiler: Compiler identity
        program: Program name or path to invoke (usually compiler.value)
        extra_flags: Flags appended after the language standard flag
        std_flag: Language standard flag
    """

    compiler: Compiler
    program: str
    extra_flags: Tuple[str, ...] = ()
    std_flag: str = STD_FLAG

    @classmethod
    def for_compiler(cls, compiler: Compiler, extra_flags: Tuple[str, ...] = ()) -> "ToolchainConfig":
        return cls(compiler=compiler, program=compiler.value, extra_flags=extra_flags)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ToolchainConfig":
        """Build the configuration from CXXMAKE_* environment variables.

        Args:
            environ: Environment to read (defaults to os.environ)

        Returns:
            ToolchainConfig for the selected compiler
        """
        env = os.environ if environ is None else environ
        extra_flags = split_flags(env.get(FLAGS_ENV))
        selector = env.get(COMPILER_ENV, "").strip()

        if not selector:
            config = cls.for_compiler(detect_compiler(), extra_flags)
        elif selector.lower() in _ALIASES:
            config = cls.for_compiler(_ALIASES[selector.lower()], extra_flags)
        else:
            # Custom driver (e.g. a cross compiler); invoked as given
            config = cls(compiler=Compiler.POSIX, program=selector, extra_flags=extra_flags)

        logger.debug(f"Toolchain: {config.program} ({config.compiler.name}), extra flags {list(config.extra_flags)}")
        return config

    def compile_command(self, output: Union[str, "os.PathLike[str]"], source: Union[str, "os.PathLike[str]"]) -> Tuple[str, ...]:
        """Arguments that compile a single source file into an executable."""
        return (
            self.program,
            self.std_flag,
            *self.extra_flags,
            "-o",
            os.fspath(output),
            os.fspath(source),
        )
