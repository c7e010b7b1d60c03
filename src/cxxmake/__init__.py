"""cxxmake - include scanning, command execution and self-rebuild for C/C++ builds."""

__version__ = "0.1.0"
