"""Toolchain invocation: external commands and self-rebuild."""

from cxxmake.build.command import Cmd, Status, StatusKind, cmd_render, cmd_run, cmd_run_checked
from cxxmake.build.self_rebuild import rebuild_self

__all__ = [
    "Cmd",
    "Status",
    "StatusKind",
    "cmd_render",
    "cmd_run",
    "cmd_run_checked",
    "rebuild_self",
]
