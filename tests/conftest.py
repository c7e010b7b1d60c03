"""Pytest configuration and fixtures for cxxmake tests.

cxxmake writes diagnostics through module-level state in cxxmake.output.
Tests that redirect it must not leak into each other, and child processes
spawned by tests must not leave stdout/stderr closed for pytest's capture.
"""

import sys
import warnings

import pytest

from cxxmake import output

# Suppress ResourceWarnings from file cleanup in Python 3.13
if sys.version_info >= (3, 13):
    warnings.filterwarnings("ignore", category=ResourceWarning)


@pytest.fixture(autouse=True)
def _reset_output():
    """Restore default diagnostic output settings after each test."""
    yield
    output.set_output_stream(None)
    output.set_output_file(None)
    output.set_timestamps(False)
    output.set_verbose(True)


@pytest.fixture(autouse=True)
def _restore_stdio():  # noqa: PT004
    """Ensure stdout/stderr are always restored after each test."""
    yield

    if sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if sys.stderr.closed:
        sys.stderr = sys.__stderr__
