"""Tests for recursive include extraction."""

import os
import sys
from unittest.mock import patch

import pytest

from cxxmake.includes import extensions
from cxxmake.includes.models import Include, QuoteKind
from cxxmake.includes.walker import walk


class TestWalk:
    """Test walking a source tree."""

    @pytest.fixture
    def temp_project(self, tmp_path):
        """Create temporary project structure."""
        project = tmp_path / "project"
        src = project / "src"
        nested = src / "detail" / "impl"
        nested.mkdir(parents=True)

        (src / "main.cpp").write_text('#include "app.h"\n#include <vector>\n')
        (src / "app.h").write_text("#pragma once\n#include <string>\n")
        (nested / "deep.hpp").write_text('#include "../../app.h"\n')
        (src / "notes.txt").write_text('#include "ignored.h"\n')
        (src / "legacy.c").write_text("#include <stdio.h>\n")

        return {"project": project, "src": src, "nested": nested}

    def test_matches_extensions_recursively(self, temp_project):
        """Test that all depths are walked and only listed extensions match."""
        result = walk(temp_project["src"], extensions.CPP)

        names = sorted(path.name for path in result)
        assert names == ["app.h", "deep.hpp", "main.cpp"]

    def test_keys_are_canonical(self, temp_project):
        """Test that keys are absolute resolved paths."""
        relative_root = os.path.relpath(temp_project["src"])
        result = walk(relative_root, {".cpp"})

        (path,) = result.keys()
        assert path.is_absolute()
        assert path == (temp_project["src"] / "main.cpp").resolve()

    def test_values_are_include_sets(self, temp_project):
        """Test that each file maps to its scanned includes."""
        result = walk(temp_project["src"], extensions.CPP)

        main = (temp_project["src"] / "main.cpp").resolve()
        assert result[main] == frozenset(
            {
                Include("app.h", QuoteKind.QUOTE_RELATIVE),
                Include("vector", QuoteKind.ANGLE_BRACKET),
            }
        )

    def test_files_without_includes(self, temp_project):
        """Test that files with no includes still appear with an empty set."""
        (temp_project["src"] / "empty.cc").write_text("int x;\n")

        result = walk(temp_project["src"], {".cc"})

        assert list(result.values()) == [frozenset()]

    def test_extension_compared_exactly(self, temp_project):
        """Test that extension matching is case-sensitive and needs the dot."""
        (temp_project["src"] / "UPPER.CPP").write_text("#include <a>\n")

        assert [p.name for p in walk(temp_project["src"], {".cpp"})] == ["main.cpp"]
        assert walk(temp_project["src"], {"cpp"}) == {}

    def test_ordered_by_path(self, temp_project):
        """Test deterministic ordering of the result."""
        result = walk(temp_project["project"], extensions.CPP | extensions.C)

        assert list(result) == sorted(result)

    def test_missing_root_is_fatal(self, tmp_path, capsys):
        """Test that a nonexistent root aborts the process."""
        with pytest.raises(SystemExit) as excinfo:
            walk(tmp_path / "nope", extensions.CPP)

        assert excinfo.value.code == 1
        assert "[ERROR] at " in capsys.readouterr().out

    def test_file_root_is_fatal(self, temp_project):
        """Test that a regular file is not a walkable root."""
        with pytest.raises(SystemExit):
            walk(temp_project["src"] / "main.cpp", extensions.CPP)

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
    def test_directory_symlinks_not_followed(self, temp_project, tmp_path):
        """Test that symlinked directories are not descended into."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "other.cpp").write_text("#include <x>\n")
        (temp_project["src"] / "link").symlink_to(outside, target_is_directory=True)

        names = sorted(path.name for path in walk(temp_project["src"], {".cpp"}))

        assert names == ["main.cpp"]

    def test_vanished_file_is_fatal(self, temp_project, capsys):
        """Test that a listed file removed before it is scanned aborts the walk."""
        real_walk = os.walk

        def walk_with_stale_entry(top, **kwargs):
            for dirpath, dirnames, filenames in real_walk(top, **kwargs):
                yield dirpath, dirnames, [*filenames, "gone.cpp"]

        with patch("cxxmake.includes.walker.os.walk", side_effect=walk_with_stale_entry):
            with pytest.raises(SystemExit) as excinfo:
                walk(temp_project["src"], extensions.CPP)

        assert excinfo.value.code == 1
        assert "gone.cpp" in capsys.readouterr().out

    @pytest.mark.skipif(sys.platform == "win32", reason="fifos are POSIX only")
    def test_non_regular_entries_skipped(self, temp_project):
        """Test that a matching name that is not a regular file is left out."""
        os.mkfifo(temp_project["src"] / "pipe.cpp")

        names = sorted(path.name for path in walk(temp_project["src"], {".cpp"}))

        assert names == ["main.cpp"]
