"""Tests for search-path include resolution."""

import pytest

from cxxmake.includes.models import Include, QuoteKind
from cxxmake.includes.resolver import resolve, resolve_all, unresolved


def quoted(spelling):
    return Include(spelling, QuoteKind.QUOTE_RELATIVE)


def angled(spelling):
    return Include(spelling, QuoteKind.ANGLE_BRACKET)


@pytest.fixture
def layout(tmp_path, monkeypatch):
    """Project with a source dir and two search directories."""
    # Keep spellings from accidentally matching files relative to the test runner's cwd
    monkeypatch.chdir(tmp_path)

    src = tmp_path / "proj" / "src"
    (src / "sub").mkdir(parents=True)
    (src / "sub" / "dep.h").write_text("")
    (src / "local.h").write_text("")

    first = tmp_path / "inc1"
    second = tmp_path / "inc2"
    first.mkdir()
    second.mkdir()
    (first / "vector").write_text("")
    (second / "vector").write_text("")
    (second / "only_second.h").write_text("")
    (second / "local.h").write_text("")

    return {"root": tmp_path, "src": src, "first": first, "second": second}


class TestResolve:
    """Test single include resolution."""

    def test_quoted_relative_to_includer(self, layout):
        """Test that quoted includes look in the includer's directory."""
        result = resolve(quoted("sub/dep.h"), [], layout["src"])
        assert result == (layout["src"] / "sub" / "dep.h").resolve()

    def test_quoted_relative_missing(self, layout):
        """Test absence when the relative file does not exist."""
        assert resolve(quoted("sub/nope.h"), [], layout["src"]) is None

    def test_angle_skips_includer_dir(self, layout):
        """Test that angle includes never look next to the includer."""
        assert resolve(angled("sub/dep.h"), [], layout["src"]) is None

    def test_quoted_prefers_includer_dir(self, layout):
        """Test that the includer's directory wins over search dirs."""
        result = resolve(quoted("local.h"), [layout["second"]], layout["src"])
        assert result == (layout["src"] / "local.h").resolve()

    def test_angle_uses_search_dirs(self, layout):
        """Test that angle includes resolve via the search directories."""
        result = resolve(angled("local.h"), [layout["second"]], layout["src"])
        assert result == (layout["second"] / "local.h").resolve()

    def test_first_search_dir_wins(self, layout):
        """Test 'first match wins' over search directories."""
        result = resolve(angled("vector"), [layout["first"], layout["second"]], layout["src"])
        assert result == (layout["first"] / "vector").resolve()

        result = resolve(angled("vector"), [layout["second"], layout["first"]], layout["src"])
        assert result == (layout["second"] / "vector").resolve()

    def test_later_search_dir(self, layout):
        """Test that later directories are consulted when earlier ones miss."""
        result = resolve(angled("only_second.h"), [layout["first"], layout["second"]], layout["src"])
        assert result == (layout["second"] / "only_second.h").resolve()

    def test_quoted_falls_back_to_search_dirs(self, layout):
        """Test that quoted includes fall back to search directories."""
        result = resolve(quoted("only_second.h"), [layout["first"], layout["second"]], layout["src"])
        assert result == (layout["second"] / "only_second.h").resolve()

    def test_existing_absolute_path(self, layout):
        """Test that an existing absolute spelling resolves to itself."""
        target = layout["second"] / "vector"
        assert resolve(angled(str(target)), [], layout["src"]) == target.resolve()

    def test_missing_absolute_path_not_searched(self, layout):
        """Test that absolute spellings are never searched."""
        spelling = str(layout["root"] / "missing" / "vector")
        assert resolve(angled(spelling), [layout["first"]], layout["src"]) is None

    def test_spelling_relative_to_cwd(self, layout):
        """Test that a spelling naming an existing file directly wins."""
        result = resolve(angled("inc2/only_second.h"), [], layout["src"])
        assert result == (layout["second"] / "only_second.h").resolve()

    def test_directories_are_not_files(self, layout):
        """Test that a matching directory is not a resolution."""
        assert resolve(quoted("sub"), [], layout["src"]) is None

    def test_unresolved_system_header(self, layout):
        """Test that an unknown header resolves to None."""
        assert resolve(angled("unknown_header.h"), [layout["first"]], layout["src"]) is None


class TestResolveAll:
    """Test dependency view construction."""

    def test_resolve_all(self, layout):
        """Test that each file's includes resolve from its own directory."""
        main = (layout["src"] / "main.cpp").resolve()
        dep = (layout["src"] / "sub" / "dep.h").resolve()
        file_map = {
            main: frozenset({quoted("sub/dep.h"), angled("vector"), angled("stdio.h")}),
            dep: frozenset({quoted("dep.h")}),
        }

        view = resolve_all(file_map, [layout["first"]])

        assert list(view) == sorted(file_map)
        assert view[main][quoted("sub/dep.h")] == dep
        assert view[main][angled("vector")] == (layout["first"] / "vector").resolve()
        assert view[main][angled("stdio.h")] is None
        assert view[dep][quoted("dep.h")] == dep

        assert unresolved(view) == {main: frozenset({angled("stdio.h")})}
