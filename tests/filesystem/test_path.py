# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for lexical path utilities."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from rootfence.errors import InvalidPathError
from rootfence.filesystem import (
    AllowedRoots,
    clean_absolute,
    expand_home,
    is_path_under,
    relative_posix,
)


class TestExpandHome:
    """Test expand_home function."""

    def test_bare_tilde(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_home("~") == str(tmp_path)

    def test_tilde_slash(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_home("~/notes.txt") == f"{tmp_path}/notes.txt"

    def test_other_user_form_is_untouched(self) -> None:
        assert expand_home("~root/file") == "~root/file"

    def test_tilde_in_the_middle_is_untouched(self) -> None:
        assert expand_home("/srv/~/file") == "/srv/~/file"


class TestCleanAbsolute:
    """Test clean_absolute function."""

    def test_collapses_dot_segments(self) -> None:
        assert clean_absolute("/srv/a/./b/../c") == "/srv/a/c"

    def test_collapses_repeated_separators(self) -> None:
        assert clean_absolute("/srv//a///b/") == "/srv/a/b"

    def test_relative_paths_use_working_directory(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        assert clean_absolute("sub/file.txt") == os.path.join(
            os.getcwd(), "sub", "file.txt"
        )

    def test_parent_of_root_stays_at_root(self) -> None:
        assert clean_absolute("/../../etc") == "/etc"

    def test_empty_path_is_invalid(self) -> None:
        with pytest.raises(InvalidPathError, match="must not be empty"):
            _ = clean_absolute("")

    def test_nul_byte_is_invalid(self) -> None:
        with pytest.raises(InvalidPathError, match="NUL"):
            _ = clean_absolute("/srv/a\x00b")

    def test_invalid_path_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            _ = clean_absolute("")


class TestIsPathUnder:
    """Test segment-aware containment."""

    def test_equal_paths(self) -> None:
        assert is_path_under("/allowed", "/allowed")

    def test_descendant(self) -> None:
        assert is_path_under("/allowed/a/b.txt", "/allowed")

    def test_sibling_with_shared_prefix(self) -> None:
        assert not is_path_under("/allowed2", "/allowed")
        assert not is_path_under("/allowed2/file", "/allowed")

    def test_ancestor(self) -> None:
        assert not is_path_under("/", "/allowed")

    def test_everything_is_under_filesystem_root(self) -> None:
        assert is_path_under("/anything/at/all", "/")


class TestRelativePosix:
    """Test relative_posix function."""

    def test_descendant(self) -> None:
        assert relative_posix("/root/a/b.txt", "/root") == "a/b.txt"

    def test_same_path(self) -> None:
        assert relative_posix("/root", "/root") == "."

    def test_outside(self) -> None:
        assert relative_posix("/other/a", "/root") is None


class TestAllowedRoots:
    """Test AllowedRoots construction."""

    def test_deduplicates_in_order(self, tmp_path: Path) -> None:
        first = tmp_path.resolve() / "first"
        second = tmp_path.resolve() / "second"
        first.mkdir()
        second.mkdir()

        roots = AllowedRoots.from_paths([first, second, f"{first}/", first / "."])

        assert roots.roots == (str(first), str(second))
        assert len(roots) == 2
        assert list(roots) == [str(first), str(second)]

    def test_resolves_symlinked_roots(self, tmp_path: Path) -> None:
        real = tmp_path.resolve() / "real"
        real.mkdir()
        alias = tmp_path.resolve() / "alias"
        alias.symlink_to(real)

        roots = AllowedRoots.from_paths([alias])

        assert roots.roots == (str(real),)

    def test_containing_returns_first_matching_root(self, tmp_path: Path) -> None:
        base = tmp_path.resolve()
        roots = AllowedRoots.from_paths([base / "a", base / "b"])

        assert roots.containing(str(base / "b" / "file")) == str(base / "b")
        assert roots.containing(str(base / "c")) is None
