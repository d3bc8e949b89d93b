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

"""Tests for depth-bounded walks and tree building."""

from __future__ import annotations

from pathlib import Path

import pytest

from rootfence.filesystem import ExcludeMatcher, TreeEntry, build_tree, walk


@pytest.fixture
def layout(workspace: Path) -> Path:
    (workspace / "a.txt").write_text("a")
    (workspace / "b" / "d").mkdir(parents=True)
    (workspace / "b" / "c.txt").write_text("c")
    (workspace / "b" / "d" / "e.txt").write_text("e")
    (workspace / "build").mkdir()
    (workspace / "build" / "out.o").write_text("o")
    return workspace


def _rel_paths(root: Path, **kwargs: object) -> list[str]:
    return [entry.rel_path for entry in walk(root, **kwargs)]  # type: ignore[arg-type]


class TestWalk:
    """Walk ordering, depth bounds, pruning, and symlink handling."""

    def test_sorted_depth_first_order(self, layout: Path) -> None:
        assert _rel_paths(layout) == [
            "a.txt",
            "b",
            "b/c.txt",
            "b/d",
            "b/d/e.txt",
            "build",
            "build/out.o",
        ]

    def test_entries_carry_absolute_paths_and_depths(self, layout: Path) -> None:
        entries = {entry.rel_path: entry for entry in walk(layout)}

        assert entries["b/d/e.txt"].path == str(layout / "b" / "d" / "e.txt")
        assert entries["b/d/e.txt"].depth == 3
        assert entries["b/d/e.txt"].name == "e.txt"
        assert entries["b"].is_directory
        assert not entries["a.txt"].is_directory

    def test_max_depth_bounds_descent(self, layout: Path) -> None:
        assert _rel_paths(layout, max_depth=1) == ["a.txt", "b", "build"]
        assert "b/d/e.txt" not in _rel_paths(layout, max_depth=2)

    def test_unbounded_walk(self, layout: Path) -> None:
        assert "b/d/e.txt" in _rel_paths(layout, max_depth=None)

    def test_excluded_directories_are_pruned(self, layout: Path) -> None:
        exclude = ExcludeMatcher.compile(["build/"])

        assert _rel_paths(layout, exclude=exclude) == [
            "a.txt",
            "b",
            "b/c.txt",
            "b/d",
            "b/d/e.txt",
        ]

    def test_excluded_files_are_skipped(self, layout: Path) -> None:
        exclude = ExcludeMatcher.compile(["*.txt"])

        assert _rel_paths(layout, exclude=exclude) == [
            "b",
            "b/d",
            "build",
            "build/out.o",
        ]

    def test_symlinked_directories_are_not_followed(self, layout: Path) -> None:
        (layout / "link").symlink_to(layout / "b", target_is_directory=True)

        entries = {entry.rel_path: entry for entry in walk(layout)}

        assert "link" in entries
        assert not entries["link"].is_directory
        assert "link/c.txt" not in entries

    def test_empty_directory(self, workspace: Path) -> None:
        assert list(walk(workspace)) == []

    def test_non_positive_depth_is_rejected(self, layout: Path) -> None:
        with pytest.raises(ValueError, match="positive"):
            _ = list(walk(layout, max_depth=0))

    def test_walking_a_file_raises(self, layout: Path) -> None:
        with pytest.raises(NotADirectoryError):
            _ = list(walk(layout / "a.txt"))


class TestBuildTree:
    """Nested tree construction."""

    def test_full_tree(self, layout: Path) -> None:
        tree = build_tree(layout)

        assert tree == (
            TreeEntry("a.txt", "file"),
            TreeEntry(
                "b",
                "directory",
                (
                    TreeEntry("c.txt", "file"),
                    TreeEntry("d", "directory", (TreeEntry("e.txt", "file"),)),
                ),
            ),
            TreeEntry("build", "directory", (TreeEntry("out.o", "file"),)),
        )

    def test_directories_at_the_bound_list_their_entries(self, layout: Path) -> None:
        tree = build_tree(layout, max_depth=1)

        assert tree == (
            TreeEntry("a.txt", "file"),
            TreeEntry(
                "b",
                "directory",
                (TreeEntry("c.txt", "file"), TreeEntry("d", "directory")),
            ),
            TreeEntry("build", "directory", (TreeEntry("out.o", "file"),)),
        )

    def test_empty_directories_have_empty_children(self, workspace: Path) -> None:
        (workspace / "empty").mkdir()

        assert build_tree(workspace) == (TreeEntry("empty", "directory", ()),)
        assert build_tree(workspace, max_depth=1) == (
            TreeEntry("empty", "directory", ()),
        )

    def test_json_shape(self, layout: Path) -> None:
        tree = build_tree(layout, max_depth=1)

        assert [entry.to_json_dict() for entry in tree][1] == {
            "name": "b",
            "type": "directory",
            "children": [
                {"name": "c.txt", "type": "file"},
                {"name": "d", "type": "directory"},
            ],
        }

    def test_deeper_bound_expands_one_more_level(self, layout: Path) -> None:
        tree = build_tree(layout, max_depth=2)

        assert tree[1].children == (
            TreeEntry("c.txt", "file"),
            TreeEntry("d", "directory", (TreeEntry("e.txt", "file"),)),
        )

    def test_non_positive_bound_is_rejected(self, layout: Path) -> None:
        with pytest.raises(ValueError, match="positive"):
            _ = build_tree(layout, max_depth=0)
