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

"""Tests for gitignore-style exclude patterns."""

from __future__ import annotations

import pytest
from hypothesis import given, settings, strategies as st

from rootfence.filesystem import ExcludeMatcher, compile_pattern, translate_glob


def _excluded(pattern: str, rel_path: str, *, is_directory: bool = False) -> bool:
    matcher = ExcludeMatcher.compile([pattern])
    return matcher.matches_relative(rel_path, is_directory=is_directory)


class TestCompilePattern:
    """Compilation of individual patterns."""

    @pytest.mark.parametrize("raw", ["", "   ", "# comment", "  # indented", "/"])
    def test_noop_patterns(self, raw: str) -> None:
        assert compile_pattern(raw) is None

    def test_dir_only_flag(self) -> None:
        pattern = compile_pattern("build/")

        assert pattern is not None
        assert pattern.is_dir_only
        assert not pattern.anchored

    def test_anchored_when_slash_present(self) -> None:
        pattern = compile_pattern("docs/api")

        assert pattern is not None
        assert pattern.anchored

    def test_leading_recursive_is_unanchored_suffix(self) -> None:
        pattern = compile_pattern("**/node_modules")

        assert pattern is not None
        assert not pattern.anchored
        assert pattern.suffix == "node_modules"

    def test_trailing_recursive_keeps_prefix(self) -> None:
        pattern = compile_pattern("dir1/**")

        assert pattern is not None
        assert pattern.anchored
        assert pattern.prefix == "dir1"

    def test_raw_is_preserved(self) -> None:
        pattern = compile_pattern("  *.log  ")

        assert pattern is not None
        assert pattern.raw == "  *.log  "


class TestTranslateGlob:
    """Glob to regular expression translation."""

    def test_star_stays_in_segment(self) -> None:
        assert translate_glob("*.py") == r"[^/]*\.py"

    def test_question_mark(self) -> None:
        assert translate_glob("a?") == "a[^/]"

    def test_double_star_crosses_segments(self) -> None:
        assert translate_glob("a**") == "a.*"

    def test_directory_wildcard(self) -> None:
        assert translate_glob("a/**/b") == "a/(?:.*/)?b"

    def test_character_class(self) -> None:
        assert translate_glob("[abc]") == "[abc]"

    def test_negated_class_excludes_separator(self) -> None:
        assert translate_glob("[!abc]") == "[^/abc]"

    def test_unterminated_class_is_literal(self) -> None:
        assert translate_glob("[abc") == r"\[abc"

    def test_escape(self) -> None:
        assert translate_glob(r"\*") == r"\*"


class TestMatching:
    """Matching relative paths against compiled patterns."""

    def test_anchored_recursive_directory(self) -> None:
        assert _excluded("dir1/**", "dir1", is_directory=True)
        assert _excluded("dir1/**", "dir1/file.txt")
        assert _excluded("dir1/**", "dir1/sub/deep.txt")
        assert not _excluded("dir1/**", "other/dir1/file.txt")
        assert not _excluded("dir1/**", "dir10/file.txt")

    def test_literals_match_whole_segments_only(self) -> None:
        assert _excluded("dir1/**", "dir1")
        assert not _excluded("dir1/**", "dir1x")
        assert _excluded("**/cache", "a/cache")
        assert _excluded("**/cache", "cache")
        assert not _excluded("**/cache", "a/mycache")
        assert not _excluded("**/a/cache", "xa/cache")

    def test_dir_only_pattern(self) -> None:
        assert _excluded("build/", "build", is_directory=True)
        assert _excluded("build/", "src/build", is_directory=True)
        assert not _excluded("build/", "build", is_directory=False)

    def test_unanchored_pattern_matches_any_segment(self) -> None:
        assert _excluded("*.log", "app.log")
        assert _excluded("*.log", "var/logs/app.log")
        assert not _excluded("*.log", "app.logx")

    def test_anchored_pattern_only_matches_from_root(self) -> None:
        assert _excluded("/root.txt", "root.txt")
        assert not _excluded("/root.txt", "sub/root.txt")
        assert _excluded("docs/*.md", "docs/intro.md")
        assert not _excluded("docs/*.md", "docs/guide/intro.md")
        assert not _excluded("docs/*.md", "site/docs/intro.md")

    def test_leading_recursive_matches_at_any_depth(self) -> None:
        assert _excluded("**/node_modules", "node_modules", is_directory=True)
        assert _excluded("**/node_modules", "a/b/node_modules", is_directory=True)
        assert not _excluded("**/node_modules", "a/node_modules_old")

    def test_directory_wildcard_matches_zero_or_more_levels(self) -> None:
        assert _excluded("a/**/b", "a/b")
        assert _excluded("a/**/b", "a/x/b")
        assert _excluded("a/**/b", "a/x/y/b")
        assert not _excluded("a/**/b", "a/xb")

    def test_question_mark_and_classes(self) -> None:
        assert _excluded("file?.txt", "file1.txt")
        assert not _excluded("file?.txt", "file10.txt")
        assert _excluded("data[0-9].csv", "data5.csv")
        assert not _excluded("data[0-9].csv", "dataX.csv")
        assert _excluded("[!.]*", "visible")
        assert not _excluded("[!.]*", ".hidden")

    def test_escaped_wildcard_is_literal(self) -> None:
        assert _excluded(r"\*.txt", "*.txt")
        assert not _excluded(r"\*.txt", "a.txt")

    def test_any_pattern_triggers(self) -> None:
        matcher = ExcludeMatcher.compile(["*.pyc", "dist/", "# note"])

        assert len(matcher.patterns) == 2
        assert matcher.matches_relative("pkg/mod.pyc", is_directory=False)
        assert matcher.matches_relative("dist", is_directory=True)
        assert not matcher.matches_relative("pkg/mod.py", is_directory=False)

    def test_empty_matcher_excludes_nothing(self) -> None:
        matcher = ExcludeMatcher.compile(["", "# only comments"])

        assert not matcher
        assert not matcher.matches_relative("anything", is_directory=False)

    def test_matches_against_walk_root(self) -> None:
        matcher = ExcludeMatcher.compile(["secret/**"])

        assert matcher.matches(
            "/srv/ws", "/srv/ws/secret/key.pem", is_directory=False
        )
        assert not matcher.matches(
            "/srv/ws", "/srv/ws/public/key.pem", is_directory=False
        )

    def test_walk_root_and_outside_paths_never_match(self) -> None:
        matcher = ExcludeMatcher.compile(["*"])

        assert not matcher.matches("/srv/ws", "/srv/ws", is_directory=True)
        assert not matcher.matches("/srv/ws", "/srv/other/file", is_directory=False)
        assert matcher.matches("/srv/ws", "/srv/ws/file", is_directory=False)


_NAMES = st.text(alphabet="abcxyz.-_", min_size=1, max_size=8).filter(
    lambda name: name not in {".", ".."}
)


class TestMatchingProperties:
    """Property checks for segment handling."""

    @given(first=_NAMES, second=_NAMES)
    @settings(max_examples=200)
    def test_single_star_never_crosses_a_separator(
        self, first: str, second: str
    ) -> None:
        assert _excluded("top/*", f"top/{first}")
        assert not _excluded("top/*", f"top/{first}/{second}")

    @given(segments=st.lists(_NAMES, min_size=1, max_size=4))
    @settings(max_examples=200)
    def test_recursive_suffix_matches_at_every_depth(
        self, segments: list[str]
    ) -> None:
        rel_path = "/".join([*segments, "target"])

        assert _excluded("**/target", rel_path)
