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

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from rootfence.filesystem import AllowedRoots
from rootfence.tools import FilesystemTools


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Return a real (symlink-free) directory used as the single allowed root."""
    root = tmp_path.resolve() / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def outside(tmp_path: Path) -> Path:
    """Return a sibling directory that is never an allowed root."""
    directory = tmp_path.resolve() / "outside"
    directory.mkdir()
    (directory / "secret.txt").write_text("top secret\n")
    return directory


@pytest.fixture
def roots(workspace: Path) -> AllowedRoots:
    return AllowedRoots.from_paths([workspace])


@pytest.fixture
def tools(roots: AllowedRoots) -> FilesystemTools:
    return FilesystemTools(roots)


@pytest.fixture
def reset_logging_state() -> Iterator[None]:
    """Restore root logger handlers and level after a test reconfigures them."""
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        yield
    finally:
        for handler in root.handlers:
            if handler not in original_handlers:
                handler.close()
        root.handlers = original_handlers
        root.setLevel(original_level)
