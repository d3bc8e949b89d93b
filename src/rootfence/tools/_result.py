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

"""Result container returned by every filesystem tool."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["ToolResult"]


@dataclass(slots=True, frozen=True)
class ToolResult[ResultValueT]:
    """Outcome of one tool invocation.

    Failures are values rather than exceptions: ``success`` is False,
    ``value`` is None, and ``message`` carries the error text the caller
    should see.

    Attributes:
        message: Text shown to the caller, on success or failure.
        value: Typed payload for programmatic callers.
        success: False when the operation did not complete.
    """

    message: str
    value: ResultValueT | None = None
    success: bool = True

    @classmethod
    def ok(
        cls, message: str, value: ResultValueT | None = None
    ) -> ToolResult[ResultValueT]:
        return cls(message=message, value=value, success=True)

    @classmethod
    def error(cls, message: str) -> ToolResult[ResultValueT]:
        return cls(message=message, value=None, success=False)

    def render(self) -> str:
        """Return the text shown to the caller."""
        return self.message
