# src/crate_bundler/buffer.py

from collections.abc import Iterable
from typing import TextIO

from .constants import INDENT
from .patterns import is_comment


class OutputBuffer:
    """Append-only line accumulator owned by a single bundler run.

    Lines are stored without trailing newlines. Each line is prefixed with
    one INDENT per nesting level at write time.
    """

    def __init__(self, indent: str = INDENT) -> None:
        self.indent = indent
        self.lines: list[str] = []

    def __len__(self) -> int:
        return len(self.lines)

    def write(self, content: str, depth: int, *, keep_comments: bool = False) -> bool:
        """Append one line at `depth`. Returns False if it was filtered out."""
        if not keep_comments and is_comment(content):
            return False
        self.lines.append(f"{self.indent * depth}{content}")
        return True

    def write_all(
        self,
        lines: Iterable[str],
        depth: int = 0,
        *,
        keep_comments: bool = False,
    ) -> int:
        """Append many lines at the same depth; returns how many were kept."""
        return sum(
            1 for line in lines if self.write(line, depth, keep_comments=keep_comments)
        )

    def replace(self, lines: list[str]) -> None:
        """Swap in the result of a whole-buffer transformation."""
        self.lines = list(lines)

    def render(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"

    def flush(self, stream: TextIO | None) -> str:
        """Write the buffer to `stream` (if any), clear it, return the text."""
        text = self.render()
        if stream is not None:
            stream.write(text)
        self.lines.clear()
        return text
