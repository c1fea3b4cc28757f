"""
Location helpers shared by all rule families.

Line numbers are 1-based and derived from a character offset by counting
newlines in the preceding text. Context windows span 2 lines before and
2 lines after the matched line.
"""

from __future__ import annotations

from typing import List, Optional

CONTEXT_LINES_BEFORE = 2
CONTEXT_LINES_AFTER = 2


def file_extension(filename: str) -> str:
    """
    Return the final dot-delimited segment of a filename, lowercased.

    A name without a dot has no extension.
    """
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def line_number_at(content: str, index: int) -> int:
    index = max(0, min(index, len(content)))
    return content.count("\n", 0, index) + 1


class SourceText:
    """
    Read-only view over one file's text with cached line splitting.
    """

    def __init__(self, content: str, filename: str) -> None:
        self.content = content
        self.filename = filename
        self._lines: Optional[List[str]] = None

    @property
    def lines(self) -> List[str]:
        if self._lines is None:
            self._lines = self.content.split("\n")
        return self._lines

    def line_number(self, index: int) -> int:
        return line_number_at(self.content, index)

    def line_at(self, line_number: int) -> str:
        if 1 <= line_number <= len(self.lines):
            return self.lines[line_number - 1]
        return ""

    def context(self, line_number: int) -> str:
        start = max(0, line_number - 1 - CONTEXT_LINES_BEFORE)
        end = min(len(self.lines), line_number + CONTEXT_LINES_AFTER)
        return "\n".join(self.lines[start:end])

    def context_at(self, index: int) -> str:
        return self.context(self.line_number(index))
