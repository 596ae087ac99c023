"""In-memory source buffer with a cursor and a marked region."""

from contextlib import contextmanager

from defgen import scanner
from defgen.models import TextRange


class SourceBuffer:
    """Mutable source text that commands read from and edit.

    The cursor follows edits the way an editor's point does: text inserted or
    removed before the cursor shifts it, text after it leaves it alone.
    """

    def __init__(self, text: str = "", offset: int = 0):
        self._text = text
        self._offset = self._clamp(offset)
        self._region: TextRange | None = None

    def __len__(self) -> int:
        return len(self._text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def region(self) -> TextRange | None:
        """The currently marked region, if any."""
        return self._region

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self._text)))

    def _check(self, text_range: TextRange) -> None:
        if text_range.end > len(self._text):
            raise ValueError(
                f"Range {text_range.start}-{text_range.end} is outside the buffer (length {len(self._text)})"
            )

    def current_offset(self) -> int:
        return self._offset

    def move_to(self, offset: int) -> None:
        self._offset = self._clamp(offset)

    def read_range(self, text_range: TextRange) -> str:
        self._check(text_range)
        return text_range.slice(self._text)

    def replace_range(self, text_range: TextRange, text: str) -> None:
        """Replace the text in a range, keeping the cursor on the same code."""
        self._check(text_range)
        self._text = self._text[:text_range.start] + text + self._text[text_range.end:]

        if self._offset >= text_range.end:
            self._offset += len(text) - text_range.length
        elif self._offset > text_range.start:
            self._offset = text_range.start + len(text)

    def insert_at(self, offset: int, text: str) -> None:
        self.replace_range(TextRange(offset, offset), text)

    def delete_range(self, text_range: TextRange) -> None:
        self.replace_range(text_range, "")

    def line_start_offset(self, offset: int) -> int:
        return self._text.rfind("\n", 0, self._clamp(offset)) + 1

    def line_end_offset(self, offset: int) -> int:
        newline = self._text.find("\n", self._clamp(offset))
        return len(self._text) if newline < 0 else newline

    def line_indentation(self, offset: int) -> str:
        """Literal whitespace prefix of the line holding offset."""
        line = self._text[self.line_start_offset(offset):self.line_end_offset(offset)]
        return line[:len(line) - len(line.lstrip(" \t"))]

    def matching_bracket_end(self, offset: int) -> int | None:
        return scanner.matching_bracket_end(self._text, offset)

    def offset_for(self, line: int, column: int) -> int:
        """Convert a 1-based line and 0-based column to an offset.

        Raises:
            ValueError: If the line does not exist or the column runs past it
        """
        lines = self._text.split("\n")
        if line < 1 or line > len(lines):
            raise ValueError(f"Line {line} is outside the buffer (1-{len(lines)})")
        if column < 0 or column > len(lines[line - 1]):
            raise ValueError(f"Column {column} is outside line {line}")
        return sum(len(text) + 1 for text in lines[:line - 1]) + column

    def line_column(self, offset: int) -> tuple[int, int]:
        """Convert an offset to a 1-based line and 0-based column."""
        offset = self._clamp(offset)
        line = self._text.count("\n", 0, offset) + 1
        return line, offset - self.line_start_offset(offset)

    @contextmanager
    def excursion(self):
        """Save the cursor and restore it on every exit path.

        Yields:
            The saved offset
        """
        saved = self._offset
        try:
            yield saved
        finally:
            self._offset = self._clamp(saved)

    @contextmanager
    def marked(self, text_range: TextRange):
        """Mark a region for the duration of the block."""
        self._check(text_range)
        previous = self._region
        self._region = text_range
        try:
            yield text_range
        finally:
            self._region = previous
