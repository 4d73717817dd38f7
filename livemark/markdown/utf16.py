"""UTF-16 offset helpers.

Host text widgets (Qt included) address text in UTF-16 code units, while
Python indexes strings by code point. Every offset that crosses the core's
public surface is a UTF-16 offset; these helpers convert at the boundary.
"""

from __future__ import annotations

from typing import NamedTuple


class TextRange(NamedTuple):
    """A (location, length) selection measured in UTF-16 code units."""

    location: int
    length: int = 0

    @property
    def end(self) -> int:
        return self.location + self.length


def utf16_len(text: str) -> int:
    return len(text) + sum(1 for ch in text if ord(ch) > 0xFFFF)


def utf16_positions(text: str) -> list[int]:
    """Return the UTF-16 offset of every code point index, plus the end offset."""
    positions = [0] * (len(text) + 1)
    offset = 0
    for idx, ch in enumerate(text):
        positions[idx] = offset
        offset += 2 if ord(ch) > 0xFFFF else 1
    positions[len(text)] = offset
    return positions


def index_to_utf16(text: str, index: int) -> int:
    return utf16_positions(text)[max(0, min(index, len(text)))]


def utf16_to_index(text: str, offset: int) -> int:
    """Map a UTF-16 offset to a code point index.

    Offsets are clamped to the text; an offset pointing between the two
    halves of a surrogate pair rounds down to the start of that character.
    """
    if offset <= 0:
        return 0
    units = 0
    for idx, ch in enumerate(text):
        width = 2 if ord(ch) > 0xFFFF else 1
        if units + width > offset:
            return idx
        units += width
    return len(text)


def clamp_offset(text: str, offset: int) -> int:
    return max(0, min(offset, utf16_len(text)))


def clamp_range(selection: TextRange, max_length: int) -> TextRange:
    location = min(max(0, selection.location), max_length)
    length = min(max(0, selection.length), max(0, max_length - location))
    return TextRange(location, length)


def offset_to_line_column(text: str, offset: int) -> tuple[int, int]:
    """Return the (line, UTF-16 column) of a flat UTF-16 offset."""
    index = utf16_to_index(text, clamp_offset(text, offset))
    line = text.count("\n", 0, index)
    line_start = text.rfind("\n", 0, index) + 1
    return line, utf16_len(text[line_start:index])


def line_column_to_offset(text: str, line: int, column: int) -> int:
    """Inverse of :func:`offset_to_line_column`, clamping both coordinates."""
    lines = text.split("\n")
    line = max(0, min(line, len(lines) - 1))
    offset = sum(utf16_len(item) + 1 for item in lines[:line])
    current = lines[line]
    column = max(0, min(column, utf16_len(current)))
    return offset + utf16_len(current[: utf16_to_index(current, column)])
