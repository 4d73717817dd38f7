"""Block segmentation of canonical markdown text.

A block is the unit the editor activates for raw editing: a run of lines
between blank lines, except that an open fenced code region keeps blank
lines inside the block until its closing fence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, TypeVar

from .utf16 import offset_to_line_column, utf16_len

BLOCK_SEPARATOR = "\n\n"

_V = TypeVar("_V")


@dataclass(frozen=True)
class FenceToken:
    char: str
    length: int
    info: str = ""

    def closes(self, opening: "FenceToken") -> bool:
        return self.char == opening.char and self.length >= opening.length


def parse_fence_token(line: str) -> Optional[FenceToken]:
    """Return the fence on ``line`` (3+ backticks or tildes), if any."""
    trimmed = line.strip(" \t")
    for char in ("`", "~"):
        if trimmed.startswith(char * 3):
            length = len(trimmed) - len(trimmed.lstrip(char))
            return FenceToken(char, length, trimmed[length:].strip())
    return None


class FenceTracker:
    """Tracks whether a line stream is inside a fenced code region."""

    def __init__(self) -> None:
        self.opening: Optional[FenceToken] = None

    @property
    def is_open(self) -> bool:
        return self.opening is not None

    def feed(self, line: str) -> Optional[FenceToken]:
        token = parse_fence_token(line)
        if token is None:
            return None
        if self.opening is None:
            self.opening = token
        elif token.closes(self.opening):
            self.opening = None
        return token


def _is_blank(line: str) -> bool:
    return not line.strip(" \t")


def _segment(lines: list[str]) -> list[tuple[int, int]]:
    """Return ``(first, end)`` line spans for each block of ``lines``.

    A blank line separates blocks when the current block already holds at
    least one line and the blank line is not the final element (a trailing
    empty element is the text after a final newline, not a blank line).
    """
    spans: list[tuple[int, int]] = []
    fence = FenceTracker()
    start: Optional[int] = None
    last = len(lines) - 1
    for idx, line in enumerate(lines):
        if not fence.is_open and _is_blank(line) and start is not None and idx != last:
            spans.append((start, idx))
            start = None
            continue
        if start is None:
            start = idx
        fence.feed(line)
    if start is not None:
        spans.append((start, len(lines)))
    return spans


def split_markdown_blocks(content: str) -> list[str]:
    if not content:
        return [""]
    lines = content.split("\n")
    blocks = ["\n".join(lines[first:end]) for first, end in _segment(lines)]
    return blocks or [""]


def join_markdown_blocks(blocks: list[str]) -> str:
    return BLOCK_SEPARATOR.join(blocks)


def block_line_spans(content: str) -> list[tuple[int, int]]:
    """Source line span ``(first_line, end_line)`` of every block of ``content``."""
    if not content:
        return [(0, 1)]
    return _segment(content.split("\n")) or [(0, 1)]


def is_separator_line(content: str, line: int) -> bool:
    """True when source ``line`` lies between blocks rather than inside one."""
    return not any(first <= line < end for first, end in block_line_spans(content))


def locate_block(content: str, offset: int) -> tuple[int, int]:
    """Map a document UTF-16 offset to ``(block_index, offset_in_block)``.

    Offsets on a separator line resolve to the end of the preceding block.
    """
    lines = content.split("\n")
    spans = block_line_spans(content)
    line, column = offset_to_line_column(content, offset)
    for index, (first, end) in enumerate(spans):
        if line < first:
            if index == 0:
                return 0, 0
            prev_first, prev_end = spans[index - 1]
            return index - 1, utf16_len("\n".join(lines[prev_first:prev_end]))
        if line < end:
            before = lines[first:line]
            return index, sum(utf16_len(item) + 1 for item in before) + column
    first, end = spans[-1]
    return len(spans) - 1, utf16_len("\n".join(lines[first:end]))


def block_start_offset(content: str, block_index: int) -> int:
    """UTF-16 document offset of the first character of ``block_index``."""
    lines = content.split("\n")
    spans = block_line_spans(content)
    block_index = max(0, min(block_index, len(spans) - 1))
    first = spans[block_index][0]
    return sum(utf16_len(item) + 1 for item in lines[:first])


def shift_heights_for_insertion(heights: Mapping[int, _V], index: int) -> dict[int, _V]:
    if index < 0:
        return dict(heights)
    return {(key + 1 if key >= index else key): value for key, value in heights.items()}


def shift_heights_for_removal(heights: Mapping[int, _V], index: int) -> dict[int, _V]:
    if index < 0:
        return dict(heights)
    shifted: dict[int, _V] = {}
    for key, value in heights.items():
        if key == index:
            continue
        shifted[key - 1 if key > index else key] = value
    return shifted


def trailing_line(block: str) -> str:
    return block.rsplit("\n", 1)[-1]
