"""Table row / alignment model shared by the editor and both renderers."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .blocks import parse_fence_token

# a list item ends a table body even when it contains pipes
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+\.)\s")


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class TableRow:
    cells: tuple[str, ...]
    indent: str = ""
    is_separator_row: bool = False
    is_all_empty: bool = False

    @property
    def column_count(self) -> int:
        return len(self.cells)


@dataclass
class TableBlock:
    header: list[str]
    alignments: list[Alignment]
    rows: list[list[str]] = field(default_factory=list)
    start_index: int = 0
    next_index: int = 0
    indent: str = ""

    @property
    def column_count(self) -> int:
        widest_row = max((len(row) for row in self.rows), default=0)
        return max(len(self.header), len(self.alignments), widest_row)

    def padded_header(self) -> list[str]:
        return pad_cells(self.header, self.column_count)

    def padded_rows(self) -> list[list[str]]:
        return [pad_cells(row, self.column_count) for row in self.rows]

    def padded_alignments(self) -> list[Alignment]:
        count = self.column_count
        aligns = list(self.alignments[:count])
        return aligns + [Alignment.LEFT] * (count - len(aligns))

    def column_widths(self) -> list[int]:
        """Monospace width of each column: widest cell, never below 3."""
        widths = [3] * self.column_count
        for row in [self.padded_header(), *self.padded_rows()]:
            for col, cell in enumerate(row):
                widths[col] = max(widths[col], display_width(cell))
        return widths


def _looks_like_table_syntax(trimmed: str) -> bool:
    return (
        trimmed.startswith("|")
        or trimmed.endswith("|")
        or " |" in trimmed
        or "| " in trimmed
    )


def _split_cells(trimmed: str) -> list[str]:
    body = trimmed
    if body.startswith("|"):
        body = body[1:]
    if body.endswith("|"):
        body = body[:-1]
    return [cell.strip(" \t") for cell in body.split("|")]


def _is_separator_cell(cell: str) -> bool:
    token = cell.replace(" ", "")
    return token.count("-") >= 3 and all(ch in "-:" for ch in token)


def parse_table_row(line: str) -> Optional[TableRow]:
    """Parse ``line`` as a table row, or return None for prose with a stray pipe."""
    trimmed = line.strip(" \t")
    if not trimmed or "|" not in trimmed or not _looks_like_table_syntax(trimmed):
        return None
    cells = _split_cells(trimmed)
    if len(cells) < 2:
        return None
    indent = line[: len(line) - len(line.lstrip(" \t"))]
    return TableRow(
        cells=tuple(cells),
        indent=indent,
        is_separator_row=all(_is_separator_cell(cell) for cell in cells),
        is_all_empty=all(not cell for cell in cells),
    )


def parse_alignments(line: str) -> Optional[list[Alignment]]:
    """Alignments of a valid separator row, or None when ``line`` is not one."""
    row = parse_table_row(line)
    if row is None or not row.is_separator_row:
        return None
    alignments: list[Alignment] = []
    for cell in row.cells:
        token = cell.replace(" ", "")
        left, right = token.startswith(":"), token.endswith(":")
        if left and right:
            alignments.append(Alignment.CENTER)
        elif right:
            alignments.append(Alignment.RIGHT)
        else:
            alignments.append(Alignment.LEFT)
    return alignments


def parse_table_block(lines: list[str], start: int) -> Optional[TableBlock]:
    """Parse a header + separator + body table beginning at ``lines[start]``."""
    if start < 0 or start + 1 >= len(lines):
        return None
    header = parse_table_row(lines[start])
    if header is None or header.is_separator_row:
        return None
    alignments = parse_alignments(lines[start + 1])
    if alignments is None:
        return None
    rows: list[list[str]] = []
    scan = start + 2
    while scan < len(lines):
        if parse_fence_token(lines[scan]) is not None or _LIST_ITEM.match(lines[scan]):
            break
        row = parse_table_row(lines[scan])
        if row is None:
            break
        rows.append(list(row.cells))
        scan += 1
    return TableBlock(
        header=list(header.cells),
        alignments=alignments,
        rows=rows,
        start_index=start,
        next_index=scan,
        indent=header.indent,
    )


def make_empty_table_row(column_count: int, indent: str = "") -> str:
    if column_count <= 0:
        return ""
    return indent + "| " + " | ".join([""] * column_count) + " |"


def pad_cells(cells: list[str], count: int) -> list[str]:
    if len(cells) >= count:
        return list(cells[:count])
    return list(cells) + [""] * (count - len(cells))


def display_width(text: str) -> int:
    width = 0
    for ch in text:
        if unicodedata.combining(ch):
            continue
        width += 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
    return width


def align_cell(text: str, width: int, alignment: Alignment) -> str:
    padding = max(0, width - display_width(text))
    if alignment is Alignment.CENTER:
        left = padding // 2
        return " " * left + text + " " * (padding - left)
    if alignment is Alignment.RIGHT:
        return " " * padding + text
    return text + " " * padding


def format_table_row(cells: list[str], widths: list[int], alignments: list[Alignment]) -> str:
    pieces = [align_cell(cell, width, align) for cell, width, align in zip(cells, widths, alignments)]
    return "| " + " | ".join(pieces) + " |"


def format_table_divider(widths: list[int], alignments: list[Alignment]) -> str:
    pieces = []
    for width, align in zip(widths, alignments):
        width = max(3, width)
        if align is Alignment.CENTER:
            pieces.append(":" + "-" * max(1, width - 2) + ":")
        elif align is Alignment.RIGHT:
            pieces.append("-" * max(1, width - 1) + ":")
        else:
            pieces.append("-" * width)
    return "| " + " | ".join(pieces) + " |"


def has_separator_row_above(block: str) -> bool:
    lines = block.split("\n")[:-1]
    for line in lines:
        row = parse_table_row(line)
        if row is not None and row.is_separator_row:
            return True
    return False


def trailing_table_row_count(block: str) -> int:
    count = 0
    for line in reversed(block.split("\n")):
        if parse_table_row(line) is None:
            break
        count += 1
    return count
