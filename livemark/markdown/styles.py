"""Inline and line-level markdown style toggles.

All functions are pure text transforms: they take the block text and a
UTF-16 ``TextRange`` selection and return a ``StyleAction`` holding the
updated text and selection.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .utf16 import TextRange, clamp_range, index_to_utf16, utf16_len, utf16_to_index

_WORD = re.compile(r"\w+(?:['’]\w+)*")
_HEADING_MARK = re.compile(r"^#{1,6}\s+")
_UNORDERED_MARK = re.compile(r"^(\s*)[-+*]\s+(.*)$")
_ORDERED_MARK = re.compile(r"^(\s*)\d+\.\s+(.*)$")
_QUOTE_MARK = re.compile(r"^(\s*)>\s?(.*)$")


class InlineStyle(Enum):
    BOLD = "**"
    ITALIC = "*"
    STRIKETHROUGH = "~~"
    INLINE_CODE = "`"

    @property
    def marker(self) -> str:
        return self.value


@dataclass(frozen=True)
class LineStyle:
    kind: str
    level: int = 0

    HEADING = "heading"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    BLOCKQUOTE = "blockquote"

    @classmethod
    def heading(cls, level: int) -> "LineStyle":
        return cls(cls.HEADING, min(max(1, level), 6))

    @classmethod
    def unordered_list(cls) -> "LineStyle":
        return cls(cls.UNORDERED_LIST)

    @classmethod
    def ordered_list(cls) -> "LineStyle":
        return cls(cls.ORDERED_LIST)

    @classmethod
    def blockquote(cls) -> "LineStyle":
        return cls(cls.BLOCKQUOTE)


@dataclass(frozen=True)
class StyleAction:
    updated_text: str
    updated_selection: TextRange


def word_range_around_caret(text: str, caret: int) -> Optional[tuple[int, int]]:
    """Code point range of the word at ``caret`` or just before it."""
    if not text:
        return None
    caret = max(0, min(caret, len(text)))
    candidates = [caret] + ([caret - 1] if caret > 0 else [])
    for candidate in candidates:
        for match in _WORD.finditer(text):
            if match.start() <= candidate < match.end():
                return match.start(), match.end()
            if match.start() > candidate:
                break
    return None


def apply_inline_style(style: InlineStyle, text: str, selection: TextRange) -> StyleAction:
    marker = style.marker
    size = len(marker)
    selection = clamp_range(TextRange(*selection), utf16_len(text))
    start = utf16_to_index(text, selection.location)
    end = max(start, utf16_to_index(text, selection.end))

    if start == end:
        word = word_range_around_caret(text, start)
        if word is None:
            updated = text[:start] + marker + marker + text[start:]
            return StyleAction(updated, TextRange(index_to_utf16(updated, start + size), 0))
        start, end = word

    selected = text[start:end]
    if len(selected) >= size * 2 and selected.startswith(marker) and selected.endswith(marker):
        inner = selected[size:-size]
        updated = text[:start] + inner + text[end:]
        return StyleAction(updated, _range(updated, start, start + len(inner)))

    if start >= size and text[start - size:start] == marker and text[end:end + size] == marker:
        updated = text[:start - size] + selected + text[end + size:]
        return StyleAction(updated, _range(updated, start - size, end - size))

    updated = text[:start] + marker + selected + marker + text[end:]
    return StyleAction(updated, _range(updated, start + size, end + size))


def apply_line_style(style: LineStyle, text: str, selection: TextRange) -> StyleAction:
    selection = clamp_range(TextRange(*selection), utf16_len(text))
    start, end = _line_range_covering(text, selection)
    target = text[start:end]
    trailing_newline = target.endswith("\n")
    lines = target.split("\n")
    if trailing_newline:
        lines.pop()
    if not lines:
        lines = [""]
    replacement = "\n".join(transform_line(line, style) for line in lines)
    if trailing_newline:
        replacement += "\n"
    updated = text[:start] + replacement + text[end:]
    return StyleAction(updated, _range(updated, start, start + len(replacement)))


def transform_line(line: str, style: LineStyle) -> str:
    if style.kind == LineStyle.HEADING:
        return _toggle_heading(line, style.level)
    if style.kind == LineStyle.UNORDERED_LIST:
        return _toggle_list(line, _UNORDERED_MARK, _ORDERED_MARK, "- ")
    if style.kind == LineStyle.ORDERED_LIST:
        return _toggle_list(line, _ORDERED_MARK, _UNORDERED_MARK, "1. ")
    if style.kind == LineStyle.BLOCKQUOTE:
        quote = _QUOTE_MARK.match(line)
        if quote:
            return quote.group(1) + quote.group(2)
        indent, content = _split_indent(line)
        return indent + "> " + content
    return line


def _toggle_heading(line: str, level: int) -> str:
    marker = "#" * min(max(1, level), 6) + " "
    indent, content = _split_indent(line)
    if content.startswith(marker):
        return indent + content[len(marker):]
    return indent + marker + _HEADING_MARK.sub("", content, count=1)


def _toggle_list(line: str, same: re.Pattern[str], other: re.Pattern[str], marker: str) -> str:
    match = same.match(line)
    if match:
        return match.group(1) + match.group(2)
    match = other.match(line)
    if match:
        return match.group(1) + marker + match.group(2)
    indent, content = _split_indent(line)
    return indent + marker + content


def _split_indent(line: str) -> tuple[str, str]:
    content = line.lstrip(" \t")
    return line[: len(line) - len(content)], content


def _line_range_covering(text: str, selection: TextRange) -> tuple[int, int]:
    """Code point range of every full line touched by ``selection`` (newline included)."""
    if not text:
        return 0, 0
    start = utf16_to_index(text, selection.location)
    end = utf16_to_index(text, selection.end)
    probe = max(start, end - 1) if selection.length > 0 else end
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", probe)
    line_end = len(text) if line_end < 0 else line_end + 1
    return line_start, max(line_start, line_end)


def _range(text: str, start: int, end: int) -> TextRange:
    location = index_to_utf16(text, start)
    return TextRange(location, index_to_utf16(text, end) - location)
