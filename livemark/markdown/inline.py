"""Inline markup spans.

Inline styling is computed as a list of non-overlapping spans over an
immutable source line. Each pass in ``INLINE_PASSES`` only scans the ranges
that earlier passes left plain, so precedence is fixed: code, links, bold,
italic, strikethrough.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

PLAIN = "plain"
CODE = "code"
LINK = "link"
BOLD = "bold"
ITALIC = "italic"
STRIKE = "strike"

INLINE_PASSES: tuple[tuple[str, re.Pattern[str]], ...] = (
    (CODE, re.compile(r"`([^`]+)`")),
    (LINK, re.compile(r"\[([^\]]+)\]\(([^)]+)\)")),
    (BOLD, re.compile(r"\*\*(.+?)\*\*")),
    (BOLD, re.compile(r"__(.+?)__")),
    (ITALIC, re.compile(r"(?<!\*)\*(?!\*)(.+?)(?<!\*)\*(?!\*)")),
    (ITALIC, re.compile(r"(?<!_)_(?!_)(.+?)(?<!_)_(?!_)")),
    (STRIKE, re.compile(r"~~(.+?)~~")),
)


@dataclass(frozen=True)
class InlineSpan:
    """``text`` is what gets displayed; ``start``/``end`` index the source line."""

    start: int
    end: int
    text: str
    kind: str = PLAIN
    href: Optional[str] = None


def parse_inline(line: str) -> list[InlineSpan]:
    spans = [InlineSpan(0, len(line), line)] if line else []
    for kind, pattern in INLINE_PASSES:
        spans = _apply_pass(line, spans, kind, pattern)
    return spans


def _apply_pass(line: str, spans: list[InlineSpan], kind: str, pattern: re.Pattern[str]) -> list[InlineSpan]:
    result: list[InlineSpan] = []
    for span in spans:
        if span.kind != PLAIN:
            result.append(span)
            continue
        segment = line[span.start:span.end]
        cursor = 0
        for match in pattern.finditer(segment):
            if match.start() > cursor:
                result.append(_plain(line, span.start + cursor, span.start + match.start()))
            href = match.group(2) if kind == LINK else None
            result.append(
                InlineSpan(span.start + match.start(), span.start + match.end(), match.group(1), kind, href)
            )
            cursor = match.end()
        if cursor < len(segment):
            result.append(_plain(line, span.start + cursor, span.end))
    return result


def _plain(line: str, start: int, end: int) -> InlineSpan:
    return InlineSpan(start, end, line[start:end])


def strip_inline(line: str) -> str:
    """Displayed text of ``line`` with inline markers removed."""
    return "".join(span.text for span in parse_inline(line))
