"""Markdown to styled-run rendering.

Output is toolkit neutral: a ``StyledLine`` holds ``StyledRun``s whose
``TextStyle`` carries weight/size/color tokens, and a ``ParagraphStyle``
with spacing hints. The Qt adapter maps tokens to ``QTextCharFormat``.

Two entry points share one line classifier:

* ``render_projection`` keeps one display line per source line, which is
  what the live editor diffs against.
* ``render_document`` groups lines into visual blocks (paragraph lines are
  joined, list continuation lines fold into their item).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Collection, Optional

from .blocks import FenceTracker
from .classify import (
    Blank,
    Fence,
    Heading,
    LineKind,
    ListItem,
    Paragraph,
    Quote,
    Rule,
    TableRowLine,
    classify_line,
    is_list_continuation,
)
from .inline import BOLD, CODE, ITALIC, LINK, STRIKE, parse_inline
from .render_timer import RenderTimer
from .tables import TableBlock, format_table_divider, format_table_row, parse_table_block

logger = logging.getLogger(__name__)

BASE_SIZE = 16.0
CODE_SIZE = 14.0
RAW_SIZE = 15.0
RULE_SIZE = 10.0
# (size, weight) for heading levels 1-6; deeper levels reuse the last entry
HEADING_STYLES = (
    (30.0, "bold"),
    (26.0, "bold"),
    (22.0, "semibold"),
    (20.0, "semibold"),
    (18.0, "medium"),
    (16.0, "medium"),
)
HEADING_SIZES = tuple(size for size, _ in HEADING_STYLES)
QUOTE_GLYPH = "▎ "
BULLET_GLYPH = "• "
CHECKED_GLYPH = "☑"
UNCHECKED_GLYPH = "☐"
RULE_GLYPH = "─"
RULE_WIDTH = 20
DOCUMENT_RULE_WIDTH = 44


@dataclass(frozen=True)
class TextStyle:
    weight: str = "regular"
    size: float = BASE_SIZE
    italic: bool = False
    monospace: bool = False
    foreground: str = "text"
    background: Optional[str] = None
    underline: bool = False
    strikethrough: bool = False
    link: Optional[str] = None


@dataclass(frozen=True)
class ParagraphStyle:
    spacing_before: float = 0.0
    spacing_after: float = 4.0
    head_indent: float = 0.0


@dataclass(frozen=True)
class StyledRun:
    text: str
    style: TextStyle = TextStyle()


@dataclass
class StyledLine:
    runs: list[StyledRun] = field(default_factory=list)
    paragraph: ParagraphStyle = ParagraphStyle()
    kind: str = "paragraph"

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass
class StyledBlock:
    kind: str
    lines: list[StyledLine] = field(default_factory=list)


@dataclass
class Projection:
    """Rendered display lines plus the exact strings last shown to the host."""

    lines: list[StyledLine]

    @property
    def rendered_lines(self) -> list[str]:
        return [line.text for line in self.lines]

    @property
    def text(self) -> str:
        return "\n".join(self.rendered_lines)


def heading_style(level: int) -> TextStyle:
    size, weight = HEADING_STYLES[min(max(level, 1), len(HEADING_STYLES)) - 1]
    return TextStyle(weight=weight, size=size)


class MarkdownRenderer:
    """Stateless renderer; construct once per session and share it."""

    def __init__(self, base_size: float = BASE_SIZE) -> None:
        self.base_style = TextStyle(size=base_size)
        self.code_style = TextStyle(size=CODE_SIZE, monospace=True, background="code_block")
        self.raw_style = TextStyle(size=RAW_SIZE, monospace=True)

    # --- inline -----------------------------------------------------------

    def render_inline(self, text: str, base: Optional[TextStyle] = None) -> list[StyledRun]:
        base = base or self.base_style
        runs = []
        for span in parse_inline(text):
            if span.kind == CODE:
                style = replace(base, monospace=True, size=CODE_SIZE, background="inline_code")
            elif span.kind == LINK:
                style = replace(base, foreground="accent", underline=True, link=span.href)
            elif span.kind == BOLD:
                style = replace(base, weight="bold")
            elif span.kind == ITALIC:
                style = replace(base, italic=True)
            elif span.kind == STRIKE:
                style = replace(base, strikethrough=True)
            else:
                style = base
            runs.append(StyledRun(span.text, style))
        return runs

    # --- projection (one display line per source line) --------------------

    def render_raw_line(self, line: str) -> StyledLine:
        return StyledLine([StyledRun(line, self.raw_style)], ParagraphStyle(), kind="raw")

    def render_projection(self, source: str, raw_lines: Collection[int] = ()) -> Projection:
        timer = RenderTimer("projection")
        lines = source.split("\n")
        output: list[StyledLine] = []
        fence = FenceTracker()
        index = 0
        while index < len(lines):
            line = lines[index]
            was_open = fence.is_open
            token = fence.feed(line)
            if index in raw_lines:
                output.append(self.render_raw_line(line))
                index += 1
                continue
            if token is not None and (not was_open or not fence.is_open):
                output.append(StyledLine([StyledRun("", self.code_style)], ParagraphStyle(spacing_after=2.0), "fence"))
                index += 1
                continue
            if was_open:
                output.append(self._code_line(line))
                index += 1
                continue
            kind = classify_line(line)
            if isinstance(kind, TableRowLine):
                table = parse_table_block(lines, index)
                if table is not None:
                    output.extend(self._projected_table(table, lines, raw_lines))
                    index = table.next_index
                    continue
            output.append(self._projected_line(kind, line, lines, index))
            index += 1
        timer.end(f"lines={len(lines)}")
        return Projection(output)

    def _projected_line(self, kind: LineKind, line: str, lines: list[str], index: int) -> StyledLine:
        following = lines[index + 1] if index + 1 < len(lines) else ""
        if isinstance(kind, Heading):
            style = heading_style(kind.level)
            runs = self.render_inline(kind.text, style)
            return StyledLine(runs, ParagraphStyle(spacing_before=10.0, spacing_after=6.0), "heading")
        if isinstance(kind, Quote):
            return self._quote_line(kind, last=not isinstance(classify_line(following), Quote))
        if isinstance(kind, ListItem):
            last = not self._continues_list(following)
            return self._list_line(kind, last)
        if isinstance(kind, Rule):
            return self._rule_line(RULE_WIDTH)
        if isinstance(kind, Blank):
            return StyledLine([], ParagraphStyle(spacing_after=0.0), "blank")
        if is_list_continuation(line) and index > 0 and self._in_list(lines, index):
            runs = self.render_inline(line.strip())
            last = not self._continues_list(following)
            return StyledLine(runs, self._list_paragraph(last, indent=44.0), "list")
        text = kind.text if isinstance(kind, Paragraph) else line.strip()
        return StyledLine(self.render_inline(text), ParagraphStyle(), "paragraph")

    def _in_list(self, lines: list[str], index: int) -> bool:
        scan = index - 1
        while scan >= 0 and is_list_continuation(lines[scan]):
            if isinstance(classify_line(lines[scan]), ListItem):
                return True
            scan -= 1
        return scan >= 0 and isinstance(classify_line(lines[scan]), ListItem)

    def _continues_list(self, line: str) -> bool:
        return isinstance(classify_line(line), ListItem) or is_list_continuation(line)

    def _projected_table(self, table: TableBlock, lines: list[str], raw_lines: Collection[int]) -> list[StyledLine]:
        widths = table.column_widths()
        aligns = table.padded_alignments()
        header_style = TextStyle(weight="semibold", size=CODE_SIZE - 1, monospace=True)
        row_style = TextStyle(size=CODE_SIZE - 1, monospace=True)
        divider_style = replace(row_style, foreground="secondary")
        texts = [
            (format_table_row(table.padded_header(), widths, aligns), header_style),
            (format_table_divider(widths, aligns), divider_style),
        ]
        texts.extend((format_table_row(row, widths, aligns), row_style) for row in table.padded_rows())
        output = []
        for offset, (text, style) in enumerate(texts):
            source_index = table.start_index + offset
            if source_index in raw_lines:
                output.append(self.render_raw_line(lines[source_index]))
                continue
            last = offset == len(texts) - 1
            output.append(StyledLine([StyledRun(text, style)], ParagraphStyle(spacing_after=6.0 if last else 0.0), "table"))
        return output

    # --- shared line pieces -----------------------------------------------

    def _code_line(self, line: str) -> StyledLine:
        return StyledLine([StyledRun(line, self.code_style)], ParagraphStyle(spacing_after=2.0, head_indent=12.0), "code")

    def _rule_line(self, width: int) -> StyledLine:
        style = TextStyle(size=RULE_SIZE, foreground="border")
        return StyledLine([StyledRun(RULE_GLYPH * width, style)], ParagraphStyle(spacing_after=12.0), "rule")

    def _quote_line(self, quote: Quote, last: bool) -> StyledLine:
        body = replace(self.base_style, foreground="secondary", background="quote")
        runs = [StyledRun(QUOTE_GLYPH, replace(self.base_style, foreground="accent"))]
        runs.extend(self.render_inline(quote.text, body))
        return StyledLine(runs, ParagraphStyle(spacing_after=6.0 if last else 0.0, head_indent=18.0), "quote")

    def _list_marker(self, item: ListItem) -> str:
        if item.is_task:
            return (CHECKED_GLYPH if item.task else UNCHECKED_GLYPH) + " "
        if item.ordered:
            return f"{item.number}. "
        return BULLET_GLYPH

    def _list_paragraph(self, last: bool, indent: float = 22.0) -> ParagraphStyle:
        return ParagraphStyle(spacing_after=6.0 if last else 0.0, head_indent=indent)

    def _list_line(self, item: ListItem, last: bool) -> StyledLine:
        depth = len(item.indent.expandtabs(4)) // 2
        runs = [StyledRun(" " * (depth * 2) + self._list_marker(item), self.base_style)]
        runs.extend(self.render_inline(item.content))
        return StyledLine(runs, self._list_paragraph(last, indent=22.0 * (depth + 1)), "list")

    # --- grouped document rendering ---------------------------------------

    def render_document(self, source: str) -> list[StyledBlock]:
        timer = RenderTimer("document")
        lines = source.split("\n")
        blocks: list[StyledBlock] = []
        index = 0
        while index < len(lines):
            line = lines[index]
            kind = classify_line(line)
            if isinstance(kind, Fence):
                code, index = self._collect_code(lines, index, kind)
                blocks.append(StyledBlock("code", [self._code_line(item) for item in code] or [self._code_line(" ")]))
                continue
            if isinstance(kind, Blank):
                index += 1
                continue
            if isinstance(kind, TableRowLine):
                table = parse_table_block(lines, index)
                if table is not None:
                    blocks.append(StyledBlock("table", self._projected_table(table, lines, ())))
                    index = table.next_index
                    continue
            if isinstance(kind, Heading):
                runs = self.render_inline(kind.text, heading_style(kind.level))
                blocks.append(StyledBlock("heading", [StyledLine(runs, ParagraphStyle(spacing_after=6.0), "heading")]))
                index += 1
                continue
            if isinstance(kind, Rule):
                blocks.append(StyledBlock("rule", [self._rule_line(DOCUMENT_RULE_WIDTH)]))
                index += 1
                continue
            if isinstance(kind, ListItem):
                items, index = self._collect_list(lines, index)
                rendered = [self._list_line(item, i == len(items) - 1) for i, item in enumerate(items)]
                blocks.append(StyledBlock("list", rendered))
                continue
            if isinstance(kind, Quote):
                quotes = []
                while index < len(lines):
                    current = classify_line(lines[index])
                    if not isinstance(current, Quote):
                        break
                    quotes.append(current)
                    index += 1
                merged = Quote(quotes[0].prefix, "\n".join(q.text for q in quotes))
                blocks.append(StyledBlock("quote", [self._quote_line(merged, last=True)]))
                continue
            paragraph = []
            while index < len(lines):
                current = classify_line(lines[index])
                if not isinstance(current, Paragraph) or (paragraph and parse_table_block(lines, index)):
                    break
                paragraph.append(current.text)
                index += 1
            if not paragraph:
                # a lone table-like row without a separator reads as prose
                paragraph.append(line.strip())
                index += 1
            blocks.append(StyledBlock("paragraph", [StyledLine(self.render_inline(" ".join(paragraph)), ParagraphStyle(), "paragraph")]))
        timer.end(f"blocks={len(blocks)}")
        return blocks

    def _collect_code(self, lines: list[str], index: int, kind: Fence) -> tuple[list[str], int]:
        code: list[str] = []
        scan = index + 1
        while scan < len(lines):
            if self._closes(lines[scan], kind):
                return code, scan + 1
            code.append(lines[scan])
            scan += 1
        return code, scan

    @staticmethod
    def _closes(line: str, opening: Fence) -> bool:
        kind = classify_line(line)
        return isinstance(kind, Fence) and kind.token.closes(opening.token)

    def _collect_list(self, lines: list[str], index: int) -> tuple[list[ListItem], int]:
        items: list[ListItem] = []
        while index < len(lines):
            line = lines[index]
            kind = classify_line(line)
            if isinstance(kind, ListItem):
                items.append(kind)
            elif items and is_list_continuation(line):
                last = items[-1]
                items[-1] = replace(last, content=f"{last.content} {line.strip()}")
            else:
                break
            index += 1
        return items, index
