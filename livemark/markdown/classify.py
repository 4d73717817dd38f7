"""Single-line markdown classifier.

Each line is classified once per render pass into one of the tagged kinds
below. Precedence is fixed: fence, blank, rule, heading, quote, list item,
table row, paragraph.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

from .blocks import FenceToken, parse_fence_token
from .tables import TableRow, parse_table_row
from .tasks import TASK_PATTERN

HEADING_PATTERN = re.compile(r"^[ \t]*(#+)[ \t]+(.*?)[ \t]*$")
QUOTE_PATTERN = re.compile(r"^(\s*(?:>\s*)+)(.*)$")
UNORDERED_PATTERN = re.compile(r"^(\s*)([-+*])\s+(.*)$")
ORDERED_PATTERN = re.compile(r"^(\s*)(\d+)\.\s+(.*)$")
RULE_TOKENS = ("---", "***", "___")


@dataclass(frozen=True)
class Blank:
    pass


@dataclass(frozen=True)
class Fence:
    token: FenceToken


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class Rule:
    pass


@dataclass(frozen=True)
class Quote:
    prefix: str
    text: str


@dataclass(frozen=True)
class ListItem:
    indent: str
    marker: str
    content: str
    ordered: bool = False
    number: int = 0
    task: Optional[bool] = None

    @property
    def is_task(self) -> bool:
        return self.task is not None


@dataclass(frozen=True)
class TableRowLine:
    row: TableRow


@dataclass(frozen=True)
class Paragraph:
    text: str


LineKind = Union[Blank, Fence, Heading, Rule, Quote, ListItem, TableRowLine, Paragraph]


def _classify_list_item(line: str) -> Optional[ListItem]:
    ordered = ORDERED_PATTERN.match(line)
    unordered = UNORDERED_PATTERN.match(line) if ordered is None else None
    match = ordered or unordered
    if match is None:
        return None
    indent, marker, content = match.group(1), match.group(2), match.group(3)
    task: Optional[bool] = None
    task_match = TASK_PATTERN.match(line)
    if task_match:
        task = task_match.group("state").lower() == "x"
        content = task_match.group("suffix")[1:].lstrip()
    if ordered is not None:
        return ListItem(indent, marker + ".", content, ordered=True, number=int(marker), task=task)
    return ListItem(indent, marker, content, task=task)


def classify_line(line: str) -> LineKind:
    token = parse_fence_token(line)
    if token is not None:
        return Fence(token)
    stripped = line.strip(" \t")
    if not stripped:
        return Blank()
    if stripped in RULE_TOKENS:
        return Rule()
    heading = HEADING_PATTERN.match(line)
    if heading and heading.group(2):
        return Heading(len(heading.group(1)), heading.group(2))
    quote = QUOTE_PATTERN.match(line)
    if quote:
        return Quote(quote.group(1), quote.group(2).strip())
    item = _classify_list_item(line)
    if item is not None:
        return item
    row = parse_table_row(line)
    if row is not None:
        return TableRowLine(row)
    return Paragraph(stripped)


def is_list_continuation(line: str) -> bool:
    """Indented non-item lines continue the previous list item."""
    return line.startswith(("  ", "\t")) and bool(line.strip())
