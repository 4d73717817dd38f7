"""Contextual Enter / Backspace resolution at block granularity."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .blocks import FenceToken, FenceTracker, parse_fence_token, trailing_line
from .tables import (
    has_separator_row_above,
    make_empty_table_row,
    parse_table_row,
    trailing_table_row_count,
)
from .utf16 import utf16_len

_TASK_ITEM = re.compile(r"^(\s*)([-+*])\s+\[( |x|X)\]\s*(.*)$")
_UNORDERED_ITEM = re.compile(r"^(\s*)([-+*])\s+(.*)$")
_ORDERED_ITEM = re.compile(r"^(\s*)(\d+)\.\s+(.*)$")
_QUOTE_ITEM = re.compile(r"^(\s*(?:>\s*)+)(.*)$")

_STAY_UNORDERED = re.compile(r"^\s*[-+*]\s+(\[( |x|X)\]\s+)?\S.*$")
_STAY_ORDERED = re.compile(r"^\s*\d+\.\s+\S.*$")


@dataclass(frozen=True)
class BlockReturnAction:
    current_block: str
    next_block: str
    same_block_selection: Optional[int] = None

    @property
    def next_selection(self) -> int:
        return utf16_len(self.next_block)

    @property
    def stays_in_block(self) -> bool:
        return self.same_block_selection is not None

    def updated_block(self) -> str:
        """Block text after a same-block action (fence auto-completion)."""
        return self.current_block + "\n" + self.next_block


@dataclass(frozen=True)
class BlockBackspaceAction:
    merged_block: str
    selection_in_merged_block: int


def make_block_return_action(block: str, selection: int) -> Optional[BlockReturnAction]:
    """Resolve Enter pressed at UTF-16 offset ``selection`` inside ``block``.

    Returns None when the caret is not at the very end of the block or the
    trailing line is blank; the host then inserts a plain newline.
    """
    if selection != utf16_len(block):
        return None
    active = trailing_line(block)
    if not active.strip(" \t"):
        return None
    fence_action = _fence_auto_completion(block, active)
    if fence_action is not None:
        return fence_action
    opening = _open_fence(block)
    closing = parse_fence_token(active)
    if opening is not None and (closing is None or not closing.closes(opening)):
        # lines inside an unterminated fence take a plain newline
        return None
    continuation = continuation_prefix(active, block)
    current = block
    if not continuation and _is_empty_marker_line(active):
        current = block[: len(block) - len(active)].rstrip("\n")
    return BlockReturnAction(current_block=current, next_block=continuation)


def make_block_backspace_action(
    previous_block: str, current_block: str, selection: int
) -> Optional[BlockBackspaceAction]:
    if selection != 0:
        return None
    merged = previous_block + "\n" + current_block
    return BlockBackspaceAction(merged, utf16_len(previous_block) + 1)


def should_deactivate_for_ended_block(active_block_index: Optional[int], ended_block_index: int) -> bool:
    return active_block_index == ended_block_index


def should_continue_editing_in_same_block(block: str, continuation: str) -> bool:
    line = trailing_line(block)
    table = parse_table_row(line)
    if table is not None:
        if table.is_all_empty:
            return False
        if continuation:
            return True
        if has_separator_row_above(block):
            return False
        # header -> separator stays in one block; a missing separator must not trap editing
        return trailing_table_row_count(block) == 1
    if not continuation:
        return False
    if line.strip(" \t").startswith(">"):
        return True
    return bool(_STAY_UNORDERED.match(line) or _STAY_ORDERED.match(line))


def continuation_prefix(line: str, block: str) -> str:
    task = _TASK_ITEM.match(line)
    if task:
        if not task.group(4).strip():
            return ""
        return task.group(1) + task.group(2) + " [ ] "

    unordered = _UNORDERED_ITEM.match(line)
    if unordered:
        if not unordered.group(3).strip():
            return ""
        return unordered.group(1) + unordered.group(2) + " "

    ordered = _ORDERED_ITEM.match(line)
    if ordered:
        if not ordered.group(3).strip():
            return ""
        return f"{ordered.group(1)}{int(ordered.group(2)) + 1}. "

    quote = _QUOTE_ITEM.match(line)
    if quote:
        if not quote.group(2).strip():
            return ""
        prefix = quote.group(1)
        return prefix if prefix.endswith(" ") else prefix + " "

    table = parse_table_row(line)
    if table is not None and table.is_separator_row:
        return make_empty_table_row(table.column_count, table.indent)
    return ""


def _is_empty_marker_line(line: str) -> bool:
    """True for a list/task/quote marker or table row with nothing after it."""
    table = parse_table_row(line)
    if table is not None:
        return table.is_all_empty
    for pattern, group in ((_TASK_ITEM, 4), (_UNORDERED_ITEM, 3), (_ORDERED_ITEM, 3), (_QUOTE_ITEM, 2)):
        match = pattern.match(line)
        if match:
            return not match.group(group).strip()
    return False


def _open_fence(block: str) -> Optional[FenceToken]:
    """Opening fence still unclosed before the trailing line of ``block``."""
    fence = FenceTracker()
    for line in block.split("\n")[:-1]:
        fence.feed(line)
    return fence.opening


def _fence_auto_completion(block: str, active: str) -> Optional[BlockReturnAction]:
    fence = parse_fence_token(active)
    if fence is None:
        return None
    if _open_fence(block) is not None:
        # the trailing fence closes an open region; nothing to complete
        return None
    indent = active[: len(active) - len(active.lstrip(" \t"))]
    return BlockReturnAction(
        current_block=block,
        next_block="\n" + indent + fence.char * fence.length,
        same_block_selection=utf16_len(block) + 1,
    )
