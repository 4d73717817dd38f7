"""Editor session: the canonical source plus block-level editing state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .blocks import (
    block_line_spans,
    block_start_offset,
    join_markdown_blocks,
    locate_block,
    shift_heights_for_insertion,
    shift_heights_for_removal,
    split_markdown_blocks,
)
from .edit_actions import (
    make_block_backspace_action,
    make_block_return_action,
    should_continue_editing_in_same_block,
    should_deactivate_for_ended_block,
)
from .html_renderer import HtmlRenderer
from .renderer import MarkdownRenderer, Projection
from .styles import InlineStyle, LineStyle, apply_inline_style, apply_line_style
from .sync import ProjectionSync, SyncResult
from .tasks import Task, extract_tasks, toggle_task_state_at_index
from .utf16 import TextRange, utf16_len

logger = logging.getLogger(__name__)

DEFAULT_CONTENT = """# Livemark Markdown Demo

> This note opens by default so every rendering path can be checked at a glance.

## 1. Headings

### H3 heading

#### H4 heading

## 2. Emphasis and inline styles

A mix of **bold**, *italic*, ~~strikethrough~~ and `inline code`.

Links work too: [Python](https://www.python.org) and [Qt](https://www.qt.io).

## 3. Lists

- Unordered item A
- Unordered item B
  - Nested item B.1
  - Nested item B.2
- Unordered item C

1. Ordered item 1
2. Ordered item 2
3. Ordered item 3

## 4. Tasks

- [x] Render markdown blocks
- [x] Tables and fenced code
- [ ] Export support

## 5. Quotes

> Markdown is about readability and portability.
>
> This quote spans several lines.

## 6. Code blocks

```python
from dataclasses import dataclass


@dataclass
class User:
    id: int
    name: str


def greet(user: User) -> None:
    print(f"Hello, {user.name}")
```

```bash
python -m pip install -e ".[test]"
```

## 7. Tables with alignment

| Feature | Status | Notes |
| --- | :---: | ---: |
| Headings/paragraphs | done | basic layout |
| Lists/tasks | done | common GFM syntax |
| Code blocks | done | fenced code |
| Tables | done | left/center/right |

## 8. Horizontal rule

---

## 9. Shortcuts

- Ctrl + B: bold (**)
- Ctrl + I: italic (*)
- Ctrl + Shift + X: strikethrough (~~)
- Ctrl + K: inline code (`)
- Ctrl + 1 / 2 / 3: heading H1 / H2 / H3
- Ctrl + Shift + 7 / 8 / 9: ordered list / unordered list / quote

Everything above exercises rendering and shortcuts on startup."""


@dataclass(frozen=True)
class BlockCaret:
    """Caret position after an edit, in block coordinates (UTF-16 offset)."""

    block_index: int
    offset: int


class EditorSession:
    """Owns the canonical markdown text for one open document.

    All mutations go through this object: edit actions, style toggles,
    projection edits and external loads. Block heights are opaque hints
    kept in step with block insertions and removals.
    """

    def __init__(
        self,
        text: Optional[str] = None,
        renderer: Optional[MarkdownRenderer] = None,
        html_renderer: Optional[HtmlRenderer] = None,
    ) -> None:
        self.renderer = renderer or MarkdownRenderer()
        self.html_renderer = html_renderer or HtmlRenderer()
        self.heights: dict[int, float] = {}
        self.active_block: Optional[int] = None
        self.sync = ProjectionSync(DEFAULT_CONTENT if text is None else text, self.renderer, self._raw_lines_for)

    # --- state ------------------------------------------------------------

    @property
    def source(self) -> str:
        return self.sync.source

    @property
    def blocks(self) -> list[str]:
        return split_markdown_blocks(self.source)

    @property
    def tasks(self) -> list[Task]:
        return extract_tasks(self.source)

    def load(self, text: str) -> None:
        self.heights = {}
        self.active_block = None
        self._commit(text)

    def _commit_blocks(self, blocks: list[str]) -> None:
        self._commit(join_markdown_blocks(blocks))

    def _commit(self, text: str) -> None:
        self.sync.source = text
        self.sync.render()

    # --- block activation -------------------------------------------------

    def activate_block(self, index: Optional[int]) -> None:
        if index is not None:
            index = max(0, min(index, len(self.blocks) - 1))
        self.active_block = index
        self.sync.render()

    def end_block_editing(self, ended_index: int) -> bool:
        """Deactivate when ``ended_index`` is the active block; True if it was."""
        if not should_deactivate_for_ended_block(self.active_block, ended_index):
            return False
        self.active_block = None
        self.sync.render()
        return True

    def _raw_lines_for(self, source: str) -> frozenset[int]:
        """Source lines of the active block, which render as raw markdown."""
        if self.active_block is None:
            return frozenset()
        spans = block_line_spans(source)
        if self.active_block >= len(spans):
            return frozenset()
        first, end = spans[self.active_block]
        return frozenset(range(first, end))

    def set_block_height(self, index: int, height: float) -> None:
        self.heights[index] = height

    # --- coordinates ------------------------------------------------------

    def locate(self, offset: int) -> BlockCaret:
        index, inner = locate_block(self.source, offset)
        return BlockCaret(index, inner)

    def document_offset(self, caret: BlockCaret) -> int:
        return block_start_offset(self.source, caret.block_index) + caret.offset

    # --- structural edits -------------------------------------------------

    def press_return(self, block_index: int, selection: int) -> Optional[BlockCaret]:
        """Contextual Enter inside ``block_index``; None means insert a plain newline."""
        blocks = self.blocks
        if not 0 <= block_index < len(blocks):
            return None
        block = blocks[block_index]
        action = make_block_return_action(block, selection)
        if action is None:
            return None

        if action.stays_in_block:
            blocks[block_index] = action.updated_block()
            caret = BlockCaret(block_index, action.same_block_selection or 0)
        elif should_continue_editing_in_same_block(block, action.next_block):
            blocks[block_index] = action.current_block + "\n" + action.next_block
            caret = BlockCaret(block_index, utf16_len(blocks[block_index]))
        elif not action.current_block and not action.next_block:
            # the block held only an empty marker line
            blocks[block_index] = ""
            caret = BlockCaret(block_index, 0)
        else:
            blocks[block_index] = action.current_block
            blocks.insert(block_index + 1, action.next_block)
            self.heights = shift_heights_for_insertion(self.heights, block_index + 1)
            caret = BlockCaret(block_index + 1, action.next_selection)

        self.active_block = caret.block_index
        self._commit_blocks(blocks)
        logger.debug("Return in block %d -> block %d offset %d", block_index, caret.block_index, caret.offset)
        return caret

    def press_backspace(self, block_index: int, selection: int) -> Optional[BlockCaret]:
        """Merge ``block_index`` into the previous block when the caret is at its start."""
        blocks = self.blocks
        if not 0 < block_index < len(blocks):
            return None
        action = make_block_backspace_action(blocks[block_index - 1], blocks[block_index], selection)
        if action is None:
            return None
        count = len(blocks)
        blocks[block_index - 1 : block_index + 1] = [action.merged_block]
        self.active_block = block_index - 1
        self._commit_blocks(blocks)
        # a leading blank line only shrinks the separator; the block survives
        if len(self.blocks) < count:
            self.heights = shift_heights_for_removal(self.heights, block_index)
        return BlockCaret(block_index - 1, action.selection_in_merged_block)

    # --- style toggles ----------------------------------------------------

    def toggle_inline_style(self, style: InlineStyle, block_index: int, selection: TextRange) -> Optional[TextRange]:
        return self._restyle(block_index, lambda block: apply_inline_style(style, block, selection))

    def toggle_line_style(self, style: LineStyle, block_index: int, selection: TextRange) -> Optional[TextRange]:
        return self._restyle(block_index, lambda block: apply_line_style(style, block, selection))

    def _restyle(self, block_index: int, apply) -> Optional[TextRange]:
        blocks = self.blocks
        if not 0 <= block_index < len(blocks):
            return None
        action = apply(blocks[block_index])
        blocks[block_index] = action.updated_text
        self._commit_blocks(blocks)
        return action.updated_selection

    def toggle_task(self, visible_index: int) -> bool:
        """Flip the ``visible_index``-th task of the document; True if anything changed."""
        updated = toggle_task_state_at_index(self.source, visible_index)
        if updated == self.source:
            return False
        self._commit(updated)
        return True

    # --- projection -------------------------------------------------------

    def projection(self) -> Projection:
        return self.sync.projection

    def host_text_changed(self, display_text: str, caret: int, *, internal: bool = False) -> Optional[SyncResult]:
        return self.sync.host_text_changed(display_text, caret, internal=internal)

    def html(self, render_key: Optional[str] = None) -> str:
        return self.html_renderer.render_fragment(self.source, render_key=render_key)

    def html_document(self) -> str:
        return self.html_renderer.render_document(self.source)
