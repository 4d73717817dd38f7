"""Reconcile edits made directly in the rendered projection with the source.

The host widget shows one display line per source line. When the user
types into it, the edited display lines are diffed against the lines last
rendered; the changed interior is written back over the same source line
indexes, then the source is re-rendered and the caret restored by
(line, column).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Collection, Optional

from .renderer import MarkdownRenderer, Projection
from .utf16 import line_column_to_offset, offset_to_line_column, utf16_len

logger = logging.getLogger(__name__)

_DETAILED_LOGGING = os.getenv("LIVEMARK_DETAILED_LOGGING", "0") not in ("0", "false", "False", "", None)


def common_prefix_count(lhs: list[str], rhs: list[str]) -> int:
    limit = min(len(lhs), len(rhs))
    index = 0
    while index < limit and lhs[index] == rhs[index]:
        index += 1
    return index


def common_suffix_count(lhs: list[str], rhs: list[str], prefix_count: int) -> int:
    """Matching trailing lines, never reaching back into the common prefix."""
    left = len(lhs) - 1
    right = len(rhs) - 1
    count = 0
    while left >= prefix_count and right >= prefix_count and lhs[left] == rhs[right]:
        count += 1
        left -= 1
        right -= 1
    return count


def patch_source_lines(source_lines: list[str], previous: list[str], current: list[str]) -> Optional[list[str]]:
    """Apply the display edit ``previous -> current`` to ``source_lines``.

    Returns None when the changed span does not fit inside the source; the
    caller keeps its source untouched in that case.
    """
    if previous == current:
        return list(source_lines)
    prefix = common_prefix_count(previous, current)
    suffix = common_suffix_count(previous, current, prefix)
    previous_end = max(prefix, len(previous) - suffix)
    current_end = max(prefix, len(current) - suffix)
    if prefix > len(source_lines) or previous_end > len(source_lines):
        return None
    return source_lines[:prefix] + current[prefix:current_end] + source_lines[previous_end:]


@dataclass
class SyncResult:
    source: str
    projection: Projection
    caret: int
    source_changed: bool


class RenderTokens:
    """Monotonic tokens for asynchronous renders; only the newest is current."""

    def __init__(self) -> None:
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def next_token(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, token: int) -> bool:
        return token == self._current


class ProjectionSync:
    """Owns the canonical source and the last rendered display lines."""

    def __init__(
        self,
        source: str = "",
        renderer: Optional[MarkdownRenderer] = None,
        raw_lines_provider: Optional[Callable[[str], Collection[int]]] = None,
    ) -> None:
        self.renderer = renderer or MarkdownRenderer()
        self.source = source
        self.raw_lines: frozenset[int] = frozenset()
        # when set, decides the raw lines from the source on every render
        self.raw_lines_provider = raw_lines_provider
        self.render()

    def render(self) -> Projection:
        if self.raw_lines_provider is not None:
            self.raw_lines = frozenset(self.raw_lines_provider(self.source))
        self.projection = self.renderer.render_projection(self.source, self.raw_lines)
        self.last_rendered_lines = self.projection.rendered_lines
        return self.projection

    def set_raw_lines(self, lines: Collection[int]) -> bool:
        """Change which source lines render raw; True when a re-render happened."""
        raw = frozenset(lines)
        if raw == self.raw_lines:
            return False
        self.raw_lines = raw
        self.render()
        return True

    def host_text_changed(self, display_text: str, caret: int, *, internal: bool = False) -> Optional[SyncResult]:
        """Fold a direct edit of the display text back into the source.

        ``internal`` marks mutations issued by the sync itself (re-render
        writes); those are ignored and None is returned.
        """
        if internal:
            return None
        current = display_text.split("\n")
        line, column = offset_to_line_column(display_text, caret)
        previous_source = self.source
        patched = patch_source_lines(self.source.split("\n"), self.last_rendered_lines, current)
        if patched is None:
            logger.warning(
                "Projection edit outside source bounds; keeping source (lines=%d)", len(self.source.split("\n"))
            )
        else:
            self.source = "\n".join(patched)
        projection = self.render()
        new_caret = self._remap_caret(projection, line, column)
        if _DETAILED_LOGGING:
            logger.debug("Projection sync caret %d -> %d (line=%d col=%d)", caret, new_caret, line, column)
        return SyncResult(self.source, projection, new_caret, self.source != previous_source)

    def apply_external_text(self, text: str, caret: int = 0, *, internal: bool = False) -> Optional[SyncResult]:
        """Replace the source from outside (file load, session mutation)."""
        if internal or text == self.source:
            return None
        self.source = text
        projection = self.render()
        new_caret = min(max(caret, 0), utf16_len(projection.text))
        return SyncResult(self.source, projection, new_caret, True)

    @staticmethod
    def _remap_caret(projection: Projection, line: int, column: int) -> int:
        lines = projection.rendered_lines
        line = min(max(line, 0), len(lines) - 1)
        column = min(column, utf16_len(lines[line]))
        return line_column_to_offset(projection.text, line, column)
