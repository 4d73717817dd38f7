from __future__ import annotations

import logging
import os
from typing import Optional

from pygments import lex
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import (
    QColor,
    QFont,
    QFontDatabase,
    QTextBlockFormat,
    QTextCharFormat,
    QTextCursor,
)
from PySide6.QtWidgets import QTextEdit

from livemark.app import config
from livemark.markdown.blocks import FenceTracker, is_separator_line
from livemark.markdown.renderer import BASE_SIZE, Projection, TextStyle
from livemark.markdown.session import BlockCaret, EditorSession
from livemark.markdown.styles import InlineStyle, LineStyle
from livemark.markdown.tasks import task_index_for_line
from livemark.markdown.utf16 import (
    TextRange,
    line_column_to_offset,
    offset_to_line_column,
    utf16_len,
)

logger = logging.getLogger(__name__)

_DETAILED_LOGGING = os.getenv("LIVEMARK_DETAILED_LOGGING", "0") not in ("0", "false", "False", "", None)

FOREGROUND_COLORS = {
    "text": "#111827",
    "secondary": "#4b5563",
    "accent": "#0b74ff",
    "border": "#d1d5db",
}
BACKGROUND_COLORS = {
    "inline_code": "#eef0f3",
    "code_block": "#f6f8fa",
    "quote": "#eef5ff",
}
FONT_WEIGHTS = {
    "regular": QFont.Weight.Normal,
    "medium": QFont.Weight.Medium,
    "semibold": QFont.Weight.DemiBold,
    "bold": QFont.Weight.Bold,
}

INLINE_SHORTCUTS = {
    Qt.Key_B: InlineStyle.BOLD,
    Qt.Key_I: InlineStyle.ITALIC,
    Qt.Key_K: InlineStyle.INLINE_CODE,
}
HEADING_SHORTCUTS = {Qt.Key_1: 1, Qt.Key_2: 2, Qt.Key_3: 3}
# shifted digits arrive as their symbol on most layouts
SHIFTED_LINE_SHORTCUTS = {
    Qt.Key_7: LineStyle.ordered_list(),
    Qt.Key_Ampersand: LineStyle.ordered_list(),
    Qt.Key_8: LineStyle.unordered_list(),
    Qt.Key_Asterisk: LineStyle.unordered_list(),
    Qt.Key_9: LineStyle.blockquote(),
    Qt.Key_ParenLeft: LineStyle.blockquote(),
}


class LiveMarkdownEditor(QTextEdit):
    """Rendered markdown everywhere except the block being edited.

    The widget text is the projection produced by the session; edits typed
    into it are folded back into the session source through the line diff.
    """

    markdownChanged = Signal(str)

    def __init__(self, parent=None, session: Optional[EditorSession] = None, font_size: Optional[int] = None) -> None:
        super().__init__(parent)
        self.session = session or EditorSession()
        self._font_scale = (font_size or config.load_editor_font_size()) / BASE_SIZE
        self._display_guard = False
        self._mono_family = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont).family()
        self._format_cache: dict[TextStyle, QTextCharFormat] = {}
        self.setAcceptRichText(False)
        self.setLineWrapMode(QTextEdit.LineWrapMode.WidgetWidth)
        self.setPlaceholderText("Start writing markdown…")
        self._init_pygments(config.load_pygments_style())
        self.textChanged.connect(self._on_text_changed)
        self.cursorPositionChanged.connect(self._on_cursor_moved)
        self._refresh_display(0)

    # --- pygments ---------------------------------------------------------

    def _init_pygments(self, style_name: Optional[str] = None) -> None:
        chosen_style = style_name or "friendly"
        try:
            self._pygments_formatter = HtmlFormatter(style=chosen_style)
        except ClassNotFound:
            logger.warning("Unknown Pygments style %r; using friendly", chosen_style)
            self._pygments_formatter = HtmlFormatter(style="friendly")
        self._pygments_format_cache: dict[str, QTextCharFormat] = {}
        self._pygments_lexer_cache: dict[str, object] = {}

    def set_pygments_style(self, style_name: str) -> None:
        self._init_pygments(style_name)
        self._refresh_display(self.textCursor().position())

    def font_point_size(self) -> int:
        return round(self._font_scale * BASE_SIZE)

    def set_font_point_size(self, size: int) -> None:
        self._font_scale = max(6, int(size)) / BASE_SIZE
        self._format_cache.clear()
        self._pygments_format_cache.clear()
        self._refresh_display(self.textCursor().position())

    def _lexer_for_language(self, lang: str):
        cache_key = lang.lower()
        if cache_key in self._pygments_lexer_cache:
            return self._pygments_lexer_cache[cache_key]
        try:
            lexer = get_lexer_by_name(cache_key, stripnl=False) if cache_key else TextLexer(stripnl=False)
        except ClassNotFound:
            lexer = TextLexer(stripnl=False)
        self._pygments_lexer_cache[cache_key] = lexer
        return lexer

    def _format_for_token(self, token, base: QTextCharFormat) -> QTextCharFormat:
        key = str(token)
        fmt = self._pygments_format_cache.get(key)
        if fmt:
            return fmt
        style = self._pygments_formatter.style.style_for_token(token)
        fmt = QTextCharFormat(base)
        if style.get("color"):
            fmt.setForeground(QColor(f"#{style['color']}"))
        if style.get("bold"):
            fmt.setFontWeight(QFont.Weight.Bold)
        if style.get("italic"):
            fmt.setFontItalic(True)
        if style.get("underline"):
            fmt.setFontUnderline(True)
        self._pygments_format_cache[key] = fmt
        return fmt

    # --- public API -------------------------------------------------------

    def set_markdown(self, text: str) -> None:
        self.session.load(text)
        self._refresh_display(0)
        self.markdownChanged.emit(self.session.source)

    def to_markdown(self) -> str:
        return self.session.source

    def toggle_inline_style(self, style: InlineStyle) -> bool:
        return self._apply_style(lambda index, selection: self.session.toggle_inline_style(style, index, selection))

    def toggle_line_style(self, style: LineStyle) -> bool:
        return self._apply_style(lambda index, selection: self.session.toggle_line_style(style, index, selection))

    def toggle_task_at_cursor(self) -> bool:
        """Flip the checkbox of the task on the caret line, if there is one."""
        line, _ = offset_to_line_column(self.toPlainText(), self.textCursor().position())
        index = task_index_for_line(self.session.source, line)
        if index is None or not self.session.toggle_task(index):
            return False
        self._refresh_display(self.textCursor().position())
        self.markdownChanged.emit(self.session.source)
        return True

    # --- coordinates ------------------------------------------------------

    def _display_to_source(self, position: int) -> int:
        line, column = offset_to_line_column(self.toPlainText(), position)
        return line_column_to_offset(self.session.source, line, column)

    def _source_to_display(self, offset: int) -> int:
        line, column = offset_to_line_column(self.session.source, offset)
        return line_column_to_offset(self.session.projection().text, line, column)

    def _caret_block(self) -> BlockCaret:
        return self.session.locate(self._display_to_source(self.textCursor().position()))

    # --- rendering --------------------------------------------------------

    def _refresh_display(self, display_caret: int, anchor: Optional[int] = None) -> None:
        projection = self.session.projection()
        self._display_guard = True
        try:
            self.setPlainText(projection.text)
            self._apply_projection_formats(projection)
            length = utf16_len(projection.text)
            cursor = self.textCursor()
            if anchor is not None:
                cursor.setPosition(max(0, min(anchor, length)))
                cursor.setPosition(max(0, min(display_caret, length)), QTextCursor.MoveMode.KeepAnchor)
            else:
                cursor.setPosition(max(0, min(display_caret, length)))
            self.setTextCursor(cursor)
        finally:
            self._display_guard = False

    def _char_format(self, style: TextStyle) -> QTextCharFormat:
        cached = self._format_cache.get(style)
        if cached is not None:
            return cached
        fmt = QTextCharFormat()
        fmt.setFontPointSize(style.size * self._font_scale)
        fmt.setFontWeight(FONT_WEIGHTS.get(style.weight, QFont.Weight.Normal))
        fmt.setFontItalic(style.italic)
        fmt.setFontUnderline(style.underline)
        fmt.setFontStrikeOut(style.strikethrough)
        if style.monospace:
            fmt.setFontFamilies([self._mono_family])
        fmt.setForeground(QColor(FOREGROUND_COLORS.get(style.foreground, FOREGROUND_COLORS["text"])))
        if style.background in BACKGROUND_COLORS:
            fmt.setBackground(QColor(BACKGROUND_COLORS[style.background]))
        if style.link:
            fmt.setAnchor(True)
            fmt.setAnchorHref(style.link)
        self._format_cache[style] = fmt
        return fmt

    def _apply_projection_formats(self, projection: Projection) -> None:
        document = self.document()
        cursor = QTextCursor(document)
        cursor.beginEditBlock()
        for number, line in enumerate(projection.lines):
            block = document.findBlockByNumber(number)
            if not block.isValid():
                break
            block_format = QTextBlockFormat()
            block_format.setTopMargin(line.paragraph.spacing_before)
            block_format.setBottomMargin(line.paragraph.spacing_after)
            if line.paragraph.head_indent:
                block_format.setLeftMargin(line.paragraph.head_indent)
                block_format.setTextIndent(-line.paragraph.head_indent)
            cursor.setPosition(block.position())
            cursor.setBlockFormat(block_format)
            offset = block.position()
            for run in line.runs:
                length = utf16_len(run.text)
                if length:
                    cursor.setPosition(offset)
                    cursor.setPosition(offset + length, QTextCursor.MoveMode.KeepAnchor)
                    cursor.setCharFormat(self._char_format(run.style))
                offset += length
        self._highlight_code_lines(projection, cursor)
        cursor.endEditBlock()

    def _highlight_code_lines(self, projection: Projection, cursor: QTextCursor) -> None:
        """Colour rendered fenced-code lines with the configured Pygments style."""
        source_lines = self.session.source.split("\n")
        fence = FenceTracker()
        language = ""
        run: list[int] = []
        for number, line in enumerate(source_lines):
            token = fence.feed(line)
            if token is not None and not fence.is_open:
                self._highlight_run(run, language, projection, cursor)
                run = []
            elif token is not None and fence.opening is token:
                language = token.info.split()[0] if token.info else ""
            elif fence.is_open and number < len(projection.lines) and projection.lines[number].kind == "code":
                run.append(number)
        self._highlight_run(run, language, projection, cursor)

    def _highlight_run(self, numbers: list[int], language: str, projection: Projection, cursor: QTextCursor) -> None:
        if not numbers or not language:
            return
        lexer = self._lexer_for_language(language)
        code = "\n".join(projection.lines[number].text for number in numbers)
        base = self._char_format(projection.lines[numbers[0]].runs[0].style)
        document = self.document()
        line_idx = 0
        col = 0
        for token_type, value in lex(code, lexer):
            remaining = value
            while remaining:
                newline = remaining.find("\n")
                if newline == -1:
                    part, remaining = remaining, ""
                else:
                    part, remaining = remaining[:newline], remaining[newline + 1 :]
                if line_idx >= len(numbers):
                    return
                if part:
                    start = document.findBlockByNumber(numbers[line_idx]).position() + col
                    cursor.setPosition(start)
                    cursor.setPosition(start + utf16_len(part), QTextCursor.MoveMode.KeepAnchor)
                    cursor.setCharFormat(self._format_for_token(token_type, base))
                    col += utf16_len(part)
                if newline != -1:
                    line_idx += 1
                    col = 0

    # --- signal handlers --------------------------------------------------

    def _on_text_changed(self) -> None:
        result = self.session.host_text_changed(
            self.toPlainText(), self.textCursor().position(), internal=self._display_guard
        )
        if result is None:
            return
        if _DETAILED_LOGGING:
            logger.debug("Display edit synced; source_changed=%s caret=%d", result.source_changed, result.caret)
        self._refresh_display(result.caret)
        self._update_active_block()
        if result.source_changed:
            self.markdownChanged.emit(result.source)

    def _on_cursor_moved(self) -> None:
        if self._display_guard:
            return
        self._update_active_block()

    def _update_active_block(self) -> None:
        cursor = self.textCursor()
        if cursor.hasSelection():
            return
        source_caret = self._display_to_source(cursor.position())
        caret = self.session.locate(source_caret)
        if caret.block_index == self.session.active_block:
            return
        self.session.activate_block(caret.block_index)
        self._refresh_display(self._source_to_display(source_caret))

    def focusOutEvent(self, event):  # type: ignore[override]
        active = self.session.active_block
        if active is not None and self.session.end_block_editing(active):
            self._refresh_display(self.textCursor().position())
        super().focusOutEvent(event)

    # --- key handling -----------------------------------------------------

    def keyPressEvent(self, event):  # type: ignore[override]
        modifiers = event.modifiers()
        key = event.key()
        if modifiers == Qt.ControlModifier:
            if key in INLINE_SHORTCUTS:
                self.toggle_inline_style(INLINE_SHORTCUTS[key])
                event.accept()
                return
            if key in HEADING_SHORTCUTS:
                self.toggle_line_style(LineStyle.heading(HEADING_SHORTCUTS[key]))
                event.accept()
                return
            if key in (Qt.Key_Return, Qt.Key_Enter):
                self.toggle_task_at_cursor()
                event.accept()
                return
        if modifiers == (Qt.ControlModifier | Qt.ShiftModifier):
            if key == Qt.Key_X:
                self.toggle_inline_style(InlineStyle.STRIKETHROUGH)
                event.accept()
                return
            if key in SHIFTED_LINE_SHORTCUTS:
                self.toggle_line_style(SHIFTED_LINE_SHORTCUTS[key])
                event.accept()
                return
        if key in (Qt.Key_Return, Qt.Key_Enter) and modifiers in (Qt.NoModifier, Qt.KeypadModifier):
            if self._handle_return():
                event.accept()
                return
        if key == Qt.Key_Backspace and modifiers == Qt.NoModifier:
            if self._handle_backspace():
                event.accept()
                return
        super().keyPressEvent(event)

    def _handle_return(self) -> bool:
        if self.textCursor().hasSelection():
            return False
        source_offset = self._display_to_source(self.textCursor().position())
        line, _ = offset_to_line_column(self.session.source, source_offset)
        if is_separator_line(self.session.source, line):
            return False
        caret = self.session.locate(source_offset)
        result = self.session.press_return(caret.block_index, caret.offset)
        if result is None:
            return False
        self._refresh_display(self._source_to_display(self.session.document_offset(result)))
        self.markdownChanged.emit(self.session.source)
        return True

    def _handle_backspace(self) -> bool:
        if self.textCursor().hasSelection():
            return False
        caret = self._caret_block()
        result = self.session.press_backspace(caret.block_index, caret.offset)
        if result is None:
            return False
        self._refresh_display(self._source_to_display(self.session.document_offset(result)))
        self.markdownChanged.emit(self.session.source)
        return True

    def _apply_style(self, apply) -> bool:
        cursor = self.textCursor()
        start = self._display_to_source(cursor.selectionStart())
        end = self._display_to_source(cursor.selectionEnd())
        caret = self.session.locate(start)
        block_start = self.session.document_offset(BlockCaret(caret.block_index, 0))
        length = max(0, end - start)
        selection = apply(caret.block_index, TextRange(caret.offset, length))
        if selection is None:
            return False
        self.session.activate_block(caret.block_index)
        anchor = self._source_to_display(block_start + selection.location)
        position = self._source_to_display(block_start + selection.end)
        self._refresh_display(position, anchor=anchor if selection.length else None)
        self.markdownChanged.emit(self.session.source)
        return True
