import pytest
from PySide6.QtCore import Qt
from PySide6.QtGui import QTextCursor
from PySide6.QtTest import QTest

from livemark.app import config
from livemark.app.ui.markdown_editor import LiveMarkdownEditor
from livemark.markdown.session import EditorSession
from livemark.markdown.styles import InlineStyle, LineStyle


@pytest.fixture
def editor(qapp, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "GLOBAL_CONFIG", tmp_path / "livemark_config.json")
    widget = LiveMarkdownEditor(session=EditorSession(""))
    yield widget
    widget.deleteLater()


def move_caret(editor, position):
    cursor = editor.textCursor()
    cursor.setPosition(position)
    editor.setTextCursor(cursor)


def test_set_markdown_shows_rendered_projection(editor):
    emitted = []
    editor.markdownChanged.connect(emitted.append)
    editor.set_markdown("# Title\n\n**bold** text")
    assert editor.toPlainText() == "Title\n\nbold text"
    assert editor.to_markdown() == "# Title\n\n**bold** text"
    assert emitted == ["# Title\n\n**bold** text"]


def test_caret_activates_block_as_raw(editor):
    editor.set_markdown("# Title\n\nbody")
    move_caret(editor, 2)
    assert editor.session.active_block == 0
    assert editor.toPlainText() == "# Title\n\nbody"


def test_bold_toggle_wraps_selection(editor):
    editor.set_markdown("hello world")
    cursor = editor.textCursor()
    cursor.setPosition(0)
    cursor.setPosition(5, QTextCursor.MoveMode.KeepAnchor)
    editor.setTextCursor(cursor)
    assert editor.toggle_inline_style(InlineStyle.BOLD)
    assert editor.to_markdown() == "**hello** world"
    assert editor.textCursor().selectedText() == "hello"


def test_heading_toggle(editor):
    editor.set_markdown("Title")
    assert editor.toggle_line_style(LineStyle.heading(2))
    assert editor.to_markdown() == "## Title"


def test_return_continues_list(editor):
    editor.set_markdown("- a")
    move_caret(editor, 3)
    QTest.keyClick(editor, Qt.Key_Return)
    assert editor.to_markdown() == "- a\n- "
    assert editor.textCursor().position() == 6


def test_typing_in_projection_updates_source(editor):
    editor.set_markdown("plain")
    move_caret(editor, 5)
    editor.insertPlainText("!")
    assert editor.to_markdown() == "plain!"


def test_task_toggle_at_cursor(editor):
    editor.set_markdown("- [ ] a")
    assert editor.toggle_task_at_cursor()
    assert editor.to_markdown() == "- [x] a"


def test_return_on_blank_separator_inserts_plain_line(editor):
    editor.set_markdown("- a\n\nb")
    move_caret(editor, 4)
    QTest.keyClick(editor, Qt.Key_Return)
    assert editor.to_markdown() == "- a\n\n\nb"
