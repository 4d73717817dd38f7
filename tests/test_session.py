from livemark.markdown.session import DEFAULT_CONTENT, BlockCaret, EditorSession
from livemark.markdown.styles import InlineStyle, LineStyle
from livemark.markdown.utf16 import TextRange


def test_default_document_loads():
    session = EditorSession()
    assert session.source == DEFAULT_CONTENT
    assert len(session.tasks) == 3
    assert session.projection().rendered_lines[0] == "Livemark Markdown Demo"


def test_list_enter_continues_in_same_block():
    session = EditorSession("- a")
    caret = session.press_return(0, 3)
    assert session.source == "- a\n- "
    assert caret == BlockCaret(0, 6)
    assert session.active_block == 0


def test_enter_on_empty_item_leaves_list():
    session = EditorSession("- a\n- ")
    caret = session.press_return(0, 6)
    assert session.blocks == ["- a", ""]
    assert caret == BlockCaret(1, 0)


def test_enter_on_lone_empty_marker_keeps_empty_block():
    session = EditorSession("- ")
    caret = session.press_return(0, 2)
    assert session.source == ""
    assert caret == BlockCaret(0, 0)


def test_paragraph_enter_inserts_block_and_shifts_heights():
    session = EditorSession("Hello")
    session.set_block_height(0, 10.0)
    session.set_block_height(1, 20.0)
    caret = session.press_return(0, 5)
    assert session.blocks == ["Hello", ""]
    assert caret == BlockCaret(1, 0)
    assert session.heights == {0: 10.0, 2: 20.0}


def test_fence_enter_completes_closing_fence():
    session = EditorSession("```py")
    caret = session.press_return(0, 5)
    assert session.source == "```py\n\n```"
    assert caret == BlockCaret(0, 6)


def test_enter_in_middle_is_left_to_host():
    session = EditorSession("Hello")
    assert session.press_return(0, 2) is None
    assert session.press_return(4, 0) is None
    assert session.source == "Hello"


def test_backspace_merges_blocks():
    session = EditorSession("one\n\ntwo\n\nthree")
    session.heights = {0: 1.0, 1: 2.0, 2: 3.0}
    caret = session.press_backspace(1, 0)
    assert session.blocks == ["one\ntwo", "three"]
    assert caret == BlockCaret(0, 4)
    assert session.heights == {0: 1.0, 1: 3.0}
    assert session.press_backspace(0, 0) is None
    assert session.press_backspace(1, 2) is None


def test_active_block_renders_raw():
    session = EditorSession("# A\n\n# B")
    session.activate_block(1)
    assert session.projection().rendered_lines == ["A", "", "# B"]
    assert not session.end_block_editing(0)
    assert session.end_block_editing(1)
    assert session.active_block is None
    assert session.projection().rendered_lines == ["A", "", "B"]


def test_activate_block_clamps():
    session = EditorSession("a\n\nb")
    session.activate_block(9)
    assert session.active_block == 1


def test_locate_and_document_offset():
    session = EditorSession("ab\n\ncd")
    caret = session.locate(5)
    assert caret == BlockCaret(1, 1)
    assert session.document_offset(caret) == 5


def test_style_toggles():
    session = EditorSession("hello world\n\nnext")
    selection = session.toggle_inline_style(InlineStyle.BOLD, 0, TextRange(0, 5))
    assert session.source == "**hello** world\n\nnext"
    assert selection == TextRange(2, 5)
    session.toggle_line_style(LineStyle.heading(2), 1, TextRange(0, 0))
    assert session.blocks[1] == "## next"
    assert session.toggle_inline_style(InlineStyle.BOLD, 5, TextRange(0, 0)) is None


def test_toggle_task_is_document_wide():
    session = EditorSession("- [ ] a\n\n- [ ] b")
    assert session.toggle_task(1)
    assert session.source == "- [ ] a\n\n- [x] b"
    assert not session.toggle_task(5)


def test_load_resets_state():
    session = EditorSession("a\n\nb")
    session.activate_block(1)
    session.set_block_height(0, 3.0)
    session.load("# New")
    assert session.source == "# New"
    assert session.active_block is None
    assert session.heights == {}


def test_projection_edit_updates_source():
    session = EditorSession("**bold** text")
    result = session.host_text_changed("bold text!", 10)
    assert result.source_changed
    assert session.source == "bold text!"


def test_html_outputs():
    session = EditorSession("- [x] done")
    assert 'data-render-key="3"' in session.html("3")
    assert 'data-task-index="0" checked' in session.html_document()


def test_enter_inside_unterminated_fence_is_left_to_host():
    session = EditorSession("```py\nx = 1")
    session.set_block_height(0, 5.0)
    assert session.press_return(0, 11) is None
    assert session.source == "```py\nx = 1"
    assert session.heights == {0: 5.0}


def test_backspace_over_extra_blank_line_keeps_heights():
    session = EditorSession("a\n\n\nb")
    session.heights = {0: 1.0, 1: 2.0}
    caret = session.press_backspace(1, 0)
    assert session.blocks == ["a", "b"]
    assert session.heights == {0: 1.0, 1: 2.0}
    assert session.document_offset(caret) == 2
