import pytest

from livemark.markdown.classify import (
    Blank,
    Fence,
    Heading,
    ListItem,
    Paragraph,
    Quote,
    Rule,
    TableRowLine,
    classify_line,
    is_list_continuation,
)


def test_fence_wins_over_everything():
    kind = classify_line("```python")
    assert isinstance(kind, Fence)
    assert kind.token.char == "`"
    assert kind.token.info == "python"


@pytest.mark.parametrize("line", ["", "   ", "\t"])
def test_blank_lines(line):
    assert isinstance(classify_line(line), Blank)


@pytest.mark.parametrize("line", ["---", "***", "___", "  ---  "])
def test_rules(line):
    assert isinstance(classify_line(line), Rule)


def test_heading_needs_space_after_hashes():
    assert classify_line("## Title  ") == Heading(2, "Title")
    assert classify_line("#hashtag") == Paragraph("#hashtag")


def test_nested_quote():
    kind = classify_line("> > nested")
    assert isinstance(kind, Quote)
    assert kind.prefix == "> > "
    assert kind.text == "nested"


def test_task_list_item():
    kind = classify_line("- [x] done")
    assert isinstance(kind, ListItem)
    assert kind.is_task and kind.task is True
    assert kind.content == "done"
    assert not kind.ordered


def test_ordered_list_item():
    kind = classify_line("  3. step")
    assert kind == ListItem("  ", "3.", "step", ordered=True, number=3)


def test_table_row_versus_stray_pipe():
    assert isinstance(classify_line("| a | b |"), TableRowLine)
    assert classify_line("a|b") == Paragraph("a|b")
    assert classify_line("-not a list") == Paragraph("-not a list")


def test_list_continuation():
    assert is_list_continuation("  more text")
    assert is_list_continuation("\tmore text")
    assert not is_list_continuation("more text")
    assert not is_list_continuation("   ")
