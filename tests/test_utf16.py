from livemark.markdown.utf16 import (
    TextRange,
    clamp_offset,
    clamp_range,
    index_to_utf16,
    line_column_to_offset,
    offset_to_line_column,
    utf16_len,
    utf16_positions,
    utf16_to_index,
)


def test_surrogate_pairs_count_twice():
    assert utf16_len("a😀b") == 4
    assert utf16_positions("a😀b") == [0, 1, 3, 4]
    assert index_to_utf16("a😀b", 2) == 3


def test_offset_inside_surrogate_pair_rounds_down():
    assert utf16_to_index("a😀b", 2) == 1
    assert utf16_to_index("a😀b", 3) == 2
    assert utf16_to_index("a😀b", 99) == 3
    assert utf16_to_index("a😀b", -4) == 0


def test_clamping():
    assert clamp_offset("abc", 10) == 3
    assert clamp_offset("abc", -1) == 0
    assert clamp_range(TextRange(-2, 4), 10) == TextRange(0, 4)
    assert clamp_range(TextRange(8, 5), 10) == TextRange(8, 2)
    assert TextRange(2, 3).end == 5


def test_line_column_conversion():
    text = "ab\n😀c"
    assert offset_to_line_column(text, 5) == (1, 2)
    assert line_column_to_offset(text, 1, 2) == 5
    assert line_column_to_offset(text, 9, 99) == 6
    assert offset_to_line_column(text, 0) == (0, 0)
