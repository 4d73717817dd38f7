from livemark.markdown.tables import (
    Alignment,
    align_cell,
    display_width,
    format_table_divider,
    format_table_row,
    make_empty_table_row,
    parse_alignments,
    parse_table_block,
    parse_table_row,
)


def test_parse_row_with_boundary_pipes():
    row = parse_table_row("  | a | b |")
    assert row is not None
    assert row.cells == ("a", "b")
    assert row.indent == "  "
    assert not row.is_separator_row


def test_parse_row_without_boundary_pipes():
    row = parse_table_row("Name | Value")
    assert row is not None
    assert row.cells == ("Name", "Value")


def test_stray_pipe_is_not_a_row():
    assert parse_table_row("a|b") is None
    assert parse_table_row("| only |") is None


def test_separator_and_empty_rows():
    assert parse_table_row("| --- | :---: |").is_separator_row
    assert not parse_table_row("| -- | -- |").is_separator_row
    assert parse_table_row("|  |  |").is_all_empty


def test_parse_alignments():
    assert parse_alignments("| --- | :---: | ---: | :--- |") == [
        Alignment.LEFT,
        Alignment.CENTER,
        Alignment.RIGHT,
        Alignment.LEFT,
    ]
    assert parse_alignments("| -- | --- |") is None


def test_parse_table_block_pads_short_rows():
    lines = ["| a | b | c |", "| --- | --- |", "| 1 |  |", "| 1 | 2 | 3 | 4 |", "after"]
    table = parse_table_block(lines, 0)
    assert table is not None
    assert table.next_index == 4
    assert table.column_count == 4
    assert table.padded_header() == ["a", "b", "c", ""]
    assert table.padded_rows()[0] == ["1", "", "", ""]
    assert table.padded_alignments()[3] is Alignment.LEFT


def test_parse_table_block_requires_valid_separator():
    assert parse_table_block(["| a | c |", "| -- | -- |"], 0) is None
    assert parse_table_block(["| a | c |"], 0) is None


def test_table_scan_stops_at_fence():
    lines = ["| a | b |", "| --- | --- |", "| 1 | 2 |", "```", "| x | y |"]
    assert parse_table_block(lines, 0).next_index == 3


def test_make_empty_table_row():
    assert make_empty_table_row(2) == "|  |  |"
    assert make_empty_table_row(0) == ""


def test_display_width_counts_wide_characters_twice():
    assert display_width("abc") == 3
    assert display_width("中文") == 4
    assert display_width("é") == 1


def test_grid_formatting():
    widths = [5, 5]
    aligns = [Alignment.LEFT, Alignment.RIGHT]
    assert format_table_row(["Name", "18"], widths, aligns) == "| Name  |    18 |"
    assert format_table_divider(widths, [Alignment.CENTER, Alignment.RIGHT]) == "| :---: | ----: |"
    assert align_cell("ab", 6, Alignment.CENTER) == "  ab  "


def test_column_widths_have_minimum_of_three():
    table = parse_table_block(["| a | Value |", "| --- | --- |", "| 1 | 2 |"], 0)
    assert table.column_widths() == [3, 5]


def test_list_item_ends_table_body():
    lines = ["| h | i |", "| --- | --- |", "| 1 | 2 |", "- [ ] a | b"]
    assert parse_table_block(lines, 0).next_index == 3
