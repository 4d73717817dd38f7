from livemark.markdown.renderer import (
    BULLET_GLYPH,
    CHECKED_GLYPH,
    QUOTE_GLYPH,
    RULE_GLYPH,
    RULE_WIDTH,
    MarkdownRenderer,
    heading_style,
)

SAMPLE = "\n".join(
    [
        "# Title",
        "",
        "- [x] done",
        "- item",
        "---",
        "```py",
        "x = 1",
        "```",
    ]
)


def test_projection_keeps_one_line_per_source_line():
    projection = MarkdownRenderer().render_projection(SAMPLE)
    assert len(projection.lines) == len(SAMPLE.split("\n"))
    assert projection.rendered_lines == [
        "Title",
        "",
        CHECKED_GLYPH + " done",
        BULLET_GLYPH + "item",
        RULE_GLYPH * RULE_WIDTH,
        "",
        "x = 1",
        "",
    ]
    assert [line.kind for line in projection.lines] == [
        "heading",
        "blank",
        "list",
        "list",
        "rule",
        "fence",
        "code",
        "fence",
    ]


def test_heading_runs_use_heading_style():
    line = MarkdownRenderer().render_projection("## Sub **bold**").lines[0]
    assert line.runs[0].style.size == heading_style(2).size
    assert line.runs[1].style.weight == "bold"


def test_heading_style_clamps_deep_levels():
    assert heading_style(8) == heading_style(6)
    assert heading_style(1).size == 30.0


def test_raw_lines_render_source_verbatim():
    projection = MarkdownRenderer().render_projection(SAMPLE, raw_lines={0, 2})
    assert projection.rendered_lines[0] == "# Title"
    assert projection.rendered_lines[2] == "- [x] done"
    assert projection.lines[0].kind == "raw"
    assert projection.lines[0].runs[0].style.monospace


def test_inner_fence_of_other_kind_stays_code():
    projection = MarkdownRenderer().render_projection("```\n~~~\n```")
    assert [line.kind for line in projection.lines] == ["fence", "code", "fence"]
    assert projection.rendered_lines[1] == "~~~"


def test_table_projection_is_an_aligned_grid():
    source = "| Name | Value |\n| --- | ---: |\n| Alice | 18 |"
    projection = MarkdownRenderer().render_projection(source)
    assert projection.rendered_lines == [
        "| Name  | Value |",
        "| ----- | ----: |",
        "| Alice |    18 |",
    ]


def test_quote_projection_prefixes_bar():
    projection = MarkdownRenderer().render_projection("> quoted *text*")
    assert projection.rendered_lines == [QUOTE_GLYPH + "quoted text"]
    assert projection.lines[0].runs[2].style.italic


def test_link_runs_carry_href():
    runs = MarkdownRenderer().render_inline("[site](https://example.com)")
    assert runs[0].text == "site"
    assert runs[0].style.link == "https://example.com"
    assert runs[0].style.underline


def test_render_document_groups_blocks():
    source = "Para one\nline two\n\n- a\n  more\n- b\n\n> q1\n> q2"
    blocks = MarkdownRenderer().render_document(source)
    assert [block.kind for block in blocks] == ["paragraph", "list", "quote"]
    assert blocks[0].lines[0].text == "Para one line two"
    assert blocks[1].lines[0].text == BULLET_GLYPH + "a more"
    assert len(blocks[1].lines) == 2
