from livemark.markdown.html_renderer import HtmlRenderer, escape_html, render_inline_html


def body(markdown):
    return HtmlRenderer().render_body(markdown)


def test_unordered_list_is_a_single_ul():
    html = body("- a\n- b\n- c")
    assert html.count("<ul>") == 1
    assert html.count("<li") == 3
    assert html.endswith("</ul>")


def test_ordered_list_and_nesting_indent():
    assert "<ol>" in body("1. one\n2. two")
    html = body("- a\n  - b")
    assert '<li style="margin-left:16px;">b</li>' in html


def test_task_indexes_run_across_the_document():
    html = body("- [ ] a\n\ntext\n\n- [x] b")
    assert '<input type="checkbox" data-task-index="0" />a' in html
    assert '<input type="checkbox" data-task-index="1" checked />b' in html


def test_text_is_escaped():
    assert body("a < b & c") == "<p>a &lt; b &amp; c</p>"
    assert escape_html('"x"') == "&quot;x&quot;"
    assert render_inline_html("`<br>`") == "<code>&lt;br&gt;</code>"


def test_inline_markup_and_links():
    html = render_inline_html("**b** *i* ~~s~~ [l](http://x.y)")
    assert "<strong>b</strong>" in html
    assert "<em>i</em>" in html
    assert "<del>s</del>" in html
    assert '<a href="http://x.y">l</a>' in html


def test_heading_ids_are_unique():
    html = body("# Intro\n\n# Intro")
    assert '<h1 id="intro">Intro</h1>' in html
    assert '<h1 id="intro-1">Intro</h1>' in html


def test_quote_lines_join_with_breaks():
    assert body("> one\n> two") == "<blockquote><p>one<br />two</p></blockquote>"


def test_table_alignment():
    html = body("| a | b |\n| :---: | ---: |\n| 1 | 2 |")
    assert '<th style="text-align:center;">a</th>' in html
    assert '<td style="text-align:right;">2</td>' in html


def test_unknown_language_falls_back_to_escaped_text():
    html = body("```nolang\n<x>\n```")
    assert html == '<pre><code class="language-nolang">&lt;x&gt;</code></pre>'


def test_known_language_is_highlighted_inline():
    html = body("```python\nprint(1)\n```")
    assert '<code class="language-python">' in html
    assert "style=" in html
    assert "print" in html


def test_rule_and_paragraph_join():
    assert body("---") == "<hr />"
    assert body("one\ntwo") == "<p>one two</p>"


def test_fragment_carries_render_key_and_css():
    html = HtmlRenderer().render_fragment("", render_key="7")
    assert 'data-render-key="7"' in html
    assert "overflow: hidden" in html
    assert ".markdown-body > :first-child { margin-top: 0 !important; }" in html
    assert ".markdown-body li { margin: 0.1em 0; }" in html


def test_full_document_scrolls():
    html = HtmlRenderer().render_document("# Doc")
    assert "overflow: auto" in html
    assert "data-render-key" not in html


def test_unknown_pygments_style_falls_back():
    renderer = HtmlRenderer("no-such-style")
    assert renderer.pygments_style == "friendly"


def test_heading_id_uses_displayed_text():
    assert '<h2 id="see-docs">' in body("## See [docs](http://x.y)")
