"""Markdown to self-contained HTML for the preview pane."""

from __future__ import annotations

import logging
from dataclasses import replace
from string import Template
from typing import Optional

from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .blocks import parse_fence_token
from .classify import (
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
from .heading_utils import unique_heading_slug
from .inline import BOLD, CODE, ITALIC, LINK, STRIKE, parse_inline, strip_inline
from .render_timer import RenderTimer
from .tables import TableBlock, parse_table_block

logger = logging.getLogger(__name__)

DEFAULT_PYGMENTS_STYLE = "friendly"

_PAGE = Template(
    """<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <style>
    :root {
      --text-primary: #111827;
      --text-secondary: #4b5563;
      --accent-color: #0b74ff;
      --border-color: #d1d5db;
      --bg: #ffffff;
    }
    html, body {
      margin: 0;
      padding: 0;
      background: var(--bg);
      color: var(--text-primary);
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
      overflow: $overflow;
    }
    .page {
      max-width: $width;
      margin: 0 auto;
      padding: $padding;
    }
    .markdown-body {
      display: flow-root;
      line-height: 1.58;
      word-wrap: break-word;
      overflow-wrap: break-word;
      font-size: 16px;
    }
    .markdown-body > :first-child { margin-top: 0 !important; }
    .markdown-body > :last-child { margin-bottom: 0 !important; }
    .markdown-body p { margin: 0 0 0.55em; }
    .markdown-body h1,
    .markdown-body h2,
    .markdown-body h3,
    .markdown-body h4,
    .markdown-body h5,
    .markdown-body h6 {
      margin: 0.65em 0 0.25em;
      font-weight: 600;
      line-height: 1.3;
    }
    .markdown-body h1 { font-size: 1.3em; }
    .markdown-body h2 { font-size: 1.15em; }
    .markdown-body h3 { font-size: 1.05em; }
    .markdown-body h4,
    .markdown-body h5,
    .markdown-body h6 { font-size: 1em; }
    .markdown-body ul,
    .markdown-body ol {
      margin: 0.25em 0;
      padding-left: 1.35em;
    }
    .markdown-body li { margin: 0.1em 0; }
    .markdown-body li:last-child { margin-bottom: 0; }
    .markdown-body blockquote {
      margin: 0.45em 0;
      padding: 0.42em 0.9em;
      border-left: 3px solid var(--accent-color);
      background: rgba(11, 116, 255, 0.05);
      color: var(--text-secondary);
    }
    .markdown-body blockquote p { margin: 0; }
    .markdown-body code {
      background: rgba(0, 0, 0, 0.06);
      padding: 2px 6px;
      border-radius: 4px;
      font-size: 0.88em;
      font-family: 'Fira Code', 'Consolas', monospace;
    }
    .markdown-body pre {
      margin: 0.45em 0;
      padding: 14px 16px;
      background: #f6f8fa;
      border-radius: 10px;
      overflow-x: auto;
      font-size: 0.84em;
      line-height: 1.5;
    }
    .markdown-body pre code {
      background: none;
      padding: 0;
      font-size: inherit;
    }
    .markdown-body table {
      width: 100%;
      border-collapse: collapse;
      margin: 0.55em 0;
      font-size: 0.9em;
    }
    .markdown-body th,
    .markdown-body td {
      padding: 8px 12px;
      border: 1px solid var(--border-color);
      vertical-align: top;
    }
    .markdown-body th {
      background: rgba(0, 0, 0, 0.03);
      font-weight: 600;
    }
    .markdown-body hr {
      margin: 0.75em 0;
      border: none;
      border-top: 1px solid var(--border-color);
    }
    .markdown-body a {
      color: var(--accent-color);
      text-decoration: none;
    }
    .markdown-body strong { font-weight: 600; }
    .markdown-body input[type='checkbox'] {
      margin-right: 8px;
    }
  </style>
</head>
<body$body_attr>
  <main class="page">
    <article class="markdown-body">$body</article>
  </main>
</body>
</html>
"""
)


def escape_html(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


_INLINE_TAGS = {BOLD: "strong", ITALIC: "em", STRIKE: "del", CODE: "code"}


def render_inline_html(text: str) -> str:
    parts = []
    for span in parse_inline(text):
        body = escape_html(span.text)
        if span.kind == LINK:
            parts.append(f'<a href="{escape_html(span.href or "")}">{body}</a>')
        elif span.kind in _INLINE_TAGS:
            tag = _INLINE_TAGS[span.kind]
            parts.append(f"<{tag}>{body}</{tag}>")
        else:
            parts.append(body)
    return "".join(parts)


class HtmlRenderer:
    """Renders markdown into an HTML body or a complete page.

    Task checkboxes are numbered across the whole input, so
    ``data-task-index`` matches the visible index used for toggling.
    """

    def __init__(self, pygments_style: Optional[str] = None) -> None:
        self.pygments_style = pygments_style or DEFAULT_PYGMENTS_STYLE
        try:
            self._formatter = HtmlFormatter(nowrap=True, noclasses=True, style=self.pygments_style)
        except ClassNotFound:
            logger.warning("Unknown Pygments style %r; using %s", self.pygments_style, DEFAULT_PYGMENTS_STYLE)
            self.pygments_style = DEFAULT_PYGMENTS_STYLE
            self._formatter = HtmlFormatter(nowrap=True, noclasses=True, style=DEFAULT_PYGMENTS_STYLE)

    def render_document(self, markdown: str) -> str:
        return self._page(self.render_body(markdown), fragment=False, render_key=None)

    def render_fragment(self, markdown: str, render_key: Optional[str] = None) -> str:
        return self._page(self.render_body(markdown or " "), fragment=True, render_key=render_key)

    def _page(self, body: str, fragment: bool, render_key: Optional[str]) -> str:
        body_attr = f' data-render-key="{escape_html(render_key)}"' if render_key is not None else ""
        return _PAGE.substitute(
            overflow="hidden" if fragment else "auto",
            width="100%" if fragment else "920px",
            padding="0" if fragment else "30px 56px 44px",
            body_attr=body_attr,
            body=body,
        )

    def render_body(self, markdown: str) -> str:
        timer = RenderTimer("html")
        lines = markdown.split("\n")
        html: list[str] = []
        slugs: dict[str, int] = {}
        task_counter = 0
        index = 0
        while index < len(lines):
            line = lines[index]
            kind = classify_line(line)
            if isinstance(kind, Fence):
                index = self._code_block(lines, index, kind, html)
                continue
            if isinstance(kind, Blank):
                index += 1
                continue
            if isinstance(kind, Rule):
                html.append("<hr />")
                index += 1
                continue
            if isinstance(kind, Heading):
                level = min(kind.level, 6)
                slug = unique_heading_slug(strip_inline(kind.text), slugs)
                html.append(f'<h{level} id="{escape_html(slug)}">{render_inline_html(kind.text)}</h{level}>')
                index += 1
                continue
            if isinstance(kind, TableRowLine):
                table = parse_table_block(lines, index)
                if table is not None:
                    html.append(self._table(table))
                    index = table.next_index
                    continue
            if isinstance(kind, Quote):
                quoted = []
                while index < len(lines):
                    current = classify_line(lines[index])
                    if not isinstance(current, Quote):
                        break
                    quoted.append(render_inline_html(current.text))
                    index += 1
                html.append(f"<blockquote><p>{'<br />'.join(quoted)}</p></blockquote>")
                continue
            if isinstance(kind, ListItem):
                index, task_counter = self._list(lines, index, task_counter, html)
                continue
            paragraph = []
            while index < len(lines):
                current = classify_line(lines[index])
                if isinstance(current, Paragraph):
                    paragraph.append(current.text)
                elif isinstance(current, TableRowLine) and parse_table_block(lines, index) is None:
                    paragraph.append(lines[index].strip())
                else:
                    break
                index += 1
            html.append(f"<p>{render_inline_html(' '.join(paragraph))}</p>")
        timer.end(f"html lines={len(lines)}")
        return "\n".join(html)

    def _code_block(self, lines: list[str], index: int, kind: Fence, html: list[str]) -> int:
        body: list[str] = []
        scan = index + 1
        while scan < len(lines):
            token = parse_fence_token(lines[scan])
            if token is not None and token.closes(kind.token):
                scan += 1
                break
            body.append(lines[scan])
            scan += 1
        language = kind.token.info.split()[0] if kind.token.info else ""
        lang_class = f' class="language-{escape_html(language)}"' if language else ""
        code = self.highlight_code("\n".join(body), language)
        html.append(f"<pre><code{lang_class}>{code}</code></pre>")
        return scan

    def highlight_code(self, code: str, language: str) -> str:
        """Inline-styled Pygments markup, or escaped text for unknown languages."""
        if not language or not code:
            return escape_html(code)
        try:
            lexer = get_lexer_by_name(language.lower(), stripnl=False)
        except ClassNotFound:
            logger.debug("No Pygments lexer for %s", language)
            return escape_html(code)
        # pygments always appends a trailing newline
        return highlight(code, lexer, self._formatter).rstrip("\n")

    def _table(self, table: TableBlock) -> str:
        aligns = [align.value for align in table.padded_alignments()]
        head = "".join(
            f'<th style="text-align:{align};">{render_inline_html(cell)}</th>'
            for cell, align in zip(table.padded_header(), aligns)
        )
        rows = []
        for row in table.padded_rows():
            cells = "".join(
                f'<td style="text-align:{align};">{render_inline_html(cell)}</td>'
                for cell, align in zip(row, aligns)
            )
            rows.append(f"<tr>{cells}</tr>")
        return f"<table><thead><tr>{head}</tr></thead><tbody>{''.join(rows)}</tbody></table>"

    def _list(self, lines: list[str], index: int, task_counter: int, html: list[str]) -> tuple[int, int]:
        items: list[ListItem] = []
        while index < len(lines):
            line = lines[index]
            kind = classify_line(line)
            if isinstance(kind, ListItem):
                items.append(kind)
            elif items and is_list_continuation(line) and not isinstance(kind, (Fence, Quote, Heading)):
                last = items[-1]
                items[-1] = replace(last, content=f"{last.content} {line.strip()}")
            else:
                break
            index += 1

        position = 0
        while position < len(items):
            ordered = items[position].ordered
            tag = "ol" if ordered else "ul"
            html.append(f"<{tag}>")
            while position < len(items) and items[position].ordered == ordered:
                item = items[position]
                depth = len(item.indent.expandtabs(4))
                style = f' style="margin-left:{depth * 8}px;"' if depth else ""
                content = render_inline_html(item.content)
                if item.is_task:
                    checked = " checked" if item.task else ""
                    html.append(
                        f'<li{style}><input type="checkbox" data-task-index="{task_counter}"{checked} />{content}</li>'
                    )
                    task_counter += 1
                else:
                    html.append(f"<li{style}>{content}</li>")
                position += 1
            html.append(f"</{tag}>")
        return index, task_counter
