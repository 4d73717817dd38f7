import pytest

from livemark.app.ui.preview_panel import PreviewPanel
from livemark.markdown.html_renderer import HtmlRenderer


@pytest.fixture
def panel(qapp):
    widget = PreviewPanel(html_renderer=HtmlRenderer(), debounce_ms=0)
    yield widget
    widget.deleteLater()


def test_render_now_sets_html(panel):
    rendered = []
    panel.rendered.connect(rendered.append)
    token = panel.render_now("# Hi")
    assert '<h1 id="hi">Hi</h1>' in panel.last_html
    assert f'data-render-key="{token}"' in panel.last_html
    assert rendered == [token]


def test_stale_render_is_dropped(panel):
    first = panel.schedule_render("old")
    second = panel.schedule_render("new")
    assert not panel.deliver(first, "<p>old</p>")
    assert panel.last_html == ""
    assert panel.deliver(second, "<p>new</p>")
    assert panel.last_html == "<p>new</p>"


def test_pending_render_uses_latest_markdown(panel):
    panel.schedule_render("first")
    panel.schedule_render("second")
    panel._render_pending()
    assert "<p>second</p>" in panel.last_html
    assert "<p>first</p>" not in panel.last_html
