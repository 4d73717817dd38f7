from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import QTextBrowser

from livemark.app import config
from livemark.markdown.html_renderer import HtmlRenderer
from livemark.markdown.sync import RenderTokens

logger = logging.getLogger(__name__)


class PreviewPanel(QTextBrowser):
    """Read-only HTML preview, re-rendered on a debounce after edits.

    Every scheduled render takes a fresh token; a result that arrives for
    an older token is dropped.
    """

    rendered = Signal(int)

    def __init__(
        self,
        parent=None,
        html_renderer: Optional[HtmlRenderer] = None,
        debounce_ms: Optional[int] = None,
    ) -> None:
        super().__init__(parent)
        self.html_renderer = html_renderer or HtmlRenderer(config.load_pygments_style())
        self.tokens = RenderTokens()
        self._pending: Optional[tuple[int, str]] = None
        self._last_markdown: Optional[str] = None
        self.last_html = ""
        self.setOpenExternalLinks(True)
        self._render_timer = QTimer(self)
        self._render_timer.setInterval(config.load_preview_debounce_ms() if debounce_ms is None else debounce_ms)
        self._render_timer.setSingleShot(True)
        self._render_timer.timeout.connect(self._render_pending)

    def schedule_render(self, markdown: str) -> int:
        token = self.tokens.next_token()
        self._pending = (token, markdown)
        self._render_timer.start()
        return token

    def render_now(self, markdown: str) -> int:
        self._render_timer.stop()
        token = self.tokens.next_token()
        self._pending = (token, markdown)
        self._render_pending()
        return token

    def _render_pending(self) -> None:
        if self._pending is None:
            return
        token, markdown = self._pending
        self._pending = None
        self._last_markdown = markdown
        self.deliver(token, self.html_renderer.render_fragment(markdown, render_key=str(token)))

    def set_pygments_style(self, style_name: str) -> None:
        self.html_renderer = HtmlRenderer(style_name)
        if self._last_markdown is not None:
            self.render_now(self._last_markdown)

    def deliver(self, token: int, html: str) -> bool:
        """Show ``html`` if ``token`` is still current; stale results are discarded."""
        if not self.tokens.is_current(token):
            logger.debug("Dropping stale preview render token=%d current=%d", token, self.tokens.current)
            return False
        self.last_html = html
        self.setHtml(html)
        self.rendered.emit(token)
        return True
