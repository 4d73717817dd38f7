from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from pygments.styles import get_all_styles
from PySide6.QtCore import QByteArray, Qt
from PySide6.QtGui import QAction, QActionGroup, QKeySequence, QShortcut
from PySide6.QtWidgets import QApplication, QMainWindow, QSplitter

from livemark.app import config
from livemark.app.ui.markdown_editor import LiveMarkdownEditor
from livemark.app.ui.preview_panel import PreviewPanel

logger = logging.getLogger(__name__)


# LIVEMARK_DEBUG                   - DEBUG level logging for every module
# LIVEMARK_DETAILED_LOGGING        - caret/sync detail from the editor core
# LIVEMARK_DETAILED_RENDER_LOGGING - per-step render timings


def _debug_enabled(var_name: str) -> bool:
    """Check if a debug flag is enabled."""
    return os.getenv(var_name, "0") not in ("0", "false", "False", "", None)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Livemark live markdown editor.")
    parser.add_argument("path", nargs="?", help="Markdown file to open.")
    parser.add_argument("--no-preview", action="store_true", help="Start with the HTML preview hidden.")
    return parser.parse_args(argv)


class MainWindow(QMainWindow):
    def __init__(self, path: Optional[Path] = None, show_preview: bool = True) -> None:
        super().__init__()
        self.path = path
        self.editor = LiveMarkdownEditor(self)
        self.preview = PreviewPanel(self)
        self.splitter = QSplitter(Qt.Orientation.Horizontal, self)
        self.splitter.addWidget(self.editor)
        self.splitter.addWidget(self.preview)
        self.setCentralWidget(self.splitter)
        self.preview.setVisible(show_preview)
        self.editor.markdownChanged.connect(self.preview.schedule_render)
        QShortcut(QKeySequence.StandardKey.Save, self, activated=self.save)
        QShortcut(QKeySequence.StandardKey.ZoomIn, self, activated=lambda: self._adjust_font_size(1))
        QShortcut(QKeySequence.StandardKey.ZoomOut, self, activated=lambda: self._adjust_font_size(-1))
        self._build_view_menu()
        self._restore_layout()
        if path is not None:
            self.open(path)
        else:
            self.preview.render_now(self.editor.to_markdown())
        self._update_title()

    def open(self, path: Path) -> None:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            text = ""
        except OSError as exc:
            logger.error("Failed to open %s: %s", path, exc)
            return
        self.path = path
        self.editor.set_markdown(text)
        self.preview.render_now(text)
        config.save_last_file(str(path))
        self._update_title()

    def save(self) -> None:
        if self.path is None:
            logger.info("No file path; pass one on the command line to save")
            return
        try:
            self.path.write_text(self.editor.to_markdown(), encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to save %s: %s", self.path, exc)
            return
        logger.info("Saved %s", self.path)

    def _build_view_menu(self) -> None:
        menu = self.menuBar().addMenu("&View")
        styles_menu = menu.addMenu("Code Style")
        group = QActionGroup(self)
        current = config.load_pygments_style()
        for name in sorted(get_all_styles()):
            action = QAction(name, self, checkable=True)
            action.setChecked(name == current)
            action.triggered.connect(lambda _checked=False, style=name: self._set_code_style(style))
            group.addAction(action)
            styles_menu.addAction(action)
        menu.addAction("Zoom In", lambda: self._adjust_font_size(1))
        menu.addAction("Zoom Out", lambda: self._adjust_font_size(-1))

    def _set_code_style(self, style: str) -> None:
        self.editor.set_pygments_style(style)
        self.preview.set_pygments_style(style)
        config.save_pygments_style(style)

    def _adjust_font_size(self, delta: int) -> None:
        new_size = max(6, min(48, self.editor.font_point_size() + delta))
        if new_size == self.editor.font_point_size():
            return
        self.editor.set_font_point_size(new_size)
        config.save_editor_font_size(new_size)

    def _update_title(self) -> None:
        name = self.path.name if self.path else "Untitled"
        self.setWindowTitle(f"{name} - Livemark")

    def _restore_layout(self) -> None:
        geometry = config.load_window_geometry()
        if geometry:
            self.restoreGeometry(QByteArray.fromBase64(geometry.encode("ascii")))
        else:
            self.resize(1200, 800)
        sizes = config.load_splitter_sizes()
        if sizes:
            self.splitter.setSizes(sizes)

    def closeEvent(self, event):  # type: ignore[override]
        config.save_window_geometry(bytes(self.saveGeometry().toBase64()).decode("ascii"))
        config.save_splitter_sizes(self.splitter.sizes())
        config.save_preview_enabled(self.preview.isVisible())
        super().closeEvent(event)


def main() -> None:
    args = _parse_args(sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if _debug_enabled("LIVEMARK_DEBUG") else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config.init_settings()
    qt_app = QApplication(sys.argv)
    path = Path(args.path).expanduser() if args.path else None
    if path is None:
        last = config.load_last_file()
        if last and Path(last).exists():
            path = Path(last)
    window = MainWindow(path, show_preview=config.load_preview_enabled() and not args.no_preview)
    window.show()
    logger.info("Livemark started path=%s", path)
    sys.exit(qt_app.exec())


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
