from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

GLOBAL_CONFIG = Path.home() / ".livemark_config.json"


def init_settings() -> None:
    GLOBAL_CONFIG.parent.mkdir(parents=True, exist_ok=True)


def _read_global_config() -> dict:
    """Return the parsed global config, or an empty dict on error/missing."""
    if not GLOBAL_CONFIG.exists():
        return {}
    try:
        payload = json.loads(GLOBAL_CONFIG.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _update_global_config(updates: dict) -> None:
    """Merge updates into global config file."""
    existing = _read_global_config()
    existing.update(updates)
    GLOBAL_CONFIG.write_text(json.dumps(existing, indent=2), encoding="utf-8")


def load_pygments_style(default: str = "friendly") -> str:
    """Load preferred Pygments style for code fences in the preview."""
    payload = _read_global_config()
    style = payload.get("pygments_style")
    if isinstance(style, str) and style.strip():
        return style.strip()
    return default


def save_pygments_style(style: str) -> None:
    """Persist preferred Pygments style."""
    _update_global_config({"pygments_style": style})


def load_editor_font_size(default: int = 16) -> int:
    """Return preferred editor base font size."""
    payload = _read_global_config()
    size = payload.get("editor_font_size")
    try:
        return max(6, int(size))
    except (TypeError, ValueError):
        return max(6, int(default))


def save_editor_font_size(size: int) -> None:
    try:
        value = max(6, int(size))
    except (TypeError, ValueError):
        value = 16
    _update_global_config({"editor_font_size": value})


def load_preview_debounce_ms() -> int:
    """Load preview render debounce delay in milliseconds (default: 150)."""
    payload = _read_global_config()
    try:
        ms = int(payload.get("preview_debounce_ms", 150))
        return max(0, min(5000, ms))
    except (TypeError, ValueError):
        return 150


def load_preview_enabled() -> bool:
    """Load HTML preview pane visibility (default: True)."""
    payload = _read_global_config()
    return bool(payload.get("preview_enabled", True))


def save_preview_enabled(enabled: bool) -> None:
    _update_global_config({"preview_enabled": bool(enabled)})


def load_last_file() -> Optional[str]:
    payload = _read_global_config()
    last = payload.get("last_file")
    return last if isinstance(last, str) and last.strip() else None


def save_last_file(path: Optional[str]) -> None:
    _update_global_config({"last_file": path})


def load_window_geometry() -> Optional[str]:
    """Return the saved main window geometry (base64 encoded), if any."""
    payload = _read_global_config()
    geometry = payload.get("window_geometry")
    return geometry if isinstance(geometry, str) and geometry else None


def save_window_geometry(geometry: str) -> None:
    _update_global_config({"window_geometry": geometry})


def load_splitter_sizes() -> Optional[list[int]]:
    payload = _read_global_config()
    sizes = payload.get("splitter_sizes")
    if not isinstance(sizes, list) or not sizes:
        return None
    try:
        return [max(0, int(size)) for size in sizes]
    except (TypeError, ValueError):
        return None


def save_splitter_sizes(sizes: list[int]) -> None:
    _update_global_config({"splitter_sizes": [int(size) for size in sizes]})
