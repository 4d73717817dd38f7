import pytest

from livemark.app import config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    path = tmp_path / "livemark_config.json"
    monkeypatch.setattr(config, "GLOBAL_CONFIG", path)
    return path


def test_defaults_without_file():
    assert config.load_pygments_style() == "friendly"
    assert config.load_editor_font_size() == 16
    assert config.load_preview_debounce_ms() == 150
    assert config.load_preview_enabled() is True
    assert config.load_last_file() is None
    assert config.load_splitter_sizes() is None


def test_round_trip_values():
    config.save_pygments_style("monokai")
    config.save_editor_font_size(3)
    config.save_preview_enabled(False)
    config.save_last_file("/tmp/note.md")
    config.save_splitter_sizes([600, 400])
    assert config.load_pygments_style() == "monokai"
    assert config.load_editor_font_size() == 6
    assert config.load_preview_enabled() is False
    assert config.load_last_file() == "/tmp/note.md"
    assert config.load_splitter_sizes() == [600, 400]


def test_corrupt_file_reads_as_empty(isolated_config):
    isolated_config.write_text("{not json", encoding="utf-8")
    assert config.load_pygments_style() == "friendly"
    isolated_config.write_text("[1, 2]", encoding="utf-8")
    assert config.load_preview_debounce_ms() == 150


def test_updates_merge_existing_keys():
    config.save_window_geometry("AAAA")
    config.save_last_file("a.md")
    assert config.load_window_geometry() == "AAAA"
    assert config.load_last_file() == "a.md"


def test_debounce_is_clamped(isolated_config):
    isolated_config.write_text('{"preview_debounce_ms": 99999}', encoding="utf-8")
    assert config.load_preview_debounce_ms() == 5000
    isolated_config.write_text('{"preview_debounce_ms": "soon"}', encoding="utf-8")
    assert config.load_preview_debounce_ms() == 150
