from __future__ import annotations

from pathlib import Path

import pytest

from filter_engine.history import DEFAULT_HISTORY_MAX
from filter_engine.paths import DATA_ROOT_ENV, default_data_root, resolve_engine_paths
from filter_engine.settings import EngineSettings, load_engine_settings, save_engine_settings


def test_missing_settings_file_gives_defaults(tmp_path: Path) -> None:
    assert load_engine_settings(tmp_path / "nope.json") == EngineSettings.defaults()


def test_unreadable_settings_give_defaults(tmp_path: Path) -> None:
    path = tmp_path / "engine_settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_engine_settings(path) == EngineSettings.defaults()

    path.write_text('{"history_max": -4, "compress_presets": "yes"}', encoding="utf-8")
    assert load_engine_settings(path) == EngineSettings(
        history_max=DEFAULT_HISTORY_MAX, compress_presets=False
    )


def test_settings_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "sub" / "engine_settings.json"
    settings = EngineSettings(history_max=3, compress_presets=True)
    save_engine_settings(path, settings)
    assert load_engine_settings(path) == settings


def test_default_data_root_prefers_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(DATA_ROOT_ENV, str(tmp_path / "explicit"))
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "Local"))
    assert default_data_root() == tmp_path / "explicit"


def test_default_data_root_prefers_local_appdata(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv(DATA_ROOT_ENV, raising=False)
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "Local"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "Roaming"))
    assert default_data_root() == tmp_path / "Local" / "catfilter"


def test_default_data_root_falls_back_to_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for var in (DATA_ROOT_ENV, "LOCALAPPDATA", "APPDATA"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    assert default_data_root() == tmp_path / "xdg" / "catfilter"


def test_resolve_engine_paths(tmp_path: Path) -> None:
    paths = resolve_engine_paths(tmp_path)
    assert paths.data_root == tmp_path.resolve()
    assert paths.presets_root == tmp_path.resolve() / "presets"
    assert paths.settings_path.name == "engine_settings.json"
