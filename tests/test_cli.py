"""
CLI tests.

These tests drive the CLI end to end against a temporary data root.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

import catfilter.cli as cli_module
from filter_engine.errors import FilterEngineError


def _run(tmp_path: Path, *argv: str) -> int:
    return cli_module.main(["--data-root", str(tmp_path), *argv])


def test_cli_root_help(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["--help"])
    assert excinfo.value.code == 0
    assert "catfilter" in capsys.readouterr().out.lower()


@pytest.mark.parametrize("subcommand", ["show", "add", "remove", "set", "history", "preset"])
def test_cli_subcommand_help(subcommand: str, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([subcommand, "--help"])
    assert excinfo.value.code == 0
    assert "usage:" in capsys.readouterr().out.lower()


def test_cli_add_set_show(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, "add", "rating") == 0
    assert _run(tmp_path, "add", "color label") == 0
    assert _run(tmp_path, "set", "1", "--operator", "or", "--text", "red", "--disable") == 0
    capsys.readouterr()

    assert _run(tmp_path, "show") == 0
    out = capsys.readouterr().out
    assert "0: rating ''" in out
    assert "1: or color label (off) 'red'" in out
    assert "serialized: 2:0:24:0:$1:17:1:red$" in out


def test_cli_capacity_error_returns_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    for _ in range(10):
        assert _run(tmp_path, "add", "0") == 0
    capsys.readouterr()

    assert _run(tmp_path, "add", "tag") == 2
    out = capsys.readouterr().out
    assert "ERROR:" in out
    assert "more than 10 rules" in out


def test_cli_bad_index_returns_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, "add", "tag") == 0
    assert _run(tmp_path, "remove", "4") == 2
    assert "ERROR:" in capsys.readouterr().out


def test_cli_history_list_and_apply(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(tmp_path, "add", "rating")
    _run(tmp_path, "set", "0", "--text", ">=4")
    capsys.readouterr()

    assert _run(tmp_path, "history") == 0
    out = capsys.readouterr().out
    assert "0: rating >=4" in out
    assert "1: rating" in out

    assert _run(tmp_path, "history", "--apply", "9") == 0
    assert "nothing applied" in capsys.readouterr().out
    assert _run(tmp_path, "history", "--apply", "1") == 0
    assert "serialized: 1:0:24:0:$" in capsys.readouterr().out


def test_cli_presets(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(tmp_path, "add", "lens")
    assert _run(tmp_path, "preset", "save", "lenses") == 0
    capsys.readouterr()

    assert _run(tmp_path, "preset", "list") == 0
    out = capsys.readouterr().out
    assert "[built-in] color labels : red" in out
    assert "lenses" in out

    assert _run(tmp_path, "preset", "apply", "rating : ★ ★") == 0
    assert "serialized: 1:0:24:0:>=2$" in capsys.readouterr().out
    assert _run(tmp_path, "preset", "apply", "missing") == 2
    assert _run(tmp_path, "preset", "delete", "lenses") == 0
    assert _run(tmp_path, "preset", "delete", "lenses") == 2


def test_cli_returns_2_on_engine_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    def _boom(*_args: object, **_kwargs: object) -> None:
        raise FilterEngineError("nope")

    monkeypatch.setattr(cli_module, "open_session", _boom)

    assert _run(tmp_path, "show") == 2
    assert "ERROR: nope" in capsys.readouterr().out


def test_parse_property_accepts_ids_and_names() -> None:
    assert cli_module.parse_property("24") == 24
    assert cli_module.parse_property("focal-length") == 6
    assert cli_module.parse_property("Color Label") == 17
    with pytest.raises(argparse.ArgumentTypeError):
        cli_module.parse_property("no such thing")


def test_cli_properties_marks_entry_style(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(tmp_path, "add", "rating")
    capsys.readouterr()

    assert _run(tmp_path, "properties") == 0
    lines = capsys.readouterr().out.splitlines()

    assert "rating" in lines[24]
    assert "specialized" in lines[24]
    assert "used 1" in lines[24]
    assert "tag" in lines[16]
    assert "text" in lines[16]


def test_cli_config_shows_and_changes_settings(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, "add", "film roll") == 0
    assert _run(tmp_path, "set", "0", "--property", "tag") == 0
    capsys.readouterr()

    assert _run(tmp_path, "config") == 0
    out = capsys.readouterr().out
    assert "saved sort order: field 0, ascending" in out
    assert "plugins/lighttable/filtering/num_rules = 1" in out
    assert "plugins/lighttable/filtering/item0 = 16" in out

    assert _run(tmp_path, "config", "--compress-presets", "on") == 0
    assert _run(tmp_path, "preset", "save", "tags") == 0
    out = capsys.readouterr().out
    assert "compress_presets = on" in out
    assert "tags.preset.zst" in out


def test_cli_history_max_persists(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(tmp_path, "add", "rating")
    _run(tmp_path, "set", "0", "--text", ">=1")
    capsys.readouterr()

    assert _run(tmp_path, "history", "--max", "1") == 0

    assert capsys.readouterr().out.strip() == "0: rating >=1"
    stored = json.loads((tmp_path / "engine_settings.json").read_text(encoding="utf-8"))
    assert stored["history_max"] == 1
