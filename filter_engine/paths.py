"""
Data root resolution.

All persistent engine state (the ConfigStore database, engine settings and
saved presets) lives under one data root directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATA_ROOT_ENV = "CATFILTER_DATA_ROOT"


@dataclass(frozen=True, slots=True)
class EnginePaths:
    """
    Concrete resolved paths under a data root.

    Attributes
    ----------
    data_root:
        Root directory for all engine data.
    presets_root:
        Directory holding named preset files.
    settings_path:
        JSON file holding EngineSettings.
    """

    data_root: Path
    presets_root: Path
    settings_path: Path


def default_data_root() -> Path:
    """
    Resolve the default data root.

    Preference order:
    1) $CATFILTER_DATA_ROOT if set
    2) %LOCALAPPDATA% or %APPDATA% (Windows)
    3) $XDG_DATA_HOME
    4) ~/.local/share
    """
    explicit = os.environ.get(DATA_ROOT_ENV)
    if explicit:
        return Path(explicit)

    for var in ("LOCALAPPDATA", "APPDATA"):
        value = os.environ.get(var)
        if value:
            return Path(value) / "catfilter"

    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "catfilter"
    return Path.home() / ".local" / "share" / "catfilter"


def resolve_engine_paths(data_root: Path | None = None) -> EnginePaths:
    """Resolve all paths under data_root (or the default root)."""
    root = (data_root or default_data_root()).expanduser().resolve()
    return EnginePaths(
        data_root=root,
        presets_root=root / "presets",
        settings_path=root / "engine_settings.json",
    )
