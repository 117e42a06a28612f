from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .history import DEFAULT_HISTORY_MAX

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """
    Persisted engine settings.

    Notes
    -----
    history_max here is the value a new ConfigStore is seeded with. Once a
    store has its own history_max it wins, since it can be changed at runtime.
    """

    history_max: int
    compress_presets: bool

    @staticmethod
    def defaults() -> "EngineSettings":
        return EngineSettings(history_max=DEFAULT_HISTORY_MAX, compress_presets=False)


def load_engine_settings(path: Path) -> EngineSettings:
    """
    Load engine settings from disk.

    Parameters
    ----------
    path:
        Settings JSON file.

    Returns
    -------
    EngineSettings
        Loaded settings, or defaults if missing/unreadable.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return EngineSettings.defaults()
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable settings file %s: %s", path, exc)
        return EngineSettings.defaults()

    if not isinstance(payload, dict):
        return EngineSettings.defaults()

    history_max = payload.get("history_max", DEFAULT_HISTORY_MAX)
    if not isinstance(history_max, int) or isinstance(history_max, bool) or history_max < 0:
        history_max = DEFAULT_HISTORY_MAX

    compress_presets = payload.get("compress_presets", False)
    if not isinstance(compress_presets, bool):
        compress_presets = False

    return EngineSettings(history_max=history_max, compress_presets=compress_presets)


def save_engine_settings(path: Path, settings: EngineSettings) -> None:
    """Save engine settings to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "history_max": settings.history_max,
        "compress_presets": settings.compress_presets,
    }
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
