"""
core.config
~~~~~~~~~~~
Persists application Settings to a JSON file in the platform's
standard config directory.

Config location
---------------
  Windows  : %APPDATA%\\BatchTranscoder\\settings.json
  macOS    : ~/Library/Application Support/BatchTranscoder/settings.json
  Linux    : ~/.config/BatchTranscoder/settings.json

Only user preferences are stored. The queue itself (jobs, progress,
errors) lives in memory and is gone when the app closes.
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, fields
from pathlib import Path

from core.models import Settings


# ── Config directory ──────────────────────────────────────────────────────────

def _config_dir() -> Path:
    if sys.platform == "win32":
        base = Path.home() / "AppData" / "Roaming"
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path.home() / ".config"
    return base / "BatchTranscoder"


CONFIG_DIR    = _config_dir()
SETTINGS_FILE = CONFIG_DIR / "settings.json"


# ── Public API ────────────────────────────────────────────────────────────────

def save_settings(settings: Settings, path: Path = SETTINGS_FILE) -> None:
    """
    Serialise *settings* to *path*, overwriting any previous data.
    Ignores I/O errors so a config issue never crashes the app.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")
    except OSError as exc:
        print(f"[CONFIG] Could not save settings to '{path}': {exc}")


def load_settings(path: Path = SETTINGS_FILE) -> Settings:
    """
    Read *path* and return a Settings instance.
    Returns defaults if the file is missing, empty, or malformed.
    """
    if not path.exists():
        return Settings()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        print(f"[CONFIG] Ignoring unreadable settings file '{path}': {exc}")
        return Settings()
    if not isinstance(payload, dict):
        return Settings()
    return _dict_to_settings(payload)


# ── Serialisation helpers ─────────────────────────────────────────────────────

def _dict_to_settings(d: dict) -> Settings:
    defaults = Settings()
    values = {}
    for f in fields(Settings):
        if f.name not in d:
            continue
        value = d[f.name]
        expected = type(getattr(defaults, f.name))
        # bool is checked separately because it is also an int
        if expected is bool:
            if isinstance(value, bool):
                values[f.name] = value
        elif expected is int:
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                values[f.name] = value
        elif isinstance(value, expected):
            values[f.name] = value
    return Settings(**values)
