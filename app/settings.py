# app/settings.py
from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging

from app.errors import SettingsError

log = logging.getLogger(__name__)

SETTINGS_FILE = Path("settings.json")


@dataclass(frozen=True)
class Settings:
    snippet_path: Optional[str] = None
    theme: str = "Monkeytype Dark"
    lock_after_finish: bool = True
    font_size: int = 18


_TYPES = {
    "snippet_path": (str, type(None)),
    "theme": (str,),
    "lock_after_finish": (bool,),
    "font_size": (int,),
}


def settings_from_dict(d: Dict[str, Any]) -> Settings:
    if not isinstance(d, dict):
        raise SettingsError("Settings must be a JSON object")
    values = {}
    for f in fields(Settings):
        if f.name not in d:
            continue
        value = d[f.name]
        # bool is an int subclass; font_size must be a real int
        if not isinstance(value, _TYPES[f.name]) or (f.name == "font_size" and isinstance(value, bool)):
            raise SettingsError(f"Invalid value for {f.name!r}: {value!r}")
        values[f.name] = value
    if values.get("font_size", 1) <= 0:
        raise SettingsError("font_size must be positive")
    return Settings(**values)


def read_settings(path: Path = SETTINGS_FILE) -> Settings:
    """Parse settings.json strictly; a missing file means defaults."""
    if not path.exists():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise SettingsError(f"Cannot read {path}: {e}") from e
    return settings_from_dict(data)


def load_settings(path: Path = SETTINGS_FILE) -> Settings:
    try:
        return read_settings(path)
    except SettingsError as e:
        log.warning("Falling back to default settings: %s", e)
        return Settings()
