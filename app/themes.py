# app/themes.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List
import json
import logging

log = logging.getLogger(__name__)


@dataclass
class Theme:
    name: str
    background: str
    primary: str      # correctly typed chars, labels
    secondary: str    # untyped chars, muted labels
    accent: str       # caret, CPM label
    error: str = "#ef4444"
    extra: str = "#b91c1c"


# -------- Built-in themes --------
THEMES: List[Theme] = [
    Theme(
        name="Monkeytype Dark",
        background="#323437",
        primary="#d1d0c5",
        secondary="#646669",
        accent="#e2b714",
        error="#ca4754",
        extra="#7e2a33",
    ),
    Theme(
        name="Monkeytype Light",
        background="#fafafa",
        primary="#111111",
        secondary="#9a9a9a",
        accent="#eab308",
    ),
    Theme(
        name="Nord",
        background="#2e3440",
        primary="#eceff4",
        secondary="#4c566a",
        accent="#88c0d0",
        error="#bf616a",
        extra="#8f4a52",
    ),
]

BUILTIN_COUNT = len(THEMES)
DEFAULT_THEME_INDEX = 0
_CUSTOM_FILE = Path("themes.json")


# -------- helpers --------
def _theme_from_dict(d: Dict[str, Any]) -> Theme:
    required = {"name", "background", "primary", "secondary", "accent"}
    missing = required - set(d.keys())
    if missing:
        raise ValueError(f"Missing theme keys: {', '.join(sorted(missing))}")
    optional = {k: str(d[k]) for k in ("error", "extra") if k in d}
    return Theme(
        name=str(d["name"]),
        background=str(d["background"]),
        primary=str(d["primary"]),
        secondary=str(d["secondary"]),
        accent=str(d["accent"]),
        **optional,
    )


# -------- public API used by UI --------
def load_custom_themes(path: Path = _CUSTOM_FILE) -> int:
    """Append extra themes from themes.json (if present). Returns how many were added."""
    if not path.exists():
        return 0
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("Failed to load %s: %s", path, e)
        return 0
    if not isinstance(data, list):
        log.warning("%s must hold a list of themes", path)
        return 0
    added = 0
    known = {t.name for t in THEMES}
    for item in data:
        try:
            theme = _theme_from_dict(item)
        except (TypeError, ValueError, AttributeError) as e:
            log.warning("Skipping custom theme: %s", e)
            continue
        if theme.name in known:
            continue
        THEMES.append(theme)
        known.add(theme.name)
        added += 1
    return added


def theme_index(name: str) -> int:
    for i, t in enumerate(THEMES):
        if t.name == name:
            return i
    return DEFAULT_THEME_INDEX
