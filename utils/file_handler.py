import logging
from pathlib import Path
from typing import Optional

from app.errors import TextLoadError
from app.state import normalize_text

log = logging.getLogger(__name__)

DEFAULT_SNIPPET = """def two_sum(nums, target):
    num_map = {}

    for i, num in enumerate(nums):
        complement = target - num

        if complement in num_map:
            return [num_map[complement], i]

        num_map[num] = i

    return []"""


def load_snippet(path) -> str:
    """Read a practice text, normalising line endings and dropping trailing newlines."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TextLoadError(f"Cannot read snippet {p}: {e}") from e
    text = normalize_text(text).rstrip("\n")
    if not text.strip():
        raise TextLoadError(f"Snippet {p} is empty")
    return text


def load_practice_text(path: Optional[str] = None) -> str:
    if not path:
        return DEFAULT_SNIPPET
    try:
        return load_snippet(path)
    except TextLoadError as e:
        log.warning("%s; using the built-in snippet", e)
        return DEFAULT_SNIPPET
