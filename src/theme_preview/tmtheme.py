"""Legacy TextMate ``.tmTheme`` support.

A tmTheme is an XML property list whose ``settings`` array holds one global
entry (no ``scope``) with editor-wide colors, followed by scoped token rules.
Converted themes keep every entry as a token rule, so the global foreground
and background still reach the tokenizer as its defaults, and the globals are
additionally mapped onto the workbench color keys.
"""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path
from typing import Any, Union
from xml.parsers.expat import ExpatError

from .errors import InvalidFormatError, NotFoundError

logger = logging.getLogger(__name__)

# tmTheme global setting -> workbench color key
GLOBAL_COLOR_KEYS: dict[str, str] = {
    "background": "editor.background",
    "foreground": "editor.foreground",
    "caret": "editorCursor.foreground",
    "selection": "editor.selectionBackground",
    "lineHighlight": "editor.lineHighlightBackground",
    "invisibles": "editorWhitespace.foreground",
}


def convert_tmtheme(data: dict[str, Any]) -> dict[str, Any]:
    """Convert a parsed tmTheme plist into the JSON theme shape.

    Returns a mapping with ``name``, ``colors`` and ``tokenColors``.  No
    ``type`` is produced; a tmTheme does not declare one.

    Raises:
        InvalidFormatError: If ``settings`` is missing or not a list.
    """
    settings = data.get("settings")
    if not isinstance(settings, list):
        raise InvalidFormatError("tmTheme must have a 'settings' array")

    colors: dict[str, str] = {}
    token_colors: list[dict[str, Any]] = []
    globals_seen = False

    for entry in settings:
        if not isinstance(entry, dict) or not isinstance(entry.get("settings"), dict):
            continue
        rule = {k: v for k, v in entry.items() if k in ("name", "scope", "settings")}
        token_colors.append(rule)

        if "scope" not in entry and not globals_seen:
            globals_seen = True
            for setting, key in GLOBAL_COLOR_KEYS.items():
                value = entry["settings"].get(setting)
                if isinstance(value, str) and value:
                    colors[key] = value

    theme: dict[str, Any] = {"colors": colors, "tokenColors": token_colors}
    if isinstance(data.get("name"), str):
        theme["name"] = data["name"]
    return theme


def read_tmtheme(path: Union[str, Path]) -> dict[str, Any]:
    """Read a ``.tmTheme`` file and convert it.

    Raises:
        NotFoundError: If the file does not exist.
        InvalidFormatError: If the file is not a tmTheme property list.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise NotFoundError(f"File not found at '{path}'") from exc

    try:
        payload = plistlib.loads(raw)
    except (plistlib.InvalidFileException, ExpatError, ValueError) as exc:
        raise InvalidFormatError(f"Invalid tmTheme at '{path}': {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidFormatError(f"Invalid tmTheme at '{path}': top-level value must be a dictionary")

    try:
        theme = convert_tmtheme(payload)
    except InvalidFormatError as exc:
        raise InvalidFormatError(f"Invalid tmTheme at '{path}': {exc}") from exc
    logger.info("Converted tmTheme %s (%d rules)", path, len(theme["tokenColors"]))
    return theme
