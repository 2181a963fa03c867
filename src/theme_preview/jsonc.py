"""JSON-with-comments reader.

Extension package descriptors and theme files are hand-written and routinely
carry ``//`` and ``/* */`` comments and trailing commas, none of which strict
JSON allows.  Both are removed before the text is handed to ``json``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from .errors import InvalidFormatError, NotFoundError


def strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas, leaving string literals untouched."""
    out: list[str] = []
    i = 0
    n = len(text)
    pending_comma = -1  # index in ``out`` of a comma that may be trailing

    while i < n:
        ch = text[i]

        if ch == '"':
            pending_comma = -1
            start = i
            i += 1
            while i < n and text[i] != '"':
                i += 2 if text[i] == "\\" else 1
            i += 1
            out.append(text[start:i])
            continue

        if ch == "/" and i + 1 < n and text[i + 1] == "/":
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue

        if ch == "/" and i + 1 < n and text[i + 1] == "*":
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            out.append(" ")
            continue

        if ch in "}]" and pending_comma >= 0:
            out[pending_comma] = ""
            pending_comma = -1
        elif ch == ",":
            pending_comma = len(out)
        elif not ch.isspace():
            pending_comma = -1

        out.append(ch)
        i += 1

    return "".join(out)


def parse_jsonc(text: str) -> Any:
    """Parse a JSON-with-comments string."""
    return json.loads(strip_jsonc(text))


def read_jsonc(path: Union[str, Path]) -> Any:
    """Read and parse a JSON-with-comments file.

    Raises:
        NotFoundError: If the file does not exist.
        InvalidFormatError: If the content is not valid JSON once comments
            and trailing commas are removed.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        raise NotFoundError(f"File not found at '{path}'") from exc
    try:
        return parse_jsonc(content)
    except json.JSONDecodeError as exc:
        raise InvalidFormatError(f"Invalid json at '{path}': {exc}") from exc
