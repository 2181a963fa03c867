"""
Theme source resolution.

A theme file may ``include`` a parent theme, which may include another, and
so on.  ``resolve`` follows that chain (bounded by ``MAX_INCLUDE_DEPTH``) and
merges it into one ``ResolvedTheme``:

    colors       nearer files win per key
    tokenColors  farther ancestors first, nearer rules after them
    name / type  nearest non-empty value

Legacy ``.tmTheme`` files are accepted both as theme files and as the target
of a string ``tokenColors`` entry.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError

from .errors import (
    IncludeDepthExceededError,
    InvalidFormatError,
    NotFoundError,
    ThemePreviewError,
)
from .jsonc import read_jsonc
from .models import ResolvedTheme, ThemeSource
from .tmtheme import read_tmtheme

logger = logging.getLogger(__name__)

MAX_INCLUDE_DEPTH = 10  # includes followed before giving up


# --- Paths ---

def true_case_path(path: Union[str, Path]) -> Path:
    """Return ``path`` with every component spelled as it is on disk.

    Components are matched case-insensitively when the exact spelling does
    not exist, so paths written on case-insensitive file systems resolve.

    Raises:
        NotFoundError: If some component has no match.
    """
    path = Path(path).absolute()
    current = Path(path.anchor)
    for part in path.parts[1:]:
        candidate = current / part
        if candidate.exists():
            current = candidate
            continue
        if part in (".", ".."):
            current = candidate
            continue
        try:
            entries = os.listdir(current)
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise NotFoundError(f"File not found at '{path}'") from exc
        lowered = part.lower()
        match = next((entry for entry in sorted(entries) if entry.lower() == lowered), None)
        if match is None:
            raise NotFoundError(f"File not found at '{path}'")
        current = current / match
    return current


def is_tmtheme(path: Path) -> bool:
    return path.suffix.lower() == ".tmtheme"


# --- Reading ---

def read_theme_document(path: Union[str, Path]) -> dict[str, Any]:
    """Read one theme file (JSON with comments, or tmTheme) as a mapping.

    Raises:
        NotFoundError: If the file does not exist.
        InvalidFormatError: If the file type is unsupported or the content
            is not a JSON object.
    """
    path = Path(path)
    if is_tmtheme(path):
        return read_tmtheme(path)
    if path.suffix.lower() != ".json":
        raise InvalidFormatError(f"Invalid theme extension at '{path}'")

    data = read_jsonc(path)
    if not isinstance(data, dict):
        raise InvalidFormatError(f"Path '{path}' is invalid")
    return data


def read_theme_source(path: Union[str, Path]) -> ThemeSource:
    """Read one theme file into a ``ThemeSource``."""
    data = read_theme_document(path)
    try:
        return ThemeSource.model_validate(data)
    except ValidationError as exc:
        raise InvalidFormatError(f"Path '{path}' is invalid: {exc}") from exc


def _token_colors(source: ThemeSource, base_dir: Path) -> list[dict[str, Any]]:
    """Token rules of one layer, following a tmTheme pointer if present."""
    token_colors = source.token_colors
    if isinstance(token_colors, str):
        tm_path = base_dir / token_colors
        logger.debug("Loading token colors from %s", tm_path)
        return list(read_tmtheme(tm_path)["tokenColors"])
    if token_colors is None:
        return []
    return [rule for rule in token_colors if isinstance(rule, dict)]


# --- Resolution ---

def load_include_chain(theme_path: Path) -> list[tuple[Path, ThemeSource]]:
    """Read a theme and every theme it transitively includes.

    The chain is ordered nearest first.  Each ``include`` is resolved against
    the directory of the file that declares it.

    Raises:
        IncludeDepthExceededError: If more than ``MAX_INCLUDE_DEPTH``
            includes would have to be followed.
    """
    chain = [(theme_path, read_theme_source(theme_path))]
    while chain[-1][1].include:
        if len(chain) > MAX_INCLUDE_DEPTH:
            raise IncludeDepthExceededError(theme_path, MAX_INCLUDE_DEPTH)
        current_path, current = chain[-1]
        include_path = current_path.parent / current.include
        logger.debug("Following include %s -> %s", current_path, include_path)
        chain.append((include_path, read_theme_source(include_path)))
    return chain


def merge_chain(chain: list[tuple[Path, ThemeSource]]) -> ResolvedTheme:
    """Merge a nearest-first include chain into one theme.

    Raises:
        InvalidFormatError: If a layer's ``colors`` is not an object.
    """
    name = None
    theme_type = None
    colors: dict[str, str] = {}
    token_colors: list[dict[str, Any]] = []

    # Farthest ancestor first, so nearer layers overwrite.
    for path, source in reversed(chain):
        name = source.name or name
        theme_type = source.type or theme_type
        colors.update(
            (key, value) for key, value in source.colors.items()
            if isinstance(value, str)
        )
        token_colors = token_colors + _token_colors(source, path.parent)

    return ResolvedTheme(type=theme_type, colors=colors, token_colors=token_colors, name=name)


def resolve(theme_path: Union[str, Path]) -> ResolvedTheme:
    """Resolve a theme file and its include chain into a ``ResolvedTheme``.

    Raises:
        NotFoundError: If the theme or any file it references is missing.
        IncludeDepthExceededError: If the include chain is too deep.
        InvalidFormatError: If any file cannot be parsed.
    """
    theme_path = Path(theme_path)
    try:
        chain = load_include_chain(theme_path)
        return merge_chain(chain)
    except IncludeDepthExceededError:
        raise
    except NotFoundError as exc:
        raise NotFoundError(f"Invalid theme at '{theme_path}': {exc}") from exc
    except (ThemePreviewError, ValidationError) as exc:
        raise InvalidFormatError(f"Invalid theme at '{theme_path}': {exc}") from exc
