"""
Command line interface.

    theme-preview info   --dir EXT_DIR
    theme-preview images --dir EXT_DIR --output OUT_DIR [--path P --uiTheme U [--label L]]

``info`` prints the extension metadata and theme contributions as JSON on
stdout.  ``images`` renders every theme contribution (or the single theme
given with ``--path``) for every example language and writes
``{themeSlug}-{extName}.svg``/``.png`` plus ``output.json`` into the output
directory.  Logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from .canonicalize import canonicalize
from .config import RenderConfig, load_config
from .errors import ThemePreviewError, ThemeProcessingError, unwrap_error
from .extension import get_info
from .models import Theme, ThemeContribution
from .renderer import PreviewRenderer
from .tokenizer import Registry

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
OUTPUT_FILE = "output.json"


def theme_slug(name: str) -> str:
    """File-name slug of a theme display name."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "theme"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

def run_info(args: argparse.Namespace) -> int:
    info = get_info(Path(args.dir).resolve())
    print(json.dumps(info.to_wire()))
    return 0


# ---------------------------------------------------------------------------
# images
# ---------------------------------------------------------------------------

def theme_summary(theme: Theme) -> dict[str, Any]:
    """The non-token fields of a theme, as written to ``output.json``."""
    return {
        "path": theme.path,
        "displayName": theme.display_name,
        "type": theme.type,
        "colors": theme.colors.model_dump(by_alias=True),
    }


def render_theme(theme: Theme, renderer: PreviewRenderer, output_dir: Path) -> list[dict[str, Any]]:
    """Write the SVG and PNG of every language of ``theme``."""
    slug = theme_slug(theme.display_name)
    outputs = []
    for entry in theme.language_tokens:
        ext_name = entry.language.ext_name
        svg_path = output_dir / f"{slug}-{ext_name}.svg"
        png_path = output_dir / f"{slug}-{ext_name}.png"
        renderer.render(theme, ext_name, svg_path=svg_path, png_path=png_path)
        outputs.append({
            "language": entry.language.to_dict(),
            "svgPath": str(svg_path),
            "pngPath": str(png_path),
        })
    return outputs


def _contributions(args: argparse.Namespace, extension_dir: Path) -> tuple[Optional[dict[str, Any]], list[ThemeContribution]]:
    if args.path:
        contribution = ThemeContribution(label=args.label, ui_theme=args.ui_theme, path=args.path)
        return None, [contribution]
    info = get_info(extension_dir)
    return info.to_wire()["extension"], info.theme_contributes


def run_images(args: argparse.Namespace, config: RenderConfig) -> int:
    extension_dir = Path(args.dir).resolve()
    output_dir = Path(args.output).resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    extension, contributions = _contributions(args, extension_dir)
    languages = config.selected_languages()
    renderer = config.renderer()
    registry = Registry()

    themes: list[dict[str, Any]] = []
    errors: list[dict[str, str]] = []
    for contribution in contributions:
        try:
            theme = canonicalize(contribution, extension_dir, registry, languages)
            outputs = render_theme(theme, renderer, output_dir)
        except (ThemePreviewError, OSError, ValueError) as exc:
            error = ThemeProcessingError(contribution.path, exc)
            error.__cause__ = exc
            logger.error("%s", error)
            errors.append({"path": contribution.path, "error": unwrap_error(error)})
            continue
        themes.append({"theme": theme_summary(theme), "languages": outputs})

    output_path = output_dir / OUTPUT_FILE
    output_path.write_text(
        json.dumps({"extension": extension, "themes": themes, "errors": errors}, indent=2),
        encoding="utf-8",
    )
    logger.info("Wrote %s", output_path)
    return 1 if errors else 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="theme-preview", description="Editor theme preview generator")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress (INFO)")
    parser.add_argument("--debug", action="store_true", help="Log everything (DEBUG)")
    parser.add_argument("--config", help="YAML config file (default: $THEME_PREVIEW_CONFIG)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="Print extension metadata and theme contributions as JSON")
    info.add_argument("--dir", default=".", help="Directory of the extension")

    images = subparsers.add_parser("images", help="Generate preview images")
    images.add_argument("--dir", default=".", help="Directory of the extension")
    images.add_argument("--output", required=True, help="Directory for the generated images")
    images.add_argument("--path", help="Render only this theme file (relative to <dir>/extension)")
    images.add_argument("--uiTheme", dest="ui_theme", help="Base theme of --path (vs, vs-dark, hc-black, hc-light)")
    images.add_argument("--label", help="Display name of --path")
    images.add_argument("--no-rounded", dest="rounded", action="store_false", default=None,
                        help="Square corners")
    images.add_argument("--width", dest="png_width", type=int, help="PNG width in pixels")
    images.add_argument("--language", dest="languages", action="append",
                        help="Only render this language ext name (repeatable)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "images" and args.path and not args.ui_theme:
        parser.error("--uiTheme is required with --path")

    overrides: dict[str, Any] = {}
    if args.command == "images":
        overrides = {"rounded": args.rounded, "png_width": args.png_width, "languages": args.languages}
    if args.debug:
        overrides["log_level"] = "DEBUG"
    elif args.verbose:
        overrides["log_level"] = "INFO"

    try:
        config = load_config(args.config, overrides)
    except ThemePreviewError as exc:
        configure_logging("WARNING")
        logger.error("%s", unwrap_error(exc))
        return 1
    configure_logging(config.log_level)

    try:
        if args.command == "info":
            return run_info(args)
        return run_images(args, config)
    except ThemePreviewError as exc:
        logger.error("%s", unwrap_error(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
