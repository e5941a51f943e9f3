"""Static file copying and stylesheet compilation."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import csscompressor
from pygments.formatters import HtmlFormatter

from .config import SiteConfig
from .errors import ConfigError
from .templates import BASE_STYLESHEET, INVERTED_STYLESHEET, RTL_STYLESHEET, SYNTAX_STYLESHEET
from .utils import write_text

logger = logging.getLogger(__name__)

THEME_DIR = Path(__file__).parent / "static" / "css"
THEME_SOURCES = {
    BASE_STYLESHEET: THEME_DIR / "style.css",
    RTL_STYLESHEET: THEME_DIR / "style-rtl.css",
    INVERTED_STYLESHEET: THEME_DIR / "style-inverted.css",
}
PYGMENTS_STYLE = "default"


def copy_static(static_dir: Path, output_dir: Path) -> int:
    if not static_dir.exists():
        return 0
    copied = 0
    for item in sorted(static_dir.iterdir()):
        dest = output_dir / item.name
        if item.is_dir():
            if dest.exists():
                shutil.rmtree(dest)
            shutil.copytree(item, dest)
            copied += sum(1 for path in dest.rglob("*") if path.is_file())
        else:
            output_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, dest)
            copied += 1
    return copied


def custom_stylesheet_sources(config: SiteConfig) -> list[tuple[str, Path]]:
    sources = []
    for rel in config.custom_stylesheets:
        rel = rel.lstrip("/")
        source = config.static_dir / rel
        if not source.is_file():
            raise ConfigError(f"Custom stylesheet not found: {rel} (looked in {config.static_dir})")
        sources.append((rel, source))
    return sources


def syntax_css() -> str:
    return HtmlFormatter(style=PYGMENTS_STYLE).get_style_defs(".highlight")


def compile_stylesheet(text: str) -> str:
    return csscompressor.compress(text) + "\n"


def compile_stylesheets(config: SiteConfig, output_dir: Path) -> list[str]:
    """Write the theme, syntax and custom stylesheets, minified, and return their output paths."""
    written = []
    selected = [BASE_STYLESHEET]
    if config.theme_rtl:
        selected.append(RTL_STYLESHEET)
    if config.theme_inverted:
        selected.append(INVERTED_STYLESHEET)
    for rel in selected:
        text = THEME_SOURCES[rel].read_text(encoding="utf-8")
        write_text(output_dir / rel, compile_stylesheet(text))
        written.append(rel)
    if config.highlight_code:
        write_text(output_dir / SYNTAX_STYLESHEET, compile_stylesheet(syntax_css()))
        written.append(SYNTAX_STYLESHEET)
    for rel, source in custom_stylesheet_sources(config):
        dest = output_dir / rel
        if source.suffix.lower() == ".css":
            write_text(dest, compile_stylesheet(source.read_text(encoding="utf-8")))
        else:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, dest)
        written.append(rel)
    for rel in written:
        logger.debug("Compiled stylesheet %s", rel)
    return written
