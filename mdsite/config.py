from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

from .errors import ConfigError
from .utils import parse_flag, parse_int

DEFAULT_CONFIG = "site.toml"


@dataclass(frozen=True)
class SiteConfig:
    title: str = "My Blog"
    author: str = ""
    language: str = "en"
    description: str = ""
    base_url: str = ""
    theme_rtl: bool = False
    theme_inverted: bool = False
    analytics_id: Optional[str] = None
    custom_stylesheets: tuple[str, ...] = ()
    copyright: str = ""
    date_format: str = "%B %d, %Y"
    title_pattern: str = "{title} | {site}"
    content_dir: Path = Path("content")
    static_dir: Path = Path("static")
    output_dir: Path = Path("public")
    layout: Optional[Path] = None
    build_workers: int = 0
    posts_per_page: int = 10
    include_drafts: bool = False
    clean: bool = True
    highlight_code: bool = True
    enable_rss: bool = True
    enable_sitemap: bool = True
    enable_404: bool = True
    enable_tags: bool = True

    def with_overrides(self, **changes: object) -> "SiteConfig":
        changes = {key: value for key, value in changes.items() if value is not None}
        return dataclasses.replace(self, **changes)


BOOL_KEYS = {
    "theme_rtl",
    "theme_inverted",
    "include_drafts",
    "clean",
    "highlight_code",
    "enable_rss",
    "enable_sitemap",
    "enable_404",
    "enable_tags",
}
STR_KEYS = {"title", "author", "language", "description", "base_url", "copyright", "date_format", "title_pattern"}
PATH_KEYS = {"content_dir", "static_dir", "output_dir", "layout"}
# Accepted spellings used by common theme configs.
ALIASES = {
    "baseurl": "base_url",
    "languagecode": "language",
    "rtl": "theme_rtl",
    "inverted": "theme_inverted",
    "google_analytics": "analytics_id",
    "googleanalytics": "analytics_id",
    "custom_css": "custom_stylesheets",
}


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    return data


def check_titles(values: dict) -> None:
    if "title" in values and not values["title"].strip():
        raise ConfigError("Config option 'title' must not be empty")
    pattern = values.get("title_pattern")
    if pattern is None:
        return
    try:
        pattern.format(title="", site="")
    except (KeyError, IndexError, ValueError, AttributeError) as exc:
        raise ConfigError(
            f"Config option 'title_pattern' {pattern!r} may only use {{title}} and {{site}}: {exc!r}"
        ) from exc


def config_from_mapping(data: dict, base_dir: Optional[Path] = None) -> SiteConfig:
    """Build a SiteConfig from a raw mapping; relative directories resolve against ``base_dir``."""
    values: dict = {}
    # Hugo-style configs keep theme switches under [params].
    params = data.get("params") if isinstance(data.get("params"), dict) else {}
    merged = {**params, **{key: value for key, value in data.items() if key != "params"}}
    for raw_key, value in merged.items():
        key = ALIASES.get(str(raw_key).lower(), str(raw_key).lower())
        if value is None:
            continue
        if key in BOOL_KEYS:
            try:
                values[key] = parse_flag(value)
            except ValueError as exc:
                raise ConfigError(f"Config option {raw_key!r}: {exc}") from exc
        elif key in STR_KEYS:
            if isinstance(value, (dict, list)):
                raise ConfigError(f"Config option {raw_key!r} must be a string")
            values[key] = str(value)
        elif key in PATH_KEYS:
            path = Path(str(value))
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            values[key] = path
        elif key == "analytics_id":
            values[key] = str(value).strip() or None
        elif key == "custom_stylesheets":
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, (list, tuple)):
                raise ConfigError(f"Config option {raw_key!r} must be a list of paths")
            values[key] = tuple(str(item) for item in value)
        elif key in {"build_workers", "posts_per_page"}:
            values[key] = parse_int(value, getattr(SiteConfig, key))
    if base_dir is not None:
        for key in ("content_dir", "static_dir", "output_dir"):
            if key not in values:
                values[key] = base_dir / getattr(SiteConfig, key)
    check_titles(values)
    return SiteConfig(**values)


def read_site_config(path: Path) -> SiteConfig:
    path = Path(path)
    return config_from_mapping(load_config(path), base_dir=path.resolve().parent)
