from __future__ import annotations

import datetime as dt
import html as html_lib
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

import yaml

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

from .errors import ParseError
from .utils import as_utc, parse_flag

LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af]")
WORD_RE = re.compile(r"[A-Za-z0-9]+(?:'[A-Za-z0-9]+)?")

YAML_MARKER = "---"
TOML_MARKER = "+++"


@dataclass(frozen=True)
class Document:
    path: str
    slug: str
    title: str
    date: dt.datetime
    body: str
    draft: bool = False
    description: str = ""
    tags: tuple[str, ...] = ()

    @property
    def sort_key(self) -> tuple[dt.datetime, str]:
        return as_utc(self.date), self.path


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", "-")
    return text or "post"


def slug_for_path(path: str, explicit: str = "") -> str:
    """Derive the output slug from a source path, e.g. ``posts/Hello World.md`` -> ``posts/hello-world``."""
    rel = PurePosixPath(path)
    parts = [slugify(part) for part in rel.parent.parts]
    parts.append(slugify(explicit or rel.stem))
    return "/".join(parts)


def parse_list(value: object) -> list[str]:
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value]
        return [item for item in items if item]
    value = str(value).strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        items = [item.strip().strip("'\"") for item in inner.split(",")]
    else:
        items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def parse_front_matter(text: str, source: str = "") -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() not in {YAML_MARKER, TOML_MARKER}:
        raise ParseError("missing front matter block", source)
    marker = lines[0].strip()

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == marker:
            end = i
            break
    if end is None:
        raise ParseError(f"unterminated front matter block (expected closing {marker!r})", source)

    block = "\n".join(lines[1:end])
    try:
        if marker == TOML_MARKER:
            data = toml.loads(block)
        else:
            data = yaml.safe_load(block)
    except (yaml.YAMLError, toml.TOMLDecodeError, ValueError) as exc:
        raise ParseError(f"invalid front matter: {exc}", source) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError("front matter must be a mapping", source)

    meta = {str(key).strip().lower(): value for key, value in data.items()}
    body = "\n".join(lines[end + 1 :])
    return meta, body


def parse_date(value: object) -> dt.datetime:
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time())
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"not a date: {value!r}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return dt.datetime.fromisoformat(text)
    except ValueError:
        return dt.datetime.combine(dt.date.fromisoformat(text), dt.time())


def get_tags(meta: dict) -> tuple[str, ...]:
    for key in ("tags", "categories"):
        if meta.get(key):
            return tuple(parse_list(meta[key]))
    return ()


def parse_document(path: str, text: str) -> Document:
    meta, body = parse_front_matter(text, path)

    title = meta.get("title")
    if title is None or not str(title).strip():
        raise ParseError("missing required key 'title'", path)
    if isinstance(title, (dict, list)):
        raise ParseError("'title' must be a string", path)

    if meta.get("date") is None:
        raise ParseError("missing required key 'date'", path)
    try:
        date = parse_date(meta["date"])
    except ValueError as exc:
        raise ParseError(f"invalid 'date': {exc}", path) from exc

    try:
        draft = parse_flag(meta.get("draft"))
    except ValueError as exc:
        raise ParseError(f"invalid 'draft': {exc}", path) from exc

    explicit_slug = str(meta.get("slug") or "").strip()
    description = meta.get("description") or meta.get("summary") or ""
    return Document(
        path=path,
        slug=slug_for_path(path, explicit_slug),
        title=str(title).strip(),
        date=date,
        body=normalize_list_spacing(body),
        draft=draft,
        description=str(description).strip(),
        tags=get_tags(meta),
    )


def normalize_list_spacing(text: str) -> str:
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        list_match = LIST_MARKER_RE.match(line)
        if list_match and not list_match.group("indent"):
            if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                out.append("")
        out.append(line)
    return "\n".join(out)


def count_words(text: str) -> int:
    text = html_lib.unescape(text)
    cjk_count = len(CJK_RE.findall(text))
    text = CJK_RE.sub(" ", text)
    word_count = len(WORD_RE.findall(text))
    return cjk_count + word_count
