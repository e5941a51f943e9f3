"""Page shell loading and slot substitution."""

from __future__ import annotations

import html
import json
import re
from pathlib import Path, PurePosixPath
from typing import Optional

from .config import SiteConfig
from .content import Document, slugify
from .errors import TemplateError
from .render import Fragment
from .utils import iso_date

SLOT_RE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")
MANDATORY_SLOTS = ("title", "content")
DEFAULT_LAYOUT = Path(__file__).parent / "layouts" / "baseof.html"

BASE_STYLESHEET = "css/style.min.css"
RTL_STYLESHEET = "css/style-rtl.min.css"
INVERTED_STYLESHEET = "css/style-inverted.min.css"
SYNTAX_STYLESHEET = "css/syntax.min.css"


def render_template(template: str, **context: Optional[str]) -> str:
    """Fill ``{{ name }}`` slots in one pass; unbound slots render nothing."""

    def repl(match: re.Match) -> str:
        value = context.get(match.group(1))
        return "" if value is None else value

    return SLOT_RE.sub(repl, template)


def load_shell(path: Optional[Path] = None) -> str:
    path = Path(path) if path is not None else DEFAULT_LAYOUT
    try:
        shell = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateError(f"Cannot read page shell {path}: {exc}") from exc
    slots = set(SLOT_RE.findall(shell))
    missing = [slot for slot in MANDATORY_SLOTS if slot not in slots]
    if missing:
        raise TemplateError(f"Page shell {path} has no slot for: {', '.join(missing)}")
    return shell


def root_for(output_path: str) -> str:
    depth = len(PurePosixPath(output_path).parent.parts)
    return "/".join([".."] * depth) if depth else "."


def stylesheet_paths(config: SiteConfig) -> list[str]:
    paths = [BASE_STYLESHEET]
    if config.highlight_code:
        paths.append(SYNTAX_STYLESHEET)
    if config.theme_rtl:
        paths.append(RTL_STYLESHEET)
    if config.theme_inverted:
        paths.append(INVERTED_STYLESHEET)
    paths.extend(path.lstrip("/") for path in config.custom_stylesheets)
    return paths


def stylesheet_links(config: SiteConfig, root: str) -> str:
    return "\n".join(
        f'<link rel="stylesheet" href="{html.escape(root)}/{html.escape(path)}">'
        for path in stylesheet_paths(config)
    )


def analytics_snippet(config: SiteConfig) -> str:
    if not config.analytics_id:
        return ""
    tag = config.analytics_id
    return (
        f'<script async src="https://www.googletagmanager.com/gtag/js?id={html.escape(tag)}"></script>\n'
        "<script>\n"
        "window.dataLayer = window.dataLayer || [];\n"
        "function gtag(){dataLayer.push(arguments);}\n"
        "gtag('js', new Date());\n"
        f"gtag('config', {json.dumps(tag)});\n"
        "</script>"
    )


def page_title(config: SiteConfig, title: str) -> str:
    if not title or title == config.title:
        return config.title
    return config.title_pattern.format(title=title, site=config.title)


def compose_page(
    shell: str,
    config: SiteConfig,
    *,
    title: Optional[str],
    content: Optional[str],
    root: str,
    description: str = "",
    keywords: str = "",
    canonical_path: str = "",
    body_class: str = "",
) -> str:
    if title is None or not title.strip():
        raise TemplateError("Cannot bind mandatory slot 'title'")
    if content is None:
        raise TemplateError(f"Cannot bind mandatory slot 'content' for page {title!r}")

    canonical = ""
    if config.base_url and canonical_path:
        href = f"{config.base_url.rstrip('/')}/{canonical_path.lstrip('/')}"
        canonical = f'<link rel="canonical" href="{html.escape(href)}">'
    feed_link = ""
    if config.base_url and config.enable_rss:
        feed_link = (
            f'<link rel="alternate" type="application/rss+xml" '
            f'title="{html.escape(config.title)}" href="{html.escape(root)}/rss.xml">'
        )
    copyright_text = config.copyright or (f"© {config.author}" if config.author else "")
    classes = [body_class] if body_class else []
    if config.theme_inverted:
        classes.append("inverted")

    return render_template(
        shell,
        lang=html.escape(config.language),
        dir="rtl" if config.theme_rtl else "ltr",
        title=html.escape(page_title(config, title)),
        site_title=html.escape(config.title),
        author=html.escape(config.author),
        description=html.escape(description or config.description),
        keywords=html.escape(keywords),
        root=root,
        canonical=canonical,
        stylesheets=stylesheet_links(config, root),
        feed_link=feed_link,
        body_class=" ".join(classes),
        content=content,
        copyright=html.escape(copyright_text),
        analytics=analytics_snippet(config),
    )


def tag_links(tags: tuple[str, ...], root: str, linked: bool) -> str:
    if not tags:
        return ""
    if linked:
        items = [
            f'<a class="tag" href="{root}/tags/{slugify(tag)}.html">{html.escape(tag)}</a>' for tag in tags
        ]
    else:
        items = [f'<span class="tag">{html.escape(tag)}</span>' for tag in tags]
    return f'<span class="tags">{" ".join(items)}</span>'


def toc_nav(toc: str) -> str:
    if not toc:
        return ""
    return f'<nav class="toc">{toc}</nav>'


def compose_document(shell: str, fragment: Fragment, document: Document, config: SiteConfig, root: str) -> str:
    content = (
        '<article class="post">'
        "<header>"
        f'<h1 class="post-title">{html.escape(document.title)}</h1>'
        '<div class="post-meta">'
        f'<time datetime="{iso_date(document.date)}">{document.date.strftime(config.date_format)}</time>'
        f'<span class="post-words">{fragment.words} words</span>'
        f"{tag_links(document.tags, root, config.enable_tags)}"
        "</div>"
        f"{toc_nav(fragment.toc)}"
        "</header>"
        f'<div class="post-content">{fragment.html}</div>'
        f'<footer class="post-footer"><a href="{root}/index.html">Back to home</a></footer>'
        "</article>"
    )
    return compose_page(
        shell,
        config,
        title=document.title,
        content=content,
        root=root,
        description=document.description or fragment.summary,
        keywords=", ".join(document.tags),
        canonical_path=f"{document.slug}.html",
        body_class="page-post",
    )
