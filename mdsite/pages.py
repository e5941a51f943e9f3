from __future__ import annotations

import html
import math
from dataclasses import dataclass

from .config import SiteConfig
from .content import Document, slugify
from .render import Fragment
from .templates import compose_page, tag_links
from .utils import iso_date, join_url, rfc822_date

FEED_LIMIT = 20


@dataclass(frozen=True)
class RenderedPage:
    path: str
    text: str


def page_url(page: int) -> str:
    if page == 1:
        return "index.html"
    return f"page-{page}.html"


def page_count(config: SiteConfig, total: int) -> int:
    if config.posts_per_page <= 0:
        return 1
    return max(1, math.ceil(total / config.posts_per_page))


def group_tags(documents: list[Document]) -> dict[str, tuple[str, list[Document]]]:
    """Map tag slug -> (display name, documents); the first spelling seen wins."""
    groups: dict[str, tuple[str, list[Document]]] = {}
    for doc in documents:
        for tag in doc.tags:
            name, items = groups.setdefault(slugify(tag), (tag, []))
            if doc not in items:
                items.append(doc)
    return groups


def planned_outputs(config: SiteConfig, documents: list[Document]) -> list[tuple[str, str]]:
    """Output paths of the generated pages, paired with a label naming their owner."""
    outputs = [(page_url(page), "<index>") for page in range(1, page_count(config, len(documents)) + 1)]
    if config.enable_404:
        outputs.append(("404.html", "<404 page>"))
    if config.enable_tags:
        for slug in sorted(group_tags(documents)):
            outputs.append((f"tags/{slug}.html", f"<tag page {slug}>"))
    if config.base_url:
        if config.enable_rss:
            outputs.append(("rss.xml", "<rss feed>"))
        if config.enable_sitemap:
            outputs.append(("sitemap.xml", "<sitemap>"))
    return outputs


def build_post_list(documents: list[Document], fragments: dict[str, Fragment], config: SiteConfig, root: str) -> str:
    if not documents:
        return '<p class="post-list-empty">No posts yet.</p>'
    items = []
    for doc in documents:
        fragment = fragments[doc.path]
        summary = doc.description or fragment.summary
        items.append(
            '<li class="post-item">'
            f'<time datetime="{iso_date(doc.date)}">{doc.date.strftime(config.date_format)}</time>'
            f'<a class="post-link" href="{root}/{doc.slug}.html">{html.escape(doc.title)}</a>'
            f'<p class="post-summary">{html.escape(summary)}</p>'
            f"{tag_links(doc.tags, root, config.enable_tags)}"
            "</li>"
        )
    return f'<ul class="post-list">{"".join(items)}</ul>'


def build_pagination(page: int, total_pages: int) -> str:
    if total_pages <= 1:
        return ""
    items = []
    if page > 1:
        items.append(f'<a class="page-link" href="./{page_url(page - 1)}">Previous</a>')
    else:
        items.append('<span class="page-link is-disabled">Previous</span>')
    numbers = []
    for num in range(1, total_pages + 1):
        if num == page:
            numbers.append(f'<span class="page-number is-active">{num}</span>')
        else:
            numbers.append(f'<a class="page-number" href="./{page_url(num)}">{num}</a>')
    items.append(f'<div class="page-numbers">{"".join(numbers)}</div>')
    if page < total_pages:
        items.append(f'<a class="page-link" href="./{page_url(page + 1)}">Next</a>')
    else:
        items.append('<span class="page-link is-disabled">Next</span>')
    return f'<nav class="pagination">{"".join(items)}</nav>'


def build_index(shell: str, documents: list[Document], fragments: dict[str, Fragment], config: SiteConfig) -> list[RenderedPage]:
    root = "."
    per_page = config.posts_per_page if config.posts_per_page > 0 else max(1, len(documents))
    total_pages = page_count(config, len(documents))
    pages = []
    for page in range(1, total_pages + 1):
        start = (page - 1) * per_page
        page_docs = documents[start : start + per_page]
        content = (
            '<section class="list">'
            "<h1>Posts</h1>"
            f"{build_post_list(page_docs, fragments, config, root)}"
            f"{build_pagination(page, total_pages)}"
            "</section>"
        )
        title = config.title if page == 1 else f"Page {page}"
        html_doc = compose_page(
            shell,
            config,
            title=title,
            content=content,
            root=root,
            canonical_path=page_url(page),
            body_class="page-list",
        )
        pages.append(RenderedPage(page_url(page), html_doc))
    return pages


def build_tag_pages(
    shell: str, documents: list[Document], fragments: dict[str, Fragment], config: SiteConfig
) -> list[RenderedPage]:
    root = ".."
    pages = []
    for slug, (name, items) in sorted(group_tags(documents).items()):
        content = (
            '<section class="list">'
            f"<h1>{html.escape(name)}</h1>"
            f"{build_post_list(items, fragments, config, root)}"
            "</section>"
        )
        path = f"tags/{slug}.html"
        html_doc = compose_page(
            shell,
            config,
            title=name,
            content=content,
            root=root,
            canonical_path=path,
            body_class="page-tag",
        )
        pages.append(RenderedPage(path, html_doc))
    return pages


def build_404(shell: str, config: SiteConfig) -> RenderedPage:
    root = "."
    content = (
        '<section class="error-404">'
        "<h1>404</h1>"
        "<p>Page not found.</p>"
        f'<a href="{root}/index.html">Back to home</a>'
        "</section>"
    )
    return RenderedPage("404.html", compose_page(shell, config, title="404 Page not found", content=content, root=root))


def build_rss(documents: list[Document], fragments: dict[str, Fragment], config: SiteConfig) -> RenderedPage:
    site_url = config.base_url.rstrip("/")
    items = []
    for doc in documents[:FEED_LIMIT]:
        link = join_url(site_url, f"{doc.slug}.html")
        summary = doc.description or fragments[doc.path].summary
        items.append(
            "\n".join(
                [
                    "<item>",
                    f"<title>{html.escape(doc.title)}</title>",
                    f"<link>{link}</link>",
                    f"<guid>{link}</guid>",
                    f"<pubDate>{rfc822_date(doc.date)}</pubDate>",
                    f"<description>{html.escape(summary)}</description>",
                    "</item>",
                ]
            )
        )
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0">',
        "<channel>",
        f"<title>{html.escape(config.title)}</title>",
        f"<link>{site_url}/</link>",
        f"<description>{html.escape(config.description)}</description>",
        f"<language>{html.escape(config.language)}</language>",
    ]
    # The newest post date keeps the feed stable across rebuilds.
    if documents:
        lines.append(f"<lastBuildDate>{rfc822_date(documents[0].date)}</lastBuildDate>")
    lines.extend(items)
    lines.extend(["</channel>", "</rss>"])
    return RenderedPage("rss.xml", "\n".join(lines) + "\n")


def build_sitemap(documents: list[Document], config: SiteConfig) -> RenderedPage:
    site_url = config.base_url.rstrip("/")
    urls = [(site_url + "/", None)]
    for page in range(2, page_count(config, len(documents)) + 1):
        urls.append((join_url(site_url, page_url(page)), None))
    for doc in documents:
        urls.append((join_url(site_url, f"{doc.slug}.html"), doc.date))
    if config.enable_tags:
        for slug in sorted(group_tags(documents)):
            urls.append((join_url(site_url, f"tags/{slug}.html"), None))
    items = []
    for url, lastmod in urls:
        lines = ["<url>", f"<loc>{html.escape(url)}</loc>"]
        if lastmod:
            lines.append(f"<lastmod>{lastmod.date().isoformat()}</lastmod>")
        lines.append("</url>")
        items.append("\n".join(lines))
    sitemap = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            "\n".join(items),
            "</urlset>",
        ]
    )
    return RenderedPage("sitemap.xml", sitemap + "\n")
