from __future__ import annotations

import html
import re
from dataclasses import dataclass

import markdown

from .content import count_words

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
SPACE_RE = re.compile(r"\s+")
SUMMARY_LENGTH = 200


@dataclass(frozen=True)
class Fragment:
    html: str
    toc: str
    summary: str
    words: int


def _make_markdown(highlight: bool) -> markdown.Markdown:
    extensions = ["fenced_code", "tables", "toc"]
    extension_configs: dict = {"toc": {"toc_depth": "2-4"}}
    if highlight:
        extensions.append("codehilite")
        extension_configs["codehilite"] = {"guess_lang": False, "css_class": "highlight"}
    return markdown.Markdown(extensions=extensions, extension_configs=extension_configs)


def render_markdown(text: str, highlight: bool = False) -> str:
    return _make_markdown(highlight).convert(text)


def render_fragment(text: str, highlight: bool = False, summary: str = "") -> Fragment:
    md = _make_markdown(highlight)
    html_content = md.convert(text)
    plain = html.unescape(SPACE_RE.sub(" ", strip_tags(html_content))).strip()
    if not summary:
        summary = plain[:SUMMARY_LENGTH] + ("..." if len(plain) > SUMMARY_LENGTH else "")
    return Fragment(
        html=html_content,
        toc=md.toc if "<li" in md.toc else "",
        summary=summary,
        words=count_words(plain),
    )


def fix_relative_img_src(html_text: str, root: str) -> str:
    def repl(match: re.Match) -> str:
        attrs = match.group(1)
        src = match.group(2)
        if src.startswith(("http://", "https://", "data:", "#", "/", "./", "../")):
            return match.group(0)
        return f'<img{attrs}src="{root}/{src}"'

    return IMG_SRC_RE.sub(repl, html_text)


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)
