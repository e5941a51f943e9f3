"""Tests for the page shell and slot substitution."""

from __future__ import annotations

import datetime as dt
import tempfile
import unittest
from pathlib import Path

from mdsite.config import SiteConfig
from mdsite.content import Document
from mdsite.errors import TemplateError
from mdsite.render import render_fragment
from mdsite.templates import (
    INVERTED_STYLESHEET,
    RTL_STYLESHEET,
    compose_document,
    compose_page,
    load_shell,
    render_template,
    root_for,
)


class TestRenderTemplate(unittest.TestCase):
    def test_fills_slots_and_blanks_unbound_ones(self) -> None:
        out = render_template("<b>{{ name }}</b>{{missing}}|", name="x")
        self.assertEqual(out, "<b>x</b>|")

    def test_values_are_not_rescanned(self) -> None:
        out = render_template("{{ content }}/{{ title }}", content="{{ title }}", title="T")
        self.assertEqual(out, "{{ title }}/T")


class TestLoadShell(unittest.TestCase):
    def test_default_shell_has_mandatory_slots(self) -> None:
        shell = load_shell()
        self.assertIn("{{ title }}", shell)
        self.assertIn("{{ content }}", shell)

    def test_shell_without_content_slot_is_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "baseof.html"
            path.write_text("<title>{{ title }}</title>", encoding="utf-8")
            with self.assertRaises(TemplateError):
                load_shell(path)

    def test_missing_shell_is_rejected(self) -> None:
        with self.assertRaises(TemplateError):
            load_shell(Path("/nonexistent/baseof.html"))


class TestComposePage(unittest.TestCase):
    def setUp(self) -> None:
        self.shell = load_shell()

    def test_title_pattern(self) -> None:
        html = compose_page(self.shell, SiteConfig(title="Site"), title="Post", content="<p>x</p>", root=".")
        self.assertIn("<title>Post | Site</title>", html)
        self.assertIn("<p>x</p>", html)

    def test_empty_title_is_an_invariant_violation(self) -> None:
        with self.assertRaises(TemplateError):
            compose_page(self.shell, SiteConfig(), title="", content="x", root=".")

    def test_missing_content_is_an_invariant_violation(self) -> None:
        with self.assertRaises(TemplateError):
            compose_page(self.shell, SiteConfig(), title="T", content=None, root=".")

    def test_rtl_stylesheet_follows_flag(self) -> None:
        on = compose_page(self.shell, SiteConfig(theme_rtl=True), title="T", content="", root="..")
        off = compose_page(self.shell, SiteConfig(theme_rtl=False), title="T", content="", root="..")
        self.assertIn(f'href="../{RTL_STYLESHEET}"', on)
        self.assertIn('dir="rtl"', on)
        self.assertNotIn(RTL_STYLESHEET, off)
        self.assertIn('dir="ltr"', off)

    def test_inverted_stylesheet_follows_flag(self) -> None:
        on = compose_page(self.shell, SiteConfig(theme_inverted=True), title="T", content="", root=".")
        off = compose_page(self.shell, SiteConfig(), title="T", content="", root=".")
        self.assertIn(INVERTED_STYLESHEET, on)
        self.assertIn('class="inverted"', on)
        self.assertNotIn(INVERTED_STYLESHEET, off)

    def test_custom_stylesheets_keep_order(self) -> None:
        config = SiteConfig(custom_stylesheets=("css/b.css", "css/a.css"))
        html = compose_page(self.shell, config, title="T", content="", root=".")
        self.assertLess(html.index("css/b.css"), html.index("css/a.css"))

    def test_analytics_only_with_id(self) -> None:
        with_id = compose_page(self.shell, SiteConfig(analytics_id="G-123"), title="T", content="", root=".")
        without = compose_page(self.shell, SiteConfig(), title="T", content="", root=".")
        self.assertIn("gtag/js?id=G-123", with_id)
        self.assertNotIn("gtag", without)

    def test_title_is_escaped(self) -> None:
        html = compose_page(self.shell, SiteConfig(title_pattern="{title}"), title="<a&b>", content="", root=".")
        self.assertIn("<title>&lt;a&amp;b&gt;</title>", html)


class TestComposeDocument(unittest.TestCase):
    def test_wraps_fragment_in_article(self) -> None:
        doc = Document(
            path="hello.md",
            slug="hello",
            title="Hello",
            date=dt.datetime(2024, 1, 1),
            body="# Hi\n\nworld",
            tags=("python",),
        )
        fragment = render_fragment(doc.body)
        html = compose_document(load_shell(), fragment, doc, SiteConfig(title_pattern="{title}"), ".")
        self.assertIn("<title>Hello</title>", html)
        self.assertRegex(html, r"<h1[^>]*>Hi</h1>")
        self.assertIn("<p>world</p>", html)
        self.assertIn('datetime="2024-01-01T00:00:00Z"', html)
        self.assertIn('href="./tags/python.html"', html)
        self.assertNotIn('class="toc"', html)

    def test_headings_produce_table_of_contents(self) -> None:
        doc = Document(
            path="guide.md",
            slug="guide",
            title="Guide",
            date=dt.datetime(2024, 1, 1),
            body="Intro.\n\n## Setup\n\nText.\n\n## Usage\n\nMore.",
        )
        html = compose_document(load_shell(), render_fragment(doc.body), doc, SiteConfig(), ".")
        start = html.index('<nav class="toc">')
        nav = html[start : html.index("</nav>", start)]
        self.assertIn('href="#setup"', nav)
        self.assertLess(nav.index("Setup"), nav.index("Usage"))
        self.assertLess(html.index('<nav class="toc">'), html.index('<div class="post-content">'))


class TestRootFor(unittest.TestCase):
    def test_depth(self) -> None:
        self.assertEqual(root_for("index.html"), ".")
        self.assertEqual(root_for("posts/a.html"), "..")
        self.assertEqual(root_for("a/b/c.html"), "../..")


if __name__ == "__main__":
    unittest.main()
