"""Tests for the command line entry point."""

from __future__ import annotations

import contextlib
import io
import tempfile
import unittest
from pathlib import Path

from mdsite.cli import EXIT_DOCUMENT_FAILURES, EXIT_FATAL, EXIT_OK, main


class TestMain(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "content").mkdir()
        self.config_path = self.root / "site.toml"
        self.config_path.write_text('title = "CLI Blog"\ntheme_inverted = true\n', encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write(self, rel: str, text: str) -> None:
        (self.root / "content" / rel).write_text(text, encoding="utf-8")

    def run_main(self, *args: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(["--config", str(self.config_path), "-q", *args])
        return code, out.getvalue(), err.getvalue()

    def test_successful_build(self) -> None:
        self.write("a.md", "---\ntitle: A\ndate: 2024-01-01\n---\nHello\n")
        code, out, _ = self.run_main()
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Build completed", out)
        html = (self.root / "public" / "a.html").read_text(encoding="utf-8")
        self.assertIn("CLI Blog", html)
        self.assertIn("style-inverted.min.css", html)

    def test_document_failures_exit_non_zero(self) -> None:
        self.write("a.md", "---\ntitle: A\ndate: 2024-01-01\n---\nHello\n")
        self.write("b.md", "---\ndate: 2024-01-01\n---\nNo title\n")
        code, _, err = self.run_main()
        self.assertEqual(code, EXIT_DOCUMENT_FAILURES)
        self.assertIn("b.md", err)
        self.assertTrue((self.root / "public" / "a.html").exists())

    def test_collision_is_fatal(self) -> None:
        self.write("a.md", "---\ntitle: A\ndate: 2024-01-01\nslug: b\n---\n")
        self.write("b.md", "---\ntitle: B\ndate: 2024-01-01\n---\n")
        code, _, err = self.run_main()
        self.assertEqual(code, EXIT_FATAL)
        self.assertIn("b.html", err)

    def test_command_line_overrides_config(self) -> None:
        self.write("d.md", "---\ntitle: D\ndate: 2024-01-01\ndraft: true\n---\n")
        out_dir = self.root / "elsewhere"
        code, _, _ = self.run_main("--output", str(out_dir), "--drafts", "--workers", "1")
        self.assertEqual(code, EXIT_OK)
        self.assertTrue((out_dir / "d.html").exists())

    def test_invalid_config_is_fatal(self) -> None:
        self.config_path.write_text("title = [", encoding="utf-8")
        code, _, err = self.run_main()
        self.assertEqual(code, EXIT_FATAL)
        self.assertIn("Invalid TOML", err)

    def test_bad_title_pattern_is_fatal(self) -> None:
        self.write("a.md", "---\ntitle: A\ndate: 2024-01-01\n---\nHello\n")
        self.config_path.write_text('title_pattern = "{title} - {sitename}"\n', encoding="utf-8")
        code, _, err = self.run_main()
        self.assertEqual(code, EXIT_FATAL)
        self.assertIn("title_pattern", err)
        self.assertFalse((self.root / "public").exists())


if __name__ == "__main__":
    unittest.main()
