"""Tests for output cleaning and small helpers."""

from __future__ import annotations

import datetime as dt
import os
import tempfile
import unittest
from pathlib import Path

from mdsite.errors import ConfigError
from mdsite.utils import clean_output_dir, iso_date, join_url, parse_flag


class TestCleanOutputDir(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve()
        self.output = self.root / "public"
        (self.output / "old").mkdir(parents=True)
        (self.output / "old" / "stale.html").write_text("x", encoding="utf-8")
        self.addCleanup(os.chdir, os.getcwd())

    def test_removes_output_tree(self) -> None:
        clean_output_dir(self.output, [self.root / "content"])
        self.assertFalse(self.output.exists())

    def test_missing_output_is_a_no_op(self) -> None:
        clean_output_dir(self.root / "nowhere", [])

    def test_refuses_working_directory(self) -> None:
        os.chdir(self.output)
        with self.assertRaises(ConfigError):
            clean_output_dir(self.output, [])
        self.assertTrue(self.output.exists())

    def test_refuses_parent_of_working_directory(self) -> None:
        os.chdir(self.output / "old")
        with self.assertRaises(ConfigError):
            clean_output_dir(self.output, [])
        self.assertTrue((self.output / "old" / "stale.html").exists())

    def test_refuses_directory_holding_content(self) -> None:
        content = self.output / "content"
        content.mkdir()
        with self.assertRaises(ConfigError):
            clean_output_dir(self.output, [content])
        self.assertTrue(content.exists())


class TestHelpers(unittest.TestCase):
    def test_parse_flag(self) -> None:
        self.assertTrue(parse_flag("Yes"))
        self.assertFalse(parse_flag(None))
        with self.assertRaises(ValueError):
            parse_flag("maybe")

    def test_join_url(self) -> None:
        self.assertEqual(join_url("https://x.org/", "/a.html"), "https://x.org/a.html")
        self.assertEqual(join_url("https://x.org/", ""), "https://x.org")

    def test_iso_date_is_utc(self) -> None:
        value = dt.datetime(2024, 1, 1, 12, tzinfo=dt.timezone(dt.timedelta(hours=2)))
        self.assertEqual(iso_date(value), "2024-01-01T10:00:00Z")


if __name__ == "__main__":
    unittest.main()
