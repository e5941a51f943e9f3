"""Discovery of Markdown sources under a content directory."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = {".md", ".markdown"}

ErrorCallback = Callable[[str, Exception], None]


@dataclass(frozen=True)
class Source:
    path: str
    text: str


def list_markdown_files(root: Path) -> list[Path]:
    files = []
    for path in root.rglob("*"):
        rel = path.relative_to(root)
        if any(part.startswith((".", "_")) for part in rel.parts):
            continue
        if path.suffix.lower() in MARKDOWN_SUFFIXES and path.is_file():
            files.append(path)
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


def iter_sources(root: Path, on_error: Optional[ErrorCallback] = None) -> Iterator[Source]:
    """Return a lazy iterator over the Markdown sources below ``root``.

    The root is checked immediately, so a missing or unreadable directory
    raises ``OSError`` here rather than on first iteration. Files that fail
    to read later are skipped with a warning and handed to ``on_error``.
    """
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"Content directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Content path is not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise PermissionError(f"Content directory is not readable: {root}")
    return _read_sources(root, on_error)


def _read_sources(root: Path, on_error: Optional[ErrorCallback]) -> Iterator[Source]:
    for path in list_markdown_files(root):
        rel = path.relative_to(root).as_posix()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable file %s: %s", rel, exc)
            if on_error is not None:
                on_error(rel, exc)
            continue
        logger.debug("Loaded %s", rel)
        yield Source(rel, text)


class ContentTree:
    """Restartable view of a content directory: every iteration re-reads the tree."""

    def __init__(self, root: Path, on_error: Optional[ErrorCallback] = None) -> None:
        self.root = Path(root)
        self.on_error = on_error

    def __iter__(self) -> Iterator[Source]:
        return iter_sources(self.root, self.on_error)
