from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, TypeVar

from .assets import compile_stylesheets, copy_static, custom_stylesheet_sources
from .cache import hash_paths, list_files
from .config import SiteConfig
from .content import Document, parse_document
from .errors import CollisionError, ParseError, SiteError
from .loader import Source, iter_sources
from .pages import RenderedPage, build_404, build_index, build_rss, build_sitemap, build_tag_pages, planned_outputs
from .render import Fragment, fix_relative_img_src, render_fragment
from .templates import DEFAULT_LAYOUT, compose_document, load_shell, root_for
from .utils import clean_output_dir, write_text

logger = logging.getLogger(__name__)

MAX_WORKERS = 32

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BuildReport:
    pages: list[str] = field(default_factory=list)
    assets: list[str] = field(default_factory=list)
    drafts: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        lines = [f"{len(self.pages)} pages written, {len(self.drafts)} drafts skipped, {len(self.failures)} failed."]
        for path, reason in sorted(self.failures.items()):
            lines.append(f"  {path}: {reason}")
        return "\n".join(lines)


def resolve_workers(requested: int) -> int:
    workers = requested if requested > 0 else (os.cpu_count() or 1)
    return max(1, min(workers, MAX_WORKERS))


def map_parallel(func: Callable[[T], R], items: list[T], workers: int) -> list[R]:
    workers = min(workers, len(items))
    if workers <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(func, items))


def plan_outputs(config: SiteConfig, documents: list[Document]) -> dict[str, str]:
    """Map every output path to the single source that owns it; a second owner is fatal."""
    owners: dict[str, str] = {}
    entries = [(f"{doc.slug}.html", doc.path) for doc in documents]
    entries.extend(planned_outputs(config, documents))
    for output, owner in entries:
        if output in owners:
            raise CollisionError(output, owners[output], owner)
        owners[output] = owner
    return owners


def load_documents(sources: Iterable[Source], config: SiteConfig, report: BuildReport, workers: int) -> list[Document]:
    def parse(source: Source) -> Document | ParseError:
        try:
            return parse_document(source.path, source.text)
        except ParseError as exc:
            return exc

    sources = list(sources)
    documents = []
    for source, result in zip(sources, map_parallel(parse, sources, workers)):
        if isinstance(result, ParseError):
            logger.error("Failed to parse %s", result)
            report.failures[source.path] = result.reason
            continue
        if result.draft and not config.include_drafts:
            logger.info("Skipping draft %s", result.path)
            report.drafts.append(result.path)
            continue
        documents.append(result)
    documents.sort(key=lambda doc: doc.sort_key, reverse=True)
    return documents


def build_site(config: SiteConfig) -> BuildReport:
    """Run one full build. Per-document failures land in the report; build-fatal errors raise."""
    report = BuildReport()
    workers = resolve_workers(config.build_workers)
    shell = load_shell(config.layout)
    custom_stylesheet_sources(config)

    def record_unreadable(path: str, exc: Exception) -> None:
        report.failures[path] = f"unreadable: {exc}"

    sources = iter_sources(config.content_dir, on_error=record_unreadable)
    documents = load_documents(sources, config, report, workers)
    plan_outputs(config, documents)

    def render(doc: Document) -> tuple[Fragment, RenderedPage]:
        output = f"{doc.slug}.html"
        root = root_for(output)
        fragment = render_fragment(doc.body, highlight=config.highlight_code, summary=doc.description)
        fragment = Fragment(
            html=fix_relative_img_src(fragment.html, root),
            toc=fragment.toc,
            summary=fragment.summary,
            words=fragment.words,
        )
        return fragment, RenderedPage(output, compose_document(shell, fragment, doc, config, root))

    rendered = map_parallel(render, documents, workers)
    fragments = {doc.path: fragment for doc, (fragment, _) in zip(documents, rendered)}
    pages = [page for _, page in rendered]
    pages.extend(build_index(shell, documents, fragments, config))
    if config.enable_tags:
        pages.extend(build_tag_pages(shell, documents, fragments, config))
    if config.enable_404:
        pages.append(build_404(shell, config))
    if config.base_url:
        if config.enable_rss:
            pages.append(build_rss(documents, fragments, config))
        if config.enable_sitemap:
            pages.append(build_sitemap(documents, config))

    output_dir = config.output_dir
    if config.clean:
        protected = [config.content_dir, config.static_dir, config.layout or DEFAULT_LAYOUT]
        clean_output_dir(output_dir, protected)
    output_dir.mkdir(parents=True, exist_ok=True)
    copied = copy_static(config.static_dir, output_dir)
    if copied:
        logger.info("Copied %d static files from %s", copied, config.static_dir)
    for page in sorted(pages, key=lambda p: p.path):
        write_text(output_dir / page.path, page.text)
        report.pages.append(page.path)
    report.assets = compile_stylesheets(config, output_dir)
    logger.info("Wrote %d pages to %s", len(report.pages), output_dir)
    return report


def input_fingerprint(config: SiteConfig, extra_paths: Iterable[Path] = ()) -> str:
    paths = list_files(config.content_dir) + list_files(config.static_dir)
    if config.layout is not None:
        paths.extend(list_files(config.layout))
    for path in extra_paths:
        paths.extend(list_files(path))
    return hash_paths(paths)


def watch(
    make_config: Callable[[], SiteConfig],
    interval: float = 1.0,
    on_build: Optional[Callable[[Optional[BuildReport]], None]] = None,
    extra_paths: Iterable[Path] = (),
    max_builds: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Poll the inputs and re-run the full build whenever their content hash changes.

    Runs until interrupted, or until ``max_builds`` builds have been attempted.
    Returns the number of builds attempted.
    """
    extra_paths = list(extra_paths)
    last = None
    builds = 0
    while max_builds is None or builds < max_builds:
        try:
            config = make_config()
            fingerprint = input_fingerprint(config, extra_paths)
        except (SiteError, OSError) as exc:
            logger.error("Cannot load configuration: %s", exc)
            sleep(interval)
            continue
        if fingerprint == last:
            sleep(interval)
            continue
        last = fingerprint
        builds += 1
        report = None
        try:
            report = build_site(config)
        except (SiteError, OSError) as exc:
            logger.error("Build failed: %s", exc)
        if on_build is not None:
            on_build(report)
    return builds
