"""Site assembly: pages, index, breadcrumbs, related links, report and search index"""

import json
import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional

from mdsite.core.models import BuildReport, BuildResult, Document, LinkGraph, LinkKind, Problem, ProblemKind
from mdsite.core.templating import Templates, create_environment
from mdsite.core.utils.paths import output_path, relative_url
from mdsite.core.utils.slug import titleize, unique_anchors


logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"
SEARCH_INDEX_FILE = "search-index.json"


def _write_text(path: Path, content: str) -> None:
    """Write with LF newlines and a trailing newline so output is byte-stable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if not content.endswith("\n"):
        content += "\n"
    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(content)


def page_map(paths: Iterable[str]) -> dict[str, str]:
    """Output page -> source path. The first path in sorted order owns a page."""
    pages: dict[str, str] = {}
    for path in sorted(paths):
        pages.setdefault(output_path(path), path)
    return pages


def output_collisions(paths: Iterable[str]) -> list[Problem]:
    """One problem per document whose page is already owned by another (a.md and a.mdx)."""
    paths = sorted(paths)
    pages = page_map(paths)
    return [
        Problem(
            kind=ProblemKind.output_collision, path=path, target=pages[output_path(path)],
            detail=f"{output_path(path)} is written for {pages[output_path(path)]}",
        )
        for path in paths
        if pages[output_path(path)] != path
    ]


def listing_file(pages: Iterable[str]) -> str:
    """Name of the generated index page; moves aside when a document renders to index.html."""
    taken = set(pages)
    name = INDEX_FILE
    while name in taken:
        name = f"_{name}"
    return name


def group_anchors(directories: Iterable[str]) -> dict[str, str]:
    """Index section id per source directory; 'a/b' and 'a-b' still get distinct ids."""
    ordered = sorted(set(directories), key=lambda d: (d != '', d))
    anchors = unique_anchors([f"dir-{d}" if d else "dir-root" for d in ordered])
    return dict(zip(ordered, anchors))


def breadcrumbs(
    doc: Document,
    site_title: str,
    anchors: dict[str, str],
    index_file: str = INDEX_FILE,
    ) -> list[tuple[str, Optional[str]]]:
    """Home -> each directory segment -> document title. Segments link to their index group if it exists."""
    page = output_path(doc.path)
    home = relative_url(page, index_file)
    crumbs: list[tuple[str, Optional[str]]] = [(site_title, home)]
    segments = doc.directory.split('/') if doc.directory else []
    for i, segment in enumerate(segments):
        directory = '/'.join(segments[:i + 1])
        url = f"{home}#{anchors[directory]}" if directory in anchors else None
        crumbs.append((titleize(segment), url))
    crumbs.append((doc.title, None))
    return crumbs


def see_also(path: str, graph: LinkGraph, documents: dict[str, Document]) -> list[tuple[str, str]]:
    """Internal-valid outbound link targets: deduplicated, original order, no self-links."""
    seen: set[str] = set()
    related = []
    for link in graph.outbound.get(path, []):
        if link.kind != LinkKind.valid or link.is_image or link.resolved == path or link.resolved in seen:
            continue
        seen.add(link.resolved)
        url = relative_url(output_path(path), output_path(link.resolved))
        related.append((documents[link.resolved].title, url))
    return related


def referenced_by(path: str, graph: LinkGraph, documents: dict[str, Document]) -> list[tuple[str, str]]:
    """Documents linking to path, sorted by source path."""
    sources = sorted({link.source for link in graph.inbound.get(path, [])})
    return [
        (documents[src].title, relative_url(output_path(path), output_path(src)))
        for src in sources
    ]


def index_groups(documents: dict[str, Document], anchors: dict[str, str] | None = None) -> list[dict]:
    """Documents grouped by source subdirectory; root group first, then sorted by directory."""
    by_dir: dict[str, list[Document]] = {}
    for doc in documents.values():
        by_dir.setdefault(doc.directory, []).append(doc)
    anchors = anchors or group_anchors(by_dir)
    groups = []
    for directory in sorted(by_dir, key=lambda d: (d != '', d)):
        groups.append({
            "label": directory or "/",
            "anchor": anchors[directory],
            "entries": [
                {"title": d.title, "url": output_path(d.path), "status": d.status}
                for d in sorted(by_dir[directory], key=lambda d: d.path)
            ],
        })
    return groups


def search_index(documents: dict[str, Document]) -> list[dict]:
    return [
        {
            "path": output_path(doc.path),
            "source": doc.path,
            "title": doc.title,
            "status": doc.status,
            "headings": [s.text for s in doc.sections],
            "content": doc.body,
        }
        for doc in sorted(documents.values(), key=lambda d: d.path)
    ]


def copy_images(result: BuildResult, root: Path, out: Path) -> list[str]:
    """Copy internal images that exist inside root to the same relative location in out."""
    copied = []
    wanted = sorted({
        link.resolved for link in result.graph.links
        if link.is_image and link.kind == LinkKind.valid and not link.resolved.startswith('../')
    })
    for rel in wanted:
        dest = out / rel
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(root / rel, dest)
        copied.append(rel)
    return copied


def write_site(
    result: BuildResult,
    root: Path,
    out: Path,
    site_title: str = "Documentation",
    report_file: str = "build-report.json",
    with_search_index: bool = True,
    templates: Templates | None = None,
    ) -> list[str]:
    """Emit the static output tree. Returns output-relative paths written, sorted.

    Each page is written once; when two sources map to the same page the first
    in sorted order wins (the pipeline reports the other as output_collision).
    """
    templates = templates or create_environment()
    out.mkdir(parents=True, exist_ok=True)
    pages = page_map(result.documents)
    docs = {path: result.documents[path] for path in pages.values()}
    anchors = group_anchors(d.directory for d in docs.values())
    index_file = listing_file(pages)
    if index_file != INDEX_FILE:
        logger.info("A document renders to %s; writing the generated index to %s", INDEX_FILE, index_file)
    written: list[str] = []

    for page, path in sorted(pages.items()):
        doc, rendered = docs[path], result.rendered[path]
        _write_text(out / page, templates.render_page({
            "site_title": site_title,
            "title": doc.title,
            "status": doc.status,
            "last_updated": doc.last_updated,
            "breadcrumbs": breadcrumbs(doc, site_title, anchors, index_file),
            "toc": rendered.toc,
            "body": rendered.html,
            "see_also": see_also(path, result.graph, result.documents),
            "referenced_by": referenced_by(path, result.graph, result.documents),
        }))
        logger.debug("Wrote %s", page)
        written.append(page)

    _write_text(out / index_file, templates.render_index({
        "site_title": site_title,
        "title": "Index",
        "groups": index_groups(docs, anchors),
    }))
    written.append(index_file)

    written.extend(copy_images(result, root, out))

    if with_search_index:
        _write_text(out / SEARCH_INDEX_FILE, json.dumps(search_index(docs), indent=2, ensure_ascii=False))
        written.append(SEARCH_INDEX_FILE)

    _write_text(out / report_file, BuildReport.from_result(result).model_dump_json(indent=2))
    written.append(report_file)
    return sorted(written)
