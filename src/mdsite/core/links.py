"""Link graph builder: extract links/images from documents and classify their targets"""

import logging
from pathlib import Path
from urllib.parse import unquote

from mdsite.core.models import Document, Link, LinkGraph, LinkKind, Problem, ProblemKind
from mdsite.core.utils.paths import is_external, resolve, split_target
from mdsite.core.utils.tokens import make_parser


logger = logging.getLogger(__name__)


def extract_references(body: str, parser_config: str = 'gfm-like') -> list[tuple[str, str, bool]]:
    """Return (target, text, is_image) for every link and image in document order.

    Code spans and fences are never scanned, so example links inside them are ignored.
    """
    refs = []
    for tok in make_parser(parser_config).parse(body):
        if tok.type != 'inline' or not tok.children:
            continue
        open_link = None
        text_parts: list[str] = []
        for child in tok.children:
            if child.type == 'link_open':
                open_link = unquote(str(child.attrGet('href') or ''))
                text_parts = []
            elif child.type == 'link_close' and open_link is not None:
                refs.append((open_link, ''.join(text_parts).strip(), False))
                open_link = None
            elif child.type == 'image':
                refs.append((unquote(str(child.attrGet('src') or '')), child.content, True))
                if open_link is not None:
                    text_parts.append(child.content)
            elif open_link is not None and child.type in ('text', 'code_inline'):
                text_parts.append(child.content)
    return refs


def classify(
    source: str,
    target: str,
    text: str,
    is_image: bool,
    known: set[str],
    root: Path | None = None,
    ) -> Link:
    """Classify one reference from source.

    Links are internal-valid when they resolve to a loaded document; images when
    the referenced file exists on disk under root.
    """
    if is_external(target):
        return Link(source=source, target=target, text=text, kind=LinkKind.external, is_image=is_image)

    path, fragment = split_target(target)
    resolved = resolve(source, path)
    if is_image and root is not None:
        try:
            ok = (root / resolved).is_file()
        except OSError as e:
            # over-long or otherwise unusable names count as missing
            logger.debug("Cannot stat image %s from %s: %s", resolved, source, e)
            ok = False
    else:
        ok = resolved in known
    return Link(
        source=source,
        target=target,
        text=text,
        kind=LinkKind.valid if ok else LinkKind.dangling,
        resolved=resolved,
        fragment=fragment,
        is_image=is_image,
    )


def build_graph(documents: list[Document], root: Path | None = None, parser_config: str = 'gfm-like') -> LinkGraph:
    """Build the full link graph over an already-loaded corpus."""
    known = {d.path for d in documents}
    graph = LinkGraph(
        outbound={d.path: [] for d in documents},
        inbound={d.path: [] for d in documents},
    )
    for doc in documents:
        for target, text, is_image in extract_references(doc.body, parser_config):
            link = classify(doc.path, target, text, is_image, known, root)
            graph.links.append(link)
            graph.outbound[doc.path].append(link)
            if link.kind == LinkKind.valid and not link.is_image and link.resolved != doc.path:
                graph.inbound[link.resolved].append(link)
    logger.debug("Link graph: %d link(s) across %d document(s)", len(graph.links), len(documents))
    return graph


def find_problems(graph: LinkGraph, documents: list[Document]) -> list[Problem]:
    """Dangling links, missing images and duplicate titles, in document order."""
    problems = []
    for link in graph.links:
        if link.kind != LinkKind.dangling:
            continue
        if link.is_image:
            problems.append(Problem(
                kind=ProblemKind.missing_image, path=link.source, target=link.target,
                detail=f"image not found: {link.resolved}",
            ))
        else:
            problems.append(Problem(
                kind=ProblemKind.dangling_link, path=link.source, target=link.target,
                detail=f"no document at {link.resolved}",
            ))

    first_by_title: dict[str, str] = {}
    for doc in documents:
        if doc.title in first_by_title:
            problems.append(Problem(
                kind=ProblemKind.duplicate_title, path=doc.path, target=first_by_title[doc.title],
                detail=f"title '{doc.title}' is also used by {first_by_title[doc.title]}",
            ))
        else:
            first_by_title[doc.title] = doc.path
    return problems
