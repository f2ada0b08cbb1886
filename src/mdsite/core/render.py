"""Markdown -> HTML rendering with stable heading anchors and a per-document TOC"""

import html
import logging
from urllib.parse import quote, unquote

from mdsite.core.load import extract_sections
from mdsite.core.models import Document, Problem, ProblemKind, RenderedDoc, Section
from mdsite.core.utils.paths import is_external, output_path, relative_url, resolve, split_target
from mdsite.core.utils.pool import parallel_map
from mdsite.core.utils.tokens import heading_level, make_parser
from mdsite.errors import RenderError


logger = logging.getLogger(__name__)


def rewrite_href(href: str, source: str, known: set[str]) -> str:
    """Point links at loaded documents to their rendered .html page; leave everything else alone."""
    if not href or is_external(href) or href.startswith('#'):
        return href
    path, fragment = split_target(unquote(href))
    resolved = resolve(source, path)
    if resolved not in known:
        return href
    url = quote(relative_url(output_path(source), output_path(resolved)))
    return f"{url}#{quote(fragment, safe='')}" if fragment else url


def build_toc(sections: tuple[Section, ...], depth: int = 3) -> str:
    """Nested <ul> of sections up to depth, skipping a leading h1 (the page title).

    Skipped heading levels nest one step deeper rather than erroring.
    """
    items = list(sections)
    if items and items[0].level == 1:
        items = items[1:]
    items = [s for s in items if s.level <= depth]
    if not items:
        return ''

    parts: list[str] = []
    stack: list[int] = []
    for s in items:
        if not stack or s.level > stack[-1]:
            parts.append('<ul>')
            stack.append(s.level)
        else:
            while len(stack) > 1 and s.level < stack[-1]:
                parts.append('</li></ul>')
                stack.pop()
            if s.level > stack[-1]:
                # h2, h4, h3: the h3 still belongs under the open h2
                parts.append('<ul>')
                stack.append(s.level)
            else:
                parts.append('</li>')
        parts.append(f'<li><a href="#{html.escape(s.anchor)}">{html.escape(s.text)}</a>')
    parts.extend('</li></ul>' for _ in stack)
    return ''.join(parts)


def render_markdown(doc: Document, known: set[str], parser_config: str = 'gfm-like') -> tuple[str, tuple[Section, ...]]:
    """Render a document body to HTML; returns (html, sections).

    Heading ids come from the same section extraction the loader uses, so
    anchors in the page always match the document's recorded sections.
    """
    md = make_parser(parser_config)
    tokens = md.parse(doc.body)
    sections = extract_sections(tokens)

    headings = iter(sections)
    for tok in tokens:
        if heading_level(tok) is not None:
            tok.attrSet('id', next(headings).anchor)
        elif tok.type == 'inline' and tok.children:
            for child in tok.children:
                if child.type == 'link_open':
                    child.attrSet('href', rewrite_href(str(child.attrGet('href') or ''), doc.path, known))

    return md.renderer.render(tokens, md.options, {}), sections


def render_document(
    doc: Document,
    known: set[str],
    parser_config: str = 'gfm-like',
    toc_depth: int = 3,
    ) -> tuple[RenderedDoc, Problem | None]:
    """Render one document; failures degrade to a literal <pre> of the source plus a problem."""
    try:
        body, sections = render_markdown(doc, known, parser_config)
    except Exception as e:
        err = RenderError(doc.path, e)
        logger.warning("%s", err)
        rendered = RenderedDoc(
            path=doc.path,
            html=f"<pre>{html.escape(doc.body)}</pre>\n",
            toc=build_toc(doc.sections, toc_depth),
            sections=doc.sections,
        )
        return rendered, Problem(kind=ProblemKind.render_error, path=doc.path, detail=str(e))

    return RenderedDoc(path=doc.path, html=body, toc=build_toc(sections, toc_depth), sections=sections), None


def render_corpus(
    documents: list[Document],
    parser_config: str = 'gfm-like',
    toc_depth: int = 3,
    max_workers: int = 0,
    ) -> tuple[dict[str, RenderedDoc], list[Problem]]:
    """Render all documents in parallel. Returns ({path: RenderedDoc}, render problems)."""
    known = {d.path for d in documents}
    results = parallel_map(lambda d: render_document(d, known, parser_config, toc_depth), documents, max_workers)

    rendered: dict[str, RenderedDoc] = {}
    problems: list[Problem] = []
    for doc_out, problem in results:
        rendered[doc_out.path] = doc_out
        if problem is not None:
            problems.append(problem)
    return rendered, problems
