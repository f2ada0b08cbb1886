"""Pipeline step functions: check and build orchestration"""

import logging
import os
import shutil
from pathlib import Path

from mdsite.config import Settings
from mdsite.core.assemble import output_collisions, write_site
from mdsite.core.links import build_graph, find_problems
from mdsite.core.load import check_root, load_corpus
from mdsite.core.models import BuildResult
from mdsite.core.render import render_corpus
from mdsite.core.templating import create_environment
from mdsite.errors import ConfigError


logger = logging.getLogger(__name__)


def _overlaps(out: Path, root: Path) -> bool:
    """True when cleaning out would delete part of (or all of) root."""
    out, root = out.resolve(), root.resolve()
    return out == root or out in root.parents


def _check_out(out: Path) -> None:
    """Create out if needed. Raises ConfigError when it cannot be written."""
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Output directory is not writable ({e.strerror})", out) from e
    if not os.access(out, os.W_OK | os.X_OK):
        raise ConfigError("Output directory is not writable", out)


def run_check(root: Path, settings: Settings) -> BuildResult:
    """Load the corpus and build the link graph; nothing is rendered or written.

    Problems are ordered: load errors, then link problems in document order.
    """
    corpus = load_corpus(Path(root), settings.parser_config, settings.max_workers)
    graph = build_graph(corpus.documents, Path(root), settings.parser_config)
    return BuildResult(
        documents=corpus.by_path(),
        graph=graph,
        problems=corpus.errors + find_problems(graph, corpus.documents),
    )


def run_build(root: Path, out: Path, settings: Settings, clean: bool = False) -> BuildResult:
    """Full pipeline: load -> graph -> render -> assemble.

    Only ConfigError escapes; per-document failures become problems in the result.
    """
    root, out = check_root(Path(root)), Path(out)
    templates_dir = Path(settings.templates_dir) if settings.templates_dir else None
    if templates_dir is not None and not templates_dir.is_dir():
        raise ConfigError("Templates directory does not exist", templates_dir)
    if out.exists() and not out.is_dir():
        raise ConfigError("Output directory is not writable", out)
    if clean and out.exists():
        if _overlaps(out, root):
            raise ConfigError("Refusing to clean an output directory that contains the root", out)
        logger.debug("Removing previous output %s", out)
        shutil.rmtree(out)
    _check_out(out)

    result = run_check(root, settings)
    documents = list(result.documents.values())
    result.rendered, render_problems = render_corpus(
        documents, settings.parser_config, settings.toc_depth, settings.max_workers,
    )
    result.problems.extend(render_problems)
    result.problems.extend(output_collisions(result.documents))
    result.outputs = write_site(
        result, root, out,
        site_title=settings.site_title,
        report_file=settings.report_file,
        with_search_index=settings.search_index,
        templates=create_environment(templates_dir),
    )
    logger.info("Built %d page(s) into %s with %d problem(s)", len(result.rendered), out, len(result.problems))
    return result
