"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from mdsite.config import Settings, load_config
from mdsite.core.models import BuildResult
from mdsite.core.pipeline import run_build, run_check
from mdsite.crud.database import init_db, make_engine
from mdsite.crud.graph import save_graph
from mdsite.errors import ConfigError


EXIT_CONFIG = 1
EXIT_PROBLEMS = 2


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(EXIT_CONFIG)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ConfigError as e:
        _fail(str(e))


def _echo_report(result: BuildResult) -> None:
    """Print one line per problem and a summary line."""
    for p in result.problems:
        target = f" -> {p.target}" if p.target else ""
        typer.echo(f"  {p.kind.value}: {p.path}{target} ({p.detail})")
    typer.echo(f"{len(result.documents)} document(s), {len(result.problems)} problem(s)")


def _exit_for(result: BuildResult, strict: bool) -> None:
    if strict and result.has_problems:
        raise typer.Exit(EXIT_PROBLEMS)


def build_cmd(
    root: Annotated[str, typer.Option("--root", help="Directory of markdown sources")],
    out: Annotated[Optional[str], typer.Option("--out", help="Output directory")] = None,
    strict: Annotated[Optional[bool], typer.Option("--strict/--no-strict", help="Exit 2 when any problem is found")] = None,
    clean: Annotated[bool, typer.Option("--clean", help="Remove the output directory before building")] = False,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Worker threads; 0 = CPU count")] = None,
    toc_depth: Annotated[Optional[int], typer.Option("--toc-depth", help="Deepest heading level in page TOCs")] = None,
    search: Annotated[Optional[bool], typer.Option("--search-index/--no-search-index", help="Write search-index.json")] = None,
    ):
    """Run the full pipeline: load -> link graph -> render -> assemble."""
    settings = _settings(overrides={
        "output_dir": out, "strict": strict, "max_workers": workers,
        "toc_depth": toc_depth, "search_index": search,
    })
    output_dir = Path(settings.output_dir)
    try:
        result = run_build(Path(root), output_dir, settings, clean=clean)
    except ConfigError as e:
        _fail(str(e))

    if not result.documents:
        typer.echo("No .md/.mdx files found.")
    _echo_report(result)
    typer.echo(f"Built {len(result.rendered)} page(s) to {output_dir}/")
    _exit_for(result, settings.strict)


def check_cmd(
    root: Annotated[str, typer.Option("--root", help="Directory of markdown sources")],
    strict: Annotated[Optional[bool], typer.Option("--strict/--no-strict", help="Exit 2 when any problem is found")] = None,
    ):
    """Load documents and check links without rendering anything."""
    settings = _settings(overrides={"strict": strict})
    try:
        result = run_check(Path(root), settings)
    except ConfigError as e:
        _fail(str(e))
    _echo_report(result)
    _exit_for(result, settings.strict)


def export_graph_cmd(
    root: Annotated[str, typer.Option("--root", help="Directory of markdown sources")],
    db_url: Annotated[Optional[str], typer.Option("--db-url", help="Database URL (or set MDSITE_DB_URL)")] = None,
    ):
    """Write a documents/links/problems snapshot of the corpus to a database."""
    settings = _settings(overrides={"db_url": db_url})
    try:
        result = run_check(Path(root), settings)
    except ConfigError as e:
        _fail(str(e))

    engine = make_engine(settings.db_url)
    init_db(engine)
    key = Path(root).resolve().as_posix()
    try:
        with Session(engine) as session:
            counts = save_graph(session, key, result)
            session.commit()
    except Exception as e:
        _fail("Export failed", e)
    typer.echo(
        f"Exported {counts['documents']} document(s), {counts['links']} link(s), "
        f"{counts['problems']} problem(s) to {settings.db_url}"
    )
