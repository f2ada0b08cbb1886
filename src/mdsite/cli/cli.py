"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from mdsite.cli.commands import build_cmd, check_cmd, export_graph_cmd


app = typer.Typer(name="mdsite", no_args_is_help=True, help="Static documentation site builder and link checker")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


app.command(name="build")(build_cmd)
app.command(name="check")(check_cmd)
app.command(name="export-graph")(export_graph_cmd)
