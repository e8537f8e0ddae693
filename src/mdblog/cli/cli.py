"""CLI entrypoint: Typer app definition and command registration"""

from typing import Annotated, Optional

import typer

from mdblog.cli.commands import (
    build_cmd, categories_cmd, check_cmd, commit_cmd, diff_cmd, export_cmd,
    extract_cmd, history_cmd, init_cmd, list_cmd, revert_cmd, tags_cmd,
)
from mdblog.config import load_config
from mdblog.log import configure_logging


app = typer.Typer(name="mdblog", no_args_is_help=True, help="Markdown blog content tooling")


@app.callback()
def main(
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING, ERROR")] = None,
    ):
    """Validate, catalog, and export Markdown blog posts."""
    if log_level is None:
        try:
            log_level = load_config().log_level
        except ValueError:
            log_level = "WARNING"  # the command itself reports the config error
    configure_logging(log_level)


app.command(name="init")(init_cmd)
app.command(name="check")(check_cmd)
app.command(name="extract")(extract_cmd)
app.command(name="commit")(commit_cmd)
app.command(name="export")(export_cmd)
app.command(name="build")(build_cmd)
app.command(name="list")(list_cmd)
app.command(name="tags")(tags_cmd)
app.command(name="categories")(categories_cmd)
app.command(name="history")(history_cmd)
app.command(name="diff")(diff_cmd)
app.command(name="revert")(revert_cmd)
