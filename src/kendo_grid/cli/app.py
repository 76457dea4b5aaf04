import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from kendo_grid.cli.query import fields, query
from kendo_grid.cli.serve import serve
from kendo_grid.config import get_settings

app = typer.Typer(
    name="kendo-grid",
    help="Query and serve JSON record files as Kendo grids.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    log_level: Annotated[str | None, typer.Option(help="Logging level (default from KENDO_GRID_LOG_LEVEL).")] = None,
) -> None:
    logging.basicConfig(
        level=(log_level or get_settings().log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


app.command("query")(query)
app.command("fields")(fields)
app.command("serve")(serve)


def main() -> None:
    app()
